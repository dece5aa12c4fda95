"""Classify observed navigation URIs against a login's callback URI.

The classifier is the pure core of the flow: given the URI a browser surface
is about to load and the session's configured start/end URIs, it decides
whether the login is over and, if so, how it ended.

A navigation is terminal only when it targets the callback (end) URI, which
is compared on scheme, host name and absolute path; the query string,
fragment and port are ignored. A terminal navigation whose query string
begins with ``error`` is a provider error; anything else is a success and
the whole URI (query included) is handed back to the caller for token
parsing.

Example::

    result = classify(
        "https://tenant.example.com/mobile?code=abc123",
        "https://tenant.example.com/authorize",
        "https://tenant.example.com/mobile",
    )
    assert result.terminal and result.outcome.status == "success"
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import SplitResult, unquote_plus, urlsplit

from pydantic import BaseModel, ConfigDict

from authview.models import NO_DETAILS_AVAILABLE, Outcome

__all__ = [
    "ClassificationResult",
    "NOT_TERMINAL",
    "NO_DETAILS_AVAILABLE",
    "classify",
    "same_origin",
]

_ERROR_MARKER = "error"
_ERROR_DETAILS = re.compile(r"^error=([^&]+)&error_description=([^&]+)")


class ClassificationResult(BaseModel):
    """Result of :func:`classify`.

    ``outcome`` is set if and only if ``terminal`` is true. Results are
    frozen, so the shared :data:`NOT_TERMINAL` cannot be altered by a caller.
    """

    model_config = ConfigDict(frozen=True)

    terminal: bool = False
    outcome: Optional[Outcome] = None


NOT_TERMINAL = ClassificationResult()
"""Shared result for navigations that do not end the login."""


def _split(uri: str) -> Optional[SplitResult]:
    try:
        parts = urlsplit(uri)
        # urlsplit only validates the port when it is read.
        _ = parts.port
    except ValueError:
        return None
    return parts


def _origin_key(parts: SplitResult) -> tuple[str, str, str]:
    return (parts.scheme.lower(), parts.hostname or "", parts.path or "/")


def same_origin(uri: str, other_uri: str) -> bool:
    """Return True if two URIs share scheme, host and absolute path.

    Query string, fragment, port and user-info are not compared. Either URI
    failing to parse means they are not the same.
    """
    left = _split(uri)
    right = _split(other_uri)
    if left is None or right is None:
        return False
    return _origin_key(left) == _origin_key(right)


def _provider_error(query: str) -> Outcome:
    match = _ERROR_DETAILS.match(query)
    if match is None:
        return Outcome.provider_error_without_details()
    return Outcome.provider_error(
        unquote_plus(match.group(1)),
        unquote_plus(match.group(2)),
    )


def classify(observed_uri: str, start_uri: str, end_uri: str) -> ClassificationResult:
    """Classify *observed_uri* for a login that runs from *start_uri* to *end_uri*.

    Never raises: URIs that fail to parse are simply not terminal, and an
    error query that does not carry parseable details still yields a
    provider error (with :data:`NO_DETAILS_AVAILABLE` as its detail).

    Args:
        observed_uri: The URI the surface is navigating to.
        start_uri: The provider's login page. Kept for symmetry with the
            session; it does not influence the result.
        end_uri: The callback URI that ends the login.

    Returns:
        :data:`NOT_TERMINAL`, or a terminal :class:`ClassificationResult`
        carrying a success or provider-error :class:`~authview.models.Outcome`.
    """
    if not same_origin(observed_uri, end_uri):
        return NOT_TERMINAL

    query = urlsplit(observed_uri).query
    if query.startswith(_ERROR_MARKER):
        outcome = _provider_error(query)
    else:
        outcome = Outcome.success(observed_uri)
    return ClassificationResult(terminal=True, outcome=outcome)
