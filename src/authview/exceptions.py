"""Exception hierarchy for authview.

All exceptions inherit from :class:`AuthviewError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`authview.exit_codes`.

Login outcomes are *not* exceptions: success, provider errors, transport
errors and user cancellation are all delivered as an
:class:`~authview.models.Outcome` through the broker. The classes here cover
configuration problems, bad input files, and misuse of the flow API.

Subclass hierarchy::

    AuthviewError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 1)
    +-- TranscriptError     (exit 7)
    +-- FlowError           (exit 1)
"""

from authview.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_TRANSCRIPT_ERROR,
)


class AuthviewError(Exception):
    """Base exception for all authview errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(AuthviewError):
    """Raised for invalid CLI arguments or malformed start/end URIs."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(AuthviewError):
    """Raised for configuration problems (invalid JSON, bad values, unknown keys)."""

    exit_code = EXIT_GENERIC_FAILURE


class TranscriptError(AuthviewError):
    """Raised when a navigation transcript cannot be read or fails validation."""

    exit_code = EXIT_TRANSCRIPT_ERROR


class FlowError(AuthviewError):
    """Raised when the flow API is misused.

    The only case today is beginning a second login session on a broker
    that already has one in flight; concurrent logins need separate
    broker instances.
    """

    exit_code = EXIT_GENERIC_FAILURE
