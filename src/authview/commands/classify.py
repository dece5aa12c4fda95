"""Classify command -- check a single URI against a callback URI.

Handy when wiring up a new provider: paste the URI the browser ended on and
see whether (and how) the flow would have finished::

    authview classify "https://app.example.com/cb?error=access_denied&error_description=No" \
        --end-uri https://app.example.com/cb
"""

from __future__ import annotations

from typing import Optional

import typer

from authview.classifier import classify
from authview.commands import outcome_exit_code
from authview.output import format_response


def classify_command(
    uri: str = typer.Argument(help="Observed navigation URI."),
    end_uri: str = typer.Option(..., "--end-uri", "-e", help="Callback URI that ends the login."),
    start_uri: Optional[str] = typer.Option(
        None, "--start-uri", "-s", help="Provider login URI (informational)."
    ),
) -> None:
    """Classify URI as not terminal, success, or provider error.

    Prints the classification and exits with the outcome's exit code
    (0 when the URI does not end the login).
    """
    result = classify(uri, start_uri or "", end_uri)
    format_response(result.model_dump(mode="json"))
    if result.outcome is not None:
        raise typer.Exit(code=outcome_exit_code(result.outcome))
