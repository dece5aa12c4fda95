"""Replay command -- run a recorded navigation transcript through the flow.

Example::

    authview replay transcripts/provider-error.yaml
    authview --json replay - < transcript.json
"""

from __future__ import annotations

import asyncio

import typer

from authview.commands import outcome_exit_code
from authview.config import resolve_config
from authview.exceptions import AuthviewError
from authview.flow import replay_transcript
from authview.output import error, format_outcome, info
from authview.transcript import load_transcript


def replay_command(
    transcript_path: str = typer.Argument(
        help="Transcript file (JSON or YAML), or '-' for stdin."
    ),
) -> None:
    """Replay a transcript and print the delivered outcome."""
    try:
        config = resolve_config()
        transcript = load_transcript(transcript_path)
        result = asyncio.run(replay_transcript(transcript, config.flow))
    except AuthviewError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(
        f"Played {result.steps_played} step(s); "
        f"{len(result.navigations)} navigation(s), "
        f"{result.go_back_count} go-back request(s)"
    )
    format_outcome(result.outcome)
    raise typer.Exit(code=outcome_exit_code(result.outcome))
