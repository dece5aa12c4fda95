"""Load recorded navigation transcripts from a file or stdin.

A transcript captures one login attempt: the configured start/end URIs and the
ordered navigation events and host signals observed while it ran. Replaying
it through :func:`authview.flow.replay_transcript` reproduces the controller's
decisions without a browser, which is how odd provider behaviour gets turned
into a regression test.

Transcripts are JSON or YAML::

    start_uri: https://tenant.example.com/authorize?client_id=abc
    end_uri: https://tenant.example.com/mobile
    steps:
      - {kind: navigating, uri: "https://tenant.example.com/login"}
      - {kind: load_completed}
      - {kind: navigating, uri: "https://tenant.example.com/mobile?code=xyz"}
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from authview.exceptions import TranscriptError
from authview.models import Transcript


def load_transcript(source: str) -> Transcript:
    """Load and validate a transcript from a file path, or stdin when *source* is ``-``.

    Raises:
        TranscriptError: If the source cannot be read, parsed, or validated.
    """
    if source == "-":
        content = sys.stdin.read()
        hint = ""
        label = "stdin"
    else:
        path = Path(source)
        if not path.is_file():
            raise TranscriptError(f"Transcript file not found: {source}")
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TranscriptError(f"Failed to read transcript {source}: {exc}") from exc
        suffix = path.suffix.lower()
        hint = "json" if suffix == ".json" else "yaml" if suffix in (".yaml", ".yml") else ""
        label = source

    if not content.strip():
        raise TranscriptError(f"Transcript is empty: {label}")

    data = _parse_content(content, hint)
    try:
        return Transcript.model_validate(data)
    except ValidationError as exc:
        raise TranscriptError(f"Invalid transcript {label}: {exc}") from exc


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, falling back to YAML unless hinted as JSON."""
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise TranscriptError(f"Invalid JSON: {exc}") from exc
            json_error = exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse transcript as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise TranscriptError(msg) from exc
    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise TranscriptError(f"Transcript must be a JSON/YAML object (got {kind})")
    return result
