"""Config commands -- view and modify the global configuration.

Example::

    authview config show
    authview config set flow.hide_delay_ms 200
    authview config set flow.timeout_seconds none
    authview config reset --force
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError

from authview.config import (
    global_config_path,
    load_global_config,
    reset_global_config,
    resolve_config,
    save_global_config,
)
from authview.models import GlobalConfig
from authview.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)

_NULL_VALUES = ("none", "null", "")


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False, "--effective", help="Show the resolved config (project file and env applied)."
    ),
) -> None:
    """Show the current configuration."""
    config = resolve_config() if effective else load_global_config()
    info(f"Config file: {global_config_path()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'flow.hide_delay_ms')."),
    value: str = typer.Argument(help="Value to set ('none' clears optional values)."),
) -> None:
    """Set a configuration value.

    The value is validated (and coerced) against the config model before
    anything is written.
    """
    data = load_global_config().model_dump(mode="json")

    keys = key.split(".")
    target: dict[str, Any] = data
    for k in keys[:-1]:
        if not isinstance(target.get(k), dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    target[final_key] = None if value.lower() in _NULL_VALUES else value

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset the configuration to defaults."""
    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    reset_global_config()
    success("Configuration reset to defaults.")
