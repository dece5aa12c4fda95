"""Typer application and CLI entry point for authview.

Registers the built-in commands (``classify``, ``replay``, ``login`` and the
``config`` group), initialises output and logging from the global flags,
and maps errors to exit codes in :func:`main`.

See Also:
    :mod:`authview.config`: Configuration resolution.
    :mod:`authview.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from authview import __version__
from authview.commands.classify import classify_command
from authview.commands.config import config_app
from authview.commands.login import login_command
from authview.commands.replay import replay_command
from authview.exceptions import AuthviewError, ConfigError
from authview.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="authview",
    help="Drive and inspect embedded-browser login flows.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("classify")(classify_command)
app.command("replay")(replay_command)
app.command("login")(login_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"authview {__version__}")
        raise typer.Exit()


def configure_logging(level: str, console: Console) -> None:
    """Route the ``authview`` logger to a Rich handler on *console*.

    Replaces any handler installed by a previous call.

    Raises:
        ConfigError: If *level* is not a logging level name.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ConfigError(f"Unknown log level: {level}")

    logger = logging.getLogger("authview")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    logger.addHandler(RichHandler(console=console, show_path=False, markup=False))
    logger.setLevel(numeric)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Initialise output and logging before every command.

    Output format precedence is ``--json``/``--plain``, then the configured
    ``output.format``. ``--verbose`` forces DEBUG logging; otherwise the
    configured ``log_level`` applies.
    """
    from authview.config import resolve_config
    from authview.output import OutputFormat, OutputManager, set_output

    config = resolve_config()

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        try:
            fmt = OutputFormat(config.output.format)
        except ValueError:
            raise ConfigError(
                f"Unknown output format in config: {config.output.format}"
            ) from None

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        output_file=output_file,
    )
    set_output(output)
    configure_logging("DEBUG" if verbose else config.log_level, output.stderr_console)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Write the current traceback under the data directory and return its path."""
    from authview.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """Console-script entry point.

    :class:`~authview.exceptions.AuthviewError` exits with the error's
    ``exit_code``; anything else writes a crash log and exits with
    :data:`~authview.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except AuthviewError as exc:
        from authview.output import error

        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        from authview.output import error

        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
