"""Login command -- run a login against the headless HTTP surface.

Only logins that complete without user interaction (for example a silent
re-authentication carried by a session cookie) can finish this way; an
interactive login page simply sits until ``--timeout`` cancels the flow.

Example::

    authview login "https://tenant.example.com/authorize?prompt=none&..." \
        https://tenant.example.com/mobile --cookie session=abc --timeout 20
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer

from authview.commands import outcome_exit_code
from authview.config import resolve_config
from authview.exceptions import AuthviewError, InvalidUsageError
from authview.flow import run_login
from authview.models import FlowSettings, Outcome
from authview.output import error, format_outcome, info
from authview.surfaces.http import HttpSurface


def _parse_cookies(values: list[str]) -> dict[str, str]:
    cookies: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise InvalidUsageError(f"Invalid cookie '{item}': expected NAME=VALUE")
        cookies[name.strip()] = value
    return cookies


async def _login(
    start_uri: str, end_uri: str, settings: FlowSettings, cookies: dict[str, str]
) -> Outcome:
    async with HttpSurface(settings, cookies=cookies) as surface:
        return await run_login(surface, start_uri, end_uri, settings)


def login_command(
    start_uri: str = typer.Argument(help="Provider login URI."),
    end_uri: str = typer.Argument(help="Callback URI that ends the login."),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", help="Cancel after this many seconds."
    ),
    clear_cookies: Optional[bool] = typer.Option(
        None, "--clear-cookies/--keep-cookies", help="Clear cookies before starting."
    ),
    cookie: Optional[list[str]] = typer.Option(
        None, "--cookie", "-c", help="Seed a cookie (NAME=VALUE). Repeatable."
    ),
) -> None:
    """Run the login flow headlessly and print the outcome."""
    try:
        config = resolve_config(cli_timeout=timeout, cli_clear_cookies=clear_cookies)
        cookies = _parse_cookies(cookie or [])
        info(f"Starting login at {start_uri}")
        outcome = asyncio.run(_login(start_uri, end_uri, config.flow, cookies))
    except AuthviewError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_outcome(outcome)
    raise typer.Exit(code=outcome_exit_code(outcome))
