"""Configuration management with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.authview/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- a single :class:`~authview.models.GlobalConfig` JSON
  file holding the output format, flow settings and log level.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  effective configuration.

File writes go through :func:`_atomic_write` (temp file then rename).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from authview.exceptions import ConfigError
from authview.models import GlobalConfig

_APP_NAME = "authview"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "authview.json"

ENV_HIDE_DELAY_MS = "AUTHVIEW_HIDE_DELAY_MS"
ENV_TIMEOUT = "AUTHVIEW_TIMEOUT"
ENV_LOG_LEVEL = "AUTHVIEW_LOG_LEVEL"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms that use XDG Base Directory paths (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/authview/`` (default ``~/.config/authview/``).
    On macOS/Windows: ``~/.authview/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/authview/`` (default ``~/.local/share/authview/``).
    On macOS/Windows: ``~/.authview/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* through a temp file in the same directory.

    ``os.replace`` makes the final rename atomic on POSIX; the temp file is
    removed on any failure.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Optional[str] = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as fd:
            tmp_path = fd.name
            fd.write(data)
            fd.flush()
            os.fsync(fd.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def load_global_config() -> GlobalConfig:
    """Load the global configuration, or defaults when no file exists.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


def reset_global_config() -> None:
    """Delete the global config file so defaults apply again."""
    path = global_config_path()
    if path.is_file():
        path.unlink()


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./authview.json`` if present.

    The file holds a partial :class:`~authview.models.GlobalConfig` (for
    example only ``{"flow": {"timeout_seconds": 60}}``) and is layered over
    the user config.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    flow: dict[str, Any] = {}
    hide_delay = os.environ.get(ENV_HIDE_DELAY_MS)
    if hide_delay:
        flow["hide_delay_ms"] = hide_delay
    timeout = os.environ.get(ENV_TIMEOUT)
    if timeout:
        flow["timeout_seconds"] = timeout
    if flow:
        overrides["flow"] = flow
    log_level = os.environ.get(ENV_LOG_LEVEL)
    if log_level:
        overrides["log_level"] = log_level.upper()
    return overrides


def resolve_config(
    cli_format: Optional[str] = None,
    cli_timeout: Optional[float] = None,
    cli_clear_cookies: Optional[bool] = None,
) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``cli_format``, ``cli_timeout``, ``cli_clear_cookies``)
        2. Environment variables (``AUTHVIEW_HIDE_DELAY_MS``,
           ``AUTHVIEW_TIMEOUT``, ``AUTHVIEW_LOG_LEVEL``)
        3. Project config (``./authview.json``)
        4. User config (``~/.config/authview/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer is invalid.
    """
    data = load_global_config().model_dump(mode="json")

    project = load_project_config()
    if project is not None:
        data = _deep_merge(data, project)

    data = _deep_merge(data, _env_overrides())

    if cli_format is not None:
        data["output"]["format"] = cli_format
    if cli_timeout is not None:
        data["flow"]["timeout_seconds"] = cli_timeout
    if cli_clear_cookies is not None:
        data["flow"]["clear_cookies"] = cli_clear_cookies

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
