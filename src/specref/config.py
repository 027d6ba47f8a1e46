"""Where specref keeps its files, and how settings are layered.

Directories follow the XDG Base Directory layout on Linux and the BSDs
(``~/.config/specref``, ``~/.cache/specref``, ``~/.local/share/specref``,
each overridable through its ``XDG_*_HOME`` variable).  Elsewhere
everything lives under ``~/.specref``.

Settings are a :class:`~specref.models.GlobalConfig` assembled by
:func:`resolve_config` from, lowest priority first:

1. built-in defaults;
2. the user file ``config.json`` in the config directory;
3. ``specref.json`` in the current working directory, merged key by key;
4. ``SPECREF_ORIGIN``, ``SPECREF_TIMEOUT`` and ``SPECREF_NO_CACHE``;
5. command-line flags.

The user file is only ever replaced atomically.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specref.exceptions import ConfigError
from specref.models import GlobalConfig

_APP_NAME = "specref"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specref.json"

DEFAULT_ORIGIN = "cli"
"""Origin tag used when none is configured."""

_TRUTHY = ("1", "true", "yes", "on")

# kind -> (XDG variable, default under $HOME, subdirectory of ~/.specref)
_DIRS: dict[str, tuple[str, tuple[str, ...], Optional[str]]] = {
    "config": ("XDG_CONFIG_HOME", (".config",), None),
    "cache": ("XDG_CACHE_HOME", (".cache",), "cache"),
    "data": ("XDG_DATA_HOME", (".local", "share"), "logs"),
}


# --- Directories ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, home_segments, fallback = _DIRS[kind]
    if _is_xdg_platform():
        base = os.environ.get(env_var) or Path.home().joinpath(*home_segments)
        path = Path(base) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if fallback:
            path = path / fallback
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json`` (created on demand)."""
    return _app_dir("config")


def get_cache_dir() -> Path:
    """Directory holding the document cache; safe to delete at any time."""
    return _app_dir("cache")


def get_data_dir() -> Path:
    """Directory holding crash logs."""
    return _app_dir("data")


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* so readers never see a partial file.

    The text goes to a sibling temp file, which is synced and then renamed
    over *path*.  The temp file is removed if anything fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# --- Config files ---


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def load_global_config() -> GlobalConfig:
    """Read the user's ``config.json``; defaults when it does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or fails validation.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    text = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    _atomic_write(get_config_dir() / _CONFIG_FILENAME, text)


def load_project_config() -> Optional[dict[str, Any]]:
    """Read ``./specref.json`` if present.

    The file is a partial :class:`~specref.models.GlobalConfig`, typically
    pinning the origin tag or timeout for one repository.

    Raises:
        ConfigError: If the file is not a JSON object.
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


# --- Precedence ---


def resolve_config(
    cli_origin: Optional[str] = None,
    cli_timeout: Optional[float] = None,
    cli_no_cache: bool = False,
) -> GlobalConfig:
    """Build the effective configuration for this run.

    Args:
        cli_origin: ``--origin`` flag.
        cli_timeout: ``--timeout`` flag.
        cli_no_cache: ``--no-cache`` flag.

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    data = load_global_config().model_dump(mode="json")

    project = load_project_config()
    if project is not None:
        data = _deep_merge(data, project)

    env_origin = os.environ.get("SPECREF_ORIGIN")
    if env_origin:
        data["origin"] = env_origin
    env_timeout = os.environ.get("SPECREF_TIMEOUT")
    if env_timeout:
        data["fetch"]["timeout"] = env_timeout
    if os.environ.get("SPECREF_NO_CACHE", "").lower() in _TRUTHY:
        data["cache"]["enabled"] = False

    if cli_origin is not None:
        data["origin"] = cli_origin
    if cli_timeout is not None:
        data["fetch"]["timeout"] = cli_timeout
    if cli_no_cache:
        data["cache"]["enabled"] = False

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
