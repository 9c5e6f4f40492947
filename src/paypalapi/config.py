"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for paypalapi:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.paypalapi/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Settings** -- A single :class:`~paypalapi.models.PayPalSettings` JSON
  file, layered under environment variable overrides by
  :func:`load_settings`.
* **Credential resolution** -- :func:`resolve_credential` reads the client
  id and secret from env vars, files, or literal values.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import contextlib
import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from paypalapi.exceptions import ConfigError
from paypalapi.models import PayPalSettings

_APP_NAME = "paypalapi"
_CONFIG_FILENAME = "config.json"

# Environment variable -> settings field, highest precedence.
_ENV_OVERRIDES = {
    "PAYPALAPI_BASE_URL": "base_url",
    "PAYPALAPI_M_BASE_URL": "m_base_url",
    "PAYPALAPI_CLIENT_ID_SOURCE": "client_id_source",
    "PAYPALAPI_CLIENT_SECRET_SOURCE": "client_secret_source",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Linux and the BSDs follow the XDG layout; everything else gets ``~/.paypalapi``."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(env_var: str, home_default: tuple[str, ...], fallback: tuple[str, ...]) -> Path:
    """Resolve and create one of the paypalapi directories.

    *env_var* and *home_default* locate the XDG base; *fallback* is the path
    below ``~/.paypalapi`` used on macOS and Windows.
    """
    if _is_xdg_platform():
        base = os.environ.get(env_var) or Path.home().joinpath(*home_default)
        path = Path(base) / _APP_NAME
    else:
        path = Path.home().joinpath(f".{_APP_NAME}", *fallback)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json``.

    ``$XDG_CONFIG_HOME/paypalapi`` (``~/.config/paypalapi``) on Linux/BSD,
    ``~/.paypalapi`` elsewhere.
    """
    return _app_dir("XDG_CONFIG_HOME", (".config",), ())


def get_data_dir() -> Path:
    """Directory holding persisted auth state.

    ``$XDG_DATA_HOME/paypalapi`` (``~/.local/share/paypalapi``) on Linux/BSD,
    ``~/.paypalapi/data`` elsewhere.
    """
    return _app_dir("XDG_DATA_HOME", (".local", "share"), ("data",))


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Replace *path* with *data* so readers never see a partial file.

    Content goes to a sibling temp file that is fsynced and then renamed
    over *path*.  *mode*, if given, is set before the secret hits the disk.
    The temp file is removed if anything fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if mode is not None:
            os.chmod(tmp_name, mode)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


# --- Settings ---


def settings_path() -> Path:
    """Path to the settings file inside the config directory."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_settings_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid settings file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid settings file at {path}: expected a JSON object")
    return data


def load_settings(path: Optional[Path] = None) -> PayPalSettings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. Environment variables (``PAYPALAPI_BASE_URL``, ``PAYPALAPI_M_BASE_URL``,
           ``PAYPALAPI_CLIENT_ID_SOURCE``, ``PAYPALAPI_CLIENT_SECRET_SOURCE``)
        2. Settings file (*path*, or ``<config_dir>/config.json``)
        3. Defaults

    Args:
        path: Explicit settings file.  A missing file is treated as empty.

    Returns:
        The validated :class:`~paypalapi.models.PayPalSettings`.

    Raises:
        ConfigError: If the file contains invalid JSON or the merged values
            fail validation.
    """
    data = _read_settings_file(path if path is not None else settings_path())

    for env_var, field in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data[field] = value

    try:
        return PayPalSettings.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc


def save_settings(settings: PayPalSettings, path: Optional[Path] = None) -> None:
    """Persist settings atomically to *path* (default: the config directory)."""
    data = settings.model_dump(mode="json")
    atomic_write(
        path if path is not None else settings_path(),
        json.dumps(data, indent=2) + "\n",
    )


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"value:literal"`` -- the literal text after the prefix

    Raises:
        ConfigError: If the source can't be resolved or resolves to an
            empty string.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
    elif source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            value = path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc
    elif source.startswith("value:"):
        value = source[6:]
    else:
        raise ConfigError(
            f"Unknown credential source '{source}'. "
            "Expected env:VAR, file:/path, or value:literal"
        )

    if not value:
        raise ConfigError(f"Credential source '{source}' resolved to an empty value")
    return value
