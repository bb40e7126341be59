"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for gistdrop:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.gistdrop/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **User config** -- A single :class:`~gistdrop.models.AppConfig` JSON file.
  Managed via :func:`load_config` and :func:`save_config`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables and the config file into the effective
  :class:`~gistdrop.models.AppConfig` that is handed to every component.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from gistdrop.exceptions import ConfigError
from gistdrop.models import AppConfig

_APP_NAME = "gistdrop"
_CONFIG_FILENAME = "config.json"
_CREDENTIALS_FILENAME = "credentials.json"

# Environment variable -> AppConfig field
_ENV_OVERRIDES = {
    "GISTDROP_CLIENT_ID": "client_id",
    "GISTDROP_SCOPE": "scope",
    "GISTDROP_API_URL": "api_url",
    "GISTDROP_LOG_LEVEL": "log_level",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/gistdrop/`` (default ``~/.config/gistdrop/``).
    On macOS/Windows: ``~/.gistdrop/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (logs, crash reports), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/gistdrop/`` (default ``~/.local/share/gistdrop/``).
    On macOS/Windows: ``~/.gistdrop/data/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_log_dir() -> Path:
    """Return ``<data_dir>/logs/``, creating it if necessary."""
    path = get_data_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def config_path() -> Path:
    """Path to the user config file."""
    return get_config_dir() / _CONFIG_FILENAME


def credentials_path() -> Path:
    """Fixed per-user path of the stored credential record."""
    return get_config_dir() / _CREDENTIALS_FILENAME


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.

    Args:
        path: Destination file.
        data: Text to write (UTF-8).
        mode: Optional permission bits applied to the temp file before any
            content is written, e.g. ``0o600`` for secrets.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- User config ---


def read_config_data(path: Optional[Path] = None) -> dict[str, Any]:
    """Read the raw config file as a dict, without validating its values.

    Used by ``config set`` so that a file holding a bad value can still be
    repaired one key at a time.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = path or config_path()
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError, OSError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config at {path}: expected a JSON object")
    return data


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load the user configuration.

    Args:
        path: Config file to read. Defaults to :func:`config_path`.

    Returns:
        The deserialised :class:`~gistdrop.models.AppConfig`. If the file
        does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = path or config_path()
    data = read_config_data(path)
    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: AppConfig, path: Optional[Path] = None) -> None:
    """Persist the configuration atomically to disk.

    Args:
        config: The configuration to save.
        path: Destination. Defaults to :func:`config_path`.
    """
    data = config.model_dump(mode="json", exclude_none=True)
    atomic_write(path or config_path(), json.dumps(data, indent=2) + "\n")


def update_config(config: Union[AppConfig, dict[str, Any]], key: str, value: str) -> AppConfig:
    """Return a copy of *config* with *key* set to *value*, validated.

    *config* may be a loaded :class:`~gistdrop.models.AppConfig` or the raw
    dict from :func:`read_config_data`.  The string *value* is coerced by
    Pydantic to the field's declared type (``"true"`` becomes ``True`` for
    booleans, ``"10"`` becomes ``10.0`` for the timeout, and so on).

    Raises:
        ConfigError: If *key* is not a config field or the result does not
            validate.
    """
    if key not in AppConfig.model_fields:
        raise ConfigError(f"Unknown config key: {key}")
    data = config.model_dump() if isinstance(config, AppConfig) else dict(config)
    data[key] = value
    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        bad = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        if bad and bad != [key]:
            raise ConfigError(
                f"Config still invalid after setting {key}: check {', '.join(bad)}"
            ) from exc
        raise ConfigError(f"Invalid value for {key}: {value!r}") from exc


# --- Precedence resolution ---


def resolve_config(
    cli_client_id: Optional[str] = None,
    cli_scope: Optional[str] = None,
    path: Optional[Path] = None,
) -> AppConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_client_id``, ``cli_scope``)
        2. Environment variables (``GISTDROP_CLIENT_ID``, ``GISTDROP_SCOPE``,
           ``GISTDROP_API_URL``, ``GISTDROP_LOG_LEVEL``)
        3. User config (``~/.config/gistdrop/config.json``)
        4. Defaults

    Raises:
        ConfigError: If the config file or an override does not validate.

    Returns:
        The effective :class:`~gistdrop.models.AppConfig`.
    """
    # 4 + 3. Load file config (fills in defaults automatically)
    config = load_config(path)

    # 2. Environment variables
    overrides: dict[str, str] = {}
    for env_var, field in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            overrides[field] = value

    # 1. CLI flags (highest precedence)
    if cli_client_id is not None:
        overrides["client_id"] = cli_client_id
    if cli_scope is not None:
        overrides["scope"] = cli_scope

    if overrides:
        try:
            config = AppConfig.model_validate({**config.model_dump(), **overrides})
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration override: {exc}") from exc
    return config
