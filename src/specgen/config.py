"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for specgen:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specgen/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~specgen.models.GlobalConfig`
  JSON file storing generator defaults and output preferences.
* **Project config** -- An optional ``./specgen.json`` with the same shape
  (any subset of keys), pinning package names for one repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so a crash never leaves a half-written file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specgen.exceptions import ConfigError
from specgen.models import GlobalConfig

_APP_NAME = "specgen"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specgen.json"

# Environment variable -> (section, key)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "SPECGEN_MODEL_PACKAGE": ("generator", "model_package"),
    "SPECGEN_ENDPOINT_PACKAGE": ("generator", "endpoint_package"),
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_dir(env_var: str, default: tuple[str, ...], fallback: tuple[str, ...]) -> Path:
    if _is_xdg_platform():
        env_value = os.environ.get(env_var, "")
        base = Path(env_value) if env_value else Path.home().joinpath(*default)
        path = base / _APP_NAME
    else:
        path = Path.home().joinpath(f".{_APP_NAME}", *fallback)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specgen/`` (default ``~/.config/specgen/``).
    On macOS/Windows: ``~/.specgen/``.
    """
    return _xdg_dir("XDG_CONFIG_HOME", (".config",), ())


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specgen/`` (default ``~/.local/share/specgen/``).
    On macOS/Windows: ``~/.specgen/logs/``.
    """
    return _xdg_dir("XDG_DATA_HOME", (".local", "share"), ("logs",))


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the original error re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = tempfile.NamedTemporaryFile(
        mode="w",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
        encoding="utf-8",
    )
    try:
        with tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except BaseException:
        # Includes KeyboardInterrupt.
        try:
            os.unlink(tmp.name)
        except OSError:
            pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def load_global_config() -> GlobalConfig:
    """Load the global configuration.

    Returns:
        The deserialised :class:`~specgen.models.GlobalConfig`, or a default
        instance if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
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
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specgen.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

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


# --- Precedence resolution ---


def _layer(base: dict[str, Any], overrides: dict[str, Any]) -> None:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _layer(base[key], value)
        else:
            base[key] = value


def resolve_config(
    cli_model_package: Optional[str] = None,
    cli_endpoint_package: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_model_package``, ``cli_endpoint_package``,
           ``cli_format``)
        2. Environment variables (``SPECGEN_MODEL_PACKAGE``,
           ``SPECGEN_ENDPOINT_PACKAGE``)
        3. Project config (``./specgen.json``)
        4. User config (``~/.config/specgen/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer is invalid.
    """
    merged = load_global_config().model_dump(mode="json")

    project = load_project_config()
    if project is not None:
        _layer(merged, project)

    for env_var, (section, key) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            merged[section][key] = value

    if cli_model_package is not None:
        merged["generator"]["model_package"] = cli_model_package
    if cli_endpoint_package is not None:
        merged["generator"]["endpoint_package"] = cli_endpoint_package
    if cli_format is not None:
        merged["output"]["format"] = cli_format

    try:
        return GlobalConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


# --- Editing ---


def set_config_value(key: str, value: str) -> GlobalConfig:
    """Set a dotted *key* (e.g. ``generator.model_package``) in the global config.

    The string *value* is coerced by Pydantic to the field's type, so
    ``generator.dedupe false`` stores a boolean.

    Returns:
        The saved configuration.

    Raises:
        ConfigError: If the key is unknown or the value does not validate.
    """
    section, _, name = key.partition(".")
    data = load_global_config().model_dump(mode="json")
    if section not in data or name not in data[section]:
        valid = ", ".join(f"{s}.{k}" for s, fields in data.items() for k in fields)
        raise ConfigError(f"Unknown config key '{key}'. Valid keys: {valid}")

    data[section][name] = value
    try:
        config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for '{key}': {value!r}") from exc
    save_global_config(config)
    return config
