"""Configuration management with platform paths and precedence resolution.

This module locates and reads the configuration for votd:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/Library`` on macOS and ``%APPDATA%``/``%LOCALAPPDATA%`` on Windows.
  See :func:`get_config_dir`, :func:`get_cache_dir`, :func:`get_data_dir`.
  The cache directory may be *unavailable* (no home directory and no
  override), in which case :func:`cache_file_path` returns ``None`` and the
  verse-of-the-day cache is skipped for the invocation.
* **Global config** -- A single :class:`~votd.models.GlobalConfig` JSON
  file storing defaults (timeout, endpoint, cache and output settings).
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, and the global config into the effective
  configuration.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from votd.exceptions import ConfigError
from votd.models import GlobalConfig

_APP_NAME = "votd"
_CONFIG_FILENAME = "config.json"
CACHE_FILENAME = "votd-cli-cache.txt"

_TRUTHY = {"1", "true", "yes", "on"}


# --- Platform path resolution ---


def _is_xdg_platform() -> bool:
    """Linux and the BSDs follow the XDG base directory layout."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _home() -> Optional[Path]:
    """Return the user's home directory, or ``None`` if it cannot be determined."""
    try:
        return Path.home()
    except (RuntimeError, KeyError):
        return None


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Optional[Path]:
    """``$env_var`` if set and non-empty, else ``$HOME/<default_segments>``."""
    override = os.environ.get(env_var)
    if override:
        return Path(override)
    home = _home()
    return home.joinpath(*default_segments) if home is not None else None


def _platform_base(kind: str) -> Optional[Path]:
    """Return the per-platform base directory for ``config``, ``cache`` or ``data``."""
    system = platform.system()
    if _is_xdg_platform():
        env_var, segments = {
            "config": ("XDG_CONFIG_HOME", (".config",)),
            "cache": ("XDG_CACHE_HOME", (".cache",)),
            "data": ("XDG_DATA_HOME", (".local", "share")),
        }[kind]
        return _xdg_base(env_var, segments)
    if system == "Darwin":
        home = _home()
        if home is None:
            return None
        sub = {"config": "Application Support", "cache": "Caches", "data": "Application Support"}
        return home / "Library" / sub[kind]
    if system == "Windows":
        env_var = "APPDATA" if kind == "config" else "LOCALAPPDATA"
        value = os.environ.get(env_var, "")
        return Path(value) if value else None
    # Unknown platform: fall back to a dot-directory in $HOME
    home = _home()
    return home / f".{_APP_NAME}" if home is not None else None


def get_config_dir() -> Optional[Path]:
    """Return the configuration directory (``$XDG_CONFIG_HOME/votd/`` on Linux).

    Returns:
        Absolute path to the configuration directory, or ``None`` when no
        home directory can be determined. The directory is not created.
    """
    base = _platform_base("config")
    return base / _APP_NAME if base is not None else None


def get_cache_dir() -> Optional[Path]:
    """Return the platform cache directory that holds the verse-of-the-day slot.

    On Linux/BSD: ``$XDG_CACHE_HOME`` (default ``~/.cache``).
    On macOS: ``~/Library/Caches``. On Windows: ``%LOCALAPPDATA%``.

    The cache file lives directly in this directory, not in an
    application sub-directory.

    Returns:
        The directory path, or ``None`` when it cannot be determined.
    """
    return _platform_base("cache")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    Falls back to the system temp directory when no home directory is
    available so that crash logs can always be written.
    """
    base = _platform_base("data")
    path = base / _APP_NAME if base is not None else Path(tempfile.gettempdir()) / _APP_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path


def cache_file_path() -> Optional[Path]:
    """Return ``<cache dir>/votd-cli-cache.txt``, or ``None`` if unavailable."""
    cache_dir = get_cache_dir()
    if cache_dir is None:
        return None
    return cache_dir / CACHE_FILENAME


# --- Global config ---


def _global_config_path() -> Optional[Path]:
    """Path to the global config file."""
    config_dir = get_config_dir()
    return config_dir / _CONFIG_FILENAME if config_dir is not None else None


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~votd.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but cannot be read, contains
            invalid JSON or fails Pydantic validation.
    """
    path = _global_config_path()
    if path is None or not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (OSError, json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


# --- Precedence resolution ---


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def resolve_config(
    cli_timeout: Optional[float] = None,
    cli_no_cache: bool = False,
    cli_show_translation: bool = False,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_timeout``, ``cli_no_cache``, ``cli_show_translation``)
        2. Environment variables (``VOTD_TIMEOUT``, ``VOTD_NO_CACHE``,
           ``VOTD_BASE_URL``)
        3. User config (``~/.config/votd/config.json``)
        4. Defaults

    Boolean CLI flags can only switch a setting on; a flag left unset
    defers to the lower layers.

    Returns:
        The effective :class:`~votd.models.GlobalConfig`.

    Raises:
        ConfigError: If the config file or an environment variable is invalid.
    """
    # 4 + 3. Defaults layered with the config file
    cfg = load_global_config()

    # 2. Environment variables
    env_timeout = os.environ.get("VOTD_TIMEOUT")
    if env_timeout:
        try:
            cfg.request.timeout = float(env_timeout)
        except ValueError as exc:
            raise ConfigError(f"VOTD_TIMEOUT must be a number of seconds, got {env_timeout!r}") from exc
    env_base_url = os.environ.get("VOTD_BASE_URL")
    if env_base_url:
        cfg.request.base_url = env_base_url
    if _env_flag("VOTD_NO_CACHE"):
        cfg.cache.enabled = False

    # 1. CLI flags
    if cli_timeout is not None:
        cfg.request.timeout = cli_timeout
    if cli_no_cache:
        cfg.cache.enabled = False
    if cli_show_translation:
        cfg.output.show_translation = True

    if cfg.request.timeout <= 0:
        raise ConfigError(f"Timeout must be positive, got {cfg.request.timeout}")
    return cfg
