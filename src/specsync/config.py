"""Configuration management with XDG paths and precedence resolution.

specsync's behaviour is fixed except for a few policy points that are
implementation choices rather than OpenAPI requirements: the name given to an
operation without ``operationId``/``summary``, how multiple security
requirements are flattened, and whether user-created requests are shown as
removal candidates. This module resolves those settings:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specsync/`` on macOS and Windows. See :func:`get_config_dir`.
* **Global config** -- A single :class:`~specsync.models.GlobalConfig`
  JSON file storing user defaults, written atomically by
  :func:`save_global_config`.
* **Project config** -- ``./specsync.json``, a partial config whose keys
  override the global file.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specsync.exceptions import ConfigError
from specsync.models import GlobalConfig

_APP_NAME = "specsync"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specsync.json"

ENV_NAME_FALLBACK = "SPECSYNC_NAME_FALLBACK"
ENV_SECURITY_POLICY = "SPECSYNC_SECURITY_POLICY"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory (which may not exist yet).

    On Linux/BSD: ``$XDG_CONFIG_HOME/specsync/`` (default ``~/.config/specsync/``).
    On macOS/Windows: ``~/.specsync/``.
    """
    if _is_xdg_platform():
        xdg = os.environ.get("XDG_CONFIG_HOME")
        base = Path(xdg) if xdg else Path.home() / ".config"
        return base / _APP_NAME
    return Path.home() / f".{_APP_NAME}"


def get_data_dir() -> Path:
    """Return the data directory used for crash logs, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specsync/`` (default ``~/.local/share/specsync/``).
    On macOS/Windows: ``~/.specsync/``.
    """
    if _is_xdg_platform():
        xdg = os.environ.get("XDG_DATA_HOME")
        base = Path(xdg) if xdg else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Loading ---


def _read_json(path: Path, what: str) -> Optional[dict[str, Any]]:
    """Read a JSON object from *path*, or ``None`` if the file does not exist."""
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {what} at {path}: expected a JSON object")
    return data


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~specsync.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    data = _read_json(path, "global config")
    if data is None:
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
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
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def save_global_config(config: GlobalConfig) -> Path:
    """Persist the global configuration atomically and return its path."""
    path = get_config_dir() / _CONFIG_FILENAME
    data = config.model_dump(mode="json")
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specsync.json``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    return _read_json(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project config")


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_name_fallback: Optional[str] = None,
    cli_security_policy: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``SPECSYNC_NAME_FALLBACK``,
           ``SPECSYNC_SECURITY_POLICY``)
        3. Project config (``./specsync.json``)
        4. User config (``~/.config/specsync/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    # 5 + 4. Global config (fills in defaults automatically)
    data = load_global_config().model_dump(mode="json")

    # 3. Project-local overrides
    project = load_project_config()
    if project is not None:
        data = _deep_merge(data, project)

    # 2. Environment, then 1. CLI flags
    parser = data.setdefault("parser", {})
    if not isinstance(parser, dict):
        raise ConfigError("Invalid configuration: 'parser' must be an object")
    for key, env_var, cli_value in (
        ("name_fallback", ENV_NAME_FALLBACK, cli_name_fallback),
        ("security_policy", ENV_SECURITY_POLICY, cli_security_policy),
    ):
        env_value = os.environ.get(env_var)
        if env_value:
            parser[key] = env_value
        if cli_value is not None:
            parser[key] = cli_value

    if cli_format is not None:
        output = data.setdefault("output", {})
        if not isinstance(output, dict):
            raise ConfigError("Invalid configuration: 'output' must be an object")
        output["format"] = cli_format

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
