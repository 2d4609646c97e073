"""Configuration management with XDG paths, registration files, and credential sources.

This module handles all persistent configuration for openapi-cli:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.openapi-cli/`` on macOS and Windows. See :func:`get_cache_dir` and
  :func:`get_data_dir`.
* **Registration files** -- ``openapi-cli.json`` / ``openapi-cli.yaml`` in
  the working directory, or the file named by ``OPENAPI_CLI_CONFIG``,
  validated into a :class:`~openapi_cli.models.RegistrationsFile`. See
  :func:`find_registrations_file` and :func:`load_registrations_file`.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, interactive prompts, or takes them literally.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from openapi_cli.exceptions import ConfigurationError
from openapi_cli.models import RegistrationsFile

_APP_NAME = "openapi-cli"
CONFIG_ENV_VAR = "OPENAPI_CLI_CONFIG"
REGISTRATION_FILENAMES = ("openapi-cli.json", "openapi-cli.yaml", "openapi-cli.yml")


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


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Used to store fetched remote specs. Cached data can be safely deleted
    at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/openapi-cli/`` (default
    ``~/.cache/openapi-cli/``). On macOS/Windows: ``~/.openapi-cli/cache/``.

    Returns:
        Absolute path to the cache directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CACHE_HOME", (".cache",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/openapi-cli/`` (default
    ``~/.local/share/openapi-cli/``). On macOS/Windows: ``~/.openapi-cli/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Registration files ---


def find_registrations_file(cwd: Optional[Path] = None) -> Optional[Path]:
    """Locate the registrations file.

    ``$OPENAPI_CLI_CONFIG`` wins when set; otherwise the first of
    ``openapi-cli.json``, ``openapi-cli.yaml`` and ``openapi-cli.yml`` found
    in *cwd* (default: the current working directory).

    Returns:
        The file path, or ``None`` when no file is configured or present.

    Raises:
        ConfigurationError: If ``$OPENAPI_CLI_CONFIG`` names a missing file.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path).expanduser()
        if not path.is_file():
            raise ConfigurationError(
                f"Config file not found: {path} (from ${CONFIG_ENV_VAR})"
            )
        return path

    base = cwd or Path.cwd()
    for name in REGISTRATION_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load_registrations_file(path: Path) -> RegistrationsFile:
    """Read and validate a registrations file.

    JSON is used for ``.json`` files and YAML for everything else. A bare
    list at the top level is accepted as the ``registrations`` list.

    Args:
        path: The file to read.

    Returns:
        The validated :class:`~openapi_cli.models.RegistrationsFile`.

    Raises:
        ConfigurationError: If the file cannot be read, parsed, or
            validated.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc

    try:
        data: Any
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Invalid config file {path}: {exc}") from exc

    if data is None:
        data = {}
    if isinstance(data, list):
        data = {"registrations": data}

    try:
        return RegistrationsFile.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid config file {path}: {exc}") from exc


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)
        - anything else -- used literally

    Args:
        source: The source descriptor string.

    Returns:
        The resolved credential string.

    Raises:
        ConfigurationError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigurationError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        file_path = source[5:]
        path = Path(file_path).expanduser()
        if not path.is_file():
            raise ConfigurationError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigurationError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigurationError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter credential: ")

    return source
