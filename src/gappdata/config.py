"""Centralized configuration.

Local state lives in the gappdata home directory:
    .env        - GAPPDATA_CLIENT_ID and other settings
    token.json  - last acquired OAuth access token

The home directory defaults to ~/.gappdata and can be moved with the
GAPPDATA_HOME environment variable.

This module auto-loads the .env file on import; variables already present
in the environment take precedence.
"""

import os
from pathlib import Path

from gappdata.exceptions import ClientIdNotFoundError

CLIENT_ID_ENV = "GAPPDATA_CLIENT_ID"
HOME_ENV = "GAPPDATA_HOME"

APP_DIR = Path(os.environ.get(HOME_ENV, Path.home() / ".gappdata")).expanduser()

ENV_FILE = APP_DIR / ".env"
TOKEN_FILE = APP_DIR / "token.json"


def _parse_env_line(line: str) -> tuple[str, str] | None:
    """Split one ``KEY=value`` line, or return None for anything else.

    Accepts an optional ``export`` prefix and one pair of matching quotes
    around the value.
    """
    line = line.strip()
    if line.startswith("#"):
        return None
    line = line.removeprefix("export ").lstrip()

    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None

    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key, value


def read_env_file(env_path: Path) -> dict[str, str]:
    """Read the ``KEY=value`` pairs of a .env file without applying them.

    A missing file reads as empty. Later duplicates win.
    """
    if not env_path.is_file():
        return {}
    pairs = (_parse_env_line(line) for line in env_path.read_text().splitlines())
    return dict(pair for pair in pairs if pair is not None)


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Export a .env file into os.environ, keeping variables already set.

    Returns:
        The variables that were actually exported.
    """
    exported = {
        key: value for key, value in read_env_file(env_path).items() if key not in os.environ
    }
    os.environ.update(exported)
    return exported


def get_client_id(client_id: str | None = None) -> str:
    """Resolve the OAuth client id.

    Args:
        client_id: Explicit client id. Wins over the environment.

    Returns:
        The client id.

    Raises:
        ClientIdNotFoundError: If no client id is available.
    """
    resolved = client_id or os.environ.get(CLIENT_ID_ENV)
    if not resolved:
        raise ClientIdNotFoundError(CLIENT_ID_ENV)
    return resolved


def ensure_app_dir() -> Path:
    """Create the gappdata home directory if it doesn't exist.

    Returns:
        Path to the home directory.
    """
    APP_DIR.mkdir(parents=True, exist_ok=True)
    return APP_DIR


def get_config_status() -> dict:
    """Get status of the local configuration.

    Returns:
        Dictionary with configuration status.
    """
    return {
        "app_dir": str(APP_DIR),
        "env_file": ENV_FILE.exists(),
        "client_id": bool(os.environ.get(CLIENT_ID_ENV)),
        "token": TOKEN_FILE.exists(),
    }


_loaded = _load_env_file(ENV_FILE)
