"""
spotify_login configuration. Spotify endpoints, redirect page and scopes are fixed per app
registration; the client_id lives in a local JSON file that is read once at startup.
"""
import json
import logging
import os
import socket
from dataclasses import dataclass
from pathlib import Path

from spotify_login.errors import ConfigError

logger = logging.getLogger(__name__)

# JSON file holding {"client_id": "..."}
CONFIG_PATH = os.environ.get("SPOTIFY_LOGIN_CONFIG", "config.json")

# Authorization server endpoints
AUTHORIZE_URL = os.environ.get("SPOTIFY_AUTHORIZE_URL", "https://accounts.spotify.com/authorize")
TOKEN_URL = os.environ.get("SPOTIFY_TOKEN_URL", "https://accounts.spotify.com/api/token")

# Static page registered at Spotify; it reads `state` and bounces the code back to this server
REDIRECT_URI = os.environ.get("SPOTIFY_REDIRECT_URI", "https://campbellowen.github.io/redirect_to_local")

SCOPE = os.environ.get("SPOTIFY_SCOPE", "user-read-playback-state user-read-currently-playing")

# Local listener
HOST = os.environ.get("SPOTIFY_LOGIN_HOST", "0.0.0.0")
PORT = int(os.environ.get("SPOTIFY_LOGIN_PORT", "8765"))

# Host advertised in `state`; discovered from the LAN interface when unset
ADVERTISED_HOST = os.environ.get("SPOTIFY_LOGIN_ADVERTISED_HOST", "").strip() or None

CODE_VERIFIER_LENGTH = 100

# Seconds a pending authorization stays valid (user has to log in at Spotify in between)
SESSION_TTL = int(os.environ.get("SPOTIFY_LOGIN_SESSION_TTL", "600"))

# Timeout (seconds) for POST /api/token
TOKEN_REQUEST_TIMEOUT = float(os.environ.get("SPOTIFY_TOKEN_REQUEST_TIMEOUT", "10"))

LOG_LEVEL = os.environ.get("SPOTIFY_LOGIN_LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class ClientIdentity:
    client_id: str


def load_client_identity(path: str | os.PathLike | None = None) -> ClientIdentity:
    """
    Read client_id from the JSON config file. Raises ConfigError if the file is missing,
    unreadable, not a JSON object, or has no non-empty string client_id.
    """
    p = Path(path or CONFIG_PATH)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Need a {p} file containing your app's client_id: {e}") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{p} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{p} must contain a JSON object")
    client_id = data.get("client_id")
    if not isinstance(client_id, str) or not client_id.strip():
        raise ConfigError(f"{p} has no client_id")
    logger.info("Loaded client_id from %s", p)
    return ClientIdentity(client_id=client_id.strip())


def discover_local_ip() -> str:
    """Outward-facing IP of this machine. UDP connect sends no packets."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("8.8.8.8", 80))
            return s.getsockname()[0]
    except OSError as e:
        logger.warning("Could not determine local IP (%s); using 127.0.0.1", e)
        return "127.0.0.1"


def local_address() -> str:
    """host:port the redirect page should send the browser back to."""
    host = ADVERTISED_HOST or discover_local_ip()
    return f"{host}:{PORT}"
