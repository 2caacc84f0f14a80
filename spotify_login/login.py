"""
Login initiation: fresh PKCE pair, stored verifier, Spotify /authorize URL.
"""
import base64
import logging
from urllib.parse import urlencode

from spotify_login.config import AUTHORIZE_URL, REDIRECT_URI, SCOPE, ClientIdentity
from spotify_login.pkce import generate_pkce
from spotify_login.session_store import SessionStore

logger = logging.getLogger(__name__)


def encode_state(address: str) -> str:
    """
    state carries this server's host:port (standard base64) so the static redirect page can
    forward the code here without Spotify knowing the local address.
    """
    return base64.b64encode(address.encode("utf-8")).decode("ascii")


def build_authorize_url(
    *,
    client_id: str,
    code_challenge: str,
    state: str,
    redirect_uri: str = REDIRECT_URI,
    scope: str = SCOPE,
    authorize_url: str = AUTHORIZE_URL,
) -> str:
    params = {
        "code_challenge_method": "S256",
        "code_challenge": code_challenge,
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "scope": scope,
        "state": state,
    }
    return f"{authorize_url}?{urlencode(params)}"


def initiate_login(store: SessionStore, identity: ClientIdentity, local_address: str) -> str:
    """Start an authorization attempt and return the URL to redirect the browser to."""
    code_verifier, code_challenge = generate_pkce()
    store.begin_session(code_verifier)
    url = build_authorize_url(
        client_id=identity.client_id,
        code_challenge=code_challenge,
        state=encode_state(local_address),
    )
    logger.info("Redirecting to Spotify log-in page")
    return url
