"""
/authcode handling: validate the callback, consume the pending verifier, exchange the code at
Spotify's token endpoint and parse the token response.
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from spotify_login.config import REDIRECT_URI, TOKEN_REQUEST_TIMEOUT, TOKEN_URL, ClientIdentity
from spotify_login.errors import (
    AuthorizationDeniedError,
    MalformedCallbackError,
    OrphanCallbackError,
    TokenExchangeError,
    TokenResponseError,
)
from spotify_login.login import encode_state
from spotify_login.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenResponse:
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str | None = None
    scope: str | None = None

    @classmethod
    def from_json(cls, data: Any) -> "TokenResponse":
        """Validate the token endpoint's JSON body. Raises TokenResponseError on shape mismatch."""
        if not isinstance(data, dict):
            raise TokenResponseError("Token response is not a JSON object")
        access_token = data.get("access_token")
        refresh_token = data.get("refresh_token")
        expires_in = data.get("expires_in")
        if not isinstance(access_token, str) or not access_token:
            raise TokenResponseError("Token response has no access_token")
        if not isinstance(refresh_token, str) or not refresh_token:
            raise TokenResponseError("Token response has no refresh_token")
        # bool is an int subclass; reject it explicitly
        if not isinstance(expires_in, int) or isinstance(expires_in, bool) or expires_in < 0:
            raise TokenResponseError("Token response has no valid expires_in")
        token_type = data.get("token_type")
        scope = data.get("scope")
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=expires_in,
            token_type=token_type if isinstance(token_type, str) else None,
            scope=scope if isinstance(scope, str) else None,
        )


def _error_description(r) -> str:
    """Provider's error_description / error when the body is JSON, else the raw text."""
    if r.headers.get("content-type", "").startswith("application/json"):
        try:
            err = r.json()
        except ValueError:
            err = None
        if isinstance(err, dict):
            desc = err.get("error_description") or err.get("error")
            if desc:
                return str(desc)
    return getattr(r, "text", "") or f"HTTP {r.status_code}"


def exchange_code(code: str, code_verifier: str, client_id: str) -> TokenResponse:
    """
    POST /api/token with the grant in the query string and an empty form body
    (Spotify accepts either; the body stays empty so Content-Length is 0).
    """
    params = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": REDIRECT_URI,
        "client_id": client_id,
        "code_verifier": code_verifier,
        "response_type": "code",
    }
    try:
        r = httpx.post(
            TOKEN_URL,
            params=params,
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Content-Length": "0",
                "Accept": "application/json",
            },
            timeout=TOKEN_REQUEST_TIMEOUT,
        )
    except httpx.HTTPError as e:
        raise TokenExchangeError(f"Token request failed: {e}") from e

    if not 200 <= r.status_code < 300:
        raise TokenExchangeError(f"Token endpoint returned {r.status_code}: {_error_description(r)}")

    try:
        data = r.json()
    except ValueError as e:
        raise TokenResponseError("Token response is not valid JSON") from e
    return TokenResponse.from_json(data)


def handle_callback(
    query: Mapping[str, str],
    store: SessionStore,
    identity: ClientIdentity,
    local_address: str | None = None,
) -> TokenResponse:
    """
    Complete the pending authorization. When local_address is given, a supplied state must be
    the one /login advertised. Only a callback carrying a code consumes the pending session.
    Raises a CallbackError subclass on every failure.
    """
    state = query.get("state")
    if state is not None and local_address is not None and state != encode_state(local_address):
        logger.warning("Callback state does not match this server")
        raise MalformedCallbackError("Unexpected state parameter.")

    # Callbacks without a code leave the pending session in place
    error = query.get("error")
    if error:
        logger.warning("Authorization denied by Spotify: %s", error)
        raise AuthorizationDeniedError(query.get("error_description") or error)

    code = query.get("code")
    if not code:
        logger.warning("Callback without code parameter")
        raise MalformedCallbackError("Missing code parameter.")

    code_verifier = store.take_session()
    if code_verifier is None:
        logger.warning("Callback with no pending authorization")
        raise OrphanCallbackError("No pending authorization. Please log in again.")

    try:
        tokens = exchange_code(code, code_verifier, identity.client_id)
    except TokenExchangeError as e:
        logger.warning("Token exchange failed: %s", e.message)
        raise

    logger.info("Access  Token: %s", tokens.access_token)
    logger.info("Refresh Token: %s", tokens.refresh_token)
    logger.info("Expires in: %ss", tokens.expires_in)
    return tokens
