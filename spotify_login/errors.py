"""
Error taxonomy. Callback errors carry the HTTP status the /authcode route answers with.
"""


class SpotifyLoginError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(SpotifyLoginError):
    """Missing or malformed config file; fatal at startup."""


class CallbackError(SpotifyLoginError):
    status_code = 400
    title = "Login error"


class MalformedCallbackError(CallbackError):
    """No code in the callback, or a state this server did not issue. Session untouched."""

    status_code = 400


class AuthorizationDeniedError(CallbackError):
    """Authorization server redirected back with error=... and no code. Session untouched."""

    status_code = 400


class OrphanCallbackError(CallbackError):
    """Callback with no pending authorization (replayed, abandoned, or spoofed)."""

    status_code = 409


class TokenExchangeError(CallbackError):
    """Transport failure or non-2xx status from the token endpoint."""

    status_code = 502
    title = "Token exchange failed"


class TokenResponseError(TokenExchangeError):
    """Token endpoint answered 2xx with a body that is not the expected JSON."""
