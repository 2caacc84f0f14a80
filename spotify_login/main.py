"""
Local Spotify login server.
GET /login redirects to Spotify with PKCE; GET /authcode exchanges the returned code for tokens.
Port 8765; the static redirect page forwards the code here using the address carried in state.
"""
import html
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from spotify_login.callback import handle_callback
from spotify_login.config import HOST, LOG_LEVEL, PORT, ClientIdentity, load_client_identity, local_address
from spotify_login.errors import CallbackError
from spotify_login.login import initiate_login
from spotify_login.session_store import SessionStore

logger = logging.getLogger(__name__)


def _page(title: str, message: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(
        f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{html.escape(title)}</title></head>
<body>
  <h1>{html.escape(title)}</h1>
  <p>{html.escape(message)}</p>
  <p><a href="/login">Log in</a></p>
</body>
</html>""",
        status_code=status_code,
    )


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_client_identity(request: Request) -> ClientIdentity:
    return request.app.state.client_identity


def get_local_address(request: Request) -> str:
    return request.app.state.local_address


def create_app(
    client_identity: ClientIdentity | None = None,
    session_store: SessionStore | None = None,
    advertised_address: str | None = None,
) -> FastAPI:
    """
    Build the app. Missing collaborators are resolved at startup: client_id from the config file
    (ConfigError aborts startup) and the advertised address from the LAN interface.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.client_identity is None:
            app.state.client_identity = load_client_identity()
        if app.state.local_address is None:
            app.state.local_address = local_address()
        logger.info("Callback address advertised in state: %s", app.state.local_address)
        yield

    app = FastAPI(title="Spotify Login", version="0.1.0", lifespan=lifespan)
    app.state.client_identity = client_identity
    app.state.session_store = session_store or SessionStore()
    app.state.local_address = advertised_address

    @app.get("/health")
    def health(store: SessionStore = Depends(get_session_store)):
        """Health check endpoint."""
        return {"status": "ok", "service": "spotify_login", "pending_authorization": store.has_pending()}

    @app.get("/", response_class=HTMLResponse)
    def home():
        """Home page with link to start login."""
        return HTMLResponse(
            """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Spotify Login</title></head>
<body>
  <h1>Spotify Login</h1>
  <p><a href="/login">Log in with Spotify</a></p>
</body>
</html>"""
        )

    @app.get("/login")
    def login(
        store: SessionStore = Depends(get_session_store),
        identity: ClientIdentity = Depends(get_client_identity),
        address: str = Depends(get_local_address),
    ):
        """Generate PKCE pair, remember the verifier, redirect to Spotify /authorize."""
        url = initiate_login(store, identity, address)
        return RedirectResponse(url=url, status_code=302)

    @app.get("/authcode", response_class=HTMLResponse)
    def authcode(
        request: Request,
        store: SessionStore = Depends(get_session_store),
        identity: ClientIdentity = Depends(get_client_identity),
        address: str = Depends(get_local_address),
    ):
        """Redirect target: exchange ?code=... for tokens. Errors render as non-2xx pages."""
        try:
            handle_callback(dict(request.query_params), store, identity, address)
        except CallbackError as e:
            return _page(e.title, e.message, status_code=e.status_code)
        return _page("Login success", "Access and refresh tokens received. You can close this window.")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        "spotify_login.main:app",
        host=HOST,
        port=PORT,
    )
