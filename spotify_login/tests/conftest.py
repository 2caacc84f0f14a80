"""
Pytest fixtures for spotify_login. Every test gets a fresh app and session store; client_id and the
advertised address are injected so nothing reads config.json or probes the network.
"""
import pytest
from fastapi.testclient import TestClient

from spotify_login.config import ClientIdentity
from spotify_login.main import create_app
from spotify_login.session_store import SessionStore

TEST_ADDRESS = "192.168.1.20:8765"


@pytest.fixture
def identity():
    return ClientIdentity(client_id="test-client")


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def client(identity, store):
    return TestClient(create_app(client_identity=identity, session_store=store, advertised_address=TEST_ADDRESS))


class MockTokenResponse:
    """Stand-in for httpx.Response as returned by httpx.post."""

    def __init__(self, status_code=200, data=None, headers=None, text=""):
        self.status_code = status_code
        self._data = data
        self.headers = headers if headers is not None else {"content-type": "application/json"}
        self.text = text

    def json(self):
        if self._data is None:
            raise ValueError("No JSON object could be decoded")
        return self._data


TOKEN_JSON = {
    "access_token": "AT",
    "token_type": "Bearer",
    "expires_in": 3600,
    "refresh_token": "RT",
    "scope": "user-read-playback-state user-read-currently-playing",
}


@pytest.fixture
def local_address():
    return TEST_ADDRESS


@pytest.fixture
def token_response():
    """Factory for a mocked token endpoint response; defaults to a 200 with TOKEN_JSON."""

    def make(status_code=200, data=TOKEN_JSON, headers=None, text=""):
        return MockTokenResponse(status_code=status_code, data=data, headers=headers, text=text)

    return make
