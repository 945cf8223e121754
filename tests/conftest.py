import os
import sys
from pathlib import Path

os.environ.setdefault("APP_ENV", "testing")

import pytest  # noqa: E402

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api import create_app  # noqa: E402
from models import storage  # noqa: E402
from utils.security import SigningKeys  # noqa: E402

TEST_EMAIL = "a@x.com"
TEST_PASSWORD = "password123"
REFRESH_COOKIE = "refresh_token"


@pytest.fixture(scope="session")
def signing_keys():
    """One freshly generated RSA key pair per test run."""
    return SigningKeys.generate()


@pytest.fixture
def app(signing_keys):
    app = create_app("testing", signing_keys=signing_keys)
    yield app
    storage.close()
    storage.drop_all()


@pytest.fixture
def client(app):
    # cookies are passed explicitly so each test controls which refresh token is sent
    return app.test_client(use_cookies=False)


@pytest.fixture
def sessions(app):
    return app.extensions["session_manager"]


@pytest.fixture
def ledger(sessions):
    return sessions.token_ledger


@pytest.fixture
def gate(app):
    return app.extensions["auth_gate"]


def refresh_cookie_header(response):
    """Raw Set-Cookie header carrying the refresh token, or None."""
    for header in response.headers.getlist("Set-Cookie"):
        if header.startswith(f"{REFRESH_COOKIE}="):
            return header
    return None


def refresh_cookie_value(response):
    header = refresh_cookie_header(response)
    if header is None:
        return None
    return header.split(";", 1)[0].split("=", 1)[1]


def with_refresh_cookie(token):
    return {"Cookie": f"{REFRESH_COOKIE}={token}"}


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, email=TEST_EMAIL, password=TEST_PASSWORD):
    return client.post("/api/auth/register", json={"email": email, "password": password})


def login(client, email=TEST_EMAIL, password=TEST_PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def register_and_login(client, email=TEST_EMAIL, password=TEST_PASSWORD):
    """Returns (access_token, refresh_token)."""
    register(client, email, password)
    response = login(client, email, password)
    assert response.status_code == 200
    return response.get_json()["access_token"], refresh_cookie_value(response)
