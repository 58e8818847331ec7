"""Pytest configuration and fixtures."""

import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing app
os.environ.setdefault("TOKEN_SECRET", "test-secret-for-unit-tests")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from src.config import Settings
from src.services.auth_service import AuthService
from src.services.token_service import TokenCodec
from src.services.user_service import UserService
from src.services.user_store import UserStore

TEST_SECRET = "test-secret-for-unit-tests"
DEFAULT_PASSWORD = "secret-pw"


class FakeClock:
    """Controllable clock returning epoch seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now += ms / 1000


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway users file."""
    return Settings(
        token_secret=TEST_SECRET,
        users_file=str(tmp_path / "data" / "users.json"),
        bcrypt_rounds=4,
        log_level="WARNING",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def codec(settings, clock) -> TokenCodec:
    return TokenCodec(settings.token_secret, settings.token_ttl_seconds, clock)


@pytest.fixture
def store(settings) -> UserStore:
    return UserStore(settings.users_file)


@pytest.fixture
def auth_service(settings, store, codec) -> AuthService:
    return AuthService(settings, store, codec)


@pytest.fixture
def user_service(store) -> UserService:
    return UserService(store)


@pytest.fixture
def client(settings) -> Generator[TestClient, None, None]:
    """TestClient over an app wired to the temporary users file."""
    from src.main import create_app

    app = create_app(settings)
    with TestClient(app) as tc:
        yield tc


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def register_user(
    client: TestClient,
    first_name: str = "Alice",
    last_name: str = "Smith",
    email: str = "alice@example.com",
    password: str = DEFAULT_PASSWORD,
) -> dict:
    """POST /api/auth/register and return the created user."""
    resp = client.post(
        "/api/auth/register",
        json={
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "password": password,
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["user"]


def login_user(
    client: TestClient,
    email: str = "alice@example.com",
    password: str = DEFAULT_PASSWORD,
) -> str:
    """POST /api/auth/login (the client keeps the cookie) and return the token."""
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]["token"]
