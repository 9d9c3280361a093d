"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
settings with a test JWT secret, an in-memory store, a notifier that records
codes instead of emailing them, and an app wired to all of the above.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from shared.config import Settings
from shared.models import PrincipalKind
from api.app import create_app
from api.dependencies import ServiceContainer
from modules.auth.hashing import PasswordHasher
from modules.auth.service import AuthService
from modules.auth.tokens import TokenIssuer
from modules.notifications.exceptions import NotificationFailedError
from modules.principals.memory import InMemoryPrincipalStore
from modules.principals.models import CreatePrincipalRequest
from modules.principals.service import PrincipalService


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only-0123456789"
TEST_PASSWORD = "correct-horse-1"


class RecordingNotifier:
    """INotifier that keeps every code it was asked to send."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    async def send_two_factor_code(self, destination: str, code: str) -> None:
        self._record("2fa", destination, code)

    async def send_password_reset_code(self, destination: str, code: str) -> None:
        self._record("reset", destination, code)

    def _record(self, purpose: str, destination: str, code: str) -> None:
        if self.fail:
            raise NotificationFailedError("SMTP unavailable")
        self.sent.append((purpose, destination, code))

    def last_code(self, purpose: str = "2fa") -> str:
        codes = [code for p, _, code in self.sent if p == purpose]
        assert codes, f"no {purpose} code was sent"
        return codes[-1]


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any .env file."""
    return Settings(
        _env_file=None,
        jwt_secret=TEST_JWT_SECRET,
        store_backend="memory",
        smtp_host="",
    )


@pytest.fixture
def store() -> InMemoryPrincipalStore:
    return InMemoryPrincipalStore()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher()


@pytest.fixture
def tokens(settings: Settings) -> TokenIssuer:
    return TokenIssuer.from_settings(settings)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def auth_service(store, hasher, tokens, notifier) -> AuthService:
    return AuthService(store=store, hasher=hasher, tokens=tokens, notifier=notifier)


@pytest.fixture
def principal_service(store, hasher) -> PrincipalService:
    return PrincipalService(store=store, hasher=hasher)


@pytest.fixture
def create_principal(principal_service):
    """Async factory: await create_principal(kind, username=..., ...)."""

    async def _create(
        kind: PrincipalKind = PrincipalKind.USER,
        username: str = "alice",
        email: str = "alice@example.com",
        password: str = TEST_PASSWORD,
        **extra,
    ):
        request = CreatePrincipalRequest(username=username, email=email, password=password, **extra)
        return await principal_service.create(kind, request)

    return _create


@pytest.fixture
def container(settings, store, notifier) -> ServiceContainer:
    return ServiceContainer(settings, store=store, notifier=notifier)


@pytest.fixture
def client(container):
    """TestClient over an app wired to the in-memory store."""
    app = create_app(container=container)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seed(create_principal):
    """Synchronous principal seeding for TestClient-based tests."""

    def _seed(kind: PrincipalKind = PrincipalKind.USER, **fields):
        return asyncio.run(create_principal(kind, **fields))

    return _seed


@pytest.fixture
def login(client):
    """Log in over HTTP and return Authorization headers."""

    def _login(kind: PrincipalKind, email: str, password: str = TEST_PASSWORD) -> dict[str, str]:
        response = client.post(f"/api/{kind.value}s/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
