"""Pytest fixtures for testing"""

import pytest
from typing import Callable, Dict, Generator
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from card_tracker.api.main import create_app
from card_tracker.config import Settings
from card_tracker.infrastructure.database.models import User
from card_tracker.infrastructure.database.session import Database
from card_tracker.infrastructure.security.credentials import CredentialService

API = "/api"

TEST_SETTINGS = Settings(
    database_url="sqlite://",
    jwt_secret="test-secret-key-that-is-at-least-32-characters",
    bcrypt_rounds=4,  # bcrypt minimum, keeps the suite fast
    create_tables_on_startup=False,
    rate_limit_max=10_000,
    environment="test",
)


@pytest.fixture
def database() -> Generator[Database, None, None]:
    """Fresh in-memory database per test"""
    database = Database.from_url(TEST_SETTINGS.database_url)
    database.create_all()
    try:
        yield database
    finally:
        database.drop_all()
        database.dispose()


@pytest.fixture
def db(database: Database) -> Generator[Session, None, None]:
    """Session for repository-level tests"""
    yield from database.session()


@pytest.fixture
def credentials() -> CredentialService:
    return CredentialService.from_settings(TEST_SETTINGS)


@pytest.fixture
def app(database: Database, credentials: CredentialService) -> FastAPI:
    return create_app(TEST_SETTINGS, database=database, credentials=credentials)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create FastAPI test client with test database"""
    return TestClient(app)


@pytest.fixture
def register(client: TestClient) -> Callable[..., Dict]:
    """Register a user through the API and return the response body"""

    def _register(email: str = "alice@example.com", name: str = "Alice", password: str = "secret123") -> Dict:
        response = client.post(f"{API}/auth/register", json={"email": email, "name": name, "password": password})
        assert response.status_code == 201, response.text
        return response.json()

    return _register


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(register) -> Dict[str, str]:
    return bearer(register()["token"])


@pytest.fixture
def other_auth_headers(register) -> Dict[str, str]:
    return bearer(register(email="bob@example.com", name="Bob")["token"])


@pytest.fixture
def create_card(client: TestClient, auth_headers: Dict[str, str]) -> Callable[..., Dict]:
    """Create a card for the default user and return the response body"""

    def _create_card(headers: Dict[str, str] | None = None, **overrides) -> Dict:
        payload = {
            "name": "Visa",
            "balance": 0,
            "interestRate": 20,
            "dueDate": "2025-01-01",
            "minimumPayment": 0,
        }
        payload.update(overrides)
        response = client.post(f"{API}/cards", json=payload, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create_card


@pytest.fixture
def owner(db: Session) -> User:
    """User row for repository-level tests"""
    user = User(email="owner@example.com", name="Owner", password_hash=None)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def stranger(db: Session) -> User:
    user = User(email="stranger@example.com", name="Stranger", password_hash=None)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
