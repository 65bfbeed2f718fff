"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, schema rebuilt for each test
- JWT token minting for authenticated tests
- HTTPX AsyncClient over the ASGI app
- CaseSyncStore wired to the same app
"""
import os
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Generator

# Must be set before any fixmypidge module reads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TESTING"] = "1"
os.environ["WEBHOOK_SECRET"] = "test-webhook-secret"
os.environ["AUTOMATION_WEBHOOK_URL"] = ""
os.environ["GEOCODING_API_TOKEN"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from fixmypidge.main import app
from fixmypidge.client import ApiClient, CaseSyncStore
from fixmypidge.core.deps import COOKIE_NAME, get_db
from fixmypidge.core.security import create_session_token
from fixmypidge.db.base import Base
from fixmypidge.db import models  # noqa: F401
from fixmypidge.db.session import SessionLocal, engine

WEBHOOK_SECRET = "test-webhook-secret"


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh schema per test; app code may commit freely."""
    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def local_storage(tmp_path, monkeypatch):
    """Keep uploaded photos inside the test's tmp dir."""
    from fixmypidge.core.config import settings

    monkeypatch.setattr(settings, "STORAGE_BACKEND", "local")
    monkeypatch.setattr(settings, "LOCAL_STORAGE_PATH", str(tmp_path / "photos"))
    return tmp_path / "photos"


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user_id: str
    token: str
    cookie_name: str = COOKIE_NAME


@pytest.fixture(scope="function")
def test_auth() -> TestAuth:
    user_id = f"citizen-{uuid.uuid4().hex[:8]}"
    return TestAuth(user_id=user_id, token=create_session_token(user_id))


# =============================================================================
# Client Fixtures
# =============================================================================

def _override_db(db: Session) -> None:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client (webhooks, health, auth failures)."""
    _override_db(db)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def authed_client(
    db: Session,
    test_auth: TestAuth,
) -> AsyncGenerator[AsyncClient, None]:
    """Client carrying the citizen's bearer token."""
    _override_db(db)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {test_auth.token}"},
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def store(db: Session, test_auth: TestAuth) -> AsyncGenerator[CaseSyncStore, None]:
    """CaseSyncStore talking to the app in-process."""
    _override_db(db)
    async with ApiClient(
        "http://test",
        token=test_auth.token,
        transport=ASGITransport(app=app),
    ) as api:
        yield CaseSyncStore(api)
    app.dependency_overrides.clear()


@pytest.fixture
def webhook_headers() -> dict[str, str]:
    return {"x-webhook-secret": WEBHOOK_SECRET}
