"""Pytest configuration and fixtures."""

import base64
import os

# Keep the application engine off PostgreSQL during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

import httpx
import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from apps.gateway.database import Base
from apps.gateway.services.credentials import StaticCredentialResolver, TenantCredentials
from apps.gateway.services.crypto import SecretDecryptor
from apps.gateway.services.zoom_token import ZoomTokenClient

TEST_KEY = base64.b64encode(b"k" * 32).decode("utf-8")


class ZoomMock:
    """Mock Zoom server recording every request it receives."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.json_body = {"access_token": "tok123", "token_type": "bearer", "expires_in": 3600}
        self.text_body = None
        self.error = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.text_body is not None:
            return httpx.Response(self.status_code, text=self.text_body)
        return httpx.Response(self.status_code, json=self.json_body)

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def zoom():
    """Mock Zoom token endpoint."""
    return ZoomMock()


@pytest.fixture
def tenants():
    """Credential records for a configured and a partially configured tenant."""
    return {
        "acme": TenantCredentials(
            tenant_id="acme",
            zoom_account_id="acct-1",
            zoom_client_id="client-1",
            zoom_client_secret="secret-1",
            zoom_webhook_secret="whsec-1",
        ),
        "partial": TenantCredentials(tenant_id="partial", zoom_client_id="client-2"),
    }


@pytest.fixture
def resolver(tenants):
    return StaticCredentialResolver(tenants)


@pytest.fixture
def token_client(resolver, zoom):
    return ZoomTokenClient(resolver, transport=zoom.transport)


@pytest.fixture
def decryptor():
    return SecretDecryptor(TEST_KEY)


@pytest.fixture
def seal():
    """Seal a secret the way the tenant administration service stores it."""

    def _seal(plaintext: str) -> str:
        nonce = os.urandom(12)
        sealed = AESGCM(base64.b64decode(TEST_KEY)).encrypt(nonce, plaintext.encode("utf-8"), None)
        return base64.b64encode(nonce + sealed).decode("utf-8")

    return _seal


@pytest.fixture
def test_db():
    """Create test database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def client(test_db, resolver, zoom):
    """Create test client with Zoom mocked out."""
    from fastapi.testclient import TestClient

    from apps.gateway.api.dependencies import (
        get_credential_resolver,
        get_token_exchange,
        get_zoom_client_factory,
    )
    from apps.gateway.database import get_db
    from apps.gateway.main import app
    from apps.gateway.services.observability import LoggingTokenExchange
    from apps.gateway.services.zoom_client import ZoomClient

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_credential_resolver] = lambda: resolver
    app.dependency_overrides[get_token_exchange] = lambda: LoggingTokenExchange(
        ZoomTokenClient(resolver, transport=zoom.transport)
    )
    app.dependency_overrides[get_zoom_client_factory] = lambda: (
        lambda token: ZoomClient(token, transport=zoom.transport)
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
