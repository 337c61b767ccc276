"""FastAPI dependencies for Zoom credential resolution and API access."""

from typing import Callable

import structlog
from fastapi import Depends
from sqlalchemy.orm import Session

from apps.gateway.config import get_settings
from apps.gateway.database import get_db
from apps.gateway.services.credentials import (
    CredentialResolver,
    DatabaseCredentialResolver,
    SettingsCredentialResolver,
)
from apps.gateway.services.crypto import get_secret_decryptor
from apps.gateway.services.observability import LoggingTokenExchange
from apps.gateway.services.zoom_client import ZoomClient
from apps.gateway.services.zoom_token import ZoomTokenClient

logger = structlog.get_logger()

ZoomClientFactory = Callable[[str], ZoomClient]


def get_credential_resolver(db: Session = Depends(get_db)) -> CredentialResolver:
    """Tenant credentials from the database, falling back to ZOOM_* settings."""
    settings = get_settings()

    try:
        decryptor = get_secret_decryptor()
    except ValueError as e:
        logger.warning("Tenant secrets cannot be decrypted", error=str(e))
        decryptor = None

    return DatabaseCredentialResolver(
        db,
        decryptor,
        fallback=SettingsCredentialResolver(settings),
    )


def get_token_exchange(
    resolver: CredentialResolver = Depends(get_credential_resolver),
) -> LoggingTokenExchange:
    """Token exchange client for the request's resolver."""
    settings = get_settings()
    client = ZoomTokenClient(
        resolver,
        token_url=settings.zoom_token_url,
        timeout=settings.zoom_oauth_timeout_seconds,
    )
    return LoggingTokenExchange(client)


def get_zoom_client_factory() -> ZoomClientFactory:
    """Factory building a Zoom API client from an access token."""
    settings = get_settings()

    def factory(access_token: str) -> ZoomClient:
        return ZoomClient(
            access_token,
            base_url=settings.zoom_api_base_url,
            timeout=settings.zoom_api_timeout_seconds,
        )

    return factory
