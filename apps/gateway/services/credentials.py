"""Tenant Zoom credential resolution.

The token exchange depends only on the ``CredentialResolver`` protocol so it
can be exercised without a persistence backend. Resolvers may return partial
records: a tenant can exist without being Zoom-configured yet.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Protocol

import structlog
from sqlalchemy.orm import Session

from apps.gateway.config import Settings
from apps.gateway.models import ZoomTenantSettings
from apps.gateway.services.crypto import SecretDecryptor

logger = structlog.get_logger()

REQUIRED_FIELDS = ("zoom_account_id", "zoom_client_id", "zoom_client_secret")


class CredentialsNotFoundError(LookupError):
    """Raised when a tenant has no Zoom settings at all."""

    def __init__(self, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(f"Zoom settings not found for tenant {tenant_id}")


@dataclass(frozen=True)
class TenantCredentials:
    """Zoom OAuth credentials for one tenant. Any field may be unset."""

    tenant_id: str
    zoom_account_id: Optional[str] = None
    zoom_client_id: Optional[str] = None
    zoom_client_secret: Optional[str] = field(default=None, repr=False)
    zoom_webhook_secret: Optional[str] = field(default=None, repr=False)

    def missing_fields(self) -> List[str]:
        """Names of required fields that are absent or empty."""
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]

    @property
    def is_configured(self) -> bool:
        return not self.missing_fields()


class CredentialResolver(Protocol):
    """Source of tenant Zoom credentials."""

    def get_credentials(self, tenant_id: str) -> TenantCredentials:
        """Return the tenant's credentials.

        Raises:
            CredentialsNotFoundError: If the tenant has no Zoom settings
        """
        ...


class StaticCredentialResolver:
    """Resolver backed by an in-memory mapping of tenant id to credentials."""

    def __init__(self, credentials: Optional[Mapping[str, TenantCredentials]] = None):
        self._credentials: Dict[str, TenantCredentials] = dict(credentials or {})

    def get_credentials(self, tenant_id: str) -> TenantCredentials:
        try:
            return self._credentials[tenant_id]
        except KeyError:
            raise CredentialsNotFoundError(tenant_id) from None


class SettingsCredentialResolver:
    """Resolver for the default tenant, read from ZOOM_* environment settings."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def get_credentials(self, tenant_id: str) -> TenantCredentials:
        if tenant_id != self.settings.default_tenant_id:
            raise CredentialsNotFoundError(tenant_id)

        return TenantCredentials(
            tenant_id=tenant_id,
            zoom_account_id=self.settings.zoom_account_id or None,
            zoom_client_id=self.settings.zoom_client_id or None,
            zoom_client_secret=self.settings.zoom_client_secret or None,
            zoom_webhook_secret=self.settings.zoom_webhook_secret or None,
        )


class DatabaseCredentialResolver:
    """Resolver reading active rows of ``zoom_tenant_settings``."""

    def __init__(
        self,
        db: Session,
        decryptor: Optional[SecretDecryptor],
        fallback: Optional[CredentialResolver] = None,
    ):
        """
        Initialize resolver.

        Args:
            db: Database session
            decryptor: Decrypts stored secrets; None leaves secrets unset
            fallback: Resolver consulted when the tenant has no active row
        """
        self.db = db
        self.decryptor = decryptor
        self.fallback = fallback

    def get_credentials(self, tenant_id: str) -> TenantCredentials:
        row = (
            self.db.query(ZoomTenantSettings)
            .filter(
                ZoomTenantSettings.tenant_id == tenant_id,
                ZoomTenantSettings.is_active.is_(True),
            )
            .first()
        )

        if row is None:
            if self.fallback is not None:
                return self.fallback.get_credentials(tenant_id)
            raise CredentialsNotFoundError(tenant_id)

        return TenantCredentials(
            tenant_id=tenant_id,
            zoom_account_id=row.zoom_account_id,
            zoom_client_id=row.zoom_client_id,
            zoom_client_secret=self._decrypt(tenant_id, "zoom_client_secret", row.zoom_client_secret_enc),
            zoom_webhook_secret=self._decrypt(tenant_id, "zoom_webhook_secret", row.zoom_webhook_secret_enc),
        )

    def _decrypt(self, tenant_id: str, name: str, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if self.decryptor is None:
            logger.warning("No decryption key configured, secret unavailable", tenant_id=tenant_id, field=name)
            return None
        try:
            return self.decryptor.decrypt(value)
        except ValueError as e:
            logger.error("Failed to decrypt tenant secret", tenant_id=tenant_id, field=name, error=str(e))
            return None


def credential_status(credentials: TenantCredentials) -> dict:
    """Configuration status of each Zoom field, without exposing secrets."""

    def status(value: Optional[str]) -> str:
        return "configured" if value else "not_configured"

    return {
        "tenant_id": credentials.tenant_id,
        "zoom_account_id": credentials.zoom_account_id,
        "zoom_client_id": credentials.zoom_client_id,
        "account_id_status": status(credentials.zoom_account_id),
        "client_id_status": status(credentials.zoom_client_id),
        "client_secret_status": status(credentials.zoom_client_secret),
        "webhook_secret_status": status(credentials.zoom_webhook_secret),
        "missing_fields": credentials.missing_fields(),
        "is_configured": credentials.is_configured,
    }
