"""Per-tenant Zoom settings model."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from apps.gateway.database import Base


class ZoomTenantSettings(Base):
    """Zoom Server-to-Server OAuth credentials for one tenant.

    Rows are written by the tenant administration service; this service only
    reads them. Secrets are stored encrypted (see services.crypto).
    """

    __tablename__ = "zoom_tenant_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), nullable=False, unique=True, index=True)

    zoom_account_id = Column(String(255), nullable=True)
    zoom_client_id = Column(String(255), nullable=True)

    # Base64 "nonce + ciphertext"
    zoom_client_secret_enc = Column(Text, nullable=True)
    zoom_webhook_secret_enc = Column(Text, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<ZoomTenantSettings(tenant_id={self.tenant_id}, active={self.is_active})>"
