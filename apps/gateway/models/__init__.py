"""Database models."""

from apps.gateway.models.zoom_settings import ZoomTenantSettings

__all__ = [
    "ZoomTenantSettings",
]
