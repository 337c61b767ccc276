"""Tenant Zoom integration endpoints."""

from typing import Any, List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field

from apps.gateway.api.dependencies import (
    ZoomClientFactory,
    get_credential_resolver,
    get_token_exchange,
    get_zoom_client_factory,
)
from apps.gateway.services.credentials import (
    CredentialResolver,
    CredentialsNotFoundError,
    credential_status,
)
from apps.gateway.services.meeting_ids import validate_meeting_identifier
from apps.gateway.services.observability import LoggingTokenExchange
from apps.gateway.services.zoom_client import ZoomAPIError, ZoomClient
from apps.gateway.services.zoom_token import (
    TokenErrorKind,
    TokenExchangeFailure,
    TokenExchangeResult,
)

logger = structlog.get_logger()
router = APIRouter()


class TokenInfo(BaseModel):
    """Token metadata."""

    token_type: str
    expires_in: int


class TokenTestResponse(BaseModel):
    """Result of a tenant's token exchange."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    access_token: Optional[str] = Field(default=None, alias="accessToken")
    token_info: Optional[TokenInfo] = Field(default=None, alias="tokenInfo")
    error: Optional[str] = None
    error_kind: Optional[str] = Field(default=None, alias="errorKind")
    details: Optional[Any] = None
    missing_fields: Optional[List[str]] = Field(default=None, alias="missingFields")


class ZoomSettingsStatus(BaseModel):
    """Zoom configuration status of a tenant."""

    tenant_id: str
    zoom_account_id: Optional[str] = None
    zoom_client_id: Optional[str] = None
    account_id_status: str
    client_id_status: str
    client_secret_status: str
    webhook_secret_status: str
    missing_fields: List[str]
    is_configured: bool


class ZoomSettingsResponse(BaseModel):
    """Zoom settings status, null when the tenant has none."""

    settings: Optional[ZoomSettingsStatus] = None


_FAILURE_STATUS = {
    TokenErrorKind.configuration: 400,
    TokenErrorKind.upstream_auth: 502,
    TokenErrorKind.transport: 502,
    TokenErrorKind.resolver: 503,
    TokenErrorKind.cancelled: 503,
}


def token_test_response(result: TokenExchangeResult) -> TokenTestResponse:
    """Map a token exchange result onto the HTTP response shape."""
    if isinstance(result, TokenExchangeFailure):
        return TokenTestResponse(
            success=False,
            error=result.error_message,
            error_kind=result.kind.value,
            details=result.details,
            missing_fields=result.missing_fields or None,
        )

    return TokenTestResponse(
        success=True,
        access_token=result.access_token,
        token_info=TokenInfo(token_type=result.token_type, expires_in=result.expires_in),
    )


@router.post(
    "/{tenant_id}/zoom/test-auth",
    response_model=TokenTestResponse,
    response_model_exclude_none=True,
)
async def check_zoom_auth(
    tenant_id: str,
    response: Response,
    exchange: LoggingTokenExchange = Depends(get_token_exchange),
):
    """
    Exchange the tenant's Zoom credentials for an access token.

    Args:
        tenant_id: Tenant identifier
        response: Outgoing response, status set from the result
        exchange: Token exchange client

    Returns:
        Token exchange outcome
    """
    result = await exchange.exchange_token(tenant_id)
    if isinstance(result, TokenExchangeFailure):
        response.status_code = _FAILURE_STATUS[result.kind]
    return token_test_response(result)


@router.get("/{tenant_id}/zoom/status", response_model=ZoomSettingsResponse)
async def get_zoom_status(
    tenant_id: str,
    resolver: CredentialResolver = Depends(get_credential_resolver),
):
    """
    Get the tenant's Zoom configuration status.

    Returns:
        Per-field configured/not_configured status, secrets omitted
    """
    try:
        credentials = resolver.get_credentials(tenant_id)
    except CredentialsNotFoundError:
        return ZoomSettingsResponse(settings=None)

    return ZoomSettingsResponse(settings=ZoomSettingsStatus(**credential_status(credentials)))


async def _tenant_zoom_client(
    tenant_id: str,
    exchange: LoggingTokenExchange,
    factory: ZoomClientFactory,
) -> ZoomClient:
    result = await exchange.exchange_token(tenant_id)
    if isinstance(result, TokenExchangeFailure):
        raise HTTPException(
            status_code=_FAILURE_STATUS[result.kind],
            detail=token_test_response(result).model_dump(by_alias=True, exclude_none=True),
        )
    return factory(result.access_token)


def _validated_meeting_id(meeting_id: str) -> str:
    identifier = validate_meeting_identifier(meeting_id)
    if not identifier.is_valid:
        raise HTTPException(status_code=400, detail=identifier.error)
    return identifier.normalized


@router.get("/{tenant_id}/zoom/meetings/{meeting_id}/recordings")
async def get_meeting_recordings(
    tenant_id: str,
    meeting_id: str,
    exchange: LoggingTokenExchange = Depends(get_token_exchange),
    factory: ZoomClientFactory = Depends(get_zoom_client_factory),
):
    """
    Get cloud recordings of a tenant's meeting.

    Args:
        tenant_id: Tenant identifier
        meeting_id: Meeting id (separators allowed) or meeting UUID

    Returns:
        Zoom recording payload
    """
    identifier = _validated_meeting_id(meeting_id)
    client = await _tenant_zoom_client(tenant_id, exchange, factory)

    try:
        return await client.get_meeting_recordings(identifier)
    except ZoomAPIError as e:
        logger.error("Failed to fetch meeting recordings", tenant_id=tenant_id, meeting_id=identifier, error=e.message)
        raise HTTPException(status_code=502, detail=e.message)


@router.get("/{tenant_id}/zoom/meetings/{meeting_id}/participants")
async def get_meeting_participants(
    tenant_id: str,
    meeting_id: str,
    exchange: LoggingTokenExchange = Depends(get_token_exchange),
    factory: ZoomClientFactory = Depends(get_zoom_client_factory),
):
    """Get the participants report of a tenant's past meeting."""
    identifier = _validated_meeting_id(meeting_id)
    client = await _tenant_zoom_client(tenant_id, exchange, factory)

    try:
        return await client.get_meeting_participants(identifier)
    except ZoomAPIError as e:
        logger.error("Failed to fetch meeting participants", tenant_id=tenant_id, meeting_id=identifier, error=e.message)
        raise HTTPException(status_code=502, detail=e.message)
