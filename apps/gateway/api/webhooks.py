"""Zoom webhook endpoint with per-tenant signature verification."""

import json

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from apps.gateway.api.dependencies import get_credential_resolver
from apps.gateway.services.credentials import CredentialResolver, CredentialsNotFoundError
from apps.gateway.services.zoom_webhook import url_validation_response, verify_signature

logger = structlog.get_logger()
router = APIRouter()


@router.post("/zoom/{tenant_id}")
async def zoom_webhook(
    tenant_id: str,
    request: Request,
    resolver: CredentialResolver = Depends(get_credential_resolver),
):
    """
    Receive a Zoom webhook for a tenant.

    The signature is checked over the raw body with the tenant's webhook
    secret. URL validation challenges are answered; other events are
    acknowledged.
    """
    body = await request.body()

    try:
        credentials = resolver.get_credentials(tenant_id)
    except CredentialsNotFoundError as e:
        logger.warning("Webhook for tenant without Zoom settings", tenant_id=tenant_id)
        raise HTTPException(
            status_code=400,
            detail={"error": str(e), "code": "WEBHOOK_VERIFICATION_ERROR"},
        )

    signature = request.headers.get("x-zm-signature")
    timestamp = request.headers.get("x-zm-request-timestamp")

    if not verify_signature(credentials.zoom_webhook_secret, timestamp, body, signature):
        logger.warning("Zoom webhook signature mismatch", tenant_id=tenant_id, timestamp=timestamp)
        raise HTTPException(
            status_code=401,
            detail={"error": "Invalid webhook signature", "code": "INVALID_WEBHOOK_SIGNATURE"},
        )

    try:
        payload = json.loads(body)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail={"error": "Webhook body is not valid JSON", "code": "INVALID_WEBHOOK_PAYLOAD"},
        )

    event = payload.get("event") if isinstance(payload, dict) else None

    if event == "endpoint.url_validation":
        inner = payload.get("payload")
        plain_token = inner.get("plainToken") if isinstance(inner, dict) else None
        if not plain_token:
            raise HTTPException(
                status_code=400,
                detail={"error": "Missing plainToken", "code": "URL_VALIDATION_FAILED"},
            )
        logger.info("Answered Zoom URL validation", tenant_id=tenant_id)
        return url_validation_response(credentials.zoom_webhook_secret, plain_token)

    logger.info("Zoom webhook received", tenant_id=tenant_id, zoom_event=event)
    return {"message": "Webhook received", "event": event, "tenant_id": tenant_id}
