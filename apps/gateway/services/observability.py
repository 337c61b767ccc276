"""Structured logging around the token exchange."""

import structlog

from apps.gateway.services.zoom_token import (
    TokenExchangeFailure,
    TokenExchangeResult,
    ZoomTokenClient,
)

logger = structlog.get_logger()


def log_exchange_result(tenant_id: str, result: TokenExchangeResult) -> None:
    """Log the outcome of a token exchange. Never logs secrets or tokens."""
    if isinstance(result, TokenExchangeFailure):
        logger.warning(
            "Zoom token exchange failed",
            tenant_id=tenant_id,
            error_kind=result.kind.value,
            error=result.error_message,
            missing_fields=result.missing_fields or None,
        )
    else:
        logger.info(
            "Zoom token exchange succeeded",
            tenant_id=tenant_id,
            token_type=result.token_type,
            expires_in=result.expires_in,
        )


class LoggingTokenExchange:
    """Wraps a ZoomTokenClient and logs each exchange."""

    def __init__(self, client: ZoomTokenClient):
        self.client = client

    async def exchange_token(self, tenant_id: str) -> TokenExchangeResult:
        logger.info("Starting Zoom token exchange", tenant_id=tenant_id)
        result = await self.client.exchange_token(tenant_id)
        log_exchange_result(tenant_id, result)
        return result

    def exchange_token_sync(self, tenant_id: str) -> TokenExchangeResult:
        logger.info("Starting Zoom token exchange", tenant_id=tenant_id)
        result = self.client.exchange_token_sync(tenant_id)
        log_exchange_result(tenant_id, result)
        return result
