"""Zoom Server-to-Server OAuth token exchange.

Performs the ``account_credentials`` grant against Zoom's token endpoint for a
tenant and normalizes every outcome into a ``TokenExchangeResult``. Errors
never propagate past ``exchange_token``: missing configuration, Zoom
rejections and transport failures all come back as ``TokenExchangeFailure``.

The client keeps no state between calls. Each call resolves the tenant's
credentials and issues its own request, so one instance can serve any number
of tenants concurrently.
"""

import asyncio
import base64
import enum
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

import httpx

from apps.gateway.services.credentials import (
    REQUIRED_FIELDS,
    CredentialResolver,
    CredentialsNotFoundError,
    TenantCredentials,
)

ZOOM_TOKEN_URL = "https://zoom.us/oauth/token"
DEFAULT_TIMEOUT_SECONDS = 10.0


class TokenErrorKind(str, enum.Enum):
    """Failure categories of a token exchange."""

    configuration = "configuration"
    upstream_auth = "upstream_auth"
    transport = "transport"
    resolver = "resolver"
    cancelled = "cancelled"


@dataclass(frozen=True)
class TokenExchangeSuccess:
    """Access token issued by Zoom, values as returned."""

    access_token: str = field(repr=False)
    token_type: str
    expires_in: int

    success = True


@dataclass(frozen=True)
class TokenExchangeFailure:
    """Failed exchange.

    ``details`` carries the raw upstream response body, when there was one,
    for diagnostic display.
    """

    error_message: str
    kind: TokenErrorKind
    details: Optional[Any] = None
    missing_fields: List[str] = field(default_factory=list)

    success = False


TokenExchangeResult = Union[TokenExchangeSuccess, TokenExchangeFailure]


def build_basic_auth_header(client_id: str, client_secret: str) -> str:
    """Build the HTTP Basic ``Authorization`` value for ``client_id:client_secret``."""
    raw = f"{client_id}:{client_secret}".encode("utf-8")
    return f"Basic {base64.b64encode(raw).decode('ascii')}"


def _missing_configuration(missing: List[str]) -> TokenExchangeFailure:
    return TokenExchangeFailure(
        error_message=f"Missing required Zoom credentials: {', '.join(missing)}",
        kind=TokenErrorKind.configuration,
        missing_fields=missing,
    )


def _exception_message(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


def interpret_token_response(response: httpx.Response) -> TokenExchangeResult:
    """Convert Zoom's token endpoint response into a result.

    Args:
        response: Response from the token endpoint

    Returns:
        Success when the response is 2xx with a well-formed token body
    """
    details = response.text or None

    try:
        body = response.json()
    except ValueError:
        body = None

    if not response.is_success:
        message = None
        if isinstance(body, dict) and isinstance(body.get("error_description"), str):
            message = body["error_description"]
        return TokenExchangeFailure(
            error_message=message or f"Zoom token request failed with HTTP {response.status_code}",
            kind=TokenErrorKind.upstream_auth,
            details=details,
        )

    if (
        isinstance(body, dict)
        and isinstance(body.get("access_token"), str)
        and isinstance(body.get("token_type"), str)
        and isinstance(body.get("expires_in"), int)
        and not isinstance(body.get("expires_in"), bool)
    ):
        return TokenExchangeSuccess(
            access_token=body["access_token"],
            token_type=body["token_type"],
            expires_in=body["expires_in"],
        )

    return TokenExchangeFailure(
        error_message="Malformed token response from Zoom",
        kind=TokenErrorKind.transport,
        details=details,
    )


class ZoomTokenClient:
    """Exchanges tenant client credentials for Zoom access tokens."""

    def __init__(
        self,
        resolver: CredentialResolver,
        token_url: str = ZOOM_TOKEN_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[Union[httpx.BaseTransport, httpx.AsyncBaseTransport]] = None,
    ):
        """
        Initialize token client.

        Args:
            resolver: Source of tenant credentials
            token_url: Zoom OAuth token endpoint
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests to mock Zoom
        """
        self.resolver = resolver
        self.token_url = token_url
        self.timeout = timeout
        self.transport = transport

    def _resolve(self, tenant_id: str) -> Union[TenantCredentials, TokenExchangeFailure]:
        try:
            credentials = self.resolver.get_credentials(tenant_id)
        except CredentialsNotFoundError as e:
            return TokenExchangeFailure(
                error_message=str(e),
                kind=TokenErrorKind.configuration,
                missing_fields=list(REQUIRED_FIELDS),
            )
        except Exception as e:
            # Lookup failed, nothing is known about which fields exist
            return TokenExchangeFailure(
                error_message=f"Could not load Zoom credentials: {_exception_message(e)}",
                kind=TokenErrorKind.resolver,
            )

        missing = credentials.missing_fields()
        if missing:
            return _missing_configuration(missing)
        return credentials

    def _request_kwargs(self, credentials: TenantCredentials) -> dict:
        return {
            "url": self.token_url,
            "data": {
                "grant_type": "account_credentials",
                "account_id": credentials.zoom_account_id,
            },
            "headers": {
                "Authorization": build_basic_auth_header(
                    credentials.zoom_client_id, credentials.zoom_client_secret
                ),
                "Content-Type": "application/x-www-form-urlencoded",
            },
        }

    async def exchange_token(self, tenant_id: str) -> TokenExchangeResult:
        """
        Exchange the tenant's credentials for an access token.

        Cancelling the awaiting task closes the in-flight request and yields a
        ``cancelled`` failure instead of raising.

        Args:
            tenant_id: Tenant identifier

        Returns:
            TokenExchangeSuccess or TokenExchangeFailure
        """
        resolved = self._resolve(tenant_id)
        if isinstance(resolved, TokenExchangeFailure):
            return resolved

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(**self._request_kwargs(resolved))
        except asyncio.CancelledError:
            # The cancel request is consumed here
            asyncio.current_task().uncancel()
            return TokenExchangeFailure(
                error_message="Token request was cancelled",
                kind=TokenErrorKind.cancelled,
            )
        except Exception as e:
            return TokenExchangeFailure(
                error_message=_exception_message(e),
                kind=TokenErrorKind.transport,
            )

        return interpret_token_response(response)

    def exchange_token_sync(self, tenant_id: str) -> TokenExchangeResult:
        """Blocking variant of ``exchange_token`` for synchronous callers."""
        resolved = self._resolve(tenant_id)
        if isinstance(resolved, TokenExchangeFailure):
            return resolved

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(**self._request_kwargs(resolved))
        except Exception as e:
            return TokenExchangeFailure(
                error_message=_exception_message(e),
                kind=TokenErrorKind.transport,
            )

        return interpret_token_response(response)
