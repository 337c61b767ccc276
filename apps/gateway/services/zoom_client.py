"""Zoom API client for fetching meeting artifacts."""

from typing import Any, Optional

import httpx
import structlog

from apps.gateway.services.meeting_ids import encode_meeting_identifier_for_api

logger = structlog.get_logger()


class ZoomAPIError(Exception):
    """Zoom REST API returned a non-success response."""

    def __init__(self, status_code: int, message: str, details: Optional[Any] = None):
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(f"Zoom API error {status_code}: {message}")


class ZoomClient:
    """Client for interacting with Zoom API."""

    BASE_URL = "https://api.zoom.us/v2"

    def __init__(
        self,
        access_token: str,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Zoom client with access token.

        Args:
            access_token: OAuth access token
            base_url: Zoom REST API base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests to mock Zoom
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    async def _get(self, path: str) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}{path}", headers=self.headers)
        except httpx.HTTPError as e:
            logger.error("Zoom API unreachable", path=path, error=str(e))
            raise ZoomAPIError(503, f"Zoom API unreachable: {e}")

        if not response.is_success:
            try:
                message = response.json().get("message")
            except (ValueError, AttributeError):
                message = None
            logger.warning("Zoom API request failed", path=path, status_code=response.status_code)
            raise ZoomAPIError(
                response.status_code,
                message or f"Zoom API request failed with HTTP {response.status_code}",
                details=response.text or None,
            )

        try:
            return response.json()
        except ValueError:
            logger.warning("Zoom API returned a non-JSON body", path=path, status_code=response.status_code)
            raise ZoomAPIError(
                response.status_code,
                "Malformed response from Zoom",
                details=response.text or None,
            )

    async def get_meeting_recordings(self, meeting_identifier: str) -> dict:
        """
        Get cloud recordings of a meeting.

        Args:
            meeting_identifier: Meeting id or meeting UUID

        Returns:
            Recording dict including ``recording_files``

        Raises:
            ValueError: If the identifier is invalid
            ZoomAPIError: If Zoom rejects the request
        """
        encoded = encode_meeting_identifier_for_api(meeting_identifier)
        return await self._get(f"/meetings/{encoded}/recordings")

    async def get_meeting_participants(self, meeting_identifier: str) -> dict:
        """
        Get the participants report of a past meeting.

        Args:
            meeting_identifier: Meeting id or meeting UUID

        Returns:
            Report dict including ``participants``

        Raises:
            ValueError: If the identifier is invalid
            ZoomAPIError: If Zoom rejects the request
        """
        encoded = encode_meeting_identifier_for_api(meeting_identifier)
        return await self._get(f"/report/meetings/{encoded}/participants")
