"""Zoom meeting identifier helpers.

Zoom addresses meetings either by numeric meeting id (often written with
spaces, e.g. ``822 5973 5801``) or by meeting UUID, a base64-like string that
may contain ``/``, ``+``, ``=`` and ``-``. Any identifier holding one of those
characters is treated as a UUID, so a dashed meeting id is passed through as
a UUID rather than normalized.
"""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import structlog

logger = structlog.get_logger()

_SEPARATORS = re.compile(r"[\s\-_.]")
_UUID_MARKERS = ("/", "=", "+", "-")


@dataclass(frozen=True)
class MeetingIdentifier:
    """Result of validating a meeting id or UUID."""

    is_valid: bool
    kind: Optional[str] = None  # "meeting_id" or "uuid"
    normalized: Optional[str] = None
    error: Optional[str] = None


def normalize_meeting_id(meeting_id) -> str:
    """Strip separators from a meeting id, leaving only digits.

    Args:
        meeting_id: Meeting id, possibly with spaces, dashes, dots or underscores

    Returns:
        Digits-only meeting id

    Raises:
        ValueError: If the id is empty or contains anything but digits
    """
    if meeting_id is None or meeting_id == "":
        raise ValueError("Meeting ID is required")

    normalized = _SEPARATORS.sub("", str(meeting_id))

    if not normalized.isdigit() or not normalized.isascii():
        raise ValueError(f"Invalid meeting ID format: {meeting_id}")

    # Zoom meeting ids are usually 10-11 digits
    if len(normalized) < 9 or len(normalized) > 12:
        logger.warning("Unusual meeting ID length", meeting_id=normalized, length=len(normalized))

    return normalized


def validate_meeting_identifier(identifier) -> MeetingIdentifier:
    """Classify an identifier as meeting id or UUID and normalize it."""
    if not identifier:
        return MeetingIdentifier(is_valid=False, error="Meeting ID or UUID is required")

    value = str(identifier).strip()

    if any(marker in value for marker in _UUID_MARKERS):
        return MeetingIdentifier(is_valid=True, kind="uuid", normalized=value)

    try:
        normalized = normalize_meeting_id(value)
    except ValueError as e:
        return MeetingIdentifier(is_valid=False, error=str(e))

    return MeetingIdentifier(is_valid=True, kind="meeting_id", normalized=normalized)


def encode_meeting_identifier_for_api(identifier) -> str:
    """Encode a meeting id or UUID for use in a Zoom API path.

    UUIDs that begin with ``/`` or contain ``//`` must be double-encoded.

    Raises:
        ValueError: If the identifier is invalid
    """
    result = validate_meeting_identifier(identifier)
    if not result.is_valid:
        raise ValueError(result.error)

    if result.kind == "uuid":
        encoded = quote(result.normalized, safe="")
        if result.normalized.startswith("/") or "//" in result.normalized:
            encoded = quote(encoded, safe="")
        return encoded

    return result.normalized
