"""Zoom webhook signature verification."""

import hashlib
import hmac
from typing import Optional, Union

SIGNATURE_VERSION = "v0"


def _to_bytes(value: Union[str, bytes]) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


def compute_signature(secret: str, timestamp: str, body: Union[str, bytes]) -> str:
    """Compute ``x-zm-signature`` for a request body.

    Zoom signs ``v0:{timestamp}:{body}`` with HMAC-SHA256 keyed by the
    webhook secret token.
    """
    message = b":".join([SIGNATURE_VERSION.encode(), _to_bytes(timestamp), _to_bytes(body)])
    digest = hmac.new(_to_bytes(secret), message, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_signature(
    secret: Optional[str],
    timestamp: Optional[str],
    body: Union[str, bytes],
    signature: Optional[str],
) -> bool:
    """Check a webhook signature in constant time."""
    if not secret or not timestamp or not signature:
        return False
    expected = compute_signature(secret, timestamp, body)
    return hmac.compare_digest(_to_bytes(expected), _to_bytes(signature))


def url_validation_response(secret: str, plain_token: str) -> dict:
    """Response to Zoom's ``endpoint.url_validation`` challenge."""
    encrypted = hmac.new(_to_bytes(secret), _to_bytes(plain_token), hashlib.sha256).hexdigest()
    return {"plainToken": plain_token, "encryptedToken": encrypted}
