"""Decryption of tenant Zoom secrets stored at rest.

Secrets in ``zoom_tenant_settings`` are written by the tenant administration
service as base64 of a 12-byte AES-GCM nonce followed by the ciphertext. This
service only reads them.
"""

from base64 import b64decode

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

NONCE_SIZE = 12


class SecretDecryptor:
    """Opens AES-GCM sealed tenant secrets with the application key."""

    def __init__(self, key: str):
        """
        Args:
            key: Base64 of the 256-bit application key
        """
        try:
            raw_key = b64decode(key, validate=True)
        except ValueError as e:
            raise ValueError(f"APP_SECRET is not valid base64: {e}")
        if len(raw_key) != 32:
            raise ValueError("APP_SECRET must decode to 32 bytes")
        self._aead = AESGCM(raw_key)

    def decrypt(self, sealed: str) -> str:
        """
        Open a sealed secret.

        Raises:
            ValueError: If the value is empty, malformed or was sealed with another key
        """
        if not sealed:
            raise ValueError("No sealed value to decrypt")

        try:
            blob = b64decode(sealed)
            opened = self._aead.decrypt(blob[:NONCE_SIZE], blob[NONCE_SIZE:], None)
            return opened.decode("utf-8")
        except (ValueError, InvalidTag) as e:
            raise ValueError(f"Decryption failed: {e.__class__.__name__}")


def get_secret_decryptor() -> SecretDecryptor:
    """Build the decryptor from ``APP_SECRET``.

    Raises:
        ValueError: If APP_SECRET is not configured
    """
    from apps.gateway.config import get_settings

    app_secret = get_settings().app_secret
    if not app_secret:
        raise ValueError("APP_SECRET not configured")
    return SecretDecryptor(app_secret)
