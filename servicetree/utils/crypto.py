"""Encryption utilities for secrets kept in configuration."""
import base64
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from servicetree.config import settings
from servicetree.errors import ConfigurationError


class CryptoService:
    """Service for encrypting and decrypting configured secrets."""

    def __init__(self, encryption_key: Optional[str] = None):
        """Initialize crypto service with the configured encryption key."""
        encryption_key = encryption_key or settings.ENCRYPTION_KEY
        if not encryption_key:
            raise ConfigurationError("ENCRYPTION_KEY is not set")

        # Ensure the key is properly formatted for Fernet
        try:
            self.cipher = Fernet(encryption_key.encode())
        except ValueError as e:
            raise ConfigurationError(f"Invalid ENCRYPTION_KEY format: {e}") from e

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string and return base64-encoded ciphertext."""
        if not plaintext:
            return plaintext

        encrypted_bytes = self.cipher.encrypt(plaintext.encode())
        return base64.b64encode(encrypted_bytes).decode()

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a base64-encoded ciphertext and return plaintext."""
        if not ciphertext:
            return ciphertext

        try:
            encrypted_bytes = base64.b64decode(ciphertext.encode())
            decrypted_bytes = self.cipher.decrypt(encrypted_bytes)
            return decrypted_bytes.decode()
        except (InvalidToken, ValueError) as e:
            raise ConfigurationError(f"Failed to decrypt secret: {e}") from e


# Singleton instance
_crypto_service = None


def get_crypto_service() -> CryptoService:
    """Get or create the crypto service singleton."""
    global _crypto_service
    if _crypto_service is None:
        _crypto_service = CryptoService()
    return _crypto_service
