"""
Symmetric cipher for stored Shopify credentials.

Tokens are stored as ``hex(iv):hex(ciphertext)`` envelopes produced with
AES-256-CBC and PKCS#7 padding. There is no authentication tag, so a
tampered ciphertext is only detected when it breaks the padding; anything
else decrypts to garbage.
"""

import logging
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from fastapi import Request

from app.core.exceptions import ConfigurationError, DecryptError

logger = logging.getLogger(__name__)

KEY_HEX_LENGTH = 64  # 32 bytes for AES-256
IV_LENGTH = 16
ENVELOPE_SEPARATOR = ":"


def _parse_key(key_hex: str) -> bytes:
    """Validate a hex encoded AES-256 key and return its raw bytes."""
    if not key_hex:
        raise ConfigurationError(
            "ENCRYPTION_KEY must be set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
        )
    if len(key_hex) != KEY_HEX_LENGTH:
        raise ConfigurationError(
            f"Invalid encryption key length: {len(key_hex)} characters. "
            f"Expected {KEY_HEX_LENGTH} hex characters for AES-256.",
            details={"length": len(key_hex)},
        )
    try:
        return bytes.fromhex(key_hex)
    except ValueError:
        raise ConfigurationError("ENCRYPTION_KEY must be a hex string") from None


class CredentialCipher:
    """
    AES-256-CBC wrapper for access tokens.

    The key is passed in explicitly so tests can use a deterministic key
    without touching the process environment.
    """

    def __init__(self, key_hex: str):
        self._key = _parse_key(key_hex)

    def _cipher(self, iv: bytes) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(iv))

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a secret with a fresh random IV and return the envelope."""
        iv = os.urandom(IV_LENGTH)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = self._cipher(iv).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return f"{iv.hex()}{ENVELOPE_SEPARATOR}{ciphertext.hex()}"

    def decrypt(self, envelope: str) -> str:
        """
        Decrypt an envelope produced by encrypt().

        Raises:
            DecryptError: malformed envelope, non-hex segment, wrong key or
                invalid padding.
        """
        if not isinstance(envelope, str) or ENVELOPE_SEPARATOR not in envelope:
            raise DecryptError("envelope is missing the iv separator")

        iv_hex, _, ciphertext_hex = envelope.partition(ENVELOPE_SEPARATOR)
        try:
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
        except ValueError:
            raise DecryptError("envelope is not valid hex") from None

        if len(iv) != IV_LENGTH:
            raise DecryptError(f"iv must be {IV_LENGTH} bytes, got {len(iv)}")
        if not ciphertext or len(ciphertext) % IV_LENGTH:
            raise DecryptError("ciphertext is not a whole number of blocks")

        decryptor = self._cipher(iv).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        try:
            plaintext = unpadder.update(padded) + unpadder.finalize()
        except ValueError:
            raise DecryptError("invalid padding (wrong key or corrupted ciphertext)") from None

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            raise DecryptError("decrypted value is not valid UTF-8") from None


def get_cipher(request: Request) -> CredentialCipher:
    """
    Dependency returning the process-wide cipher built at startup.

    Usage:
        @router.get("/endpoint")
        async def endpoint(cipher: CredentialCipher = Depends(get_cipher)):
            ...
    """
    cipher = getattr(request.app.state, "cipher", None)
    if cipher is None:
        logger.error("Credential cipher requested before application startup")
        raise ConfigurationError("Credential cipher is not configured")
    return cipher
