"""Cryptographic capability interface and its `cryptography` implementation.

The cipher only talks to a CryptoBackend, so the primitives can be swapped for
another native provider (or a test double) without touching blob framing.
"""

import logging
import os
from typing import Final, Protocol

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from common.errors import AuthenticationFailedError, CryptoUnavailableError

KEY_LENGTH: Final[int] = 32  # AES-256

logger = logging.getLogger(__name__)


class CryptoBackend(Protocol):
    """Protocol for the primitives the credential cipher needs."""

    def random_bytes(self, n: int) -> bytes:
        """Return n bytes from a cryptographically secure source."""
        ...

    def derive_key(self, password: str, salt: bytes, iterations: int) -> bytes:
        """Stretch a password into a KEY_LENGTH-byte symmetric key."""
        ...

    def aead_encrypt(self, key: bytes, nonce: bytes, plaintext: bytes) -> bytes:
        """Encrypt and append the authentication tag."""
        ...

    def aead_decrypt(self, key: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
        """Verify the tag and decrypt.

        Raises:
            AuthenticationFailedError: If the tag does not verify
        """
        ...


class CryptographyBackend:
    """PBKDF2-HMAC-SHA256 and AES-256-GCM via the `cryptography` package.

    Randomness comes from os.urandom. Errors raised by OpenSSL or the OS while
    invoking a primitive are converted to CryptoUnavailableError; tag
    verification failures become AuthenticationFailedError.
    """

    def random_bytes(self, n: int) -> bytes:
        try:
            return os.urandom(n)
        except NotImplementedError as e:
            raise CryptoUnavailableError(f"No secure random source available: {e}") from e

    def derive_key(self, password: str, salt: bytes, iterations: int) -> bytes:
        try:
            kdf = PBKDF2HMAC(
                algorithm=hashes.SHA256(),
                length=KEY_LENGTH,
                salt=salt,
                iterations=iterations,
            )
            return kdf.derive(password.encode("utf-8"))
        except UnsupportedAlgorithm as e:
            raise CryptoUnavailableError(f"PBKDF2-HMAC-SHA256 unavailable: {e}") from e

    def aead_encrypt(self, key: bytes, nonce: bytes, plaintext: bytes) -> bytes:
        try:
            return AESGCM(key).encrypt(nonce, plaintext, None)
        except UnsupportedAlgorithm as e:
            raise CryptoUnavailableError(f"AES-GCM unavailable: {e}") from e

    def aead_decrypt(self, key: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
        try:
            return AESGCM(key).decrypt(nonce, ciphertext, None)
        except InvalidTag as e:
            logger.debug("AES-GCM tag verification failed")
            raise AuthenticationFailedError("Decryption failed: wrong password or corrupted data") from e
        except UnsupportedAlgorithm as e:
            raise CryptoUnavailableError(f"AES-GCM unavailable: {e}") from e
