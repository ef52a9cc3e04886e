"""Password-based authenticated encryption of a credential string.

Blob format (base64-encoded, positional, no length prefixes):

    salt (16 bytes) || nonce (12 bytes) || AES-GCM ciphertext + 16-byte tag

Salt and nonce are drawn fresh for every encryption, so encrypting the same
secret twice yields unrelated blobs. The key is re-derived from the stored
salt on every decryption and is never kept on the instance.

Example:
    >>> cipher = CredentialCipher()
    >>> blob = cipher.encrypt("sk-test-123", "Encc1234")
    >>> cipher.decrypt(blob, "Encc1234")
    'sk-test-123'
"""

import binascii
import logging
from typing import Final

from common.codec import (
    base64_to_bytes,
    bytes_to_base64,
    bytes_to_text,
    concat_buffers,
    text_to_bytes,
)
from common.errors import AuthenticationFailedError, MalformedBlobError
from vault.backend import CryptoBackend, CryptographyBackend

# Constants
SALT_LENGTH: Final[int] = 16
NONCE_LENGTH: Final[int] = 12
MIN_BLOB_LENGTH: Final[int] = SALT_LENGTH + NONCE_LENGTH
PBKDF2_ITERATIONS: Final[int] = 200_000
MIN_PBKDF2_ITERATIONS: Final[int] = 100_000

logger = logging.getLogger(__name__)


class CredentialCipher:
    """Encrypts and decrypts credential strings under a password.

    Attributes:
        backend: Crypto primitives (random source, KDF, AEAD)
        iterations: PBKDF2 iteration count used for every derivation
    """

    def __init__(
        self,
        backend: CryptoBackend | None = None,
        iterations: int = PBKDF2_ITERATIONS,
    ) -> None:
        """Initialize the cipher.

        Args:
            backend: Crypto backend (defaults to CryptographyBackend)
            iterations: PBKDF2 iteration count

        Raises:
            ValueError: If iterations is below MIN_PBKDF2_ITERATIONS
        """
        if iterations < MIN_PBKDF2_ITERATIONS:
            raise ValueError(
                f"PBKDF2 iterations must be at least {MIN_PBKDF2_ITERATIONS}, got {iterations}"
            )
        self.backend = backend if backend is not None else CryptographyBackend()
        self.iterations = iterations

    def derive_key(self, password: str, salt: bytes) -> bytes:
        """Derive the AES key for a password and salt.

        Args:
            password: User password
            salt: 16-byte random salt

        Returns:
            32-byte symmetric key

        Raises:
            ValueError: If salt is not SALT_LENGTH bytes
        """
        if len(salt) != SALT_LENGTH:
            raise ValueError(f"Salt must be {SALT_LENGTH} bytes, got {len(salt)}")
        return self.backend.derive_key(password, salt, self.iterations)

    def encrypt(self, plaintext: str, password: str) -> str:
        """Encrypt plaintext and return the base64 blob.

        Args:
            plaintext: Secret to protect
            password: Password the key is derived from

        Returns:
            base64(salt || nonce || ciphertext)

        Raises:
            CryptoUnavailableError: If the backend primitives cannot be invoked
        """
        salt = self.backend.random_bytes(SALT_LENGTH)
        nonce = self.backend.random_bytes(NONCE_LENGTH)
        key = self.derive_key(password, salt)
        ciphertext = self.backend.aead_encrypt(key, nonce, text_to_bytes(plaintext))

        logger.debug(
            "Encrypted credential",
            extra={"plaintext_bytes": len(plaintext), "ciphertext_bytes": len(ciphertext)},
        )
        return bytes_to_base64(concat_buffers(salt, nonce, ciphertext))

    def decrypt(self, blob: str, password: str) -> str:
        """Decrypt a blob produced by encrypt().

        Args:
            blob: base64(salt || nonce || ciphertext)
            password: Password used at encryption time

        Returns:
            Original plaintext

        Raises:
            MalformedBlobError: If blob is not a base64 string or shorter than salt + nonce
            AuthenticationFailedError: If the tag does not verify
            CryptoUnavailableError: If the backend primitives cannot be invoked
        """
        if not isinstance(blob, str):
            raise MalformedBlobError(
                f"Credential blob must be a base64 string, got {type(blob).__name__}"
            )
        try:
            raw = base64_to_bytes(blob)
        except (binascii.Error, ValueError) as e:
            raise MalformedBlobError(f"Credential blob is not valid base64: {e}") from e

        if len(raw) < MIN_BLOB_LENGTH:
            raise MalformedBlobError(
                f"Credential blob too short: {len(raw)} bytes, need at least {MIN_BLOB_LENGTH}"
            )

        salt = raw[:SALT_LENGTH]
        nonce = raw[SALT_LENGTH:MIN_BLOB_LENGTH]
        ciphertext = raw[MIN_BLOB_LENGTH:]

        key = self.derive_key(password, salt)
        plain = self.backend.aead_decrypt(key, nonce, ciphertext)

        try:
            return bytes_to_text(plain)
        except UnicodeDecodeError as e:
            raise AuthenticationFailedError("Decrypted credential is not valid UTF-8") from e


_default_cipher: CredentialCipher | None = None


def _get_default_cipher() -> CredentialCipher:
    global _default_cipher
    if _default_cipher is None:
        _default_cipher = CredentialCipher()
    return _default_cipher


def encrypt_api_key(api_key: str, password: str) -> str:
    """Encrypt an API key with the default cipher."""
    return _get_default_cipher().encrypt(api_key, password)


def decrypt_api_key(blob: str, password: str) -> str:
    """Decrypt an API key blob with the default cipher."""
    return _get_default_cipher().decrypt(blob, password)
