"""Password-protected storage for the speech service API key."""

from vault.backend import CryptoBackend, CryptographyBackend
from vault.cipher import (
    NONCE_LENGTH,
    PBKDF2_ITERATIONS,
    SALT_LENGTH,
    CredentialCipher,
    decrypt_api_key,
    encrypt_api_key,
)
from vault.store import CredentialVault, JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "NONCE_LENGTH",
    "PBKDF2_ITERATIONS",
    "SALT_LENGTH",
    "CredentialCipher",
    "CredentialVault",
    "CryptoBackend",
    "CryptographyBackend",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "decrypt_api_key",
    "encrypt_api_key",
]
