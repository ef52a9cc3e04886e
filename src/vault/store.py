"""Key-value persistence for the encrypted API credential.

The vault never touches a storage backend directly; it is handed a
KeyValueStore. MemoryStore serves tests, JsonFileStore persists a single JSON
object on disk (the local equivalent of a browser's localStorage).
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Final, Protocol

from common.errors import CredentialMissingError, MalformedBlobError, PasswordMissingError
from vault.cipher import CredentialCipher

DEFAULT_STORAGE_KEY: Final[str] = "apiKey"

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Protocol for string key-value persistence."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        ...

    def clear(self) -> None:
        """Remove every key, discarding unreadable contents."""
        ...


class MemoryStore:
    """In-process dict-backed store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class JsonFileStore:
    """Store backed by one JSON object in a file.

    The file and its parent directory are created on first write. Writes go to
    a temporary file in the same directory which then replaces the target, so
    a crash never leaves a half-written store. The file is chmod 0600.

    Attributes:
        path: Location of the JSON file
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedBlobError(f"Credential store {self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MalformedBlobError(f"Credential store {self.path} does not contain a JSON object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class CredentialVault:
    """Saves and loads one encrypted API key through a KeyValueStore.

    Every save() writes a freshly encrypted blob; every load() re-derives the
    key from the stored salt. Nothing decrypted is cached.

    Example:
        >>> vault = CredentialVault(MemoryStore(), CredentialCipher())
        >>> vault.save("sk-test-123", "Encc1234")
        >>> vault.load("Encc1234")
        'sk-test-123'
    """

    def __init__(
        self,
        store: KeyValueStore,
        cipher: CredentialCipher | None = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        """Initialize the vault.

        Args:
            store: Persistence collaborator
            cipher: Credential cipher (defaults to CredentialCipher())
            storage_key: Key the blob is stored under
        """
        self.store = store
        self.cipher = cipher if cipher is not None else CredentialCipher()
        self.storage_key = storage_key

    def has_credential(self) -> bool:
        """Check whether a blob is stored."""
        return bool(self.store.get(self.storage_key))

    def save(self, api_key: str, password: str) -> None:
        """Encrypt and persist an API key, replacing any stored blob.

        Raises:
            ValueError: If api_key is empty
            PasswordMissingError: If password is empty
        """
        if not api_key:
            raise ValueError("API key cannot be empty")
        if not password:
            raise PasswordMissingError("A password is required to encrypt the API key")

        blob = self.cipher.encrypt(api_key, password)
        self.store.set(self.storage_key, blob)
        logger.info("API key saved", extra={"storage_key": self.storage_key})

    def load(self, password: str) -> str:
        """Load and decrypt the stored API key.

        Raises:
            PasswordMissingError: If password is empty
            CredentialMissingError: If no blob is stored
            MalformedBlobError: If the stored blob cannot be parsed
            AuthenticationFailedError: If the password is wrong or the blob was altered
        """
        if not password:
            raise PasswordMissingError("A password is required to decrypt the API key")

        blob = self.store.get(self.storage_key)
        if not blob:
            raise CredentialMissingError(
                "API key not found. Run 'voice-vault setup' to store your API key."
            )
        return self.cipher.decrypt(blob, password)

    def clear(self) -> None:
        """Delete the stored blob."""
        self.store.delete(self.storage_key)
        logger.info("API key removed", extra={"storage_key": self.storage_key})
