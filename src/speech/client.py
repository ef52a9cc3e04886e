"""Async HTTP client for the remote speech generation service.

Each request re-reads the API key through ``api_key_provider`` (for the CLI,
a vault decryption), so exactly one credential decryption happens per
outgoing request and no plaintext key outlives the call.

Retry policy:
    - 2xx: parsed JSON returned
    - 429 and 5xx: retried with exponential backoff
    - transport errors (connection reset, timeout): retried the same way
    - any other status: RemoteCallRejectedError, not retried
    - retry ceiling reached: RemoteCallExhaustedError

Example usage:
    >>> async with GeminiTTSClient(ApiConfig(), RetryConfig(), vault_key) as client:
    ...     response = await client.generate_content(payload)
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import Any

import aiohttp

from common.errors import (
    RemoteCallExhaustedError,
    RemoteCallRejectedError,
    UnsupportedAudioFormatError,
)
from speech.config import ApiConfig, RetryConfig

logger = logging.getLogger(__name__)


def is_retryable_status(status: int) -> bool:
    """Check whether an HTTP status warrants another attempt."""
    return status == 429 or status >= 500


class GeminiTTSClient:
    """Calls the generateContent endpoint with retry and backoff.

    Attributes:
        api: Endpoint configuration
        retry: Retry policy
    """

    def __init__(
        self,
        api: ApiConfig,
        retry: RetryConfig,
        api_key_provider: Callable[[], str],
        session: aiohttp.ClientSession | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize client.

        Args:
            api: Endpoint configuration
            retry: Retry policy
            api_key_provider: Returns the plaintext API key; called once per request
                in a worker thread
            session: Optional externally owned aiohttp session
            sleep: Coroutine used to wait between attempts
        """
        self.api = api
        self.retry = retry
        self._api_key_provider = api_key_provider
        self._session = session
        self._owns_session = session is None
        self._sleep = sleep

    @property
    def endpoint(self) -> str:
        """generateContent URL for the configured model."""
        return f"{self.api.base_url}/models/{self.api.model}:generateContent"

    async def __aenter__(self) -> "GeminiTTSClient":
        self._ensure_session()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.api.timeout_s)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session if this client created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    async def generate_content(self, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a generateContent request.

        Args:
            payload: JSON request body

        Returns:
            Parsed JSON response

        Raises:
            CredentialError: If the API key cannot be obtained
            RemoteCallRejectedError: On a non-retryable HTTP status
            RemoteCallExhaustedError: When all attempts fail with retryable errors
            UnsupportedAudioFormatError: If a 2xx body is not JSON
        """
        api_key = await asyncio.to_thread(self._api_key_provider)
        session = self._ensure_session()
        delay_s = self.retry.initial_delay_ms / 1000.0
        last_error: str | None = None

        for attempt in range(1, self.retry.max_retries + 1):
            try:
                async with session.post(
                    self.endpoint,
                    params={"key": api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                ) as response:
                    if 200 <= response.status < 300:
                        try:
                            result: dict[str, Any] = await response.json()
                        except (aiohttp.ContentTypeError, ValueError) as e:
                            raise UnsupportedAudioFormatError(
                                f"API response is not valid JSON: {e}"
                            ) from e
                        logger.debug("Speech API call succeeded", extra={"attempt": attempt})
                        return result

                    if not is_retryable_status(response.status):
                        message = await _error_message(response)
                        logger.error(
                            "Speech API rejected request",
                            extra={"status": response.status, "error": message},
                        )
                        raise RemoteCallRejectedError(response.status, message)

                    last_error = f"HTTP {response.status}"
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = f"{type(e).__name__}: {e}"

            if attempt == self.retry.max_retries:
                break

            logger.warning(
                "Speech API attempt failed, retrying",
                extra={"attempt": attempt, "error": last_error, "delay_s": delay_s},
            )
            await self._sleep(delay_s)
            delay_s *= self.retry.backoff_factor

        logger.error(
            "Speech API call failed after multiple retries",
            extra={"attempts": self.retry.max_retries, "error": last_error},
        )
        raise RemoteCallExhaustedError(self.retry.max_retries, last_error)


async def _error_message(response: aiohttp.ClientResponse) -> str:
    try:
        body = await response.json(content_type=None)
    except (aiohttp.ContentTypeError, ValueError):
        return response.reason or "Unknown error"
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        message = body["error"].get("message")
        if message:
            return str(message)
    return response.reason or "Unknown error"
