"""Unit tests for GeminiTTSClient retry policy.

Uses a scripted fake aiohttp session and a recording sleep, so no network
access or real delays are involved.
"""

import asyncio
import time
from unittest.mock import Mock

import aiohttp
import pytest

from common.errors import (
    CredentialMissingError,
    RemoteCallExhaustedError,
    RemoteCallRejectedError,
    UnsupportedAudioFormatError,
)
from speech.client import GeminiTTSClient, is_retryable_status
from speech.config import ApiConfig, RetryConfig
from tests.helpers.fake_http import FakeResponse, FakeSession, audio_response


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_client(
    outcomes: list, key_provider: Mock | None = None, max_retries: int = 5
) -> tuple[GeminiTTSClient, FakeSession, RecordingSleep, Mock]:
    session = FakeSession(outcomes)
    sleep = RecordingSleep()
    provider = key_provider or Mock(return_value="sk-test-123")
    client = GeminiTTSClient(
        ApiConfig(),
        RetryConfig(max_retries=max_retries, initial_delay_ms=1000),
        api_key_provider=provider,
        session=session,  # type: ignore[arg-type]
        sleep=sleep,
    )
    return client, session, sleep, provider


@pytest.mark.parametrize(
    ("status", "retryable"),
    [(200, False), (400, False), (401, False), (404, False), (429, True), (500, True), (503, True)],
)
def test_is_retryable_status(status: int, retryable: bool) -> None:
    """Test 429 and 5xx are the only retryable statuses."""
    assert is_retryable_status(status) is retryable


@pytest.mark.asyncio
async def test_success_first_attempt() -> None:
    """Test a 200 response is returned without retrying."""
    body = audio_response()
    client, session, sleep, provider = make_client([FakeResponse(200, body)])

    assert await client.generate_content({"contents": []}) == body
    assert sleep.delays == []
    provider.assert_called_once()

    call = session.calls[0]
    assert call["url"] == (
        "https://generativelanguage.googleapis.com/v1beta/models/"
        "gemini-2.5-flash-preview-tts:generateContent"
    )
    assert call["params"] == {"key": "sk-test-123"}
    assert call["json"] == {"contents": []}


@pytest.mark.asyncio
async def test_retries_429_and_5xx_with_exponential_backoff() -> None:
    """Test delays double after each retryable failure."""
    body = audio_response()
    client, session, sleep, _ = make_client(
        [FakeResponse(429), FakeResponse(500), FakeResponse(503), FakeResponse(200, body)]
    )

    assert await client.generate_content({}) == body
    assert sleep.delays == [1.0, 2.0, 4.0]
    assert len(session.calls) == 4


@pytest.mark.asyncio
async def test_retries_transport_errors() -> None:
    """Test connection errors and timeouts are retried."""
    body = audio_response()
    client, _, sleep, _ = make_client(
        [aiohttp.ClientConnectionError("reset"), asyncio.TimeoutError(), FakeResponse(200, body)]
    )

    assert await client.generate_content({}) == body
    assert sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_exhausted_after_max_retries() -> None:
    """Test the retry ceiling raises RemoteCallExhaustedError."""
    client, session, sleep, _ = make_client([FakeResponse(503)] * 5)

    with pytest.raises(RemoteCallExhaustedError, match="after 5 attempts") as exc_info:
        await client.generate_content({})

    assert exc_info.value.attempts == 5
    assert exc_info.value.last_error == "HTTP 503"
    assert len(session.calls) == 5
    # No sleep after the final attempt
    assert sleep.delays == [1.0, 2.0, 4.0, 8.0]


@pytest.mark.asyncio
async def test_client_error_not_retried() -> None:
    """Test a 4xx other than 429 fails immediately with the API message."""
    client, session, sleep, _ = make_client(
        [FakeResponse(400, {"error": {"message": "API key not valid"}}, reason="Bad Request")]
    )

    with pytest.raises(RemoteCallRejectedError) as exc_info:
        await client.generate_content({})

    assert exc_info.value.status == 400
    assert exc_info.value.message == "API key not valid"
    assert str(exc_info.value) == "API Error: 400 - API key not valid"
    assert len(session.calls) == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_client_error_without_json_body_uses_reason() -> None:
    """Test fallback to the HTTP reason phrase."""
    client, _, _, _ = make_client(
        [FakeResponse(403, ValueError("not json"), reason="Forbidden")]
    )

    with pytest.raises(RemoteCallRejectedError, match="403 - Forbidden"):
        await client.generate_content({})


@pytest.mark.asyncio
async def test_credential_error_propagates_before_any_request() -> None:
    """Test a missing credential aborts before the network is touched."""
    provider = Mock(side_effect=CredentialMissingError("API key not found"))
    client, session, _, _ = make_client([FakeResponse(200, {})], key_provider=provider)

    with pytest.raises(CredentialMissingError):
        await client.generate_content({})
    assert session.calls == []


@pytest.mark.asyncio
async def test_key_decrypted_once_per_request() -> None:
    """Test the key provider runs once per request, not per attempt or cached."""
    client, _, _, provider = make_client(
        [FakeResponse(500), FakeResponse(200, {}), FakeResponse(200, {})]
    )

    await client.generate_content({})
    assert provider.call_count == 1
    await client.generate_content({})
    assert provider.call_count == 2


@pytest.mark.asyncio
async def test_injected_session_not_closed() -> None:
    """Test the client leaves an externally owned session open."""
    client, session, _, _ = make_client([])
    async with client:
        pass
    assert session.closed is False


@pytest.mark.asyncio
async def test_owned_session_closed_on_exit() -> None:
    """Test the client closes the session it created."""
    client = GeminiTTSClient(ApiConfig(), RetryConfig(), api_key_provider=lambda: "k")
    async with client as entered:
        session = entered._session
        assert session is not None
    assert session.closed
    assert client._session is None


@pytest.mark.asyncio
async def test_key_provider_does_not_block_event_loop() -> None:
    """Test other tasks keep running while the key is being derived."""
    ticks = 0

    async def ticker() -> None:
        nonlocal ticks
        while True:
            ticks += 1
            await asyncio.sleep(0.001)

    seen: list[int] = []

    def slow_key() -> str:
        time.sleep(0.05)
        seen.append(ticks)
        return "sk-test-123"

    client, session, _, _ = make_client(
        [FakeResponse(200, {})], key_provider=Mock(side_effect=slow_key)
    )
    task = asyncio.create_task(ticker())
    try:
        await client.generate_content({})
    finally:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    assert seen[0] >= 5
    assert session.calls[0]["params"] == {"key": "sk-test-123"}


@pytest.mark.asyncio
async def test_unparsable_success_body_not_retried() -> None:
    """Test a 2xx body that is not JSON is an audio format error."""
    client, session, sleep, _ = make_client(
        [FakeResponse(200, ValueError("Expecting value: line 1 column 1 (char 0)"))]
    )

    with pytest.raises(UnsupportedAudioFormatError, match="not valid JSON"):
        await client.generate_content({})
    assert len(session.calls) == 1
    assert sleep.delays == []
