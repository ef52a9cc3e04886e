"""Mock speech adapter for offline runs and tests.

Answers generateContent requests with a response shaped like the real
service's, carrying a 440 Hz sine tone as base64 16-bit PCM. No network, no
API key.
"""

import asyncio
import logging
from typing import Any, Final

from common.codec import bytes_to_base64
from speech.audio.synthesis import generate_sine_wave

# Constants
SINE_FREQUENCY_HZ: Final[int] = 440  # A4 note
SAMPLE_RATE_HZ: Final[int] = 24000
MS_PER_CHARACTER: Final[int] = 60
MIN_DURATION_MS: Final[int] = 200
MAX_DURATION_MS: Final[int] = 10000
SIMULATED_LATENCY_MS: Final[float] = 5.0

logger = logging.getLogger(__name__)


def _prompt_text(payload: dict[str, Any]) -> str:
    try:
        return str(payload["contents"][0]["parts"][0]["text"])
    except (KeyError, IndexError, TypeError):
        return ""


class MockSpeechClient:
    """Drop-in replacement for GeminiTTSClient.generate_content.

    Tone duration scales with prompt length (MS_PER_CHARACTER), clamped to
    [MIN_DURATION_MS, MAX_DURATION_MS].

    Attributes:
        sample_rate: Sample rate advertised in the mime type
        requests: Payloads received, in order
    """

    def __init__(self, sample_rate: int = SAMPLE_RATE_HZ) -> None:
        self.sample_rate = sample_rate
        self.requests: list[dict[str, Any]] = []
        logger.info("MockSpeechClient initialized", extra={"sample_rate": sample_rate})

    async def __aenter__(self) -> "MockSpeechClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    async def generate_content(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Return a fake audio response for the payload's prompt."""
        self.requests.append(payload)
        text = _prompt_text(payload)
        duration_ms = min(max(len(text) * MS_PER_CHARACTER, MIN_DURATION_MS), MAX_DURATION_MS)

        await asyncio.sleep(SIMULATED_LATENCY_MS / 1000.0)
        pcm = generate_sine_wave(SINE_FREQUENCY_HZ, duration_ms, self.sample_rate)

        logger.debug(
            "Generated mock audio",
            extra={"text_length": len(text), "duration_ms": duration_ms, "bytes": len(pcm)},
        )
        return {
            "candidates": [
                {
                    "content": {
                        "parts": [
                            {
                                "inlineData": {
                                    "mimeType": f"audio/L16;codec=pcm;rate={self.sample_rate}",
                                    "data": bytes_to_base64(pcm),
                                }
                            }
                        ]
                    }
                }
            ]
        }
