"""Fake aiohttp session and responses for speech client tests.

Provides:
- FakeResponse: scripted status/JSON usable as an async context manager
- FakeSession: returns scripted responses (or raises) in call order
- audio_response: a generateContent body carrying inline PCM audio
"""

import base64
from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass
class FakeResponse:
    """Scripted HTTP response."""

    status: int
    body: Any = None
    reason: str = "OK"

    async def json(self, content_type: str | None = "application/json") -> Any:
        if isinstance(self.body, Exception):
            raise self.body
        return self.body

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None


@dataclass
class FakeSession:
    """Session whose post() replays outcomes in order.

    Each outcome is a FakeResponse or an exception instance to raise.
    """

    outcomes: list[Any]
    calls: list[dict[str, Any]] = field(default_factory=list)
    closed: bool = False

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


def audio_response(
    samples: np.ndarray | None = None, mime_type: str = "audio/L16;codec=pcm;rate=24000"
) -> dict[str, Any]:
    """Build a generateContent response containing inline audio."""
    if samples is None:
        samples = np.array([0, 1000, -1000, 32767, -32768], dtype="<i2")
    data = base64.b64encode(samples.astype("<i2").tobytes()).decode("ascii")
    return {
        "candidates": [
            {"content": {"parts": [{"inlineData": {"mimeType": mime_type, "data": data}}]}}
        ]
    }
