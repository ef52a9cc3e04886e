"""Extraction and decoding of the speech service's inline PCM audio.

Successful responses carry the audio at
``candidates[0].content.parts[0].inlineData`` as
``{"mimeType": "audio/L16;rate=24000", "data": "<base64 PCM>"}``.
"""

import binascii
import re
from dataclasses import dataclass
from typing import Any, Final

import numpy as np
from numpy.typing import NDArray

from common.codec import base64_to_bytes
from common.errors import SampleRateUnresolvableError, UnsupportedAudioFormatError
from speech.audio.framing import MAX_SAMPLE_RATE

PCM16_MIME_PREFIX: Final[str] = "audio/l16"
_RATE_PATTERN: Final[re.Pattern[str]] = re.compile(r"rate=(\d+)", re.IGNORECASE)


@dataclass(frozen=True)
class InlineAudio:
    """Audio payload as returned by the service."""

    mime_type: str
    data: str


def extract_inline_audio(response: dict[str, Any]) -> InlineAudio:
    """Pull the inline audio part out of a generateContent response.

    Args:
        response: Parsed JSON response

    Returns:
        The audio mime type and base64 payload

    Raises:
        UnsupportedAudioFormatError: If the response has no audio part
    """
    try:
        part = response["candidates"][0]["content"]["parts"][0]
        inline = part["inlineData"]
        data = inline.get("data")
        mime_type = inline.get("mimeType")
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise UnsupportedAudioFormatError("API response missing audio data or invalid format.") from e

    if not data or not mime_type:
        raise UnsupportedAudioFormatError("API response missing audio data or invalid format.")
    return InlineAudio(mime_type=mime_type, data=data)


def parse_sample_rate(mime_type: str) -> int:
    """Read the sample rate from an ``audio/L16;rate=N`` mime type.

    Raises:
        UnsupportedAudioFormatError: If the mime type is not audio/L16
        SampleRateUnresolvableError: If no usable rate parameter is present
    """
    if not mime_type.lower().startswith(PCM16_MIME_PREFIX):
        raise UnsupportedAudioFormatError(f"Expected 16-bit linear PCM audio, got '{mime_type}'")

    match = _RATE_PATTERN.search(mime_type)
    if match is None:
        raise SampleRateUnresolvableError(
            f"Could not determine sample rate from API response mime type '{mime_type}'"
        )

    rate = int(match.group(1))
    if rate <= 0:
        raise SampleRateUnresolvableError(f"Invalid sample rate {rate} in mime type '{mime_type}'")
    if rate > MAX_SAMPLE_RATE:
        raise SampleRateUnresolvableError(
            f"Sample rate {rate} in mime type '{mime_type}' exceeds {MAX_SAMPLE_RATE} Hz"
        )
    return rate


def decode_pcm_payload(data: str) -> NDArray[np.int16]:
    """Decode base64 PCM into little-endian int16 samples.

    Raises:
        UnsupportedAudioFormatError: If data is not base64 or has an odd byte count
    """
    try:
        raw = base64_to_bytes(data)
    except (binascii.Error, ValueError) as e:
        raise UnsupportedAudioFormatError(f"Audio payload is not valid base64: {e}") from e

    if len(raw) % 2 != 0:
        raise UnsupportedAudioFormatError(
            f"16-bit PCM payload must have an even byte count, got {len(raw)}"
        )
    return np.frombuffer(raw, dtype="<i2")
