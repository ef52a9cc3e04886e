"""Unit tests for the mock speech adapter and tone synthesis."""

import numpy as np
import pytest

from speech.adapters.adapter_mock import MAX_DURATION_MS, MIN_DURATION_MS, MockSpeechClient
from speech.audio.pcm import decode_pcm_payload, extract_inline_audio, parse_sample_rate
from speech.audio.synthesis import float_to_pcm16, generate_sine_wave
from speech.generator import build_payload


def test_generate_sine_wave_length() -> None:
    """Test sample count is rate x duration."""
    assert len(generate_sine_wave(440, 100, 24000)) == 2400 * 2
    assert generate_sine_wave(440, 0, 24000) == b""


def test_generate_sine_wave_amplitude() -> None:
    """Test peak amplitude tracks the requested level."""
    samples = np.frombuffer(generate_sine_wave(1000, 100, 48000, amplitude=0.5), dtype="<i2")
    assert 16000 < np.abs(samples).max() <= 16384


@pytest.mark.parametrize(
    ("frequency", "duration_ms", "sample_rate", "amplitude"),
    [(0, 10, 24000, 0.5), (13000, 10, 24000, 0.5), (440, -1, 24000, 0.5), (440, 10, 0, 0.5),
     (440, 10, 24000, 1.5)],
)
def test_generate_sine_wave_validation(
    frequency: int, duration_ms: int, sample_rate: int, amplitude: float
) -> None:
    """Test parameter validation."""
    with pytest.raises(ValueError):
        generate_sine_wave(frequency, duration_ms, sample_rate, amplitude)


def test_float_to_pcm16_clips() -> None:
    """Test out-of-range floats are clipped to int16 limits."""
    pcm = float_to_pcm16(np.array([2.0, -2.0, 0.0], dtype=np.float32))
    assert np.frombuffer(pcm, dtype="<i2").tolist() == [32767, -32767, 0]


@pytest.mark.asyncio
async def test_mock_response_shape() -> None:
    """Test the response parses like a real service response."""
    client = MockSpeechClient()
    response = await client.generate_content(build_payload("Hello world", "Kore", "m"))

    audio = extract_inline_audio(response)
    assert parse_sample_rate(audio.mime_type) == 24000
    samples = decode_pcm_payload(audio.data)
    # "Say clearly: Hello world" is 24 chars -> 1440ms
    assert samples.size == 24000 * 1440 // 1000
    assert client.requests[0]["generationConfig"]["responseModalities"] == ["AUDIO"]


@pytest.mark.asyncio
async def test_mock_duration_clamped() -> None:
    """Test tone duration stays within bounds."""
    client = MockSpeechClient(sample_rate=8000)

    short = decode_pcm_payload(extract_inline_audio(await client.generate_content({})).data)
    long = decode_pcm_payload(
        extract_inline_audio(await client.generate_content(build_payload("x" * 500, "Kore", "m"))).data
    )

    assert short.size == 8000 * MIN_DURATION_MS // 1000
    assert long.size == 8000 * MAX_DURATION_MS // 1000
