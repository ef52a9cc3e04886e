"""Test-signal generation for the mock speech adapter and tests."""

import numpy as np
from numpy.typing import NDArray


def float_to_pcm16(audio: NDArray[np.float32]) -> bytes:
    """Convert float audio in [-1.0, 1.0] to little-endian int16 PCM bytes.

    Values outside the range are clipped.
    """
    clipped = np.clip(audio, -1.0, 1.0)
    return (clipped * 32767.0).astype("<i2").tobytes()


def generate_sine_wave(
    frequency: int, duration_ms: int, sample_rate: int, amplitude: float = 0.5
) -> bytes:
    """Generate a mono sine tone as int16 PCM.

    Args:
        frequency: Tone frequency in Hz (at most sample_rate / 2)
        duration_ms: Duration in milliseconds
        sample_rate: Sample rate in Hz
        amplitude: Peak amplitude in [0.0, 1.0]

    Returns:
        PCM bytes, 2 bytes per sample

    Raises:
        ValueError: If any parameter is out of range

    Examples:
        >>> len(generate_sine_wave(440, 100, 24000))  # 100ms x 24kHz x 2 bytes
        4800
    """
    if sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {sample_rate}")
    if frequency <= 0 or frequency > sample_rate / 2:
        raise ValueError(f"Frequency must be in (0, {sample_rate / 2}], got {frequency}")
    if duration_ms < 0:
        raise ValueError(f"Duration must be non-negative, got {duration_ms}")
    if not 0.0 <= amplitude <= 1.0:
        raise ValueError(f"Amplitude must be in [0.0, 1.0], got {amplitude}")

    num_samples = sample_rate * duration_ms // 1000
    t = np.arange(num_samples, dtype=np.float32) / sample_rate
    tone = amplitude * np.sin(2.0 * np.pi * frequency * t)
    return float_to_pcm16(tone.astype(np.float32))
