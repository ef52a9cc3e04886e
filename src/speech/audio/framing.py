"""WAV container framing for raw 16-bit mono PCM.

The speech service returns headerless little-endian int16 samples. Wrapping
them in a 44-byte RIFF/WAVE header makes them playable by any decoder. This
is pure framing: no resampling, no channel mixing, payload copied verbatim.
"""

import struct
from dataclasses import dataclass
from typing import Final

import numpy as np
from numpy.typing import NDArray

# Constants
WAV_HEADER_SIZE: Final[int] = 44
NUM_CHANNELS: Final[int] = 1
BITS_PER_SAMPLE: Final[int] = 16
FMT_CHUNK_SIZE: Final[int] = 16
PCM_FORMAT_CODE: Final[int] = 1
BLOCK_ALIGN: Final[int] = NUM_CHANNELS * (BITS_PER_SAMPLE // 8)
# byte_rate is a uint32 header field
MAX_SAMPLE_RATE: Final[int] = 0xFFFFFFFF // BLOCK_ALIGN

# RIFF/WAVE header, all integers little-endian
_HEADER_STRUCT: Final[struct.Struct] = struct.Struct("<4sI4s4sIHHIIHH4sI")


@dataclass(frozen=True)
class WavHeader:
    """Decoded fields of a canonical 44-byte WAV header."""

    chunk_size: int
    audio_format: int
    num_channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_length: int

    @property
    def duration_s(self) -> float:
        """Playback duration in seconds."""
        if self.byte_rate == 0:
            return 0.0
        return self.data_length / self.byte_rate


def _as_pcm_bytes(samples: bytes | bytearray | memoryview | NDArray[np.integer]) -> bytes:
    if isinstance(samples, np.ndarray):
        return samples.astype("<i2", copy=False).tobytes()
    return bytes(samples)


def pcm_to_wav(
    samples: bytes | bytearray | memoryview | NDArray[np.integer], sample_rate: int
) -> bytes:
    """Wrap 16-bit mono PCM samples in a WAV container.

    Args:
        samples: Raw little-endian int16 bytes, or an integer numpy array
            (converted to little-endian int16)
        sample_rate: Sample rate in Hz

    Returns:
        Complete WAV file bytes of length 44 + len(payload)

    Raises:
        ValueError: If sample_rate is not positive or does not fit the header

    Examples:
        >>> wav = pcm_to_wav(b"", 24000)
        >>> len(wav)
        44
        >>> read_wav_header(wav).chunk_size
        36
    """
    if sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {sample_rate}")
    if sample_rate > MAX_SAMPLE_RATE:
        raise ValueError(f"Sample rate {sample_rate} exceeds the WAV maximum of {MAX_SAMPLE_RATE}")

    payload = _as_pcm_bytes(samples)
    data_length = len(payload)
    block_align = BLOCK_ALIGN
    byte_rate = sample_rate * block_align

    header = _HEADER_STRUCT.pack(
        b"RIFF",
        36 + data_length,
        b"WAVE",
        b"fmt ",
        FMT_CHUNK_SIZE,
        PCM_FORMAT_CODE,
        NUM_CHANNELS,
        sample_rate,
        byte_rate,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_length,
    )
    return header + payload


def read_wav_header(container: bytes) -> WavHeader:
    """Parse the header of a WAV produced by pcm_to_wav().

    Args:
        container: WAV file bytes

    Returns:
        Decoded header fields

    Raises:
        ValueError: If the buffer is shorter than 44 bytes or the chunk tags
            are not RIFF/WAVE/fmt /data
    """
    if len(container) < WAV_HEADER_SIZE:
        raise ValueError(
            f"WAV container must be at least {WAV_HEADER_SIZE} bytes, got {len(container)}"
        )

    (
        riff,
        chunk_size,
        wave,
        fmt,
        _fmt_size,
        audio_format,
        num_channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        data_tag,
        data_length,
    ) = _HEADER_STRUCT.unpack_from(container)

    if (riff, wave, fmt, data_tag) != (b"RIFF", b"WAVE", b"fmt ", b"data"):
        raise ValueError("Not a canonical RIFF/WAVE PCM header")

    return WavHeader(
        chunk_size=chunk_size,
        audio_format=audio_format,
        num_channels=num_channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
        data_length=data_length,
    )
