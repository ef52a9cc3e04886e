"""Audio payload parsing and WAV framing."""

from speech.audio.framing import WAV_HEADER_SIZE, WavHeader, pcm_to_wav, read_wav_header
from speech.audio.pcm import (
    InlineAudio,
    decode_pcm_payload,
    extract_inline_audio,
    parse_sample_rate,
)

__all__ = [
    "WAV_HEADER_SIZE",
    "InlineAudio",
    "WavHeader",
    "decode_pcm_payload",
    "extract_inline_audio",
    "parse_sample_rate",
    "pcm_to_wav",
    "read_wav_header",
]
