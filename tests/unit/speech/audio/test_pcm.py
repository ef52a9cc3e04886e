"""Unit tests for inline audio extraction and PCM decoding."""

import base64

import numpy as np
import pytest

from common.errors import SampleRateUnresolvableError, UnsupportedAudioFormatError
from speech.audio.pcm import decode_pcm_payload, extract_inline_audio, parse_sample_rate
from tests.helpers.fake_http import audio_response


class TestExtractInlineAudio:
    """Test suite for extract_inline_audio()."""

    def test_extracts_part(self) -> None:
        audio = extract_inline_audio(audio_response())
        assert audio.mime_type == "audio/L16;codec=pcm;rate=24000"
        assert audio.data

    @pytest.mark.parametrize(
        "response",
        [
            {},
            {"candidates": []},
            {"candidates": [{"content": {"parts": []}}]},
            {"candidates": [{"content": {"parts": [{"text": "no audio"}]}}]},
            {"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": "audio/L16"}}]}}]},
            {"candidates": [{"content": {"parts": [{"inlineData": {"data": "AAAA"}}]}}]},
            {"candidates": None},
        ],
    )
    def test_missing_audio(self, response: dict) -> None:
        with pytest.raises(UnsupportedAudioFormatError, match="missing audio data"):
            extract_inline_audio(response)


class TestParseSampleRate:
    """Test suite for parse_sample_rate()."""

    @pytest.mark.parametrize(
        ("mime_type", "rate"),
        [
            ("audio/L16;rate=24000", 24000),
            ("audio/L16;codec=pcm;rate=16000", 16000),
            ("audio/l16; rate=8000", 8000),
            ("audio/L16;rate=2147483647", 2147483647),
        ],
    )
    def test_parses_rate(self, mime_type: str, rate: int) -> None:
        assert parse_sample_rate(mime_type) == rate

    @pytest.mark.parametrize("mime_type", ["audio/mpeg", "audio/wav;rate=24000", "text/plain"])
    def test_rejects_non_pcm16(self, mime_type: str) -> None:
        with pytest.raises(UnsupportedAudioFormatError):
            parse_sample_rate(mime_type)

    @pytest.mark.parametrize(
        "mime_type",
        ["audio/L16", "audio/L16;rate=", "audio/L16;rate=0", "audio/L16;rate=3000000000"],
    )
    def test_unresolvable_rate(self, mime_type: str) -> None:
        with pytest.raises(SampleRateUnresolvableError):
            parse_sample_rate(mime_type)


class TestDecodePcmPayload:
    """Test suite for decode_pcm_payload()."""

    def test_decodes_little_endian_int16(self) -> None:
        data = base64.b64encode(b"\x01\x00\xff\xff\x00\x80").decode()
        samples = decode_pcm_payload(data)
        assert samples.tolist() == [1, -1, -32768]
        assert samples.dtype == np.dtype("<i2")

    def test_empty_payload(self) -> None:
        assert decode_pcm_payload("").size == 0

    def test_odd_byte_count(self) -> None:
        with pytest.raises(UnsupportedAudioFormatError, match="even byte count"):
            decode_pcm_payload(base64.b64encode(b"\x01\x02\x03").decode())

    def test_invalid_base64(self) -> None:
        with pytest.raises(UnsupportedAudioFormatError, match="base64"):
            decode_pcm_payload("***")
