"""Text-to-speech generation: request building and response-to-WAV conversion."""

import logging
import time
from dataclasses import dataclass
from typing import Any

from speech.audio.framing import pcm_to_wav
from speech.audio.pcm import decode_pcm_payload, extract_inline_audio, parse_sample_rate
from speech.config import VoiceConfig
from speech.speech_base import SpeechClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeechResult:
    """A generated utterance.

    Attributes:
        wav: Complete WAV container bytes
        sample_rate: Sample rate reported by the service
        voice: Voice used
        num_samples: Number of 16-bit samples in the payload
    """

    wav: bytes
    sample_rate: int
    voice: str
    num_samples: int

    @property
    def duration_s(self) -> float:
        """Playback duration in seconds."""
        return self.num_samples / self.sample_rate


def style_prompt(text: str) -> str:
    """Prefix text with delivery guidance for the speech model."""
    if "?" in text:
        return f"Say excitedly: {text}"
    return f"Say clearly: {text}"


def build_payload(text: str, voice: str, model: str) -> dict[str, Any]:
    """Build a generateContent request body for audio output."""
    return {
        "contents": [{"parts": [{"text": style_prompt(text)}]}],
        "generationConfig": {
            "responseModalities": ["AUDIO"],
            "speechConfig": {
                "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}},
            },
        },
        "model": model,
    }


class SpeechGenerator:
    """Turns text into a playable WAV using a speech client.

    Example:
        >>> generator = SpeechGenerator(MockSpeechClient(), VoiceConfig())
        >>> result = await generator.generate("Hello there")
        >>> result.wav[:4]
        b'RIFF'
    """

    def __init__(
        self,
        client: SpeechClient,
        voice_config: VoiceConfig | None = None,
        model: str = "gemini-2.5-flash-preview-tts",
    ) -> None:
        self.client = client
        self.voice_config = voice_config or VoiceConfig()
        self.model = model

    def _validate(self, text: str, voice: str) -> None:
        if not text:
            raise ValueError("Please enter some text to generate speech.")
        if len(text) > self.voice_config.max_text_chars:
            raise ValueError(
                f"Text is {len(text)} characters, maximum is {self.voice_config.max_text_chars}"
            )
        if voice not in self.voice_config.voices:
            raise ValueError(f"Unknown voice '{voice}'. Choose one of {self.voice_config.voices}")

    async def generate(self, text: str, voice: str | None = None) -> SpeechResult:
        """Generate speech for text.

        Args:
            text: Text to speak (surrounding whitespace is stripped)
            voice: Prebuilt voice name, defaults to the configured default

        Returns:
            WAV container and metadata

        Raises:
            ValueError: If text is empty or too long, or voice is unknown
            CredentialError: If the API key cannot be obtained
            RemoteCallError: If the service call fails
            AudioFormatError: If the response audio cannot be framed
        """
        text = text.strip()
        voice = voice or self.voice_config.default_voice
        self._validate(text, voice)

        start = time.monotonic()
        response = await self.client.generate_content(build_payload(text, voice, self.model))

        audio = extract_inline_audio(response)
        sample_rate = parse_sample_rate(audio.mime_type)
        samples = decode_pcm_payload(audio.data)
        wav = pcm_to_wav(samples, sample_rate)

        logger.info(
            "Speech generated",
            extra={
                "voice": voice,
                "sample_rate": sample_rate,
                "num_samples": len(samples),
                "elapsed_ms": round((time.monotonic() - start) * 1000.0, 1),
            },
        )
        return SpeechResult(wav=wav, sample_rate=sample_rate, voice=voice, num_samples=len(samples))
