"""Speech generation client: remote API access, PCM payload handling, WAV framing."""

from speech.client import GeminiTTSClient
from speech.config import ClientConfig
from speech.generator import SpeechGenerator, SpeechResult, build_payload

__all__ = [
    "ClientConfig",
    "GeminiTTSClient",
    "SpeechGenerator",
    "SpeechResult",
    "build_payload",
]
