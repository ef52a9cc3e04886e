"""Base protocol for speech service clients."""

from typing import Any, Protocol


class SpeechClient(Protocol):
    """Protocol shared by GeminiTTSClient and MockSpeechClient."""

    async def generate_content(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a generateContent request.

        Args:
            payload: JSON request body

        Returns:
            Parsed JSON response containing inline audio
        """
        ...
