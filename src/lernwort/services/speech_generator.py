"""Remote text-to-speech generation."""
import base64
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from google import genai
from google.genai import types

from lernwort.config import settings

logger = logging.getLogger(__name__)


class SpeechGenerator(ABC):
    """Produces base64-encoded mono 16-bit PCM for a piece of text."""

    @abstractmethod
    async def generate(self, text: str) -> Optional[str]:
        """Return the audio payload, or None when nothing was produced."""


class GeminiSpeechGenerator(SpeechGenerator):
    """Speech generation through the Gemini TTS model."""

    PROMPT = "Say clearly in German: {text}"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        voice: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.speech.api_key
        self.model = model or settings.speech.model
        self.voice = voice or settings.speech.voice
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate(self, text: str) -> Optional[str]:
        logger.debug(f"Requesting speech for {text!r} with voice {self.voice}")
        response = await self._get_client().aio.models.generate_content(
            model=self.model,
            contents=self.PROMPT.format(text=text),
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=self.voice),
                    ),
                ),
            ),
        )
        return self._extract_audio(response)

    @staticmethod
    def _extract_audio(response: Any) -> Optional[str]:
        """Pull the inline audio of the first candidate, as base64."""
        candidates = getattr(response, "candidates", None) or []
        if not candidates or candidates[0].content is None:
            return None
        parts = candidates[0].content.parts or []
        if not parts or parts[0].inline_data is None:
            return None
        data = parts[0].inline_data.data
        if not data:
            return None
        if isinstance(data, bytes):
            return base64.b64encode(data).decode("ascii")
        return data
