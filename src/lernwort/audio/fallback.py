"""On-device speech synthesis used when the remote voice is unavailable."""
import asyncio
import logging
from typing import Any, Callable, Optional

from lernwort.config import settings

logger = logging.getLogger(__name__)

EngineFactory = Callable[[], Any]


def _init_engine() -> Any:
    # Local import so the rest of the package works without a system speech driver
    import pyttsx3

    return pyttsx3.init()


class FallbackSynthesizer:
    """Speak text with the system voice (offline, lower fidelity).

    :meth:`speak` never raises; failures are logged and swallowed.
    """

    def __init__(
        self,
        language: Optional[str] = None,
        rate: Optional[int] = None,
        engine_factory: Optional[EngineFactory] = None,
    ):
        self.language = (language or settings.speech.fallback_language).lower()
        self.rate = rate if rate is not None else settings.speech.fallback_rate
        self._engine_factory = engine_factory or _init_engine
        self._voice_id: Optional[str] = None

    async def speak(self, text: str) -> None:
        """Speak text and return when the system voice is done."""
        try:
            await asyncio.to_thread(self._speak_blocking, text)
        except Exception as e:
            logger.error(f"Fallback speech failed for {text!r}: {e}")

    def _speak_blocking(self, text: str) -> None:
        engine = self._engine_factory()
        engine.setProperty("rate", self.rate)
        voice_id = self._voice_id or self._find_voice(engine)
        if voice_id:
            engine.setProperty("voice", voice_id)
        engine.say(text)
        engine.runAndWait()

    def _find_voice(self, engine: Any) -> Optional[str]:
        """Pick the first installed voice that speaks the configured language."""
        for voice in engine.getProperty("voices") or []:
            languages = []
            for lang in getattr(voice, "languages", None) or []:
                if isinstance(lang, bytes):
                    lang = lang.decode("utf-8", errors="ignore")
                languages.append(str(lang).lstrip("\x05").lower())
            if any(lang.startswith(self.language) for lang in languages) or \
               f".{self.language}" in str(getattr(voice, "id", "")).lower():
                self._voice_id = voice.id
                logger.debug(f"Using system voice {voice.id} for fallback speech")
                return self._voice_id
        logger.debug(f"No system voice for language {self.language}, using default")
        return None
