"""Cached, retrying pronunciation playback with a local fallback voice."""
import asyncio
import logging
from collections import OrderedDict
from typing import Callable, Optional

from lernwort.audio.fallback import FallbackSynthesizer
from lernwort.audio.pcm import AudioBuffer, decode_base64, decode_pcm16
from lernwort.audio.playback import AudioPlaybackContext
from lernwort.config import settings
from lernwort.exceptions import GenerationExhaustedError
from lernwort.monitoring import speech_attempt_failures, speech_requests
from lernwort.services.speech_generator import SpeechGenerator

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class SpeechCache:
    """Decoded audio keyed by the exact text it was generated for.

    Unbounded by default. With ``max_entries`` set, the least recently used
    entry is evicted once the limit is exceeded.
    """

    def __init__(self, max_entries: int = 0):
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, AudioBuffer]" = OrderedDict()

    def get(self, text: str) -> Optional[AudioBuffer]:
        buffer = self._entries.get(text)
        if buffer is not None and self.max_entries:
            self._entries.move_to_end(text)
        return buffer

    def put(self, text: str, buffer: AudioBuffer) -> None:
        self._entries[text] = buffer
        self._entries.move_to_end(text)
        if self.max_entries and len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted cached audio for {evicted!r}")

    def __contains__(self, text: str) -> bool:
        return text in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


class SpeechPlayer:
    """Speaks text: cache, then remote generation with retries, then the system voice."""

    def __init__(
        self,
        generator: SpeechGenerator,
        context: AudioPlaybackContext,
        fallback: FallbackSynthesizer,
        cache: Optional[SpeechCache] = None,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.generator = generator
        self.context = context
        self.fallback = fallback
        self.cache = cache if cache is not None else SpeechCache(settings.speech.cache_size)
        self.max_attempts = max_attempts if max_attempts is not None else settings.speech.max_attempts
        self.retry_delay = retry_delay if retry_delay is not None else settings.speech.retry_delay

    async def speak(
        self,
        text: str,
        on_start: Optional[Callback] = None,
        on_end: Optional[Callback] = None,
    ) -> None:
        """Pronounce text.

        ``on_start`` fires first and ``on_end`` fires exactly once at the end,
        whichever path served the request. Never raises.
        """
        self._notify(on_start, "start")
        try:
            buffer = self.cache.get(text)
            if buffer is not None:
                speech_requests.labels(source="cache").inc()
                await self.context.play(buffer)
                return

            try:
                payload = await self._generate_with_retry(text)
                buffer = decode_pcm16(
                    decode_base64(payload),
                    sample_rate=self.context.sample_rate,
                    channels=self.context.channels,
                )
                self.cache.put(text, buffer)
                speech_requests.labels(source="remote").inc()
                await self.context.play(buffer)
                return
            except Exception as e:
                logger.warning(f"Switching to system voice for {text!r}: {e}")

            speech_requests.labels(source="fallback").inc()
            await self.fallback.speak(text)
        except Exception as e:
            logger.error(f"Could not play {text!r}: {e}")
        finally:
            self._notify(on_end, "end")

    async def _generate_with_retry(self, text: str) -> str:
        """Ask the generator for audio, waiting 1x, 2x, ... the base delay between attempts."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                payload = await self.generator.generate(text)
                if payload:
                    return payload
                logger.warning(f"Attempt {attempt}/{self.max_attempts} returned no audio for {text!r}")
            except Exception as e:
                logger.warning(f"Attempt {attempt}/{self.max_attempts} failed for {text!r}: {e}")
            speech_attempt_failures.inc()

            if attempt < self.max_attempts:
                await asyncio.sleep(self.retry_delay * attempt)

        raise GenerationExhaustedError(text, self.max_attempts)

    @staticmethod
    def _notify(callback: Optional[Callback], name: str) -> None:
        if callback is None:
            return
        try:
            callback()
        except Exception as e:
            logger.error(f"Speech {name} callback failed: {e}")
