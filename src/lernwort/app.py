"""Application composition root."""
import asyncio
import logging
from typing import Any, Callable, List, Optional

import httpx
from sqlalchemy.orm import Session

from lernwort.audio.fallback import FallbackSynthesizer
from lernwort.audio.playback import AudioPlaybackContext, StreamFactory
from lernwort.config import settings
from lernwort.models.base import SessionLocal, init_db
from lernwort.models.word import WordRecord
from lernwort.services.collection import REVIEW_CORRECT_DELTA, REVIEW_WRONG_DELTA, WordCollection
from lernwort.services.content_generator import ContentGenerator
from lernwort.services.local_store import LocalStore
from lernwort.services.sheet_client import RemoteWordStoreClient, SheetAction
from lernwort.services.speech_generator import GeminiSpeechGenerator, SpeechGenerator
from lernwort.services.speech_service import SpeechCache, SpeechPlayer
from lernwort.services.sync_service import SyncReport, SyncService


class LernwortApp:
    """Owns the single instance of every stateful component of the process."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        speech_generator: Optional[SpeechGenerator] = None,
        stream_factory: Optional[StreamFactory] = None,
        fallback: Optional[FallbackSynthesizer] = None,
        content_generator: Optional[ContentGenerator] = None,
        session_factory: Callable[[], Session] = SessionLocal,
    ):
        """Initialize the application."""
        self.logger = logging.getLogger(__name__)
        self.running = False
        self.db: Optional[Session] = None
        self._session_factory = session_factory

        self.client = RemoteWordStoreClient(http_client)
        self.audio_context = AudioPlaybackContext(
            sample_rate=settings.speech.sample_rate,
            channels=settings.speech.channels,
            stream_factory=stream_factory,
        )
        self.player = SpeechPlayer(
            generator=speech_generator or GeminiSpeechGenerator(),
            context=self.audio_context,
            fallback=fallback or FallbackSynthesizer(),
            cache=SpeechCache(settings.speech.cache_size),
        )
        self.content_generator = content_generator or ContentGenerator()

        self.store: Optional[LocalStore] = None
        self.collection: Optional[WordCollection] = None
        self.sync_service: Optional[SyncService] = None

    async def start(self, auto_sync: bool = True) -> None:
        """Open local state and run the initial sync when configured.

        Pass ``auto_sync=False`` when the caller is about to sync itself.
        """
        if self.running:
            return

        init_db()
        self.db = self._session_factory()
        self.store = LocalStore(self.db)
        if not self.store.get_sheet_url() and settings.sync.sheet_url:
            self.store.set_sheet_url(settings.sync.sheet_url)
        self.collection = WordCollection(self.store)
        self.sync_service = SyncService(self.collection, self.client, self.store)
        self.logger.info("Local state loaded")

        self.running = True

        if auto_sync and settings.sync.auto_sync and self.sheet_url:
            await self.sync()

    async def stop(self) -> None:
        """Wait for dispatched pushes and release resources."""
        if not self.running:
            return

        try:
            await self.client.drain()
            await self.client.close()
            self.audio_context.close()
            if self.db:
                self.db.close()
                self.logger.info("Database session closed")
        finally:
            self.running = False

    @property
    def sheet_url(self) -> str:
        """The configured remote store endpoint."""
        return self.store.get_sheet_url() if self.store else ""

    @property
    def words(self) -> List[WordRecord]:
        return self.collection.words if self.collection else []

    @property
    def last_synced_at(self) -> Optional[str]:
        return self.sync_service.last_synced_at if self.sync_service else None

    def set_sheet_url(self, url: str) -> None:
        """Configure the remote store endpoint."""
        self.store.set_sheet_url(url)
        self.logger.info("Remote store endpoint updated")

    async def sync(self) -> Optional[SyncReport]:
        """Sync with the remote store unless a sync is already running."""
        if self.sync_service.is_syncing:
            self.logger.info("Sync already in progress, ignoring request")
            return None
        return await self.sync_service.sync()

    async def speak(
        self,
        text: str,
        on_start: Optional[Callable[[], Any]] = None,
        on_end: Optional[Callable[[], Any]] = None,
    ) -> None:
        """Pronounce text."""
        await self.player.speak(text, on_start=on_start, on_end=on_end)

    async def lookup(self, query: str) -> Optional[WordRecord]:
        """Look a word up and add it to the collection if it is new."""
        query = query.strip()
        if not query:
            return None

        record = await asyncio.to_thread(self.content_generator.generate_word, query)
        existing = self.collection.find_by_word(record.word)
        if existing is not None:
            self.logger.info(f"Word already collected: {existing.word}")
            return existing

        self.collection.add(record)
        self._notify_remote(SheetAction.ADD_WORD, record)
        self.logger.info(f"Added word: {record.word}")
        return record

    async def delete_word(self, word_id: str) -> bool:
        """Delete a word locally and tell the remote store."""
        record = self.collection.remove(word_id)
        if record is None:
            return False
        self._notify_remote(SheetAction.DELETE_WORD, record)
        self.logger.info(f"Deleted word: {record.word}")
        return True

    async def record_review(self, word_id: str, correct: bool) -> Optional[WordRecord]:
        """Apply a learning-session answer to a word's mastery."""
        delta = REVIEW_CORRECT_DELTA if correct else REVIEW_WRONG_DELTA
        record = self.collection.apply_review(word_id, delta)
        if record is None:
            return None
        self._notify_remote(SheetAction.UPDATE_PROGRESS, record)
        return record

    def _notify_remote(self, action: SheetAction, record: WordRecord) -> None:
        url = self.sheet_url
        if url:
            self.client.push_in_background(url, action, record)
