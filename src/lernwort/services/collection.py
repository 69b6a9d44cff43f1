"""The learner's local word collection."""
import logging
from typing import List, Optional

from lernwort.models.word import WordRecord
from lernwort.services.local_store import LocalStore

logger = logging.getLogger(__name__)

MIN_MASTERY = 0
MAX_MASTERY = 100
REVIEW_CORRECT_DELTA = 25
REVIEW_WRONG_DELTA = -10


class WordCollection:
    """Ordered, id-unique list of word records persisted on every change."""

    def __init__(self, store: LocalStore):
        """Initialize the collection and load persisted records."""
        self.store = store
        self._words: List[WordRecord] = []
        self.load()

    @property
    def words(self) -> List[WordRecord]:
        """Snapshot of the current records, in display order."""
        return list(self._words)

    def __len__(self) -> int:
        return len(self._words)

    def load(self) -> None:
        """Reload records from the store, dropping duplicate ids."""
        seen = set()
        words = []
        for word in self.store.load_words():
            if word.id in seen:
                logger.warning(f"Dropping duplicate stored record {word.id} ({word.word})")
                continue
            seen.add(word.id)
            words.append(word)
        self._words = words
        logger.info(f"Loaded {len(self._words)} words from local store")

    def get(self, word_id: str) -> Optional[WordRecord]:
        """Get a record by its id."""
        return next((w for w in self._words if w.id == word_id), None)

    def find_by_word(self, text: str) -> Optional[WordRecord]:
        """Get the first record whose word matches case-insensitively."""
        text = text.lower()
        return next((w for w in self._words if w.word.lower() == text), None)

    def replace(self, words: List[WordRecord]) -> None:
        """Replace the whole collection and persist it."""
        self._words = list(words)
        self.store.save_words(self._words)

    def add(self, record: WordRecord) -> bool:
        """Prepend a record unless the same word is already collected."""
        if self.get(record.id) or self.find_by_word(record.word):
            logger.debug(f"Word already in collection: {record.word}")
            return False
        self._words.insert(0, record)
        self.store.save_words(self._words)
        return True

    def remove(self, word_id: str) -> Optional[WordRecord]:
        """Remove a record by id and return it."""
        record = self.get(word_id)
        if record is None:
            return None
        self._words = [w for w in self._words if w.id != word_id]
        self.store.save_words(self._words)
        return record

    def apply_review(self, word_id: str, delta: int) -> Optional[WordRecord]:
        """Shift a record's mastery after a learning session answer, clamped to 0..100."""
        record = self.get(word_id)
        if record is None:
            return None
        record.mastery_level = max(MIN_MASTERY, min(MAX_MASTERY, record.mastery_level + delta))
        self.store.save_words(self._words)
        return record
