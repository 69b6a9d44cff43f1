"""Key-value persistence for locally held application state."""
import json
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from lernwort.models.models import StoredValue
from lernwort.models.word import WordRecord

logger = logging.getLogger(__name__)

WORDS_KEY = "words"
SHEET_URL_KEY = "sheet_url"
LAST_SYNC_KEY = "last_sync"


class LocalStore:
    """Synchronous key-value store backed by the local database."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get the raw value stored under a key."""
        entry = self.db.get(StoredValue, key)
        if entry is None:
            return default
        return entry.value

    def set(self, key: str, value: str) -> None:
        """Store a raw value under a key, replacing any previous one."""
        entry = self.db.get(StoredValue, key)
        if entry is None:
            self.db.add(StoredValue(key=key, value=value))
        else:
            entry.value = value
        self.db.commit()

    def delete(self, key: str) -> bool:
        """Remove a key. Returns False when it was not present."""
        entry = self.db.get(StoredValue, key)
        if entry is None:
            return False
        self.db.delete(entry)
        self.db.commit()
        return True

    def load_words(self) -> List[WordRecord]:
        """Load the persisted word collection."""
        raw = self.get(WORDS_KEY)
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Stored word collection is not valid JSON, starting empty: {e}")
            return []
        if not isinstance(items, list):
            logger.error("Stored word collection is not a list, starting empty")
            return []
        return [WordRecord.from_dict(item) for item in items if isinstance(item, dict)]

    def save_words(self, words: List[WordRecord]) -> None:
        """Persist the whole word collection."""
        self.set(WORDS_KEY, json.dumps([word.to_dict() for word in words], ensure_ascii=False))

    def get_sheet_url(self) -> str:
        """Get the configured remote store endpoint, empty when unset."""
        return self.get(SHEET_URL_KEY, "") or ""

    def set_sheet_url(self, url: str) -> None:
        """Store the remote store endpoint."""
        self.set(SHEET_URL_KEY, url.strip())

    def get_last_synced(self) -> Optional[str]:
        """Get the human-readable marker of the last successful sync."""
        return self.get(LAST_SYNC_KEY)

    def set_last_synced(self, marker: str) -> None:
        """Record the human-readable marker of the last successful sync."""
        self.set(LAST_SYNC_KEY, marker)
