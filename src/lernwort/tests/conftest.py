"""Test configuration."""
import os
from pathlib import Path
from typing import Any, Callable, Generator, Optional

import pytest
from dotenv import load_dotenv
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).resolve().parents[3] / ".env.test"
load_dotenv(test_env_path)
os.environ.setdefault("DATABASE_URL", "sqlite:///test_lernwort.db")
os.environ.setdefault("AUTO_SYNC", "false")

# Import after environment setup
from lernwort.config import ensure_directories
from lernwort.models.base import Base, SessionLocal, engine, init_db
from lernwort.models.word import WordRecord, new_word_id
from lernwort.tests.fakes import RecordingFallback, StreamRecorder
from sqlalchemy.orm import Session

fake = Faker()


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield


@pytest.fixture
def clean_database() -> Generator[None, None, None]:
    """Create the tables before a test and drop them afterwards."""
    engine.dispose()
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(clean_database) -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_word() -> Callable[..., WordRecord]:
    """Factory for word records with realistic filler data."""
    def _make_word(word: Optional[str] = None, **overrides: Any) -> WordRecord:
        fields = {
            "id": new_word_id(),
            "word": word or fake.unique.last_name(),
            "gender": "none",
            "meaning": fake.word(),
            "created_at": fake.unix_time() * 1000,
            "mastery_level": 0,
        }
        fields.update(overrides)
        fields["created_at"] = int(fields["created_at"])
        return WordRecord(**fields)

    return _make_word


@pytest.fixture
def stream_recorder() -> StreamRecorder:
    return StreamRecorder()


@pytest.fixture
def fallback() -> RecordingFallback:
    return RecordingFallback()
