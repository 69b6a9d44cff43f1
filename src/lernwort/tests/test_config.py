"""Tests for settings validation."""
import pytest

from lernwort.config import Settings, SpeechSettings, SyncSettings, settings


def test_test_environment_settings() -> None:
    assert settings.sync.auto_sync is False
    assert settings.speech.sample_rate == 24000
    assert settings.speech.channels == 1
    assert settings.speech.max_attempts == 3


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_attempts": 0},
        {"retry_delay": -1.0},
        {"cache_size": -5},
        {"sample_rate": 0},
        {"channels": 0},
    ],
)
def test_invalid_speech_settings_are_rejected(overrides) -> None:
    with pytest.raises(ValueError):
        Settings(speech=SpeechSettings(**overrides)).validate()


def test_invalid_sync_timeout_is_rejected() -> None:
    with pytest.raises(ValueError):
        Settings(sync=SyncSettings(timeout=0)).validate()
