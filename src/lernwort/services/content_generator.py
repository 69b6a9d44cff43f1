"""Content generation for newly looked-up words."""
import logging
from typing import Optional, Tuple

from deep_translator import GoogleTranslator

from lernwort.config import settings
from lernwort.models.word import Gender, WordRecord, new_word_id, now_ms

logger = logging.getLogger(__name__)

ARTICLES = {gender.value: gender for gender in Gender if gender is not Gender.NONE}


class ContentGenerator:
    """Builds a new word record for a looked-up German word."""

    def __init__(self, source_lang: Optional[str] = None, native_lang: Optional[str] = None):
        self.source_lang = source_lang or settings.content.source_language
        self.native_lang = native_lang or settings.content.native_language

    @staticmethod
    def generate_translation(text: str, source_lang: str, native_lang: str) -> str:
        """Generate a translation for a word or phrase."""
        try:
            translator = GoogleTranslator(source=source_lang, target=native_lang)
            translation = translator.translate(text)
            logger.info(f"Translation generated for word: {text}, translation: {translation}")
            return translation or ""
        except Exception as e:
            logger.error(f"Error generating translation for word: {text}, error: {e}")
            return ""

    @staticmethod
    def split_article(query: str) -> Tuple[Gender, str]:
        """Separate a leading article ("die Katze") from the word itself."""
        parts = query.strip().split(maxsplit=1)
        if len(parts) == 2 and parts[0].lower() in ARTICLES:
            return ARTICLES[parts[0].lower()], parts[1].strip()
        return Gender.NONE, query.strip()

    def generate_word(self, query: str) -> WordRecord:
        """Generate a fresh record for a query, with mastery starting at zero."""
        gender, word = self.split_article(query)
        is_noun = gender is not Gender.NONE or word[:1].isupper()
        meaning = self.generate_translation(query.strip(), self.source_lang, self.native_lang)

        return WordRecord(
            id=new_word_id(),
            word=word,
            gender=gender.value,
            meaning=meaning,
            part_of_speech="noun" if is_noun else "other",
            created_at=now_ms(),
            mastery_level=0,
        )
