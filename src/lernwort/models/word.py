"""Vocabulary record shared by the local collection and the remote store."""
import math
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Gender(Enum):
    """Grammatical gender of a noun, expressed by its article."""
    MASCULINE = "der"
    FEMININE = "die"
    NEUTER = "das"
    NONE = "none"


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def new_word_id() -> str:
    """Generate a fresh opaque record identifier."""
    return str(uuid.uuid4())


def _as_int(value: Any) -> Optional[int]:
    """Coerce a loosely typed number, returning None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return int(value)
    return None


@dataclass
class WordRecord:
    """A learned vocabulary entry.

    ``id`` is immutable once assigned; ``mastery_level`` is the only field
    the reconciler ever changes on an existing record.
    """
    id: str
    word: str
    gender: str = Gender.NONE.value
    meaning: str = ""
    ipa: str = ""
    part_of_speech: str = "noun"
    plural: str = ""
    synonyms: List[str] = field(default_factory=list)
    examples: List[Any] = field(default_factory=list)
    verb_forms: Optional[Dict[str, str]] = None
    created_at: int = field(default_factory=now_ms)
    mastery_level: int = 0

    def matches(self, other: "WordRecord") -> bool:
        """Same logical entry: equal ids or case-insensitively equal words."""
        return self.id == other.id or self.word.lower() == other.word.lower()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase field names of the stored and remote format."""
        data = {
            "id": self.id,
            "word": self.word,
            "gender": self.gender,
            "meaning": self.meaning,
            "ipa": self.ipa,
            "partOfSpeech": self.part_of_speech,
            "plural": self.plural,
            "synonyms": list(self.synonyms),
            "examples": list(self.examples),
            "createdAt": self.created_at,
            "masteryLevel": self.mastery_level,
        }
        if self.verb_forms:
            data["verbForms"] = dict(self.verb_forms)
        return data

    @classmethod
    def from_dict(cls, item: Dict[str, Any]) -> "WordRecord":
        """Build a record from a loosely shaped dict, defaulting anything missing."""
        created_at = _as_int(item.get("createdAt"))
        mastery_level = _as_int(item.get("masteryLevel"))
        synonyms = item.get("synonyms")
        examples = item.get("examples")
        verb_forms = item.get("verbForms")

        return cls(
            id=str(item.get("id") or new_word_id()),
            word=str(item.get("word") or ""),
            gender=str(item.get("gender") or Gender.NONE.value),
            meaning=str(item.get("meaning") or ""),
            ipa=str(item.get("ipa") or ""),
            part_of_speech=str(item.get("partOfSpeech") or "noun"),
            plural=str(item.get("plural") or ""),
            synonyms=list(synonyms) if isinstance(synonyms, list) else [],
            examples=list(examples) if isinstance(examples, list) else [],
            verb_forms=dict(verb_forms) if isinstance(verb_forms, dict) else None,
            created_at=created_at if created_at is not None else now_ms(),
            mastery_level=mastery_level if mastery_level is not None else 0,
        )
