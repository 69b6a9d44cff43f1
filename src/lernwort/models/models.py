"""Database models for locally persisted state."""
from sqlalchemy import Column, String, Text

from lernwort.models.base import Base, TimestampMixin


class StoredValue(Base, TimestampMixin):
    """A single key-value entry of the local store."""

    __tablename__ = "stored_values"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
