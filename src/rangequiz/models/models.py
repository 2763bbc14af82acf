"""Database models for the quiz bot."""
from sqlalchemy import Column, String, Text

from rangequiz.models.base import Base, TimestampMixin


class KeyValueEntry(Base, TimestampMixin):
    """A string blob stored under a fixed key."""

    __tablename__ = "kv_store"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<KeyValueEntry key={self.key!r} size={len(self.value or '')}>"
