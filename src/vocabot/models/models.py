"""Database models for the bot."""
from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from vocabot.models.base import Base, TimestampMixin, utcnow


class ChatRegistration(Base, TimestampMixin):
    """A chat that receives scheduled words, with its schedule."""

    __tablename__ = "chat_registrations"

    id = Column(Integer, primary_key=True)
    chat_id = Column(BigInteger, unique=True, nullable=False, index=True)
    chat_title = Column(String, nullable=True)
    registered_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    repetition_time = Column(String(5), default="09:00", nullable=False)  # HH:MM, local clock
    new_words_time = Column(String(5), default="20:00", nullable=False)
    new_words_count = Column(Integer, default=0, nullable=False)  # 0 = process default
    repetition_words_count = Column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<ChatRegistration chat_id={self.chat_id} active={self.is_active}>"


class Word(Base):
    """Vocabulary entry, shared by all chats."""

    __tablename__ = "words"

    id = Column(Integer, primary_key=True)
    target_word = Column(String, nullable=False)
    source_meaning = Column(String, nullable=False)
    phonetic_transcription = Column(String, nullable=False, default="")
    frequency_rank = Column(Integer, nullable=False, index=True)  # lower = more frequent
    imported_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    learned_by = relationship("LearnedWord", back_populates="word")

    def __repr__(self) -> str:
        return f"<Word id={self.id} rank={self.frequency_rank} {self.target_word!r}>"


class LearnedWord(Base):
    """Record that a word has been introduced to a chat."""

    __tablename__ = "learned_words"
    __table_args__ = (
        UniqueConstraint("chat_id", "word_id", name="uq_learned_words_chat_word"),
    )

    id = Column(Integer, primary_key=True)
    chat_id = Column(BigInteger, nullable=False, index=True)
    word_id = Column(Integer, ForeignKey("words.id"), nullable=False)
    learned_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_repeated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    repetition_count = Column(Integer, default=0, nullable=False)

    # Relationships
    word = relationship("Word", back_populates="learned_by")
