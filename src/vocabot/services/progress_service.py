"""Service for tracking what each chat has learned."""
import logging
from typing import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vocabot.models.base import utcnow
from vocabot.models.models import LearnedWord

logger = logging.getLogger(__name__)


class ProgressService:
    """Service for recording learned words and repetitions."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def mark_words_as_learned(self, chat_id: int, word_ids: Iterable[int]) -> int:
        """Mark words as learned by the chat.

        Words that are already marked keep their timestamps and counters.
        Returns the number of new marks.
        """
        word_ids = set(word_ids)
        if not word_ids:
            return 0

        try:
            added = self._insert_missing_marks(chat_id, word_ids)
        except IntegrityError:
            # Another writer marked some of the words in the meantime
            self.db.rollback()
            logger.info("Concurrent update of learned words for chat %d, retrying", chat_id)
            added = self._insert_missing_marks(chat_id, word_ids)

        logger.info("Marked %d word(s) as learned for chat %d", added, chat_id)
        return added

    def _insert_missing_marks(self, chat_id: int, word_ids: set) -> int:
        existing_ids = {
            row.word_id
            for row in self.db.query(LearnedWord.word_id)
            .filter(
                LearnedWord.chat_id == chat_id,
                LearnedWord.word_id.in_(word_ids),
            )
            .all()
        }

        now = utcnow()
        new_marks = [
            LearnedWord(
                chat_id=chat_id,
                word_id=word_id,
                learned_at=now,
                last_repeated_at=now,
                repetition_count=0,
            )
            for word_id in sorted(word_ids - existing_ids)
        ]
        self.db.add_all(new_marks)
        self.db.commit()
        return len(new_marks)

    def update_repetition(self, chat_id: int, word_ids: Iterable[int]) -> int:
        """Record one repetition of each word for the chat.

        Words the chat has not learned are skipped. Returns the number of
        updated marks.
        """
        word_ids = set(word_ids)
        if not word_ids:
            return 0

        updated = (
            self.db.query(LearnedWord)
            .filter(
                LearnedWord.chat_id == chat_id,
                LearnedWord.word_id.in_(word_ids),
            )
            .update(
                {
                    LearnedWord.repetition_count: LearnedWord.repetition_count + 1,
                    LearnedWord.last_repeated_at: utcnow(),
                },
                synchronize_session=False,
            )
        )
        self.db.commit()
        logger.info("Updated repetition of %d word(s) for chat %d", updated, chat_id)
        return updated

    def restart_progress(self, chat_id: int) -> int:
        """Forget everything the chat has learned. Returns the number of removed words."""
        logger.info("Restarting learning progress for chat %d", chat_id)

        removed = (
            self.db.query(LearnedWord)
            .filter(LearnedWord.chat_id == chat_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()

        logger.info("Progress restarted for chat %d. Removed %d learned words", chat_id, removed)
        return removed
