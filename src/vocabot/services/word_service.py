"""Service for selecting words for a chat."""
import logging
import random
from typing import List, Set

from sqlalchemy.orm import Session

from vocabot.models.models import LearnedWord, Word

logger = logging.getLogger(__name__)


class WordService:
    """Service for selecting new and already learned words."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def get_word_count(self) -> int:
        """Get the count of words in the vocabulary."""
        return self.db.query(Word).count()

    def get_learned_word_ids(self, chat_id: int) -> Set[int]:
        """Get ids of all words introduced to the chat."""
        rows = (
            self.db.query(LearnedWord.word_id)
            .filter(LearnedWord.chat_id == chat_id)
            .all()
        )
        return {row.word_id for row in rows}

    def get_learned_word_count(self, chat_id: int) -> int:
        """Get the number of words introduced to the chat."""
        return self.db.query(LearnedWord).filter(LearnedWord.chat_id == chat_id).count()

    def get_new_words(self, chat_id: int, count: int) -> List[Word]:
        """Get the most frequent words the chat has not learned yet.

        Words are ordered by frequency rank, ties broken by id. Fewer than
        ``count`` words (possibly none) means the vocabulary is exhausted.
        """
        if count <= 0:
            return []

        learned_word_ids = (
            self.db.query(LearnedWord.word_id)
            .filter(LearnedWord.chat_id == chat_id)
        )
        return (
            self.db.query(Word)
            .filter(~Word.id.in_(learned_word_ids))
            .order_by(Word.frequency_rank, Word.id)
            .limit(count)
            .all()
        )

    def get_random_learned_words(self, chat_id: int, count: int) -> List[Word]:
        """Get a random sample of words the chat has already learned."""
        if count <= 0:
            return []

        learned_word_ids = list(self.get_learned_word_ids(chat_id))
        if not learned_word_ids:
            return []

        selected_ids = random.sample(learned_word_ids, min(count, len(learned_word_ids)))
        words = {
            word.id: word
            for word in self.db.query(Word).filter(Word.id.in_(selected_ids)).all()
        }
        logger.debug("Selected %d of %d learned words for chat %d", len(words), len(learned_word_ids), chat_id)
        return [words[word_id] for word_id in selected_ids if word_id in words]
