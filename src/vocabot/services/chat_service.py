"""Chat service for managing chat registrations and schedules."""
import logging
from typing import Optional, Set, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vocabot.config import TIME_PATTERN, settings
from vocabot.exceptions import InvalidTimeFormatError, NotRegisteredError
from vocabot.models.base import utcnow
from vocabot.models.models import ChatRegistration

logger = logging.getLogger(__name__)


def parse_schedule_time(value: str) -> Tuple[int, int]:
    """Parse an ``HH:MM`` string into an (hour, minute) pair."""
    match = TIME_PATTERN.match((value or "").strip())
    if not match:
        raise InvalidTimeFormatError(value)
    return int(match.group(1)), int(match.group(2))


def normalize_schedule_time(value: str) -> str:
    """Validate a time string and return it zero-padded, e.g. 9:05 -> 09:05."""
    hour, minute = parse_schedule_time(value)
    return f"{hour:02d}:{minute:02d}"


class ChatService:
    """Service for managing chat registrations."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def _get_any(self, chat_id: int) -> Optional[ChatRegistration]:
        return (
            self.db.query(ChatRegistration)
            .filter(ChatRegistration.chat_id == chat_id)
            .first()
        )

    def _get_active_or_raise(self, chat_id: int) -> ChatRegistration:
        registration = self.get_chat_registration(chat_id)
        if registration is None:
            raise NotRegisteredError(chat_id)
        return registration

    def is_chat_registered(self, chat_id: int) -> bool:
        """Check whether the chat has an active registration."""
        return self.get_chat_registration(chat_id) is not None

    def register_chat(self, chat_id: int, chat_title: Optional[str] = None) -> ChatRegistration:
        """Register a chat, reactivating an existing registration if there is one.

        Registering an already active chat is a no-op. A concurrent
        registration of the same chat loses on the unique ``chat_id``
        constraint and returns the row that won.
        """
        existing = self._get_any(chat_id)
        if existing is not None:
            if not existing.is_active:
                existing.is_active = True
                existing.chat_title = chat_title
                self.db.commit()
                self.db.refresh(existing)
                logger.info("Reactivated chat %d (%s)", chat_id, chat_title)
            return existing

        registration = ChatRegistration(
            chat_id=chat_id,
            chat_title=chat_title,
            registered_at=utcnow(),
            is_active=True,
            new_words_time=settings.learning.default_new_words_time,
            repetition_time=settings.learning.default_repetition_time,
            new_words_count=0,
            repetition_words_count=0,
        )
        self.db.add(registration)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("Chat %d was registered concurrently, retrying", chat_id)
            return self.register_chat(chat_id, chat_title)

        self.db.refresh(registration)
        logger.info("Registered new chat %d (%s)", chat_id, chat_title)
        return registration

    def deactivate_chat(self, chat_id: int) -> None:
        """Stop learning in a chat. Unknown chats are ignored."""
        registration = self._get_any(chat_id)
        if registration is None:
            return

        registration.is_active = False
        self.db.commit()
        logger.info("Deactivated chat %d", chat_id)

    def get_active_chat_ids(self) -> Set[int]:
        """Get ids of all chats with learning enabled."""
        rows = (
            self.db.query(ChatRegistration.chat_id)
            .filter(ChatRegistration.is_active.is_(True))
            .all()
        )
        return {row.chat_id for row in rows}

    def get_chat_registration(self, chat_id: int) -> Optional[ChatRegistration]:
        """Get the chat registration if it is active."""
        return (
            self.db.query(ChatRegistration)
            .filter(
                ChatRegistration.chat_id == chat_id,
                ChatRegistration.is_active.is_(True),
            )
            .first()
        )

    def update_repetition_time(self, chat_id: int, time: str) -> ChatRegistration:
        """Set the daily repetition time of an active chat."""
        time = normalize_schedule_time(time)
        registration = self._get_active_or_raise(chat_id)
        registration.repetition_time = time
        self.db.commit()
        logger.info("Updated repetition time to %s for chat %d", time, chat_id)
        return registration

    def update_new_words_time(self, chat_id: int, time: str) -> ChatRegistration:
        """Set the daily new words time of an active chat."""
        time = normalize_schedule_time(time)
        registration = self._get_active_or_raise(chat_id)
        registration.new_words_time = time
        self.db.commit()
        logger.info("Updated new words time to %s for chat %d", time, chat_id)
        return registration

    def update_words_count(
        self,
        chat_id: int,
        new_words_count: int,
        repetition_words_count: int,
    ) -> ChatRegistration:
        """Set per-chat batch sizes. 0 falls back to the configured default."""
        if new_words_count < 0 or repetition_words_count < 0:
            raise ValueError("Words count cannot be negative")

        registration = self._get_active_or_raise(chat_id)
        registration.new_words_count = new_words_count
        registration.repetition_words_count = repetition_words_count
        self.db.commit()
        logger.info(
            "Updated words count: new=%d, repetition=%d for chat %d",
            new_words_count,
            repetition_words_count,
            chat_id,
        )
        return registration

