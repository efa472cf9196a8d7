"""Service for dispatching scheduled new words and repetitions."""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, Optional, Set, Tuple

from sqlalchemy.orm import sessionmaker

from vocabot import monitoring
from vocabot.config import LearningSettings, settings
from vocabot.exceptions import InvalidTimeFormatError, MalformedScheduleError
from vocabot.models.base import SessionLocal
from vocabot.models.models import ChatRegistration
from vocabot.services.chat_service import ChatService, parse_schedule_time
from vocabot.services.message_service import BotMessageKey, MessageService
from vocabot.services.notification_service import NotificationService
from vocabot.services.progress_service import ProgressService
from vocabot.services.word_service import WordService

logger = logging.getLogger(__name__)


class Flow(Enum):
    """Scheduled work that can run for a chat."""
    NEW_WORDS = "new_words"
    REPETITION = "repetition"


@dataclass
class FlowState:
    """Dispatch state of one flow for one chat."""
    running: bool = False
    last_dispatched: Optional[str] = None  # YYYY-MM-DD HH:MM


def effective_batch_size(chat_count: int, default_count: int) -> int:
    """Chat override if set, otherwise the configured default."""
    return chat_count if chat_count and chat_count > 0 else default_count


class SchedulerService:
    """Runs a tick every minute and starts the flows due for each chat.

    A flow is started at most once per chat, flow and minute, and never
    while the previous run of the same flow for the same chat is still in
    progress. Minutes missed while the process was down are not caught up.
    """

    def __init__(
        self,
        notification_service: NotificationService,
        message_service: Optional[MessageService] = None,
        session_factory: sessionmaker = SessionLocal,
        learning: Optional[LearningSettings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the service with a notification sink and a session factory."""
        self.notification_service = notification_service
        self.message_service = message_service or MessageService()
        self.session_factory = session_factory
        self.learning = learning or settings.learning
        self.clock = clock
        self.tasks: Dict[str, asyncio.Task] = {}
        self.tick_tasks: Set[asyncio.Task] = set()
        self.flow_states: Dict[Tuple[int, Flow], FlowState] = {}
        self.running = False

    async def start(self) -> None:
        """Start the scheduler service."""
        if self.running:
            return

        self.running = True
        logger.info("Starting scheduler service...")

        self.tasks["dispatcher"] = asyncio.create_task(self._run_dispatcher())

    async def stop(self) -> None:
        """Stop the scheduler service, abandoning flows that are in progress."""
        if not self.running:
            return

        self.running = False
        logger.info("Stopping scheduler service...")

        tasks = list(self.tasks.values()) + list(self.tick_tasks)
        for task in tasks:
            task.cancel()

        # Wait for tasks to complete
        await asyncio.gather(*tasks, return_exceptions=True)
        self.tasks.clear()
        self.tick_tasks.clear()

    async def _run_dispatcher(self) -> None:
        """Start a tick at the beginning of every minute."""
        while self.running:
            try:
                await asyncio.sleep(self._seconds_until_next_minute())

                # Ticks run on their own so a long flow never delays the next minute
                task = asyncio.create_task(self._run_tick())
                self.tick_tasks.add(task)
                task.add_done_callback(self.tick_tasks.discard)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Error in dispatcher task: %s", str(e))
                await asyncio.sleep(60)  # Wait 1 minute before retrying

    def _seconds_until_next_minute(self) -> float:
        now = self.clock()
        return 60 - now.second - now.microsecond / 1_000_000 + 0.05

    async def _run_tick(self) -> None:
        try:
            await self.tick()
        except Exception:
            monitoring.tick_failures.inc()
            logger.exception("Error executing dispatcher tick")

    async def tick(self, now: Optional[datetime] = None) -> int:
        """Check every active chat against ``now`` and run the flows that are due.

        Returns the number of flows started. Errors while listing chats are
        raised; errors of a single chat are logged and the other chats are
        still processed.
        """
        now = now or self.clock()
        monitoring.ticks.inc()

        with self.session_factory() as db:
            active_chat_ids = ChatService(db).get_active_chat_ids()
        monitoring.active_chats.set(len(active_chat_ids))

        if not active_chat_ids:
            logger.info("No registered chats found. Skipping tick.")
            return 0

        logger.info(
            "Current time: %s. Checking %d chat(s) for scheduled words",
            now.strftime("%H:%M"),
            len(active_chat_ids),
        )

        processed = await asyncio.gather(
            self._run_job(Flow.NEW_WORDS, active_chat_ids, now),
            self._run_job(Flow.REPETITION, active_chat_ids, now),
        )
        return sum(processed)

    async def _run_job(self, flow: Flow, chat_ids: Iterable[int], now: datetime) -> int:
        """Check all chats for one flow, one chat after another."""
        processed_count = 0

        for chat_id in sorted(chat_ids):
            try:
                if await self._check_chat(flow, chat_id, now):
                    processed_count += 1
            except Exception:
                logger.exception("Error processing %s check for chat %d", flow.value, chat_id)

        logger.info("%s job check completed. Processed %d chat(s)", flow.value, processed_count)
        return processed_count

    async def _check_chat(self, flow: Flow, chat_id: int, now: datetime) -> bool:
        with self.session_factory() as db:
            registration = ChatService(db).get_chat_registration(chat_id)
            if registration is None:
                # Deactivated since the chat list was fetched
                return False
            configured_time, batch_size = self._flow_settings(flow, registration)

        try:
            hour, minute = self._parse_configured_time(configured_time)
        except MalformedScheduleError as e:
            logger.warning("Skipping %s for chat %d: %s", flow.value, chat_id, e)
            return False

        if (hour, minute) != (now.hour, now.minute):
            return False

        return await self.dispatch(flow, chat_id, batch_size, now)

    def _flow_settings(self, flow: Flow, registration: ChatRegistration) -> Tuple[str, int]:
        if flow is Flow.NEW_WORDS:
            return (
                registration.new_words_time,
                effective_batch_size(registration.new_words_count, self.learning.new_words_count),
            )
        return (
            registration.repetition_time,
            effective_batch_size(registration.repetition_words_count, self.learning.repetition_words_count),
        )

    @staticmethod
    def _parse_configured_time(value: str) -> Tuple[int, int]:
        try:
            return parse_schedule_time(value)
        except InvalidTimeFormatError as e:
            raise MalformedScheduleError(value) from e

    async def dispatch(self, flow: Flow, chat_id: int, batch_size: int, now: datetime) -> bool:
        """Run a flow for a chat unless it is running or already ran this minute."""
        state = self.flow_states.setdefault((chat_id, flow), FlowState())
        minute_key = now.strftime("%Y-%m-%d %H:%M")

        if state.running or state.last_dispatched == minute_key:
            logger.info(
                "Skipping %s for chat %d: %s",
                flow.value,
                chat_id,
                "still running" if state.running else f"already dispatched at {minute_key}",
            )
            monitoring.flows_suppressed.labels(flow=flow.value).inc()
            return False

        state.running = True
        state.last_dispatched = minute_key
        monitoring.flows_dispatched.labels(flow=flow.value).inc()

        try:
            with monitoring.flow_duration.labels(flow=flow.value).time():
                if flow is Flow.NEW_WORDS:
                    await self._process_new_words_for_chat(chat_id, batch_size)
                else:
                    await self._process_repetition_for_chat(chat_id, batch_size)
        except Exception:
            monitoring.flow_errors.labels(flow=flow.value).inc()
            raise
        finally:
            state.running = False

        return True

    def is_running(self, chat_id: int, flow: Flow) -> bool:
        """Check whether a flow is in progress for a chat."""
        state = self.flow_states.get((chat_id, flow))
        return state is not None and state.running

    async def _process_new_words_for_chat(self, chat_id: int, count: int) -> None:
        logger.info("Starting new words for chat %d", chat_id)

        with self.session_factory() as db:
            words = WordService(db).get_new_words(chat_id, count)

        if not words:
            logger.info("No new words available for chat %d", chat_id)
            await self.notification_service.send_message(
                chat_id,
                self.message_service.get_message(BotMessageKey.ALL_WORDS_LEARNED),
            )
            return

        message = self.message_service.format_new_words(words)
        if await self.notification_service.send_message(chat_id, message):
            monitoring.words_delivered.labels(flow=Flow.NEW_WORDS.value).inc(len(words))
        else:
            logger.warning("New words were not delivered to chat %d, marking them as learned anyway", chat_id)

        with self.session_factory() as db:
            ProgressService(db).mark_words_as_learned(chat_id, [word.id for word in words])

        logger.info("New words completed for chat %d. Words learned: %d", chat_id, len(words))

    async def _process_repetition_for_chat(self, chat_id: int, count: int) -> None:
        logger.info("Starting repetition for chat %d", chat_id)

        with self.session_factory() as db:
            words = WordService(db).get_random_learned_words(chat_id, count)

        if not words:
            logger.info("No learned words available for repetition in chat %d", chat_id)
            return

        # Questions first, answers after the delay
        questions = self.message_service.format_repetition_questions(words)
        await self.notification_service.send_message(chat_id, questions)

        await asyncio.sleep(self.learning.answer_delay_seconds)

        answers = self.message_service.format_repetition_answers(words)
        if not await self.notification_service.send_message(chat_id, answers):
            logger.warning("Answers were not delivered to chat %d, repetition not counted", chat_id)
            return
        monitoring.words_delivered.labels(flow=Flow.REPETITION.value).inc(len(words))

        with self.session_factory() as db:
            ProgressService(db).update_repetition(chat_id, [word.id for word in words])

        logger.info("Repetition completed for chat %d. Words repeated: %d", chat_id, len(words))
