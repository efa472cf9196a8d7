"""Telegram command handlers."""
import logging
import re
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from telegram import BotCommand, Update
from telegram.ext import Application, CallbackContext, MessageHandler, filters

from vocabot import monitoring
from vocabot.config import settings
from vocabot.exceptions import InvalidTimeFormatError, NotRegisteredError
from vocabot.models.base import SessionLocal
from vocabot.services.chat_service import ChatService, normalize_schedule_time
from vocabot.services.message_service import BotMessageKey, MessageService
from vocabot.services.notification_service import NotificationService
from vocabot.services.progress_service import ProgressService
from vocabot.services.scheduler_service import effective_batch_size
from vocabot.services.word_service import WordService

# Get logger for this module
logger = logging.getLogger(__name__)

COMMAND_PATTERN = re.compile(r"^/([A-Za-z][\w-]*)(?:@\w+)?(?:\s+(.*))?$", re.DOTALL)

CommandHandlerFunc = Callable[[Update, CallbackContext, List[str]], Awaitable[None]]


def parse_command(text: Optional[str]) -> Optional[Tuple[str, List[str]]]:
    """Split ``/set_new-words-time@bot 09:00`` into ("set-new-words-time", ["09:00"])."""
    if not text:
        return None
    match = COMMAND_PATTERN.match(text.strip())
    if not match:
        return None
    name = match.group(1).lower().replace("_", "-")
    args = (match.group(2) or "").split()
    return name, args


def chat_title(update: Update) -> Optional[str]:
    """Display name of the chat the update came from."""
    chat = update.effective_chat
    return chat.title or chat.username or chat.first_name


async def log_received(update: Update, command: str) -> None:
    """Log command."""
    user = update.effective_user
    logger.info(
        "Received /%s in chat %d from %s",
        command,
        update.effective_chat.id,
        f"{user.username} ({user.id})" if user else "unknown user",
    )


async def reply(context: CallbackContext, chat_id: int, key: BotMessageKey, **kwargs) -> None:
    """Send a message from the catalogue to the chat."""
    text = MessageService().get_message(key, **kwargs)
    await NotificationService(context.bot).send_message(chat_id, text)


async def handle_start_learning(update: Update, context: CallbackContext, args: List[str]) -> None:
    """Enable scheduled learning in the chat."""
    chat_id = update.effective_chat.id
    db = SessionLocal()
    try:
        chat_service = ChatService(db)
        if chat_service.is_chat_registered(chat_id):
            await reply(context, chat_id, BotMessageKey.CHAT_ALREADY_REGISTERED)
            return

        registration = chat_service.register_chat(chat_id, chat_title(update))
        monitoring.chats_registered.inc()
        await reply(
            context,
            chat_id,
            BotMessageKey.CHAT_REGISTERED_SUCCESS,
            new_words_time=registration.new_words_time,
            repetition_time=registration.repetition_time,
        )
    except Exception:
        logger.exception("Error handling start-learning command for chat %d", chat_id)
        await reply(context, chat_id, BotMessageKey.REGISTRATION_ERROR)
    finally:
        db.close()


async def handle_stop_learning(update: Update, context: CallbackContext, args: List[str]) -> None:
    """Disable scheduled learning in the chat, keeping its progress."""
    chat_id = update.effective_chat.id
    db = SessionLocal()
    try:
        chat_service = ChatService(db)
        if not chat_service.is_chat_registered(chat_id):
            await reply(context, chat_id, BotMessageKey.CHAT_NOT_REGISTERED)
            return

        chat_service.deactivate_chat(chat_id)
        await reply(context, chat_id, BotMessageKey.LEARNING_STOPPED)
    except Exception:
        logger.exception("Error handling stop-learning command for chat %d", chat_id)
        await reply(context, chat_id, BotMessageKey.STOP_LEARNING_ERROR)
    finally:
        db.close()


async def handle_restart_progress(update: Update, context: CallbackContext, args: List[str]) -> None:
    """Forget every word the chat has learned."""
    chat_id = update.effective_chat.id
    db = SessionLocal()
    try:
        removed_count = ProgressService(db).restart_progress(chat_id)
        await reply(context, chat_id, BotMessageKey.PROGRESS_RESTARTED, count=removed_count)
    except Exception:
        logger.exception("Error handling restart-progress command for chat %d", chat_id)
        await reply(context, chat_id, BotMessageKey.RESTART_PROGRESS_ERROR)
    finally:
        db.close()


async def _handle_set_time(
    update: Update,
    context: CallbackContext,
    args: List[str],
    command: str,
    update_time: Callable[[ChatService, int, str], object],
    success_key: BotMessageKey,
) -> None:
    chat_id = update.effective_chat.id
    if len(args) != 1:
        await reply(context, chat_id, BotMessageKey.INVALID_TIME_COMMAND_FORMAT, command=f"/{command}")
        return

    # Reject bad input before it reaches the registry
    try:
        time = normalize_schedule_time(args[0])
    except InvalidTimeFormatError:
        await reply(context, chat_id, BotMessageKey.INVALID_TIME_FORMAT, value=args[0])
        return

    db = SessionLocal()
    try:
        update_time(ChatService(db), chat_id, time)
        await reply(context, chat_id, success_key, time=time)
    except NotRegisteredError:
        await reply(context, chat_id, BotMessageKey.CHAT_NOT_REGISTERED)
    except Exception:
        logger.exception("Error handling %s command for chat %d", command, chat_id)
        await reply(context, chat_id, BotMessageKey.UPDATE_TIME_ERROR)
    finally:
        db.close()


async def handle_set_repetition_time(update: Update, context: CallbackContext, args: List[str]) -> None:
    """Set the daily repetition time."""
    await _handle_set_time(
        update,
        context,
        args,
        "set-repetition-time",
        ChatService.update_repetition_time,
        BotMessageKey.REPETITION_TIME_SET,
    )


async def handle_set_new_words_time(update: Update, context: CallbackContext, args: List[str]) -> None:
    """Set the daily new words time."""
    await _handle_set_time(
        update,
        context,
        args,
        "set-new-words-time",
        ChatService.update_new_words_time,
        BotMessageKey.NEW_WORDS_TIME_SET,
    )


async def handle_set_words_count(update: Update, context: CallbackContext, args: List[str]) -> None:
    """Set how many new and repeated words the chat gets."""
    chat_id = update.effective_chat.id
    try:
        new_words_count, repetition_words_count = (int(arg) for arg in args)
        if new_words_count < 0 or repetition_words_count < 0:
            raise ValueError("negative count")
    except ValueError:
        await reply(context, chat_id, BotMessageKey.INVALID_WORDS_COUNT_FORMAT)
        return

    db = SessionLocal()
    try:
        ChatService(db).update_words_count(chat_id, new_words_count, repetition_words_count)
        await reply(
            context,
            chat_id,
            BotMessageKey.WORDS_COUNT_SET,
            new_words_count=effective_batch_size(new_words_count, settings.learning.new_words_count),
            repetition_words_count=effective_batch_size(
                repetition_words_count, settings.learning.repetition_words_count
            ),
        )
    except NotRegisteredError:
        await reply(context, chat_id, BotMessageKey.CHAT_NOT_REGISTERED)
    except Exception:
        logger.exception("Error handling set-words-count command for chat %d", chat_id)
        await reply(context, chat_id, BotMessageKey.UPDATE_TIME_ERROR)
    finally:
        db.close()


async def handle_status(update: Update, context: CallbackContext, args: List[str]) -> None:
    """Show the chat's schedule and how many words it has learned."""
    chat_id = update.effective_chat.id
    db = SessionLocal()
    try:
        registration = ChatService(db).get_chat_registration(chat_id)
        if registration is None:
            await reply(context, chat_id, BotMessageKey.CHAT_NOT_REGISTERED)
            return

        word_service = WordService(db)
        await reply(
            context,
            chat_id,
            BotMessageKey.STATUS,
            new_words_count=effective_batch_size(
                registration.new_words_count, settings.learning.new_words_count
            ),
            new_words_time=registration.new_words_time,
            repetition_words_count=effective_batch_size(
                registration.repetition_words_count, settings.learning.repetition_words_count
            ),
            repetition_time=registration.repetition_time,
            learned_count=word_service.get_learned_word_count(chat_id),
            total_count=word_service.get_word_count(),
        )
    finally:
        db.close()


async def handle_help(update: Update, context: CallbackContext, args: List[str]) -> None:
    """Show the list of commands."""
    await reply(context, update.effective_chat.id, BotMessageKey.HELP)


COMMANDS: Dict[str, CommandHandlerFunc] = {
    "start-learning": handle_start_learning,
    "stop-learning": handle_stop_learning,
    "restart-progress": handle_restart_progress,
    "set-repetition-time": handle_set_repetition_time,
    "set-new-words-time": handle_set_new_words_time,
    "set-words-count": handle_set_words_count,
    "status": handle_status,
    "help": handle_help,
    "start": handle_help,
}

BOT_COMMANDS = [
    BotCommand("start_learning", "Start learning in this chat"),
    BotCommand("stop_learning", "Stop learning"),
    BotCommand("restart_progress", "Reset learning progress"),
    BotCommand("set_new_words_time", "Set the time for new words, HH:MM"),
    BotCommand("set_repetition_time", "Set the time for repetition, HH:MM"),
    BotCommand("set_words_count", "Set how many words are sent"),
    BotCommand("status", "Show schedule and progress"),
    BotCommand("help", "Show help"),
]


async def handle_message(update: Update, context: CallbackContext) -> None:
    """Dispatch a text command to its handler."""
    if update.message is None or update.effective_chat is None:
        return

    parsed = parse_command(update.message.text)
    if parsed is None:
        return

    command, args = parsed
    handler = COMMANDS.get(command)
    if handler is None:
        # In groups the command may be meant for another bot
        if update.effective_chat.type == "private":
            await reply(context, update.effective_chat.id, BotMessageKey.UNKNOWN_COMMAND)
        return

    await log_received(update, command)
    try:
        await handler(update, context, args)
    except Exception:
        logger.exception("Error handling /%s for chat %d", command, update.effective_chat.id)
        await reply(context, update.effective_chat.id, BotMessageKey.COMMAND_ERROR)


def register_handlers(application: Application) -> None:
    """Add the command handlers to the application."""
    application.add_handler(
        MessageHandler(filters.TEXT & filters.Regex(r"^\s*/"), handle_message)
    )
