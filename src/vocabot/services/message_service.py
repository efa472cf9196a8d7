"""Message texts and formatting of word batches."""
import html
import logging
from enum import Enum
from typing import Dict, List, Optional

from vocabot.config import settings
from vocabot.models.models import Word

logger = logging.getLogger(__name__)


class BotMessageKey(Enum):
    """All texts the bot can send."""
    # Registration
    CHAT_ALREADY_REGISTERED = "chat_already_registered"
    CHAT_REGISTERED_SUCCESS = "chat_registered_success"
    REGISTRATION_ERROR = "registration_error"

    # Stop learning
    CHAT_NOT_REGISTERED = "chat_not_registered"
    LEARNING_STOPPED = "learning_stopped"
    STOP_LEARNING_ERROR = "stop_learning_error"

    # Progress
    PROGRESS_RESTARTED = "progress_restarted"
    RESTART_PROGRESS_ERROR = "restart_progress_error"
    STATUS = "status"

    # Schedule
    INVALID_TIME_COMMAND_FORMAT = "invalid_time_command_format"
    INVALID_TIME_FORMAT = "invalid_time_format"
    REPETITION_TIME_SET = "repetition_time_set"
    NEW_WORDS_TIME_SET = "new_words_time_set"
    UPDATE_TIME_ERROR = "update_time_error"
    INVALID_WORDS_COUNT_FORMAT = "invalid_words_count_format"
    WORDS_COUNT_SET = "words_count_set"

    # Help
    HELP = "help"
    UNKNOWN_COMMAND = "unknown_command"
    COMMAND_ERROR = "command_error"

    # Scheduled messages
    NO_REPETITION_WORDS = "no_repetition_words"
    REPETITION_HEADER = "repetition_header"
    ANSWERS_HEADER = "answers_header"
    NO_NEW_WORDS = "no_new_words"
    NEW_WORDS_HEADER = "new_words_header"
    ALL_WORDS_LEARNED = "all_words_learned"


HELP_EN = (
    "📚 <b>Language Learning Bot</b>\n\n"
    "🔹 Available commands:\n"
    "• /start-learning - Start learning in this chat\n"
    "• /stop-learning - Stop learning\n"
    "• /restart-progress - Reset learning progress\n"
    "• /set-new-words-time HH:MM - Set the time for new words\n"
    "• /set-repetition-time HH:MM - Set the time for repetition\n"
    "• /set-words-count NEW REPEAT - Set how many words are sent\n"
    "• /status - Show schedule and progress\n\n"
    "📝 After registration, the bot automatically sends:\n"
    "• Repetition of learned words\n"
    "• New words to learn"
)

HELP_UK = (
    "📚 <b>Бот для вивчення мов</b>\n\n"
    "🔹 Доступні команди:\n"
    "• /start-learning - Розпочати навчання в цьому чаті\n"
    "• /stop-learning - Зупинити навчання\n"
    "• /restart-progress - Скинути прогрес навчання\n"
    "• /set-new-words-time ГГ:ХХ - Час надсилання нових слів\n"
    "• /set-repetition-time ГГ:ХХ - Час повторення\n"
    "• /set-words-count НОВІ ПОВТОР - Кількість слів\n"
    "• /status - Розклад і прогрес\n\n"
    "📝 Після реєстрації бот автоматично надсилає:\n"
    "• Повторення вивчених слів\n"
    "• Нові слова для вивчення"
)

MESSAGES: Dict[str, Dict[BotMessageKey, str]] = {
    "en": {
        BotMessageKey.CHAT_ALREADY_REGISTERED: "ℹ️ Learning is already enabled in this chat.",
        BotMessageKey.CHAT_REGISTERED_SUCCESS: (
            "✅ Learning started!\n\n"
            "🆕 New words every day at {new_words_time}\n"
            "🔄 Repetition every day at {repetition_time}"
        ),
        BotMessageKey.REGISTRATION_ERROR: "❌ Could not start learning. Please try again later.",
        BotMessageKey.CHAT_NOT_REGISTERED: "ℹ️ Learning is not enabled in this chat. Use /start-learning first.",
        BotMessageKey.LEARNING_STOPPED: "⏹ Learning stopped. Your progress is kept.",
        BotMessageKey.STOP_LEARNING_ERROR: "❌ Could not stop learning. Please try again later.",
        BotMessageKey.PROGRESS_RESTARTED: (
            "✅ Progress restarted!\n\n"
            "Removed {count} learned words.\n"
            "Starting from scratch! 🎯"
        ),
        BotMessageKey.RESTART_PROGRESS_ERROR: "❌ Error restarting progress. Please try again later.",
        BotMessageKey.STATUS: (
            "📊 Status\n\n"
            "🆕 New words: {new_words_count} at {new_words_time}\n"
            "🔄 Repetition: {repetition_words_count} at {repetition_time}\n"
            "📚 Learned: {learned_count} of {total_count}"
        ),
        BotMessageKey.INVALID_TIME_COMMAND_FORMAT: "⚠️ Usage: {command} HH:MM",
        BotMessageKey.INVALID_TIME_FORMAT: "⚠️ Invalid time {value}. Use 24-hour HH:MM, e.g. 09:30.",
        BotMessageKey.REPETITION_TIME_SET: "✅ Repetition time set to {time}.",
        BotMessageKey.NEW_WORDS_TIME_SET: "✅ New words time set to {time}.",
        BotMessageKey.UPDATE_TIME_ERROR: "❌ Could not update the settings. Please try again later.",
        BotMessageKey.INVALID_WORDS_COUNT_FORMAT: (
            "⚠️ Usage: /set-words-count NEW REPEAT\n"
            "Both values are whole numbers, 0 means default."
        ),
        BotMessageKey.WORDS_COUNT_SET: (
            "✅ Words count updated!\n\n"
            "🆕 New words: {new_words_count}\n"
            "🔄 Repetition: {repetition_words_count}"
        ),
        BotMessageKey.HELP: HELP_EN,
        BotMessageKey.UNKNOWN_COMMAND: "🤔 Unknown command. Send /help to see what I can do.",
        BotMessageKey.COMMAND_ERROR: "❌ Something went wrong. Please try again later.",
        BotMessageKey.NO_REPETITION_WORDS: "No words for repetition.",
        BotMessageKey.REPETITION_HEADER: "Repetition — recall the translation:",
        BotMessageKey.ANSWERS_HEADER: "Answers:",
        BotMessageKey.NO_NEW_WORDS: "No new words to learn.",
        BotMessageKey.NEW_WORDS_HEADER: "New words:",
        BotMessageKey.ALL_WORDS_LEARNED: "All words already learned! 🎉",
    },
    "uk": {
        BotMessageKey.CHAT_ALREADY_REGISTERED: "ℹ️ Навчання в цьому чаті вже увімкнено.",
        BotMessageKey.CHAT_REGISTERED_SUCCESS: (
            "✅ Навчання розпочато!\n\n"
            "🆕 Нові слова щодня о {new_words_time}\n"
            "🔄 Повторення щодня о {repetition_time}"
        ),
        BotMessageKey.REGISTRATION_ERROR: "❌ Не вдалося розпочати навчання. Спробуйте пізніше.",
        BotMessageKey.CHAT_NOT_REGISTERED: "ℹ️ Навчання в цьому чаті не увімкнено. Спочатку надішліть /start-learning.",
        BotMessageKey.LEARNING_STOPPED: "⏹ Навчання зупинено. Прогрес збережено.",
        BotMessageKey.STOP_LEARNING_ERROR: "❌ Не вдалося зупинити навчання. Спробуйте пізніше.",
        BotMessageKey.PROGRESS_RESTARTED: (
            "✅ Прогрес скинуто!\n\n"
            "Видалено {count} вивчених слів.\n"
            "Починаємо навчання спочатку! 🎯"
        ),
        BotMessageKey.RESTART_PROGRESS_ERROR: "❌ Помилка при скиданні прогресу. Спробуйте пізніше.",
        BotMessageKey.STATUS: (
            "📊 Статус\n\n"
            "🆕 Нові слова: {new_words_count} о {new_words_time}\n"
            "🔄 Повторення: {repetition_words_count} о {repetition_time}\n"
            "📚 Вивчено: {learned_count} з {total_count}"
        ),
        BotMessageKey.INVALID_TIME_COMMAND_FORMAT: "⚠️ Використання: {command} ГГ:ХХ",
        BotMessageKey.INVALID_TIME_FORMAT: "⚠️ Неправильний час {value}. Формат ГГ:ХХ, наприклад 09:30.",
        BotMessageKey.REPETITION_TIME_SET: "✅ Час повторення встановлено на {time}.",
        BotMessageKey.NEW_WORDS_TIME_SET: "✅ Час нових слів встановлено на {time}.",
        BotMessageKey.UPDATE_TIME_ERROR: "❌ Не вдалося оновити налаштування. Спробуйте пізніше.",
        BotMessageKey.INVALID_WORDS_COUNT_FORMAT: (
            "⚠️ Використання: /set-words-count НОВІ ПОВТОР\n"
            "Обидва значення цілі числа, 0 означає типове значення."
        ),
        BotMessageKey.WORDS_COUNT_SET: (
            "✅ Кількість слів оновлено!\n\n"
            "🆕 Нові слова: {new_words_count}\n"
            "🔄 Повторення: {repetition_words_count}"
        ),
        BotMessageKey.HELP: HELP_UK,
        BotMessageKey.UNKNOWN_COMMAND: "🤔 Невідома команда. Надішліть /help, щоб побачити список команд.",
        BotMessageKey.COMMAND_ERROR: "❌ Щось пішло не так. Спробуйте пізніше.",
        BotMessageKey.NO_REPETITION_WORDS: "Немає слів для повторення.",
        BotMessageKey.REPETITION_HEADER: "Повторення — згадайте переклад:",
        BotMessageKey.ANSWERS_HEADER: "Відповіді:",
        BotMessageKey.NO_NEW_WORDS: "Немає нових слів для вивчення.",
        BotMessageKey.NEW_WORDS_HEADER: "Нові слова:",
        BotMessageKey.ALL_WORDS_LEARNED: "Всі слова вже вивчені! 🎉",
    },
}


class MessageService:
    """Service that turns message keys and word batches into texts.

    All texts returned here are valid Telegram HTML.
    """

    def __init__(self, language_code: Optional[str] = None):
        """Initialize the service for the given language (defaults to config)."""
        self.language_code = (language_code or settings.language.source_language_code).lower()
        if self.language_code not in MESSAGES:
            logger.warning("No bot messages for language %s, falling back to en", self.language_code)
            self.language_code = "en"
        self.messages = MESSAGES[self.language_code]

    def get_message(self, key: BotMessageKey, **kwargs) -> str:
        """Get the text for a message key, filled with the given values."""
        template = self.messages[key]
        if not kwargs:
            return template
        return template.format(**{name: _escape(value) for name, value in kwargs.items()})

    def format_new_words(self, words: List[Word]) -> str:
        """Format a batch of new words with translations and transcriptions."""
        if not words:
            return self.get_message(BotMessageKey.NO_NEW_WORDS)

        lines = [f"🆕 <b>{self.get_message(BotMessageKey.NEW_WORDS_HEADER)}</b>", ""]
        for number, word in enumerate(words, start=1):
            lines.append(f"{number}. <b>{_escape(word.target_word)}</b>{_transcription(word)}")
            lines.append(f"   {_escape(word.source_meaning)}")
            lines.append("")
        return "\n".join(lines).rstrip()

    def format_repetition_questions(self, words: List[Word]) -> str:
        """Format the prompts of a repetition round, without answers."""
        if not words:
            return self.get_message(BotMessageKey.NO_REPETITION_WORDS)

        lines = [f"📚 {self.get_message(BotMessageKey.REPETITION_HEADER)}", ""]
        for number, word in enumerate(words, start=1):
            lines.append(f"{number}. {_escape(word.source_meaning)}")
        return "\n".join(lines)

    def format_repetition_answers(self, words: List[Word]) -> str:
        """Format the prompts of a repetition round together with the answers."""
        if not words:
            return ""

        lines = [f"✅ <b>{self.get_message(BotMessageKey.ANSWERS_HEADER)}</b>", ""]
        for number, word in enumerate(words, start=1):
            lines.append(
                f"{number}. {_escape(word.source_meaning)} → "
                f"<b>{_escape(word.target_word)}</b>{_transcription(word)}"
            )
        return "\n".join(lines)


def _escape(value) -> str:
    return html.escape(str(value), quote=False)


def _transcription(word: Word) -> str:
    if not word.phonetic_transcription:
        return ""
    return f" [{_escape(word.phonetic_transcription)}]"
