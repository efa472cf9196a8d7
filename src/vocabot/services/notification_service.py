"""Service for delivering messages to chats."""
import logging
from typing import Optional

from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import BadRequest, Forbidden, TelegramError

from vocabot import monitoring

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for sending messages to chats through the Telegram bot."""

    def __init__(self, bot: Bot):
        """Initialize the service with a Telegram bot instance."""
        self.bot = bot

    async def send_message(
        self,
        chat_id: int,
        text: str,
        parse_mode: Optional[str] = ParseMode.HTML,
    ) -> bool:
        """Send a message to a chat.

        Returns False if the message could not be delivered. Failures are
        logged here and never raised.
        """
        try:
            await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                parse_mode=parse_mode,
            )
            return True

        except (Forbidden, BadRequest) as e:
            # Handle Telegram-specific errors that indicate blocked chats
            monitoring.delivery_failures.labels(error_type=type(e).__name__).inc()
            if self._is_chat_blocked_error(e):
                logger.warning(
                    "Chat %d is unreachable, the bot was blocked or removed: %s",
                    chat_id,
                    str(e),
                )
            else:
                logger.error("Failed to send message to chat %d: %s", chat_id, str(e))
        except TelegramError as e:
            # Handle other Telegram errors (network issues, etc.)
            monitoring.delivery_failures.labels(error_type=type(e).__name__).inc()
            logger.error("Telegram error sending message to chat %d: %s", chat_id, str(e))

        return False

    @staticmethod
    def _is_chat_blocked_error(error: Exception) -> bool:
        """Check if the error indicates the chat blocked or removed the bot."""
        error_str = str(error).lower()

        blocked_patterns = [
            "bot was blocked by the user",
            "bot was kicked",
            "forbidden: bot was blocked",
            "forbidden: user is deactivated",
            "forbidden: bot can't send messages to bots",
            "bot is not a member",
            "chat not found",
            "user not found",
        ]

        return any(pattern in error_str for pattern in blocked_patterns)
