"""Tests for notification service."""
from unittest.mock import AsyncMock, Mock

import pytest
from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import BadRequest, Forbidden, NetworkError

from vocabot.services.notification_service import NotificationService


@pytest.fixture
def bot() -> Mock:
    """Create a mock bot instance."""
    bot = Mock(spec=Bot)
    bot.send_message = AsyncMock()
    return bot


@pytest.fixture
def notification_service(bot: Mock) -> NotificationService:
    """Create a notification service instance."""
    return NotificationService(bot)


@pytest.mark.asyncio
async def test_send_message(notification_service: NotificationService, bot: Mock) -> None:
    """Test sending a message."""
    assert await notification_service.send_message(-100123, "<b>Hello</b>")

    bot.send_message.assert_awaited_once_with(
        chat_id=-100123,
        text="<b>Hello</b>",
        parse_mode=ParseMode.HTML,
    )


@pytest.mark.asyncio
async def test_send_plain_message(notification_service: NotificationService, bot: Mock) -> None:
    assert await notification_service.send_message(42, "plain", parse_mode=None)

    bot.send_message.assert_awaited_once_with(chat_id=42, text="plain", parse_mode=None)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        Forbidden("Forbidden: bot was blocked by the user"),
        Forbidden("Forbidden: bot was kicked from the group chat"),
        BadRequest("Chat not found"),
        BadRequest("Can't parse entities"),
        NetworkError("Connection reset"),
    ],
)
async def test_send_message_failure(notification_service: NotificationService, bot: Mock, error) -> None:
    """Test that delivery errors are reported as False, never raised."""
    bot.send_message.side_effect = error

    assert await notification_service.send_message(42, "Hello") is False


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Forbidden: bot was blocked by the user", True),
        ("Forbidden: bot was kicked from the supergroup chat", True),
        ("Forbidden: user is deactivated", True),
        ("Bad Request: chat not found", True),
        ("Bad Request: can't parse entities", False),
        ("Timed out", False),
    ],
)
def test_is_chat_blocked_error(message: str, expected: bool) -> None:
    assert NotificationService._is_chat_blocked_error(Exception(message)) is expected
