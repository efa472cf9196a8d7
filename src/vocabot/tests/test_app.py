"""Tests for the main application."""
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.orm import Session

from vocabot.app import VocaBot
from vocabot.bot import BOT_COMMANDS
from vocabot.config import settings
from vocabot.models.models import Word


@pytest.fixture
def mock_app() -> AsyncMock:
    """Create mock application with async methods."""
    mock_app = AsyncMock()
    mock_app.initialize = AsyncMock()
    mock_app.start = AsyncMock()
    mock_app.updater = AsyncMock()
    mock_app.updater.start_polling = AsyncMock()
    mock_app.updater.running = True
    mock_app.running = True
    mock_app.stop = AsyncMock()
    mock_app.shutdown = AsyncMock()
    mock_app.add_handler = MagicMock()
    mock_app.bot = MagicMock()
    mock_app.bot.set_my_commands = AsyncMock()
    return mock_app


@pytest.fixture
def mock_scheduler() -> AsyncMock:
    """Create mock scheduler."""
    mock_scheduler = AsyncMock()
    mock_scheduler.start = AsyncMock()
    mock_scheduler.stop = AsyncMock()
    return mock_scheduler


@pytest.fixture
def bot(mock_app: AsyncMock, mock_scheduler: AsyncMock):
    """Create a bot instance with mocked dependencies."""
    mock_builder = MagicMock()
    mock_builder.token.return_value.build.return_value = mock_app

    with patch("vocabot.app.Application.builder", return_value=mock_builder), \
            patch("vocabot.app.SchedulerService", return_value=mock_scheduler):
        yield VocaBot()


@pytest.mark.asyncio
async def test_start(bot: VocaBot, mock_app: AsyncMock, mock_scheduler: AsyncMock) -> None:
    """Test starting the bot."""
    await bot.start()

    assert bot.running
    assert bot.application is mock_app
    assert bot.scheduler is mock_scheduler
    mock_app.add_handler.assert_called_once()
    mock_app.bot.set_my_commands.assert_awaited_once_with(BOT_COMMANDS)
    mock_app.updater.start_polling.assert_awaited_once()
    mock_scheduler.start.assert_awaited_once()

    await bot.stop()


@pytest.mark.asyncio
async def test_start_with_webhook(bot: VocaBot, mock_app: AsyncMock) -> None:
    """Test that a configured webhook URL replaces polling."""
    with patch.object(settings.bot, "webhook_url", "https://example.com/hook"):
        await bot.start()

    mock_app.updater.start_webhook.assert_awaited_once_with(
        listen=settings.bot.webhook_listen,
        port=settings.bot.webhook_port,
        webhook_url="https://example.com/hook",
    )
    mock_app.updater.start_polling.assert_not_awaited()

    await bot.stop()


@pytest.mark.asyncio
async def test_stop(bot: VocaBot, mock_app: AsyncMock, mock_scheduler: AsyncMock) -> None:
    """Test stopping the bot, scheduler first."""
    await bot.start()
    await bot.stop()

    assert not bot.running
    assert bot.application is None
    assert bot.scheduler is None
    mock_scheduler.stop.assert_awaited_once()
    mock_app.updater.stop.assert_awaited_once()
    mock_app.stop.assert_awaited_once()
    mock_app.shutdown.assert_awaited_once()


@pytest.mark.asyncio
async def test_start_when_already_running(bot: VocaBot, mock_app: AsyncMock) -> None:
    await bot.start()
    await bot.start()

    mock_app.initialize.assert_awaited_once()

    await bot.stop()


@pytest.mark.asyncio
async def test_stop_when_not_running(bot: VocaBot, mock_app: AsyncMock) -> None:
    await bot.stop()

    mock_app.shutdown.assert_not_awaited()


@pytest.mark.asyncio
async def test_error_handling(bot: VocaBot, mock_app: AsyncMock) -> None:
    """Test that errors during stop are raised and the state is reset."""
    await bot.start()
    mock_app.shutdown.side_effect = Exception("Test error")

    with pytest.raises(Exception) as exc_info:
        await bot.stop()

    assert str(exc_info.value) == "Test error"
    assert not bot.running
    assert bot.application is None
    assert bot.scheduler is None


@pytest.mark.asyncio
async def test_failed_start_cleans_up(bot: VocaBot, mock_app: AsyncMock) -> None:
    """Test that a failing start leaves nothing running."""
    mock_app.initialize.side_effect = RuntimeError("Invalid token")

    with pytest.raises(RuntimeError):
        await bot.start()

    assert not bot.running
    assert bot.application is None
    mock_app.shutdown.assert_awaited_once()


def test_import_words_without_path(bot: VocaBot) -> None:
    assert bot.import_words() == 0


def test_import_words(db: Session, bot: VocaBot, tmp_path: Path) -> None:
    """Test seeding the vocabulary from the configured file."""
    path = tmp_path / "words.csv"
    path.write_text("rank,english,ukrainian,transcription\n1,the,артикль,ðə\n", encoding="utf-8")

    with patch.object(settings.importer, "csv_path", str(path)):
        assert bot.import_words() == 1

    assert db.query(Word).one().target_word == "the"
