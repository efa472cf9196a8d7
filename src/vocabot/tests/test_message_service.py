"""Tests for message service."""
import pytest

from vocabot.models.models import Word
from vocabot.services.message_service import MESSAGES, BotMessageKey, MessageService


@pytest.fixture
def message_service() -> MessageService:
    """Create an English message service."""
    return MessageService("en")


@pytest.fixture
def words():
    """Words that are not stored in the database."""
    return [
        Word(id=1, target_word="house", source_meaning="будинок", phonetic_transcription="haʊs", frequency_rank=1),
        Word(id=2, target_word="a <b> tag", source_meaning="x & y", phonetic_transcription="", frequency_rank=2),
    ]


def test_every_language_has_every_message() -> None:
    for language, messages in MESSAGES.items():
        assert set(messages) == set(BotMessageKey), language


def test_get_message_with_values(message_service: MessageService) -> None:
    """Test that values are filled in and escaped."""
    text = message_service.get_message(BotMessageKey.INVALID_TIME_FORMAT, value="<25:00>")

    assert "&lt;25:00&gt;" in text
    assert "<25:00>" not in text


def test_get_message_in_ukrainian() -> None:
    assert MessageService("uk").get_message(BotMessageKey.ALL_WORDS_LEARNED) == "Всі слова вже вивчені! 🎉"


def test_unknown_language_falls_back_to_english() -> None:
    service = MessageService("de")

    assert service.language_code == "en"
    assert service.get_message(BotMessageKey.ALL_WORDS_LEARNED) == "All words already learned! 🎉"


def test_format_new_words(message_service: MessageService, words) -> None:
    """Test the new words message."""
    text = message_service.format_new_words(words)

    assert text.splitlines()[0] == "🆕 <b>New words:</b>"
    assert "1. <b>house</b> [haʊs]" in text
    assert "   будинок" in text
    # Empty transcription is left out and markup in words is escaped
    assert "2. <b>a &lt;b&gt; tag</b>\n" in text
    assert "x &amp; y" in text


def test_format_new_words_empty(message_service: MessageService) -> None:
    assert message_service.format_new_words([]) == "No new words to learn."


def test_format_repetition_questions(message_service: MessageService, words) -> None:
    """Test that questions show only the meanings."""
    text = message_service.format_repetition_questions(words)

    assert text.splitlines() == [
        "📚 Repetition — recall the translation:",
        "",
        "1. будинок",
        "2. x &amp; y",
    ]


def test_format_repetition_questions_empty(message_service: MessageService) -> None:
    assert message_service.format_repetition_questions([]) == "No words for repetition."


def test_format_repetition_answers(message_service: MessageService, words) -> None:
    """Test that answers keep the order of the questions."""
    text = message_service.format_repetition_answers(words)

    assert text.splitlines() == [
        "✅ <b>Answers:</b>",
        "",
        "1. будинок → <b>house</b> [haʊs]",
        "2. x &amp; y → <b>a &lt;b&gt; tag</b>",
    ]


def test_format_repetition_answers_empty(message_service: MessageService) -> None:
    assert message_service.format_repetition_answers([]) == ""
