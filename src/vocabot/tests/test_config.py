"""Tests for configuration settings."""
import pytest

from vocabot.config import (
    BotSettings,
    LanguageSettings,
    LearningSettings,
    Settings,
    TIME_PATTERN,
    settings,
)


def test_default_settings() -> None:
    """Test the settings loaded for the test environment."""
    assert settings.bot.token
    assert settings.database.url.startswith("sqlite:///")
    assert settings.learning.new_words_count == 3
    assert settings.learning.repetition_words_count == 10
    assert settings.learning.default_new_words_time == "20:00"
    assert settings.learning.default_repetition_time == "09:00"
    assert settings.language.source_language_code == "en"


def test_validate_accepts_current_settings() -> None:
    """Test that loaded settings pass validation."""
    settings.validate()


def test_validate_requires_token() -> None:
    """Test that a missing bot token is rejected."""
    invalid = Settings(bot=BotSettings(token=""))
    with pytest.raises(ValueError, match="TELEGRAM_BOT_TOKEN"):
        invalid.validate()


@pytest.mark.parametrize(
    "learning, message",
    [
        (LearningSettings(new_words_count=0), "NEW_WORDS_COUNT"),
        (LearningSettings(repetition_words_count=-1), "REPETITION_WORDS_COUNT"),
        (LearningSettings(answer_delay_seconds=-5), "ANSWER_DELAY_SECONDS"),
        (LearningSettings(default_new_words_time="25:00"), "DEFAULT_NEW_WORDS_TIME"),
        (LearningSettings(default_repetition_time="9am"), "DEFAULT_REPETITION_TIME"),
    ],
)
def test_validate_learning_settings(learning: LearningSettings, message: str) -> None:
    """Test that invalid learning settings are rejected."""
    invalid = Settings(bot=BotSettings(token="token"), learning=learning)
    with pytest.raises(ValueError, match=message):
        invalid.validate()


def test_validate_language() -> None:
    """Test that only supported languages are accepted."""
    invalid = Settings(
        bot=BotSettings(token="token"),
        language=LanguageSettings(source_language_code="de"),
    )
    with pytest.raises(ValueError, match="SOURCE_LANGUAGE_CODE"):
        invalid.validate()


@pytest.mark.parametrize("value", ["00:00", "9:05", "09:05", "23:59"])
def test_time_pattern_accepts(value: str) -> None:
    assert TIME_PATTERN.match(value)


@pytest.mark.parametrize("value", ["24:00", "12:60", "1205", "", "12:5", "ab:cd"])
def test_time_pattern_rejects(value: str) -> None:
    assert not TIME_PATTERN.match(value)
