"""Test configuration."""
import os
import tempfile
from pathlib import Path
from typing import Callable, Generator, List

import pytest
from faker import Faker
from sqlalchemy.orm import Session

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:test-token")
os.environ["DATABASE_URL"] = "sqlite:///" + str(Path(tempfile.mkdtemp(prefix="vocabot-tests-")) / "test.db")
os.environ["SOURCE_LANGUAGE_CODE"] = "en"
os.environ["NEW_WORDS_COUNT"] = "3"
os.environ["REPETITION_WORDS_COUNT"] = "10"
os.environ["DEFAULT_NEW_WORDS_TIME"] = "20:00"
os.environ["DEFAULT_REPETITION_TIME"] = "09:00"
os.environ.pop("WORDS_CSV_PATH", None)
os.environ.pop("METRICS_PORT", None)

# Import after environment setup
from vocabot.models.base import SessionLocal, drop_db, engine, init_db  # noqa: E402
from vocabot.models.models import Word  # noqa: E402

fake = Faker()


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    """Recreate the schema before each test."""
    drop_db()
    init_db()

    yield

    engine.dispose()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def chat_id() -> int:
    """Random Telegram-like group chat id."""
    return -fake.random_int(min=1_000_000, max=9_999_999)


@pytest.fixture
def make_words(db: Session) -> Callable[..., List[Word]]:
    """Factory adding words with the given targets, ranked in the given order."""

    def _make_words(*targets: str, ranks: List[int] = None) -> List[Word]:
        ranks = ranks or list(range(1, len(targets) + 1))
        words = [
            Word(
                target_word=target,
                source_meaning=f"{target} meaning",
                phonetic_transcription=f"/{target}/",
                frequency_rank=rank,
            )
            for target, rank in zip(targets, ranks)
        ]
        db.add_all(words)
        db.commit()
        for word in words:
            db.refresh(word)
        return words

    return _make_words
