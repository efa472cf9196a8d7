"""Service for importing the vocabulary from a CSV file."""
import csv
import logging
from pathlib import Path
from typing import List, Union

from sqlalchemy.orm import Session

from vocabot.models.base import utcnow
from vocabot.models.models import Word

logger = logging.getLogger(__name__)


class WordImportService:
    """Seeds an empty vocabulary from ``rank,target,source,phonetic`` rows."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def import_from_csv(self, path: Union[str, Path]) -> int:
        """Import words from a CSV file with a header row.

        Nothing is imported when the vocabulary already has words or the
        file does not exist. Returns the number of imported words.
        """
        path = Path(path)
        if not path.exists():
            logger.warning("CSV file not found: %s", path)
            return 0

        existing_count = self.db.query(Word).count()
        if existing_count > 0:
            logger.info("Words already imported (%d words). Skipping import.", existing_count)
            return 0

        logger.info("Starting CSV import from %s", path)
        with path.open(encoding="utf-8", newline="") as csv_file:
            words = self._read_words(csv.reader(csv_file))

        if not words:
            logger.warning("No words found in CSV file")
            return 0

        self.db.add_all(words)
        self.db.commit()
        logger.info("Successfully imported %d words", len(words))
        return len(words)

    def _read_words(self, rows) -> List[Word]:
        words = []
        imported_at = utcnow()

        # Skip header row
        next(rows, None)
        for row_number, row in enumerate(rows, start=2):
            if not row or not any(cell.strip() for cell in row):
                continue

            if len(row) < 4:
                logger.warning("Invalid CSV line at row %d: %s", row_number, row)
                continue

            try:
                rank = int(row[0].strip())
            except ValueError:
                logger.warning("Invalid frequency rank at row %d: %s", row_number, row[0])
                continue

            words.append(
                Word(
                    frequency_rank=rank,
                    target_word=row[1].strip(),
                    source_meaning=row[2].strip(),
                    phonetic_transcription=row[3].strip(),
                    imported_at=imported_at,
                )
            )

        return words
