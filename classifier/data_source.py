"""Loaders for the labeled SWIFT corpus."""

import csv
import logging
import re
import sqlite3
from pathlib import Path

from .errors import DataSourceError
from .models import LabeledSample

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


def _to_sample(text, category, language) -> LabeledSample:
    if text is None:
        raise DataSourceError("Row has no message text")
    try:
        return LabeledSample(
            text=str(text),
            category=int(category),
            language=int(language) if language not in (None, '') else 0,
        )
    except (TypeError, ValueError) as e:
        raise DataSourceError(f"Invalid category/language ({category!r}, {language!r})") from e


class CsvDataSource:
    """Reads samples from a CSV file with a header row."""

    def __init__(self, path: str, text_column: str = "SWIFT",
                 category_column: str = "Category", language_column: str = "Language"):
        self.path = Path(path)
        self.text_column = text_column
        self.category_column = category_column
        self.language_column = language_column

    def load_all(self) -> list[LabeledSample]:
        if not self.path.exists():
            raise DataSourceError(f"Corpus file not found: {self.path}")

        samples = []
        with open(self.path, 'r', encoding='utf-8', newline='') as f:
            reader = csv.DictReader(f)
            missing = {self.text_column, self.category_column} - set(reader.fieldnames or [])
            if missing:
                raise DataSourceError(f"{self.path} is missing columns: {sorted(missing)}")

            for row in reader:
                samples.append(_to_sample(
                    row[self.text_column],
                    row[self.category_column],
                    row.get(self.language_column),
                ))

        logger.info("Loaded %d records from %s", len(samples), self.path)
        return samples


class SqliteDataSource:
    """Reads samples from a SQLite table."""

    def __init__(self, path: str, table: str = "SwiftData", text_column: str = "SWIFT",
                 category_column: str = "Category", language_column: str = "Language"):
        for identifier in (table, text_column, category_column, language_column):
            if not _IDENTIFIER.match(identifier):
                raise DataSourceError(f"Invalid SQL identifier: {identifier!r}")
        self.path = Path(path)
        self.table = table
        self.columns = (text_column, category_column, language_column)

    def load_all(self) -> list[LabeledSample]:
        if not self.path.exists():
            raise DataSourceError(f"Database not found: {self.path}")

        query = "SELECT {}, {}, {} FROM {}".format(*self.columns, self.table)
        conn = sqlite3.connect(self.path)
        try:
            rows = conn.execute(query).fetchall()
        except sqlite3.Error as e:
            raise DataSourceError(f"Failed to read {self.table} from {self.path}: {e}") from e
        finally:
            conn.close()

        samples = [_to_sample(*row) for row in rows]
        logger.info("Loaded %d records from %s:%s", len(samples), self.path, self.table)
        return samples


def create_data_source(data_settings):
    """Build the configured data source."""
    columns = data_settings.columns
    if data_settings.source == "csv":
        return CsvDataSource(data_settings.path, columns.text, columns.category, columns.language)
    if data_settings.source == "sqlite":
        return SqliteDataSource(data_settings.path, data_settings.table,
                                columns.text, columns.category, columns.language)
    raise DataSourceError(f"Unknown data source: {data_settings.source}")
