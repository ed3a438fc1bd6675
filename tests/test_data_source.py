import sqlite3

import pytest
from classifier.config import DataSettings
from classifier.data_source import CsvDataSource, SqliteDataSource, create_data_source
from classifier.errors import DataSourceError
from classifier.models import LabeledSample


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "swift.csv"
    path.write_text(
        "SWIFT,Category,Language\n"
        '":20:REF1 payment transfer, EUR 100",1,1\n'
        '"Paiement par virement",2,2\n'
        "unlabelled language,3,\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def sqlite_path(tmp_path):
    path = tmp_path / "swift.db"
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE SwiftData (SWIFT TEXT, Category INTEGER, Language INTEGER)")
    conn.executemany(
        "INSERT INTO SwiftData VALUES (?, ?, ?)",
        [("payment transfer", 1, 1), ("paiement virement", 2, 2)],
    )
    conn.commit()
    conn.close()
    return path


class TestCsvDataSource:
    def test_loads_samples_in_file_order(self, csv_path):
        samples = CsvDataSource(str(csv_path)).load_all()
        assert samples == [
            LabeledSample(":20:REF1 payment transfer, EUR 100", 1, 1),
            LabeledSample("Paiement par virement", 2, 2),
            LabeledSample("unlabelled language", 3, 0),
        ]

    def test_custom_columns(self, tmp_path):
        path = tmp_path / "custom.csv"
        path.write_text("message,label\nhello,4\n", encoding="utf-8")
        samples = CsvDataSource(str(path), text_column="message", category_column="label").load_all()
        assert samples == [LabeledSample("hello", 4, 0)]

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataSourceError):
            CsvDataSource(str(tmp_path / "nope.csv")).load_all()

    def test_missing_column(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("text,Category\nhello,1\n", encoding="utf-8")
        with pytest.raises(DataSourceError, match="SWIFT"):
            CsvDataSource(str(path)).load_all()

    def test_non_integer_category(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("SWIFT,Category,Language\nhello,payments,1\n", encoding="utf-8")
        with pytest.raises(DataSourceError):
            CsvDataSource(str(path)).load_all()


class TestSqliteDataSource:
    def test_loads_table(self, sqlite_path):
        samples = SqliteDataSource(str(sqlite_path)).load_all()
        assert samples == [
            LabeledSample("payment transfer", 1, 1),
            LabeledSample("paiement virement", 2, 2),
        ]

    def test_rejects_unsafe_identifiers(self, sqlite_path):
        with pytest.raises(DataSourceError):
            SqliteDataSource(str(sqlite_path), table="SwiftData; DROP TABLE SwiftData")

    def test_missing_table(self, sqlite_path):
        with pytest.raises(DataSourceError):
            SqliteDataSource(str(sqlite_path), table="Other").load_all()

    def test_missing_database(self, tmp_path):
        with pytest.raises(DataSourceError):
            SqliteDataSource(str(tmp_path / "nope.db")).load_all()


class TestCreateDataSource:
    def test_csv(self, csv_path):
        source = create_data_source(DataSettings(source="csv", path=str(csv_path)))
        assert isinstance(source, CsvDataSource)
        assert len(source.load_all()) == 3

    def test_sqlite(self, sqlite_path):
        source = create_data_source(DataSettings(source="sqlite", path=str(sqlite_path)))
        assert isinstance(source, SqliteDataSource)
        assert len(source.load_all()) == 2
