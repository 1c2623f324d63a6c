"""
Unit tests for the database module.
Tests SQLiteDatabase connection management, query operations, schema creation
and backend selection.
"""

import pytest
import sqlite3
from pathlib import Path
from unittest.mock import patch

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from autoplanner.core.database import SQLiteDatabase, get_database
from autoplanner.core.schema import TABLES, init_schema


class TestDatabaseInit:
    """Tests for SQLiteDatabase initialization."""

    def test_init_with_valid_path(self, tmp_path):
        """Database initializes with a valid path to existing db file."""
        db_file = tmp_path / "test.db"
        conn = sqlite3.connect(db_file)
        conn.close()

        db = SQLiteDatabase(db_file)
        assert db.db_path == db_file

    def test_init_raises_if_file_not_found(self, tmp_path):
        """Database raises FileNotFoundError if db file doesn't exist."""
        db_file = tmp_path / "nonexistent.db"

        with pytest.raises(FileNotFoundError) as exc_info:
            SQLiteDatabase(db_file)

        assert "Database not found" in str(exc_info.value)
        assert "init-db" in str(exc_info.value)

    def test_create_makes_parent_directories(self, tmp_path):
        """create() builds missing directories and an empty database file."""
        db_file = tmp_path / "nested" / "dir" / "autoplanner.db"

        db = SQLiteDatabase.create(db_file)

        assert db_file.exists()
        assert db.get_table_names() == []


class TestConnectionManagement:
    """Tests for database connection context manager."""

    @pytest.fixture
    def temp_db(self, tmp_path):
        db = SQLiteDatabase.create(tmp_path / "test.db")
        db.execute_write("CREATE TABLE items (id TEXT PRIMARY KEY, name TEXT NOT NULL)")
        return db

    def test_get_connection_enables_row_factory(self, temp_db):
        """Rows are accessible by column name."""
        temp_db.execute_write("INSERT INTO items (id, name) VALUES (?, ?)", ("a", "first"))
        with temp_db.get_connection() as conn:
            row = conn.execute("SELECT * FROM items").fetchone()
        assert row["name"] == "first"

    def test_foreign_keys_are_enabled(self, temp_db):
        """Every connection turns on foreign key enforcement."""
        with temp_db.get_connection() as conn:
            enabled = conn.execute("PRAGMA foreign_keys").fetchone()[0]
        assert enabled == 1

    def test_transaction_rolls_back_on_error(self, temp_db):
        """Writes inside a failed transaction are discarded."""
        with pytest.raises(sqlite3.IntegrityError):
            with temp_db.transaction() as conn:
                conn.execute("INSERT INTO items (id, name) VALUES ('a', 'one')")
                conn.execute("INSERT INTO items (id, name) VALUES ('a', 'dup')")

        assert temp_db.execute("SELECT * FROM items") == []


class TestQueries:
    """Tests for execute, execute_one and execute_write."""

    @pytest.fixture
    def populated_db(self, tmp_path):
        db = SQLiteDatabase.create(tmp_path / "test.db")
        db.execute_write("CREATE TABLE items (id TEXT PRIMARY KEY, name TEXT, score INTEGER)")
        for row in [("a", "alpha", 1), ("b", "beta", 2), ("c", "gamma", 3)]:
            db.execute_write("INSERT INTO items (id, name, score) VALUES (?, ?, ?)", row)
        return db

    def test_execute_returns_list_of_dicts(self, populated_db):
        rows = populated_db.execute("SELECT * FROM items ORDER BY score")
        assert [r["name"] for r in rows] == ["alpha", "beta", "gamma"]
        assert isinstance(rows[0], dict)

    def test_execute_one_returns_none_if_not_found(self, populated_db):
        assert populated_db.execute_one("SELECT * FROM items WHERE id = ?", ("zzz",)) is None

    def test_execute_write_returns_rowcount(self, populated_db):
        updated = populated_db.execute_write("UPDATE items SET score = 0 WHERE score >= ?", (2,))
        assert updated == 2

    def test_table_names_sorted(self, populated_db):
        populated_db.execute_write("CREATE TABLE aardvarks (id TEXT PRIMARY KEY)")

        assert populated_db.get_table_names() == ["aardvarks", "items"]


class TestSchema:
    """Tests for init_schema()."""

    def test_creates_all_tables(self, tmp_path):
        db = SQLiteDatabase.create(tmp_path / "test.db")
        init_schema(db)

        for table in TABLES:
            assert table in db.get_table_names(), f"missing table {table}"

    def test_is_idempotent(self, tmp_path):
        """Running init_schema twice leaves the database unchanged."""
        db = SQLiteDatabase.create(tmp_path / "test.db")
        init_schema(db)
        init_schema(db)

        assert sorted(db.get_table_names()) == sorted(TABLES)

    def test_weekly_snapshot_unique_per_user_week(self, tmp_path):
        db = SQLiteDatabase.create(tmp_path / "test.db")
        init_schema(db)
        insert = """
            INSERT INTO weekly_snapshots (id, user_id, week_start, week_end, created_at, updated_at)
            VALUES (?, 'u1', '2025-01-06', '2025-01-12', 'now', 'now')
        """
        db.execute_write(insert, ("one",))

        with pytest.raises(sqlite3.IntegrityError):
            db.execute_write(insert, ("two",))


class TestGetDatabase:
    """Tests for backend selection."""

    def test_uses_sqlite_without_database_url(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        db_file = tmp_path / "test.db"
        sqlite3.connect(db_file).close()

        db = get_database(db_file)

        assert isinstance(db, SQLiteDatabase)

    def test_use_sqlite_overrides_database_url(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://example/db")
        monkeypatch.setenv("USE_SQLITE", "1")
        db_file = tmp_path / "test.db"
        sqlite3.connect(db_file).close()

        db = get_database(db_file)

        assert isinstance(db, SQLiteDatabase)

    def test_uses_postgres_when_database_url_set(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://example/db")
        monkeypatch.delenv("USE_SQLITE", raising=False)

        with patch("autoplanner.core.database.PostgreSQLDatabase") as pg:
            db = get_database()

        pg.assert_called_once_with("postgresql://example/db")
        assert db is pg.return_value
