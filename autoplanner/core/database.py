"""
Database utilities and connection management
Supports both SQLite (local development) and PostgreSQL (production)

Usage:
    # SQLite (default for local dev, uses USE_SQLITE=1 env var)
    db = get_database()

    # PostgreSQL (production, uses DATABASE_URL env var)
    db = get_database()  # Automatically uses PostgreSQL if DATABASE_URL is set
"""

import os
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple, Union
from contextlib import contextmanager

# psycopg2 is only needed for the PostgreSQL backend
try:
    import psycopg2
    import psycopg2.extras
    POSTGRES_AVAILABLE = True
except ImportError:
    POSTGRES_AVAILABLE = False


class DatabaseBase(ABC):
    """Abstract base class for database operations"""

    dialect = "sqlite"

    @abstractmethod
    def get_connection(self):
        """Get a database connection"""
        pass

    @abstractmethod
    def execute(self, query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
        """Execute a SELECT query and return results as list of dicts"""
        pass

    @abstractmethod
    def execute_one(self, query: str, params: Tuple = ()) -> Optional[Dict[str, Any]]:
        """Execute a SELECT query and return single result"""
        pass

    @abstractmethod
    def execute_write(self, query: str, params: Tuple = ()) -> Any:
        """Execute an INSERT, UPDATE, or DELETE query"""
        pass

    @abstractmethod
    def execute_script(self, statements: List[str]) -> None:
        """Execute DDL statements in a single transaction"""
        pass

    @abstractmethod
    def get_table_names(self) -> List[str]:
        """Names of the tables in the database, sorted"""
        pass


class SQLiteDatabase(DatabaseBase):
    """SQLite database implementation for local development"""

    dialect = "sqlite"

    def __init__(self, db_path: Optional[Path] = None):
        if db_path is None:
            db_path = Path(__file__).parent.parent.parent / "data" / "database" / "autoplanner.db"

        self.db_path = Path(db_path)

        if not self.db_path.exists():
            raise FileNotFoundError(
                f"Database not found at {self.db_path}. "
                "Run 'python planner.py init-db' to create it."
            )

    @classmethod
    def create(cls, db_path: Path) -> 'SQLiteDatabase':
        """Create an empty database file (and parent directories) and open it"""
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        sqlite3.connect(db_path).close()
        return cls(db_path)

    @contextmanager
    def get_connection(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        try:
            yield conn
        finally:
            conn.close()

    def execute(self, query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            rows = cursor.fetchall()
            return [dict(row) for row in rows]

    def execute_one(self, query: str, params: Tuple = ()) -> Optional[Dict[str, Any]]:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            row = cursor.fetchone()
            return dict(row) if row else None

    def execute_write(self, query: str, params: Tuple = ()) -> int:
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            conn.commit()
            return cursor.rowcount

    def execute_script(self, statements: List[str]) -> None:
        with self.transaction() as conn:
            for statement in statements:
                conn.execute(statement)

    def get_table_names(self) -> List[str]:
        query = "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
        rows = self.execute(query)
        return [row['name'] for row in rows]

    @contextmanager
    def transaction(self):
        with self.get_connection() as conn:
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise


class PostgreSQLDatabase(DatabaseBase):
    """PostgreSQL database implementation for production"""

    dialect = "postgresql"

    def __init__(self, database_url: str):
        if not POSTGRES_AVAILABLE:
            raise ImportError(
                "psycopg2 not installed. Run: pip install psycopg2-binary"
            )
        self.database_url = database_url
        self.db_path = database_url  # For compatibility with existing code

    @contextmanager
    def get_connection(self):
        conn = psycopg2.connect(self.database_url)
        try:
            yield conn
        finally:
            conn.close()

    def _convert_query(self, query: str) -> str:
        """Convert SQLite-style ? placeholders to PostgreSQL %s"""
        return query.replace('?', '%s')

    def execute(self, query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
        query = self._convert_query(query)

        with self.get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                cursor.execute(query, params)
                rows = cursor.fetchall()
                return [dict(row) for row in rows]

    def execute_one(self, query: str, params: Tuple = ()) -> Optional[Dict[str, Any]]:
        query = self._convert_query(query)

        with self.get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone()
                return dict(row) if row else None

    def execute_write(self, query: str, params: Tuple = ()) -> int:
        query = self._convert_query(query)

        with self.get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(query, params)
                conn.commit()
                return cursor.rowcount

    def execute_script(self, statements: List[str]) -> None:
        with self.transaction() as conn:
            with conn.cursor() as cursor:
                for statement in statements:
                    cursor.execute(statement)

    def get_table_names(self) -> List[str]:
        query = """
            SELECT table_name FROM information_schema.tables
            WHERE table_schema = 'public' ORDER BY table_name;
        """
        rows = self.execute(query)
        return [row['table_name'] for row in rows]

    @contextmanager
    def transaction(self):
        with self.get_connection() as conn:
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise


Database = Union[SQLiteDatabase, PostgreSQLDatabase]


def get_database(db_path: Optional[Path] = None) -> Database:
    """
    Factory function to get the appropriate database instance.

    Uses PostgreSQL if DATABASE_URL is set, otherwise falls back to SQLite.
    Set USE_SQLITE=1 to force SQLite even if DATABASE_URL is set.
    """
    use_sqlite = os.environ.get('USE_SQLITE', '').lower() in ('1', 'true', 'yes')
    database_url = os.environ.get('DATABASE_URL')

    if database_url and not use_sqlite:
        return PostgreSQLDatabase(database_url)
    else:
        return SQLiteDatabase(db_path)
