"""
Database connection management for the local identity service.
All database operations use parameterized queries to prevent injection.
"""

import sqlite3
from pathlib import Path
from typing import Optional
from contextlib import contextmanager

from ..errors import DatabaseError


class DatabaseConnection:
    """
    Wraps a single SQLite connection.
    """

    def __init__(self, db_path: str):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self.db_path = db_path
        self._connection: Optional[sqlite3.Connection] = None

    @property
    def is_memory(self) -> bool:
        return self.db_path == ":memory:"

    def connect(self) -> sqlite3.Connection:
        """
        Establish the database connection.

        Returns:
            SQLite connection object

        Raises:
            DatabaseError: If connection fails
        """
        if self._connection is not None:
            return self._connection

        try:
            if not self.is_memory:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            conn = sqlite3.connect(
                self.db_path,
                isolation_level='DEFERRED',
                check_same_thread=False,
            )

            # Inline policies are removed with their principal
            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute("PRAGMA trusted_schema = OFF")
            if not self.is_memory:
                conn.execute("PRAGMA journal_mode = WAL")

            conn.row_factory = sqlite3.Row

            self._connection = conn
            return conn

        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to connect to database: {e}")

    def close(self):
        """Close database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """
        Execute a SQL statement with parameters.

        Args:
            sql: SQL statement (use ? for parameters)
            params: Parameter values

        Returns:
            Cursor object

        Raises:
            DatabaseError: If execution fails
        """
        conn = self.connect()
        try:
            return conn.execute(sql, params)
        except sqlite3.Error as e:
            raise DatabaseError(f"SQL execution failed: {e}")

    def fetch_one(self, sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """Execute query and fetch one row."""
        return self.execute(sql, params).fetchone()

    def fetch_all(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Execute query and fetch all rows."""
        return self.execute(sql, params).fetchall()

    @contextmanager
    def transaction(self):
        """
        Context manager for transactions.

        Usage:
            with db.transaction():
                db.execute(...)
        """
        conn = self.connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
