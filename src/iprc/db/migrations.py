"""
Database migration management for the local identity service.
Ensures schema is correctly initialized and versioned.
"""

from typing import Optional

from .connection import DatabaseConnection
from .schema import get_schema_statements, get_initial_version_insert, REQUIRED_TABLES
from ..config import DB_SCHEMA_VERSION
from ..errors import DatabaseError, SchemaError


def get_current_version(db: DatabaseConnection) -> Optional[int]:
    """
    Get current schema version from database.

    Returns:
        Current version number or None if not initialized
    """
    row = db.fetch_one(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    if not row:
        return None

    row = db.fetch_one("SELECT MAX(version) AS version FROM schema_version")
    if row and row['version'] is not None:
        return row['version']
    return None


def initialize_schema(db: DatabaseConnection):
    """
    Initialize database schema.

    Raises:
        SchemaError: If the stored version differs or initialization fails
    """
    current_version = get_current_version(db)

    if current_version is not None:
        if current_version == DB_SCHEMA_VERSION:
            return
        raise SchemaError(
            f"Database schema version {current_version} does not match "
            f"expected version {DB_SCHEMA_VERSION}."
        )

    try:
        with db.transaction():
            for statement in get_schema_statements():
                db.execute(statement)

            sql, params = get_initial_version_insert()
            db.execute(sql, params)

    except DatabaseError as e:
        raise SchemaError(f"Failed to initialize schema: {e}")


def verify_schema(db: DatabaseConnection) -> bool:
    """
    Verify that schema is at the expected version and complete.

    Returns:
        True if schema is valid
    """
    if get_current_version(db) != DB_SCHEMA_VERSION:
        return False

    for table_name in REQUIRED_TABLES:
        row = db.fetch_one(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,)
        )
        if not row:
            return False

    return True
