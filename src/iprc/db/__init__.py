"""SQLite storage for the local identity service."""

from .connection import DatabaseConnection
from .migrations import initialize_schema, verify_schema

__all__ = ['DatabaseConnection', 'initialize_schema', 'verify_schema']
