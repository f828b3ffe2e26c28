"""SQLite provider package exports."""

from .provider import SQLiteProvider
from .reader import SqliteSchemaReader
from .rules import SQLiteRules
from .sql_generator import SQLiteSQLGenerator

sqlite_provider = SQLiteProvider()

__all__ = [
    "SQLiteProvider",
    "SQLiteRules",
    "SQLiteSQLGenerator",
    "SqliteSchemaReader",
    "sqlite_provider",
]
