"""
SQL generation for SQLite

SQLite can add and drop tables, columns and indexes, but cannot change a
column, a primary key or a foreign key in place. Tables affected by such
changes are rebuilt once per run:

1. CREATE TABLE "<table>__new" with the final definition
2. copy the columns both definitions share
3. DROP TABLE "<table>"
4. rename "<table>__new" to "<table>"
5. recreate the indexes of the new definition, except those still waiting
   for their own CREATE INDEX later in the run

Foreign keys are written inline in CREATE TABLE.
"""

import logging
import sqlite3
from typing import Any

from ddlforge.db_types import DbType
from ddlforge.providers.base.changes import ChangeType, DataSchemaDifference, SchemaChange
from ddlforge.providers.base.sql_generator import BaseSQLGenerator
from ddlforge.snapshot.models import DataColumn, DataForeignKey, DataTable
from ddlforge.snapshot.reader import SchemaReader

from .reader import SqliteSchemaReader, quote

logger = logging.getLogger(__name__)

# Names chosen so the reader maps them back to the same DbType
SQLITE_TYPE_NAMES: dict[DbType, str] = {
    DbType.UNSET: "",
    DbType.BINARY: "VARBINARY",
    DbType.BLOB: "BLOB",
    DbType.DATE_TIME: "DATETIME",
    DbType.DECIMAL: "DECIMAL",
    DbType.DOUBLE: "DOUBLE",
    DbType.FIXED_BINARY: "BINARY",
    DbType.FIXED_STRING: "CHAR",
    DbType.GUID: "UUID",
    DbType.INT: "INTEGER",
    DbType.LONG_BLOB: "LONGBLOB",
    DbType.LONG_TEXT: "LONGTEXT",
    DbType.MEDIUM_BLOB: "MEDIUMBLOB",
    DbType.MEDIUM_TEXT: "MEDIUMTEXT",
    DbType.SMALL_INT: "SMALLINT",
    DbType.STRING: "VARCHAR",
    DbType.TEXT: "TEXT",
    DbType.TINY_BLOB: "TINYBLOB",
    DbType.TINY_INT: "TINYINT",
    DbType.TINY_TEXT: "TINYTEXT",
    DbType.MEDIUM_INT: "MEDIUMINT",
    DbType.BIG_INT: "BIGINT",
    DbType.FLOAT: "FLOAT",
    DbType.DATE: "DATE",
    DbType.TIMESTAMP: "TIMESTAMP",
    DbType.TIME: "TIME",
    DbType.YEAR: "YEAR",
    DbType.ENUMERATION: "ENUM",
}

# Changes SQLite can only express by rebuilding the table
REBUILD_CHANGES = frozenset(
    {
        ChangeType.ALTER_TABLE,
        ChangeType.ALTER_COLUMN_TYPE,
        ChangeType.ALTER_COLUMN_NULL_DEFAULT,
        ChangeType.ADD_FOREIGN_KEY,
        ChangeType.DROP_FOREIGN_KEY,
        ChangeType.DROP_COLUMN,
    }
)


class SQLiteSQLGenerator(BaseSQLGenerator):
    """Generates SQLite migration scripts"""

    dialect = "sqlite"
    statement_separator = ";"

    def reset(self) -> None:
        self._rebuild_tables: set[str] = set()
        self._rebuilt: set[str] = set()
        self._created_indexes: set[tuple[str, str]] = set()

    def connect(self, connection_string: str | None) -> Any:
        return sqlite3.connect(connection_string or ":memory:")

    def create_schema_reader(self) -> SchemaReader:
        return SqliteSchemaReader(self.connection)

    def use_statement_text(self) -> str:
        return "-- database: main"

    def get_default_collation(self, charset: str) -> str | None:
        del charset
        return None

    def write_prolog(self, difference: DataSchemaDifference) -> None:
        created = {change.table for change in difference.of_type(ChangeType.CREATE_TABLE)}
        dropped = {change.table for change in difference.of_type(ChangeType.DROP_TABLE)}
        self._rebuild_tables = {
            change.table
            for change in difference.changes
            if change.table not in created
            and change.table not in dropped
            and self._needs_rebuild(change)
        }

        if self._rebuild_tables:
            # Dropping the old table must not cascade into referencing rows
            self.add_prolog_statement("PRAGMA foreign_keys = OFF")
        elif difference.touches_foreign_keys:
            self.add_prolog_statement("PRAGMA foreign_keys = ON")

    def _needs_rebuild(self, change: SchemaChange) -> bool:
        if change.type == ChangeType.ADD_COLUMN:
            # ALTER TABLE ADD COLUMN rejects NOT NULL without a default
            return not change.column.nullable and change.column.default is None
        if change.type == ChangeType.DROP_COLUMN:
            # ALTER TABLE DROP COLUMN rejects key columns
            table = self.current_schema.get_table(change.table)
            name = change.column.name
            return name in table.primary_key or any(
                name in foreign_key.columns for foreign_key in table.foreign_keys
            )
        return change.type in REBUILD_CHANGES

    def apply_changes(self) -> None:
        super().apply_changes()
        if self._rebuild_tables:
            self.add_statement("PRAGMA foreign_keys = ON")

    @staticmethod
    def quote_identifier(identifier: str) -> str:
        return quote(identifier)

    def render_type(self, column: DataColumn) -> str:
        name = SQLITE_TYPE_NAMES[column.db_type]
        if column.db_type == DbType.DECIMAL and column.length is not None:
            return f"DECIMAL({column.length}, {column.scale or 0})"
        if column.length is not None:
            return f"{name}({column.length})"
        return name

    def column_definition(self, table: str, column: DataColumn) -> str:
        definition = super().column_definition(table, column)
        if self.has_enum_check(column):
            definition += f" {self.enum_check_clause(column)}"
        return definition

    def table_body_lines(self, table: DataTable) -> list[str]:
        lines = super().table_body_lines(table)
        for foreign_key in self._inline_foreign_keys(table):
            name = self.foreign_key_name(table.name, foreign_key)
            lines.append(
                f"CONSTRAINT {self.quote_identifier(name)} {self.foreign_key_clause(foreign_key)}"
            )
        return lines

    def _inline_foreign_keys(self, table: DataTable) -> tuple[DataForeignKey, ...]:
        if not self.no_constraints_or_indexes:
            return table.foreign_keys
        # Keep whatever the live table has; the policy leaves keys untouched
        existing = self.current_schema.get_table(table.name) if self.current_schema else None
        return existing.foreign_keys if existing is not None else ()

    # ====================
    # CHANGE HANDLERS
    # ====================

    def add_column(self, change: SchemaChange) -> None:
        if change.table in self._rebuild_tables:
            self.rebuild_table(change.table)
        else:
            super().add_column(change)

    def drop_column(self, change: SchemaChange) -> None:
        if change.table in self._rebuild_tables:
            self.rebuild_table(change.table)
        else:
            super().drop_column(change)

    def alter_table(self, change: SchemaChange) -> None:
        self.rebuild_table(change.table)

    def drop_primary_key(self, table: DataTable) -> None:
        self.rebuild_table(table.name)

    def alter_column_type(self, change: SchemaChange) -> None:
        self.rebuild_table(change.table)

    def alter_column_null_default(self, change: SchemaChange) -> None:
        self.rebuild_table(change.table)

    def add_foreign_key(self, change: SchemaChange) -> None:
        # Created tables already carry their keys inline
        if change.table in self._rebuild_tables:
            self.rebuild_table(change.table)

    def drop_foreign_key(self, change: SchemaChange) -> None:
        # Dropped tables take their keys with them
        if change.table in self._rebuild_tables:
            self.rebuild_table(change.table)

    def add_index(self, change: SchemaChange) -> None:
        self._created_indexes.add((change.table, change.index.name))
        super().add_index(change)

    def drop_index(self, change: SchemaChange) -> None:
        # A rebuild may already have dropped it together with the old table
        self.add_statement(f"DROP INDEX IF EXISTS {self.quote_identifier(change.index.name)}")

    def rebuild_table(self, name: str) -> None:
        """Recreate ``name`` with its new definition, keeping shared column data"""
        if name in self._rebuilt:
            return
        self._rebuilt.add(name)

        old = self.current_schema.get_table(name)
        new = self.new_schema.get_table(name)
        temporary = f"{name}__new"
        logger.info("Rebuilding SQLite table %s", name)

        self.write_create_table(new, temporary)

        shared = [column for column in new.column_names if old.get_column(column) is not None]
        if shared:
            columns = self.column_list(shared)
            self.add_statement(
                f"INSERT INTO {self.quote_identifier(temporary)} ({columns}) "
                f"SELECT {columns} FROM {self.quote_identifier(name)}"
            )

        self.add_statement(f"DROP TABLE {self.quote_identifier(name)}")
        self.add_statement(
            f"ALTER TABLE {self.quote_identifier(temporary)} "
            f"RENAME TO {self.quote_identifier(name)}"
        )

        if self.no_constraints_or_indexes:
            indexes = old.indexes
        else:
            # Indexes created earlier in this run went away with the old table
            pending = {
                change.index.name
                for change in self.difference.of_type(ChangeType.ADD_INDEX)
                if change.table == name and (name, change.index.name) not in self._created_indexes
            }
            indexes = tuple(index for index in new.indexes if index.name not in pending)
        for index in indexes:
            if all(new.get_column(column) is not None for column in index.columns):
                self.add_statement(self.create_index_statement(name, index))
