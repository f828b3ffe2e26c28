"""
Base SQL Generator

Drives one migration run: open the connection, write the script header,
read the current snapshot, project the new snapshot, diff the two and turn
every change into DDL. The finished fragments go to the caller's callback.

Dialects subclass ``BaseSQLGenerator`` and fill in the hooks (separator,
comment escaping, use statement, collations, schema reader, type names).
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from ddlforge.db_types import DbType
from ddlforge.exceptions import MigrationError, SchemaDefinitionError
from ddlforge.rules import SchemaRules
from ddlforge.schema.models import Schema
from ddlforge.snapshot.models import (
    DataColumn,
    DataForeignKey,
    DataIndex,
    DataSchema,
    DataTable,
    default_column_length,
)
from ddlforge.snapshot.reader import SchemaReader, SnapshotFileReader

from .changes import ChangeType, DataSchemaDifference, SchemaChange
from .state_differ import SchemaDiffer
from .statements import FragmentKind, SqlStatement, StatementBuffer

if TYPE_CHECKING:
    from ddlforge.executor import MigrationExecutor

logger = logging.getLogger(__name__)


class BaseSQLGenerator(ABC):
    """Dialect-agnostic migration orchestrator

    One instance serves one run; all run state (buffer, snapshots,
    difference, connection) lives on the instance for that run only.
    """

    dialect: str = "ansi"
    statement_separator: str = ";"

    def __init__(self, schema: Schema, rules: SchemaRules | None = None):
        self.schema = schema
        self.rules = rules or SchemaRules()
        self.connection: Any = None
        self.buffer = StatementBuffer(self.statement_separator)
        self.current_schema: DataSchema | None = None
        self.new_schema: DataSchema | None = None
        self.difference: DataSchemaDifference | None = None
        self.no_constraints_or_indexes = False
        self.reset()

    # ====================
    # RUN
    # ====================

    def execute(self, executor: "MigrationExecutor") -> tuple[SqlStatement, ...]:
        """
        Run the migration and hand the script to ``executor.callback``

        Raises:
            MigrationError: Connection, reading, diffing or emission failed
            SchemaDefinitionError: The declarative schema is invalid
        """
        self.buffer = StatementBuffer(self.statement_separator)
        self.reset()

        try:
            self.open_connection(executor)
        except Exception as err:
            raise MigrationError("Cannot open connection", err) from err

        try:
            self.write_output(executor)
        finally:
            self.close()

        fragments = self.buffer.fragments
        executor.callback(fragments)
        return fragments

    def open_connection(self, executor: "MigrationExecutor") -> None:
        connect = executor.connection_factory or self.connect
        self.connection = connect(executor.configuration.connection_string)

    def connect(self, connection_string: str | None) -> Any:
        """Open a connection to the migration target (dialect hook)"""
        del connection_string
        raise MigrationError(
            f"No connection factory configured for the {self.dialect} dialect"
        )

    def capture(self, connection_string: str | None) -> DataSchema:
        """
        Read the live structure of a database without generating a script

        Raises:
            MigrationError: Connecting or reading failed
        """
        try:
            self.connection = self.connect(connection_string)
        except MigrationError:
            raise
        except Exception as err:
            raise MigrationError("Cannot open connection", err) from err

        try:
            return self._guard(
                "Cannot read current schema",
                lambda: DataSchema.from_reader(self.create_schema_reader()),
            )
        finally:
            self.close()

    def close(self) -> None:
        connection, self.connection = self.connection, None
        if connection is not None and hasattr(connection, "close"):
            connection.close()

    def __enter__(self) -> "BaseSQLGenerator":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def reset(self) -> None:
        """Clear per-run dialect state; dialects with extra state extend this"""

    def write_output(self, executor: "MigrationExecutor") -> None:
        self.add_comment("Automatically generated migration script")
        generated_at = datetime.now().astimezone().isoformat(timespec="seconds")
        self.add_comment(f"Generated at {generated_at}")
        self.add_newline()

        self.write_use_statement()

        self.add_newline()

        self.current_schema = self._guard(
            "Cannot read current schema", self.read_data_schema, executor
        )
        self.no_constraints_or_indexes = executor.configuration.no_constraints_or_indexes
        # Schema definition errors surface unwrapped, before any DDL
        self.new_schema = DataSchema.from_schema(self.schema, self)

        self.difference = self._guard(
            "Cannot compute schema difference",
            SchemaDiffer(
                self.current_schema,
                self.new_schema,
                self.rules,
                self.no_constraints_or_indexes,
            ).compute,
        )
        logger.info(
            "%s: %d change(s) between current and new schema",
            self.dialect,
            len(self.difference.changes),
        )

        self._guard("Cannot write prolog", self.write_prolog, self.difference)
        self._guard("Cannot apply changes", self.apply_changes)

    @staticmethod
    def _guard(message: str, func: Callable[..., Any], *args: Any) -> Any:
        """Run one stage, wrapping unexpected failures into MigrationError"""
        try:
            return func(*args)
        except (MigrationError, SchemaDefinitionError):
            raise
        except Exception as err:
            raise MigrationError(message, err) from err

    def read_data_schema(self, executor: "MigrationExecutor") -> DataSchema:
        return DataSchema.from_reader(self.resolve_schema_reader(executor))

    def resolve_schema_reader(self, executor: "MigrationExecutor") -> SchemaReader:
        if executor.reader_factory is not None:
            return executor.reader_factory(self.connection)
        if executor.configuration.current_snapshot is not None:
            return SnapshotFileReader(executor.configuration.current_snapshot)
        return self.create_schema_reader()

    def apply_changes(self) -> None:
        handlers: dict[ChangeType, Callable[[SchemaChange], None]] = {
            ChangeType.CREATE_TABLE: self.create_table,
            ChangeType.DROP_TABLE: self.drop_table,
            ChangeType.ALTER_TABLE: self.alter_table,
            ChangeType.ADD_COLUMN: self.add_column,
            ChangeType.DROP_COLUMN: self.drop_column,
            ChangeType.ALTER_COLUMN_TYPE: self.alter_column_type,
            ChangeType.ALTER_COLUMN_NULL_DEFAULT: self.alter_column_null_default,
            ChangeType.ADD_INDEX: self.add_index,
            ChangeType.DROP_INDEX: self.drop_index,
            ChangeType.ADD_FOREIGN_KEY: self.add_foreign_key,
            ChangeType.DROP_FOREIGN_KEY: self.drop_foreign_key,
        }
        for change in self.difference.changes:
            handlers[change.type](change)

    def write_prolog(self, difference: DataSchemaDifference) -> None:
        """Queue prolog statements for this difference (dialect hook)"""
        del difference

    def write_use_statement(self) -> None:
        # Session directive, not a body statement: it must not block the prolog
        self.buffer.add_raw(FragmentKind.COMMENT, self.use_statement_text() + "\n")

    # ====================
    # BUFFER HELPERS
    # ====================

    def add_comment(self, comment: str) -> None:
        self.buffer.add_comment(self.escape_comment(comment))

    def add_newline(self) -> None:
        self.buffer.add_blank_line()

    def add_prolog_statement(self, statement: str) -> None:
        self.buffer.add_prolog_statement(statement)

    def push_statement(self, statement: str) -> None:
        self.buffer.push(statement)

    def add_statement(self, statement: str = "") -> None:
        self.buffer.commit_statement(statement)

    def write_header(self, header: str) -> None:
        self.add_comment(header)
        self.add_newline()

    # ====================
    # DIALECT HOOKS
    # ====================

    def escape_comment(self, comment: str) -> str:
        """Turn text into a SQL line comment, one ``--`` per line"""
        return "\n".join(f"-- {line}".rstrip() for line in comment.splitlines() or [""])

    @abstractmethod
    def use_statement_text(self) -> str:
        """Statement selecting the target database or schema"""

    @abstractmethod
    def get_default_collation(self, charset: str) -> str | None:
        """Default collation for a character set, None when the dialect has none"""

    def create_schema_reader(self) -> SchemaReader:
        """Build the live-schema reader for the open connection (dialect hook)"""
        raise MigrationError(
            f"No live schema reader for the {self.dialect} dialect; "
            "configure a reader factory or a current snapshot"
        )

    @abstractmethod
    def quote_identifier(self, identifier: str) -> str:
        """Quote a table, column, index or constraint name"""

    @abstractmethod
    def render_type(self, column: DataColumn) -> str:
        """Dialect type for a column, including length/precision"""

    def get_column_length(
        self, db_type: DbType, length: int | None, scale: int | None
    ) -> tuple[int | None, int | None]:
        """Length/scale kept in the projected snapshot for a column type"""
        return default_column_length(db_type, length, scale)

    # ====================
    # DDL BUILDING
    # ====================

    def column_definition(self, table: str, column: DataColumn) -> str:
        parts = [self.quote_identifier(column.name)]
        column_type = self.render_type(column)
        if column_type:
            parts.append(column_type)
        if column.collation:
            parts.append(f"COLLATE {column.collation}")
        parts.append("NULL" if column.nullable else "NOT NULL")
        if column.default is not None:
            parts.append(f"DEFAULT {column.default}")
        return " ".join(parts)

    @staticmethod
    def quote_literal(value: str) -> str:
        return "'" + value.replace("'", "''") + "'"

    @staticmethod
    def has_enum_check(column: DataColumn | None) -> bool:
        return (
            column is not None
            and column.db_type == DbType.ENUMERATION
            and bool(column.enum_values)
        )

    @staticmethod
    def check_constraint_name(table: str, column: str) -> str:
        return f"{table}_{column}_check"

    def enum_check_clause(self, column: DataColumn) -> str:
        """``CHECK (col IN (...))`` limiting an enum column to its values"""
        values = ", ".join(self.quote_literal(value) for value in column.enum_values)
        return f"CHECK ({self.quote_identifier(column.name)} IN ({values}))"

    def column_list(self, columns: tuple[str, ...] | list[str]) -> str:
        return ", ".join(self.quote_identifier(column) for column in columns)

    def primary_key_clause(self, table: DataTable) -> str:
        return f"PRIMARY KEY ({self.column_list(table.primary_key)})"

    def foreign_key_clause(self, foreign_key: DataForeignKey) -> str:
        clause = (
            f"FOREIGN KEY ({self.column_list(foreign_key.columns)}) "
            f"REFERENCES {self.quote_identifier(foreign_key.referenced_table)} "
            f"({self.column_list(foreign_key.referenced_columns)})"
        )
        if foreign_key.on_delete != "NO ACTION":
            clause += f" ON DELETE {foreign_key.on_delete}"
        if foreign_key.on_update != "NO ACTION":
            clause += f" ON UPDATE {foreign_key.on_update}"
        return clause

    def table_body_lines(self, table: DataTable) -> list[str]:
        lines = [self.column_definition(table.name, column) for column in table.columns]
        if table.primary_key:
            lines.append(self.primary_key_clause(table))
        return lines

    def table_options(self, table: DataTable) -> str:
        del table
        return ""

    def write_create_table(self, table: DataTable, name: str | None = None) -> None:
        self.push_statement(f"CREATE TABLE {self.quote_identifier(name or table.name)} (")
        self.push_statement(",\n".join(f"    {line}" for line in self.table_body_lines(table)))
        self.add_statement(")" + self.table_options(table))

    def alter_table_prefix(self, table: str) -> str:
        return f"ALTER TABLE {self.quote_identifier(table)}"

    # ====================
    # CHANGE HANDLERS
    # ====================

    def create_table(self, change: SchemaChange) -> None:
        self.write_create_table(change.table_def)

    def drop_table(self, change: SchemaChange) -> None:
        self.add_statement(f"DROP TABLE {self.quote_identifier(change.table)}")

    def alter_table(self, change: SchemaChange) -> None:
        old, new = change.old_table, change.table_def
        if old.primary_key != new.primary_key:
            if old.primary_key:
                self.drop_primary_key(old)
            if new.primary_key:
                self.add_statement(
                    f"{self.alter_table_prefix(new.name)} ADD {self.primary_key_clause(new)}"
                )
        if (old.charset, old.collation) != (new.charset, new.collation):
            self.alter_table_collation(new)

    @abstractmethod
    def drop_primary_key(self, table: DataTable) -> None:
        """Drop the primary key of an existing table"""

    def alter_table_collation(self, table: DataTable) -> None:
        """Change table charset/collation (only for dialects that compare them)"""
        del table

    def add_column(self, change: SchemaChange) -> None:
        self.add_statement(
            f"{self.alter_table_prefix(change.table)} ADD COLUMN "
            f"{self.column_definition(change.table, change.column)}"
        )

    def drop_column(self, change: SchemaChange) -> None:
        self.add_statement(
            f"{self.alter_table_prefix(change.table)} DROP COLUMN "
            f"{self.quote_identifier(change.column.name)}"
        )

    @abstractmethod
    def alter_column_type(self, change: SchemaChange) -> None:
        """Change type, length or collation of a column"""

    @abstractmethod
    def alter_column_null_default(self, change: SchemaChange) -> None:
        """Change nullability or default of a column"""

    def add_index(self, change: SchemaChange) -> None:
        self.add_statement(self.create_index_statement(change.table, change.index))

    def create_index_statement(self, table: str, index: DataIndex) -> str:
        unique = "UNIQUE " if index.unique else ""
        return (
            f"CREATE {unique}INDEX {self.quote_identifier(index.name)} "
            f"ON {self.quote_identifier(table)} ({self.column_list(index.columns)})"
        )

    def drop_index(self, change: SchemaChange) -> None:
        self.add_statement(f"DROP INDEX {self.quote_identifier(change.index.name)}")

    def add_foreign_key(self, change: SchemaChange) -> None:
        foreign_key = change.foreign_key
        self.add_statement(
            f"{self.alter_table_prefix(change.table)} ADD CONSTRAINT "
            f"{self.quote_identifier(self.foreign_key_name(change.table, foreign_key))} "
            f"{self.foreign_key_clause(foreign_key)}"
        )

    def drop_foreign_key(self, change: SchemaChange) -> None:
        self.add_statement(
            f"{self.alter_table_prefix(change.table)} DROP CONSTRAINT "
            f"{self.quote_identifier(self.existing_foreign_key_name(change))}"
        )

    @staticmethod
    def foreign_key_name(table: str, foreign_key: DataForeignKey) -> str:
        return foreign_key.name or f"fk_{table}_{'_'.join(foreign_key.columns)}"

    @staticmethod
    def existing_foreign_key_name(change: SchemaChange) -> str:
        if not change.foreign_key.name:
            raise MigrationError(
                f"Cannot drop unnamed foreign key on '{change.table}' "
                f"({', '.join(change.foreign_key.columns)})"
            )
        return change.foreign_key.name
