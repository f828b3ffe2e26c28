"""SQL generation for PostgreSQL"""

from ddlforge.db_types import DbType
from ddlforge.providers.base.changes import DataSchemaDifference, SchemaChange
from ddlforge.providers.base.sql_generator import BaseSQLGenerator
from ddlforge.snapshot.models import DataColumn, DataTable

POSTGRES_TYPE_NAMES: dict[DbType, str] = {
    DbType.BINARY: "BYTEA",
    DbType.BLOB: "BYTEA",
    DbType.DATE_TIME: "TIMESTAMP",
    DbType.DECIMAL: "NUMERIC",
    DbType.DOUBLE: "DOUBLE PRECISION",
    DbType.FIXED_BINARY: "BYTEA",
    DbType.FIXED_STRING: "CHAR",
    DbType.GUID: "UUID",
    DbType.INT: "INTEGER",
    DbType.LONG_BLOB: "BYTEA",
    DbType.LONG_TEXT: "TEXT",
    DbType.MEDIUM_BLOB: "BYTEA",
    DbType.MEDIUM_TEXT: "TEXT",
    DbType.SMALL_INT: "SMALLINT",
    DbType.STRING: "VARCHAR",
    DbType.TEXT: "TEXT",
    DbType.TINY_BLOB: "BYTEA",
    DbType.TINY_INT: "SMALLINT",
    DbType.TINY_TEXT: "TEXT",
    DbType.MEDIUM_INT: "INTEGER",
    DbType.BIG_INT: "BIGINT",
    DbType.FLOAT: "REAL",
    DbType.DATE: "DATE",
    DbType.TIMESTAMP: "TIMESTAMP WITH TIME ZONE",
    DbType.TIME: "TIME",
    DbType.YEAR: "SMALLINT",
    DbType.ENUMERATION: "VARCHAR",
}

POSTGRES_DEFAULT_COLLATIONS: dict[str, str] = {
    "utf8": "en_US.utf8",
    "utf8mb4": "en_US.utf8",
    "latin1": "en_US.iso88591",
    "sql_ascii": "C",
}

# Binary types keep no length in PostgreSQL
_UNSIZED_TYPES = frozenset({DbType.BINARY, DbType.FIXED_BINARY})


class PostgresSQLGenerator(BaseSQLGenerator):
    """Generates PostgreSQL migration scripts"""

    dialect = "postgres"
    statement_separator = ";"

    def use_statement_text(self) -> str:
        return f"SET search_path TO {self.quote_identifier(self.schema.database_name)};"

    def get_default_collation(self, charset: str) -> str | None:
        return POSTGRES_DEFAULT_COLLATIONS.get(charset.lower())

    def write_prolog(self, difference: DataSchemaDifference) -> None:
        if not difference.is_empty:
            self.add_prolog_statement("SET client_encoding TO 'UTF8'")

    @staticmethod
    def quote_identifier(identifier: str) -> str:
        return '"' + identifier.replace('"', '""') + '"'

    def render_type(self, column: DataColumn) -> str:
        name = POSTGRES_TYPE_NAMES[column.db_type]
        if column.db_type == DbType.ENUMERATION:
            longest = max((len(value) for value in column.enum_values), default=1)
            return f"VARCHAR({longest})"
        if column.db_type == DbType.DECIMAL and column.length is not None:
            return f"NUMERIC({column.length}, {column.scale or 0})"
        if column.length is not None and column.db_type not in _UNSIZED_TYPES:
            return f"{name}({column.length})"
        return name

    def column_definition(self, table: str, column: DataColumn) -> str:
        definition = super().column_definition(table, column)
        if self.has_enum_check(column):
            name = self.quote_identifier(self.check_constraint_name(table, column.name))
            definition += f" CONSTRAINT {name} {self.enum_check_clause(column)}"
        return definition

    def drop_primary_key(self, table: DataTable) -> None:
        self.add_statement(
            f"{self.alter_table_prefix(table.name)} DROP CONSTRAINT "
            f"{self.quote_identifier(f'{table.name}_pkey')}"
        )

    def alter_column_type(self, change: SchemaChange) -> None:
        column, old = change.column, change.old_column
        name = self.quote_identifier(column.name)
        prefix = self.alter_table_prefix(change.table)
        check = self.quote_identifier(self.check_constraint_name(change.table, column.name))
        old_values = old.enum_values if self.has_enum_check(old) else ()
        new_values = column.enum_values if self.has_enum_check(column) else ()

        if old_values and old_values != new_values:
            self.add_statement(f"{prefix} DROP CONSTRAINT IF EXISTS {check}")

        # Enum values alone may change without changing the rendered type
        if (
            old is None
            or self.render_type(old) != self.render_type(column)
            or old.collation != column.collation
        ):
            statement = f"{prefix} ALTER COLUMN {name} TYPE {self.render_type(column)}"
            if column.collation:
                statement += f" COLLATE {self.quote_identifier(column.collation)}"
            if old is not None and old.db_type != column.db_type:
                statement += f" USING {name}::{self.render_type(column)}"
            self.add_statement(statement)

        if new_values and old_values != new_values:
            self.add_statement(f"{prefix} ADD CONSTRAINT {check} {self.enum_check_clause(column)}")

    def alter_column_null_default(self, change: SchemaChange) -> None:
        column, old = change.column, change.old_column
        prefix = (
            f"{self.alter_table_prefix(change.table)} "
            f"ALTER COLUMN {self.quote_identifier(column.name)}"
        )

        if old is None or old.nullable != column.nullable:
            self.add_statement(f"{prefix} {'DROP' if column.nullable else 'SET'} NOT NULL")
        if old is None or old.default != column.default:
            if column.default is None:
                self.add_statement(f"{prefix} DROP DEFAULT")
            else:
                self.add_statement(f"{prefix} SET DEFAULT {column.default}")
