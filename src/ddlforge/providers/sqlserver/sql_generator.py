"""SQL generation for Microsoft SQL Server"""

from ddlforge.db_types import DbType
from ddlforge.providers.base.changes import DataSchemaDifference, SchemaChange
from ddlforge.providers.base.sql_generator import BaseSQLGenerator
from ddlforge.snapshot.models import DataColumn, DataTable

SQLSERVER_TYPE_NAMES: dict[DbType, str] = {
    DbType.BINARY: "VARBINARY",
    DbType.BLOB: "VARBINARY(MAX)",
    DbType.DATE_TIME: "DATETIME2",
    DbType.DECIMAL: "DECIMAL",
    DbType.DOUBLE: "FLOAT(53)",
    DbType.FIXED_BINARY: "BINARY",
    DbType.FIXED_STRING: "NCHAR",
    DbType.GUID: "UNIQUEIDENTIFIER",
    DbType.INT: "INT",
    DbType.LONG_BLOB: "VARBINARY(MAX)",
    DbType.LONG_TEXT: "NVARCHAR(MAX)",
    DbType.MEDIUM_BLOB: "VARBINARY(MAX)",
    DbType.MEDIUM_TEXT: "NVARCHAR(MAX)",
    DbType.SMALL_INT: "SMALLINT",
    DbType.STRING: "NVARCHAR",
    DbType.TEXT: "NVARCHAR(MAX)",
    DbType.TINY_BLOB: "VARBINARY(255)",
    DbType.TINY_INT: "TINYINT",
    DbType.TINY_TEXT: "NVARCHAR(255)",
    DbType.MEDIUM_INT: "INT",
    DbType.BIG_INT: "BIGINT",
    DbType.FLOAT: "REAL",
    DbType.DATE: "DATE",
    DbType.TIMESTAMP: "DATETIMEOFFSET",
    DbType.TIME: "TIME",
    DbType.YEAR: "SMALLINT",
    DbType.ENUMERATION: "NVARCHAR",
}

SQLSERVER_DEFAULT_COLLATIONS: dict[str, str] = {
    "utf8": "Latin1_General_100_CI_AS_SC_UTF8",
    "utf8mb4": "Latin1_General_100_CI_AS_SC_UTF8",
    "latin1": "SQL_Latin1_General_CP1_CI_AS",
}


class SQLServerSQLGenerator(BaseSQLGenerator):
    """Generates T-SQL migration scripts, one batch per statement"""

    dialect = "sqlserver"
    statement_separator = "\nGO"

    def reset(self) -> None:
        # Columns already rewritten with ALTER COLUMN in this run
        self._altered_columns: set[tuple[str, str]] = set()

    def use_statement_text(self) -> str:
        return f"USE {self.quote_identifier(self.schema.database_name)};"

    def get_default_collation(self, charset: str) -> str | None:
        return SQLSERVER_DEFAULT_COLLATIONS.get(charset.lower())

    def write_prolog(self, difference: DataSchemaDifference) -> None:
        if not difference.is_empty:
            self.add_prolog_statement("SET ANSI_NULLS ON")
            self.add_prolog_statement("SET QUOTED_IDENTIFIER ON")

    @staticmethod
    def quote_identifier(identifier: str) -> str:
        return f"[{identifier.replace(']', ']]')}]"

    def render_type(self, column: DataColumn) -> str:
        name = SQLSERVER_TYPE_NAMES[column.db_type]
        if column.db_type == DbType.ENUMERATION:
            longest = max((len(value) for value in column.enum_values), default=1)
            return f"NVARCHAR({longest})"
        if column.db_type == DbType.DECIMAL and column.length is not None:
            return f"DECIMAL({column.length}, {column.scale or 0})"
        if column.length is not None:
            return f"{name}({column.length})"
        return name

    @staticmethod
    def default_constraint_name(table: str, column: str) -> str:
        return f"DF_{table}_{column}"

    @staticmethod
    def check_constraint_name(table: str, column: str) -> str:
        return f"CK_{table}_{column}"

    def column_definition(self, table: str, column: DataColumn) -> str:
        parts = [self.column_type_definition(column)]
        if column.default is not None:
            name = self.quote_identifier(self.default_constraint_name(table, column.name))
            parts.append(f"CONSTRAINT {name} DEFAULT {column.default}")
        if self.has_enum_check(column):
            name = self.quote_identifier(self.check_constraint_name(table, column.name))
            parts.append(f"CONSTRAINT {name} {self.enum_check_clause(column)}")
        return " ".join(parts)

    def column_type_definition(self, column: DataColumn) -> str:
        """Name, type, collation and nullability, as ALTER COLUMN expects them"""
        definition = f"{self.quote_identifier(column.name)} {self.render_type(column)}"
        if column.collation:
            definition += f" COLLATE {column.collation}"
        return definition + (" NULL" if column.nullable else " NOT NULL")

    def primary_key_clause(self, table: DataTable) -> str:
        name = self.quote_identifier(f"PK_{table.name}")
        return f"CONSTRAINT {name} PRIMARY KEY ({self.column_list(table.primary_key)})"

    def drop_primary_key(self, table: DataTable) -> None:
        self.add_statement(
            f"{self.alter_table_prefix(table.name)} DROP CONSTRAINT "
            f"{self.quote_identifier(f'PK_{table.name}')}"
        )

    def add_column(self, change: SchemaChange) -> None:
        self.add_statement(
            f"{self.alter_table_prefix(change.table)} ADD "
            f"{self.column_definition(change.table, change.column)}"
        )

    def drop_column(self, change: SchemaChange) -> None:
        self._drop_column_constraints(change.table, change.column)
        super().drop_column(change)

    def alter_column_type(self, change: SchemaChange) -> None:
        self._alter_column(change)

    def alter_column_null_default(self, change: SchemaChange) -> None:
        column, old = change.column, change.old_column
        if (change.table, column.name) in self._altered_columns:
            # ALTER COLUMN already restated nullability and restored the new default
            return
        if old is None or old.nullable != column.nullable:
            self._alter_column(change)
            return
        if old.default is not None:
            name = self.default_constraint_name(change.table, old.name)
            self._drop_constraint(change.table, name)
        if column.default is not None:
            self._add_default(change.table, column)

    def _alter_column(self, change: SchemaChange) -> None:
        """
        Restate type and nullability with one ALTER COLUMN per column

        Default and check constraints bound to the column block ALTER COLUMN,
        so they are dropped first and re-created from the new definition.
        """
        key = (change.table, change.column.name)
        if key in self._altered_columns:
            return
        self._altered_columns.add(key)

        column = change.column
        if change.old_column is not None:
            self._drop_column_constraints(change.table, change.old_column)
        self.add_statement(
            f"{self.alter_table_prefix(change.table)} ALTER COLUMN "
            f"{self.column_type_definition(column)}"
        )
        if self.has_enum_check(column):
            name = self.check_constraint_name(change.table, column.name)
            self.add_statement(
                f"{self.alter_table_prefix(change.table)} ADD CONSTRAINT "
                f"{self.quote_identifier(name)} {self.enum_check_clause(column)}"
            )
        if column.default is not None:
            self._add_default(change.table, column)

    def _drop_column_constraints(self, table: str, column: DataColumn) -> None:
        if column.default is not None:
            self._drop_constraint(table, self.default_constraint_name(table, column.name))
        if self.has_enum_check(column):
            self._drop_constraint(table, self.check_constraint_name(table, column.name))

    def _add_default(self, table: str, column: DataColumn) -> None:
        name = self.default_constraint_name(table, column.name)
        self.add_statement(
            f"{self.alter_table_prefix(table)} ADD CONSTRAINT "
            f"{self.quote_identifier(name)} DEFAULT {column.default} "
            f"FOR {self.quote_identifier(column.name)}"
        )

    def _drop_constraint(self, table: str, name: str) -> None:
        self.add_statement(
            f"{self.alter_table_prefix(table)} DROP CONSTRAINT {self.quote_identifier(name)}"
        )

    def drop_index(self, change: SchemaChange) -> None:
        self.add_statement(
            f"DROP INDEX {self.quote_identifier(change.index.name)} "
            f"ON {self.quote_identifier(change.table)}"
        )
