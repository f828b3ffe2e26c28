"""SQL generation for MySQL"""

from ddlforge.db_types import DbType
from ddlforge.providers.base.changes import DataSchemaDifference, SchemaChange
from ddlforge.providers.base.sql_generator import BaseSQLGenerator
from ddlforge.snapshot.models import DataColumn, DataTable

MYSQL_TYPE_NAMES: dict[DbType, str] = {
    DbType.BINARY: "VARBINARY",
    DbType.BLOB: "BLOB",
    DbType.DATE_TIME: "DATETIME",
    DbType.DECIMAL: "DECIMAL",
    DbType.DOUBLE: "DOUBLE",
    DbType.FIXED_BINARY: "BINARY",
    DbType.FIXED_STRING: "CHAR",
    DbType.GUID: "CHAR(36)",
    DbType.INT: "INT",
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

# Server defaults per character set (MySQL 8)
MYSQL_DEFAULT_COLLATIONS: dict[str, str] = {
    "utf8mb4": "utf8mb4_0900_ai_ci",
    "utf8mb3": "utf8mb3_general_ci",
    "utf8": "utf8mb3_general_ci",
    "latin1": "latin1_swedish_ci",
    "ascii": "ascii_general_ci",
    "binary": "binary",
    "ucs2": "ucs2_general_ci",
    "utf16": "utf16_general_ci",
    "utf32": "utf32_general_ci",
}


class MySQLSQLGenerator(BaseSQLGenerator):
    """Generates MySQL migration scripts"""

    dialect = "mysql"
    statement_separator = ";"

    def reset(self) -> None:
        # Columns already rewritten with MODIFY COLUMN in this run
        self._modified_columns: set[tuple[str, str]] = set()

    def use_statement_text(self) -> str:
        return f"USE {self.quote_identifier(self.schema.database_name)};"

    def get_default_collation(self, charset: str) -> str | None:
        return MYSQL_DEFAULT_COLLATIONS.get(charset.lower())

    def write_prolog(self, difference: DataSchemaDifference) -> None:
        if not difference.is_empty:
            self.add_prolog_statement(f"SET NAMES {self.schema.charset}")

    @staticmethod
    def quote_identifier(identifier: str) -> str:
        return f"`{identifier.replace('`', '``')}`"

    def render_type(self, column: DataColumn) -> str:
        name = MYSQL_TYPE_NAMES[column.db_type]
        if column.db_type == DbType.ENUMERATION:
            values = ", ".join(self.quote_literal(value) for value in column.enum_values)
            return f"ENUM({values})"
        if column.db_type == DbType.DECIMAL and column.length is not None:
            return f"DECIMAL({column.length}, {column.scale or 0})"
        if column.length is not None:
            return f"{name}({column.length})"
        return name

    def table_options(self, table: DataTable) -> str:
        options = " ENGINE=InnoDB"
        if table.charset:
            options += f" DEFAULT CHARSET={table.charset}"
        if table.collation:
            options += f" COLLATE={table.collation}"
        return options

    def drop_primary_key(self, table: DataTable) -> None:
        self.add_statement(f"{self.alter_table_prefix(table.name)} DROP PRIMARY KEY")

    def alter_table_collation(self, table: DataTable) -> None:
        if not table.charset:
            return
        statement = (
            f"{self.alter_table_prefix(table.name)} CONVERT TO CHARACTER SET {table.charset}"
        )
        if table.collation:
            statement += f" COLLATE {table.collation}"
        self.add_statement(statement)

    def alter_column_type(self, change: SchemaChange) -> None:
        self._modify_column(change)

    def alter_column_null_default(self, change: SchemaChange) -> None:
        self._modify_column(change)

    def _modify_column(self, change: SchemaChange) -> None:
        # MODIFY COLUMN rewrites the full definition; once per column is enough
        key = (change.table, change.column.name)
        if key in self._modified_columns:
            return
        self._modified_columns.add(key)
        self.add_statement(
            f"{self.alter_table_prefix(change.table)} MODIFY COLUMN "
            f"{self.column_definition(change.table, change.column)}"
        )

    def drop_index(self, change: SchemaChange) -> None:
        self.add_statement(
            f"DROP INDEX {self.quote_identifier(change.index.name)} "
            f"ON {self.quote_identifier(change.table)}"
        )

    def drop_foreign_key(self, change: SchemaChange) -> None:
        self.add_statement(
            f"{self.alter_table_prefix(change.table)} DROP FOREIGN KEY "
            f"{self.quote_identifier(self.existing_foreign_key_name(change))}"
        )
