"""
Schema Rules

Per-dialect constraints checked while projecting a declarative schema, and
switches that tell the differ which attributes the dialect can compare.
"""

from ddlforge.db_types import DbType, parse_type, requires_length
from ddlforge.exceptions import SchemaDefinitionError
from ddlforge.schema.models import Schema, SchemaTable


class SchemaRules:
    """Dialect-neutral rules; dialects override the class attributes"""

    # None means the dialect imposes no limit
    max_identifier_length: int | None = None
    # Whether charset/collation are part of the compared structure
    compare_collations: bool = True

    def validate_schema(self, schema: Schema) -> None:
        """
        Check a declarative schema before any DDL is generated

        Raises:
            SchemaDefinitionError: On the first problem found
        """
        table_names: set[str] = set()
        for table in schema.tables:
            if table.name in table_names:
                raise SchemaDefinitionError(f"Duplicate table '{table.name}'")
            table_names.add(table.name)

        for table in schema.tables:
            self.validate_table(schema, table)

    def validate_table(self, schema: Schema, table: SchemaTable) -> None:
        self.check_identifier(table.name, f"table '{table.name}'")

        if not table.columns:
            raise SchemaDefinitionError(f"Table '{table.name}' has no columns")

        column_names: set[str] = set()
        for column in table.columns:
            where = f"column '{table.name}.{column.name}'"
            self.check_identifier(column.name, where)
            if column.name in column_names:
                raise SchemaDefinitionError(f"Duplicate {where}")
            column_names.add(column.name)

            db_type = parse_type(column.type)
            if requires_length(db_type) and column.length is None:
                raise SchemaDefinitionError(f"{where} of type '{column.type}' requires a length")
            if db_type == DbType.ENUMERATION and not column.enum_values:
                raise SchemaDefinitionError(f"{where} is an enum without values")

        self._check_columns_exist(table, table.primary_key, "primary key")

        index_names: set[str] = set()
        for index in table.indexes:
            self.check_identifier(index.name, f"index '{index.name}'")
            if index.name in index_names:
                raise SchemaDefinitionError(f"Duplicate index '{index.name}' on '{table.name}'")
            index_names.add(index.name)
            if not index.columns:
                raise SchemaDefinitionError(f"Index '{index.name}' has no columns")
            self._check_columns_exist(table, index.columns, f"index '{index.name}'")

        for foreign_key in table.foreign_keys:
            label = f"foreign key {foreign_key.name or foreign_key.columns} on '{table.name}'"
            if foreign_key.name:
                self.check_identifier(foreign_key.name, label)
            self._check_columns_exist(table, foreign_key.columns, label)

            referenced = schema.get_table(foreign_key.referenced_table)
            if referenced is None:
                raise SchemaDefinitionError(
                    f"{label} references unknown table '{foreign_key.referenced_table}'"
                )
            if len(foreign_key.columns) != len(foreign_key.referenced_columns):
                raise SchemaDefinitionError(f"{label} has mismatched column counts")
            self._check_columns_exist(referenced, foreign_key.referenced_columns, label)

    def check_identifier(self, name: str, where: str) -> None:
        if not name:
            raise SchemaDefinitionError(f"Missing name for {where}")
        if self.max_identifier_length is not None and len(name) > self.max_identifier_length:
            raise SchemaDefinitionError(
                f"Name of {where} exceeds {self.max_identifier_length} characters"
            )

    @staticmethod
    def _check_columns_exist(table: SchemaTable, columns: list[str], label: str) -> None:
        known = {column.name for column in table.columns}
        for name in columns:
            if name not in known:
                raise SchemaDefinitionError(
                    f"{label} uses unknown column '{name}' of table '{table.name}'"
                )
