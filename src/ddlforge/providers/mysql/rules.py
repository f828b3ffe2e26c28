"""MySQL schema rules"""

from ddlforge.db_types import DbType, parse_type
from ddlforge.exceptions import SchemaDefinitionError
from ddlforge.rules import SchemaRules
from ddlforge.schema.models import Schema, SchemaTable

# Types MySQL refuses a literal DEFAULT for
NO_DEFAULT_TYPES = frozenset(
    {
        DbType.TINY_TEXT,
        DbType.TEXT,
        DbType.MEDIUM_TEXT,
        DbType.LONG_TEXT,
        DbType.TINY_BLOB,
        DbType.BLOB,
        DbType.MEDIUM_BLOB,
        DbType.LONG_BLOB,
    }
)


class MySQLRules(SchemaRules):
    max_identifier_length = 64
    compare_collations = True

    def validate_table(self, schema: Schema, table: SchemaTable) -> None:
        super().validate_table(schema, table)
        for column in table.columns:
            if column.default is not None and parse_type(column.type) in NO_DEFAULT_TYPES:
                raise SchemaDefinitionError(
                    f"column '{table.name}.{column.name}' of type '{column.type}' "
                    "cannot have a default value"
                )
