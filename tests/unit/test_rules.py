"""
Unit tests for schema rules

Validation runs while the declarative schema is projected, before any DDL.
"""

import pytest

from ddlforge.exceptions import SchemaDefinitionError
from ddlforge.providers.mysql import MySQLRules
from ddlforge.providers.postgres import PostgresRules
from ddlforge.providers.sqlite import SQLiteRules
from ddlforge.providers.sqlserver import SQLServerRules
from ddlforge.rules import SchemaRules
from ddlforge.schema import parse_schema
from tests.utils import schema_dict


def simple_table(name="t", **fields):
    return {"name": name, "columns": [{"name": "id", "type": "int"}], **fields}


class TestSchemaRules:
    """Test dialect-neutral validation"""

    def test_valid_schema_passes(self, shop_schema):
        SchemaRules().validate_schema(shop_schema)

    def test_duplicate_table(self):
        schema = parse_schema(schema_dict(simple_table(), simple_table()))

        with pytest.raises(SchemaDefinitionError, match="Duplicate table 't'"):
            SchemaRules().validate_schema(schema)

    def test_table_without_columns(self):
        schema = parse_schema(schema_dict({"name": "empty", "columns": []}))

        with pytest.raises(SchemaDefinitionError, match="has no columns"):
            SchemaRules().validate_schema(schema)

    def test_duplicate_column(self):
        table = {
            "name": "t",
            "columns": [{"name": "a", "type": "int"}, {"name": "a", "type": "text"}],
        }

        with pytest.raises(SchemaDefinitionError, match="Duplicate column 't.a'"):
            SchemaRules().validate_schema(parse_schema(schema_dict(table)))

    def test_enum_without_values(self):
        table = {"name": "t", "columns": [{"name": "s", "type": "enum"}]}

        with pytest.raises(SchemaDefinitionError, match="enum without values"):
            SchemaRules().validate_schema(parse_schema(schema_dict(table)))

    def test_primary_key_on_unknown_column(self):
        schema = parse_schema(schema_dict(simple_table(primaryKey=["missing"])))

        with pytest.raises(SchemaDefinitionError, match="unknown column 'missing'"):
            SchemaRules().validate_schema(schema)

    def test_index_on_unknown_column(self):
        schema = parse_schema(
            schema_dict(simple_table(indexes=[{"name": "ix", "columns": ["nope"]}]))
        )

        with pytest.raises(SchemaDefinitionError, match="index 'ix' uses unknown column"):
            SchemaRules().validate_schema(schema)

    def test_foreign_key_to_unknown_table(self):
        foreign_key = {"columns": ["id"], "referencedTable": "ghost", "referencedColumns": ["id"]}
        schema = parse_schema(schema_dict(simple_table(foreignKeys=[foreign_key])))

        with pytest.raises(SchemaDefinitionError, match="unknown table 'ghost'"):
            SchemaRules().validate_schema(schema)

    def test_foreign_key_column_count_mismatch(self):
        foreign_key = {
            "columns": ["id"],
            "referencedTable": "t",
            "referencedColumns": ["id", "id"],
        }
        schema = parse_schema(schema_dict(simple_table(foreignKeys=[foreign_key])))

        with pytest.raises(SchemaDefinitionError, match="mismatched column counts"):
            SchemaRules().validate_schema(schema)


class TestDialectRules:
    """Test per-dialect limits and switches"""

    @pytest.mark.parametrize(
        "rules,limit",
        [(MySQLRules(), 64), (PostgresRules(), 63), (SQLServerRules(), 128)],
    )
    def test_identifier_limit(self, rules, limit):
        ok = parse_schema(schema_dict(simple_table("a" * limit)))
        too_long = parse_schema(schema_dict(simple_table("a" * (limit + 1))))

        rules.validate_schema(ok)
        with pytest.raises(SchemaDefinitionError, match=f"exceeds {limit} characters"):
            rules.validate_schema(too_long)

    def test_sqlite_has_no_identifier_limit(self):
        SQLiteRules().validate_schema(parse_schema(schema_dict(simple_table("a" * 500))))

    def test_only_mysql_compares_collations(self):
        assert MySQLRules().compare_collations is True
        assert PostgresRules().compare_collations is False
        assert SQLiteRules().compare_collations is False
        assert SQLServerRules().compare_collations is False

    def test_mysql_rejects_default_on_text(self):
        table = {"name": "t", "columns": [{"name": "body", "type": "text", "default": "''"}]}

        with pytest.raises(SchemaDefinitionError, match="cannot have a default value"):
            MySQLRules().validate_schema(parse_schema(schema_dict(table)))

    def test_other_dialects_accept_default_on_text(self):
        table = {"name": "t", "columns": [{"name": "body", "type": "text", "default": "''"}]}

        PostgresRules().validate_schema(parse_schema(schema_dict(table)))
