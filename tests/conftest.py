import sqlite3

import pytest
import sqlglot
from sqlglot.errors import ParseError

from ddlforge.config import ExecutorConfiguration
from ddlforge.executor import MigrationExecutor
from ddlforge.output import ScriptCollector
from ddlforge.providers import ProviderRegistry
from ddlforge.providers.base.statements import statement_texts
from ddlforge.schema import Schema, parse_schema
from ddlforge.snapshot import DataSchema
from ddlforge.snapshot.reader import StaticSchemaReader
from tests.utils import FakeConnection, schema_dict


@pytest.fixture
def users_table_dict():
    """Users table with a unique index and an enum column"""
    return {
        "name": "users",
        "columns": [
            {"name": "id", "type": "int", "nullable": False},
            {"name": "email", "type": "varchar", "length": 255, "nullable": False},
            {
                "name": "status",
                "type": "enum",
                "enumValues": ["active", "disabled"],
                "default": "'active'",
            },
        ],
        "primaryKey": ["id"],
        "indexes": [{"name": "ux_users_email", "columns": ["email"], "unique": True}],
    }


@pytest.fixture
def orders_table_dict():
    """Orders table referencing users"""
    return {
        "name": "orders",
        "columns": [
            {"name": "id", "type": "int", "nullable": False},
            {"name": "user_id", "type": "int", "nullable": False},
            {"name": "total", "type": "decimal", "length": 10, "scale": 2},
        ],
        "primaryKey": ["id"],
        "foreignKeys": [
            {
                "name": "fk_orders_user",
                "columns": ["user_id"],
                "referencedTable": "users",
                "referencedColumns": ["id"],
                "onDelete": "CASCADE",
            }
        ],
    }


@pytest.fixture
def shop_schema(users_table_dict, orders_table_dict) -> Schema:
    return parse_schema(schema_dict(users_table_dict, orders_table_dict))


@pytest.fixture
def run_migration():
    """Run one migration against a static current snapshot; returns (collector, fragments)"""

    def _run(schema, current=None, driver="mysql", **config):
        collector = ScriptCollector()
        executor = MigrationExecutor(
            ExecutorConfiguration(driver=driver, **config),
            collector,
            connection_factory=FakeConnection,
            reader_factory=lambda _connection: StaticSchemaReader(current),
            schema=schema,
        )
        return collector, executor.run()

    return _run


@pytest.fixture
def project():
    """Project a declarative schema the way the given driver would"""

    def _project(schema, driver="mysql"):
        generator = ProviderRegistry.require(driver).get_sql_generator(schema)
        return DataSchema.from_schema(schema, generator)

    return _project


@pytest.fixture
def migrate_shop(run_migration, project, shop_schema):
    """Migrate a deployed shop schema to the given tables; returns the statement texts"""

    def _migrate(*tables, driver="mysql", **config):
        new_schema = parse_schema(schema_dict(*tables))
        _, fragments = run_migration(
            new_schema, project(shop_schema, driver), driver=driver, **config
        )
        return statement_texts(fragments)

    return _migrate


@pytest.fixture
def sqlite_db(tmp_path):
    """Path of an empty SQLite database file"""
    path = tmp_path / "target.db"
    sqlite3.connect(path).close()
    return path


# SQL Validation Helpers
def validate_sql(sql: str, dialect: str = "mysql") -> tuple[bool, str]:
    """
    Validate SQL syntax using SQLGlot.

    Args:
        sql: SQL string to validate
        dialect: SQLGlot dialect name

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        parsed = sqlglot.parse_one(sql, dialect=dialect)
    except ParseError as e:
        return False, f"SQLGlot parsing error: {e}"

    if parsed is None:
        return False, "SQLGlot returned None (invalid SQL)"
    return True, "SQL is valid"


def assert_valid_sql(sql: str, dialect: str = "mysql") -> None:
    """
    Assert that SQL is syntactically valid.

    Raises AssertionError if SQL is invalid.
    """
    is_valid, error_msg = validate_sql(sql, dialect)
    assert is_valid, f"Invalid SQL:\n{sql}\n\nError: {error_msg}"


@pytest.fixture
def assert_sql():
    """Fixture that provides SQL assertion function"""
    return assert_valid_sql
