"""
ddlforge: schema-diff migration scripts

Compares a live database with a declarative schema and writes the ordered,
dialect-specific DDL that turns one into the other.
"""

from .config import ExecutorConfiguration
from .db_types import DbType, parse_type, requires_length
from .exceptions import (
    CircularDependencyError,
    DDLForgeError,
    MigrationError,
    SchemaDefinitionError,
    UnknownDriverError,
)
from .executor import MigrationExecutor
from .output import ScriptCollector, ScriptFileWriter
from .providers import ProviderRegistry
from .providers.base.statements import FragmentKind, SqlStatement, render_script
from .schema import Schema, load_schema
from .snapshot import DataSchema

__version__ = "0.1.0"

__all__ = [
    "CircularDependencyError",
    "DDLForgeError",
    "DataSchema",
    "DbType",
    "ExecutorConfiguration",
    "FragmentKind",
    "MigrationError",
    "MigrationExecutor",
    "ProviderRegistry",
    "Schema",
    "SchemaDefinitionError",
    "ScriptCollector",
    "ScriptFileWriter",
    "SqlStatement",
    "UnknownDriverError",
    "load_schema",
    "parse_type",
    "render_script",
    "requires_length",
]
