"""Dialect-independent building blocks shared by every provider"""

from .changes import ChangeType, DataSchemaDifference, SchemaChange
from .provider import BaseProvider, Provider, ProviderCapabilities, ProviderInfo
from .sql_generator import BaseSQLGenerator
from .state_differ import SchemaDiffer
from .statements import FragmentKind, SqlStatement, StatementBuffer, render_script

__all__ = [
    "BaseProvider",
    "BaseSQLGenerator",
    "ChangeType",
    "DataSchemaDifference",
    "FragmentKind",
    "Provider",
    "ProviderCapabilities",
    "ProviderInfo",
    "SchemaChange",
    "SchemaDiffer",
    "SqlStatement",
    "StatementBuffer",
    "render_script",
]
