"""Declarative schema model and loader"""

from .loader import load_schema, parse_schema
from .models import Schema, SchemaColumn, SchemaForeignKey, SchemaIndex, SchemaTable

__all__ = [
    "Schema",
    "SchemaColumn",
    "SchemaForeignKey",
    "SchemaIndex",
    "SchemaTable",
    "load_schema",
    "parse_schema",
]
