"""
Provider System for ddlforge

One provider per driver (mysql, postgres, sqlite, sqlserver). Each bundles a
SQL generator, its schema rules and, where available, a live-schema reader.
"""

from .base.provider import BaseProvider, Provider, ProviderCapabilities, ProviderInfo
from .mysql import mysql_provider
from .postgres import postgres_provider
from .registry import ProviderRegistry
from .sqlite import sqlite_provider
from .sqlserver import sqlserver_provider

__all__ = [
    "BaseProvider",
    "Provider",
    "ProviderCapabilities",
    "ProviderInfo",
    "ProviderRegistry",
    "initialize_providers",
]


def initialize_providers() -> None:
    """Register every built-in provider that is not registered yet"""
    for provider in (mysql_provider, postgres_provider, sqlite_provider, sqlserver_provider):
        if not ProviderRegistry.has(provider.info.id):
            ProviderRegistry.register(provider)


# Auto-initialize on import
initialize_providers()
