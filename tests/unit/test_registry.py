"""
Unit tests for the provider registry and the built-in providers
"""

import pytest

from ddlforge.exceptions import UnknownDriverError
from ddlforge.providers import ProviderRegistry, initialize_providers
from ddlforge.providers.mysql import MySQLRules, MySQLSQLGenerator
from ddlforge.providers.registry import ProviderRegistryClass
from ddlforge.providers.sqlite import SQLiteSQLGenerator, sqlite_provider


class TestProviderRegistry:
    """Test registration and lookup"""

    def test_builtin_providers_registered_on_import(self):
        assert sorted(ProviderRegistry.get_all_ids()) == [
            "mysql",
            "postgres",
            "sqlite",
            "sqlserver",
        ]

    def test_register_and_get(self):
        registry = ProviderRegistryClass()
        registry.register(sqlite_provider)

        assert registry.has("sqlite")
        assert registry.get("sqlite") is sqlite_provider
        assert registry.get("mysql") is None

    def test_duplicate_registration_raises(self):
        registry = ProviderRegistryClass()
        registry.register(sqlite_provider)

        with pytest.raises(ValueError, match="already registered"):
            registry.register(sqlite_provider)

    def test_require_unknown_driver(self):
        registry = ProviderRegistryClass()
        registry.register(sqlite_provider)

        with pytest.raises(UnknownDriverError, match="Unknown driver 'oracle'") as exc_info:
            registry.require("oracle")

        assert exc_info.value.driver == "oracle"
        assert exc_info.value.available == ["sqlite"]

    def test_unregister_and_clear(self):
        registry = ProviderRegistryClass()
        registry.register(sqlite_provider)

        registry.unregister("sqlite")
        registry.unregister("sqlite")
        assert not registry.has("sqlite")

        registry.register(sqlite_provider)
        registry.clear()
        assert registry.get_all() == []

    def test_initialize_providers_is_idempotent(self):
        initialize_providers()

        assert len(ProviderRegistry.get_all()) == 4


class TestProviders:
    """Test what each provider hands out"""

    def test_generator_per_run(self, shop_schema):
        provider = ProviderRegistry.require("mysql")

        first = provider.get_sql_generator(shop_schema)
        second = provider.get_sql_generator(shop_schema)

        assert isinstance(first, MySQLSQLGenerator)
        assert isinstance(first.rules, MySQLRules)
        assert first is not second

    def test_sqlite_is_the_only_live_reader(self):
        live = {
            provider.info.id
            for provider in ProviderRegistry.get_all()
            if provider.capabilities.features["live_reader"]
        }

        assert live == {"sqlite"}

    def test_collations_capability_matches_rules(self):
        for provider in ProviderRegistry.get_all():
            assert (
                provider.capabilities.features["collations"]
                == provider.create_rules().compare_collations
            )

    def test_sqlite_generator_class(self, shop_schema):
        assert isinstance(sqlite_provider.get_sql_generator(shop_schema), SQLiteSQLGenerator)
