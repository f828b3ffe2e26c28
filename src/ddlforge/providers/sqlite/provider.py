"""SQLite provider implementation"""

from ddlforge.providers.base.provider import BaseProvider, ProviderCapabilities, ProviderInfo

from .rules import SQLiteRules
from .sql_generator import SQLiteSQLGenerator


class SQLiteProvider(BaseProvider):
    """Provider for SQLite databases, with live schema reading"""

    generator_class = SQLiteSQLGenerator
    rules_class = SQLiteRules

    @property
    def info(self) -> ProviderInfo:
        return ProviderInfo(
            id="sqlite",
            name="SQLite",
            version="0.1.0",
            description="SQLite DDL; column and key changes rebuild the table",
            docs_url="https://www.sqlite.org/lang_altertable.html",
        )

    @property
    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            features={
                "live_reader": True,
                "alter_column": False,
                "collations": False,
                "transactional_ddl": True,
            }
        )
