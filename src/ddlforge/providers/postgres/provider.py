"""PostgreSQL provider implementation"""

from ddlforge.providers.base.provider import BaseProvider, ProviderCapabilities, ProviderInfo

from .rules import PostgresRules
from .sql_generator import PostgresSQLGenerator


class PostgresProvider(BaseProvider):
    """Provider for PostgreSQL"""

    generator_class = PostgresSQLGenerator
    rules_class = PostgresRules

    @property
    def info(self) -> ProviderInfo:
        return ProviderInfo(
            id="postgres",
            name="PostgreSQL",
            version="0.1.0",
            description="PostgreSQL DDL; enums become CHECK constraints",
            docs_url="https://www.postgresql.org/docs/current/ddl.html",
        )

    @property
    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            features={
                "live_reader": False,
                "alter_column": True,
                "collations": False,
                "transactional_ddl": True,
            }
        )
