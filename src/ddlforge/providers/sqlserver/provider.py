"""SQL Server provider implementation"""

from ddlforge.providers.base.provider import BaseProvider, ProviderCapabilities, ProviderInfo

from .rules import SQLServerRules
from .sql_generator import SQLServerSQLGenerator


class SQLServerProvider(BaseProvider):
    """Provider for Microsoft SQL Server (T-SQL batches separated by GO)"""

    generator_class = SQLServerSQLGenerator
    rules_class = SQLServerRules

    @property
    def info(self) -> ProviderInfo:
        return ProviderInfo(
            id="sqlserver",
            name="SQL Server",
            version="0.1.0",
            description="T-SQL DDL with named default and key constraints",
            docs_url="https://learn.microsoft.com/sql/t-sql/statements/alter-table-transact-sql",
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
