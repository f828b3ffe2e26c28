"""MySQL provider implementation"""

from ddlforge.providers.base.provider import BaseProvider, ProviderCapabilities, ProviderInfo

from .rules import MySQLRules
from .sql_generator import MySQLSQLGenerator


class MySQLProvider(BaseProvider):
    """Provider for MySQL 8 and compatible servers"""

    generator_class = MySQLSQLGenerator
    rules_class = MySQLRules

    @property
    def info(self) -> ProviderInfo:
        return ProviderInfo(
            id="mysql",
            name="MySQL",
            version="0.1.0",
            description="MySQL 8 DDL with charset and collation tracking",
            docs_url="https://dev.mysql.com/doc/refman/8.0/en/sql-data-definition-statements.html",
        )

    @property
    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            features={
                "live_reader": False,
                "alter_column": True,
                "collations": True,
                "transactional_ddl": False,
            }
        )
