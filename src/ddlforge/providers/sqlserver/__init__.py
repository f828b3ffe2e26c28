"""SQL Server provider package exports."""

from .provider import SQLServerProvider
from .rules import SQLServerRules
from .sql_generator import SQLServerSQLGenerator

sqlserver_provider = SQLServerProvider()

__all__ = ["SQLServerProvider", "SQLServerRules", "SQLServerSQLGenerator", "sqlserver_provider"]
