"""MySQL provider package exports."""

from .provider import MySQLProvider
from .rules import MySQLRules
from .sql_generator import MySQLSQLGenerator

mysql_provider = MySQLProvider()

__all__ = ["MySQLProvider", "MySQLRules", "MySQLSQLGenerator", "mysql_provider"]
