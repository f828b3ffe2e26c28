"""PostgreSQL provider package exports."""

from .provider import PostgresProvider
from .rules import PostgresRules
from .sql_generator import PostgresSQLGenerator

postgres_provider = PostgresProvider()

__all__ = ["PostgresProvider", "PostgresRules", "PostgresSQLGenerator", "postgres_provider"]
