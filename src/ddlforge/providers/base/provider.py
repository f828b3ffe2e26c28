"""
Base Provider Interface

A provider bundles what one driver needs for a migration run: the SQL
generator, the schema rules and (through the generator) the live-schema
reader.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from ddlforge.rules import SchemaRules
from ddlforge.schema.models import Schema

from .sql_generator import BaseSQLGenerator


class ProviderCapabilities(BaseModel):
    """What a driver can do without help from the caller"""

    features: dict[str, bool] = {
        "live_reader": False,  # Reads the current schema from an open connection
        "alter_column": True,  # Changes columns in place instead of rebuilding tables
        "collations": False,  # Compares charset and collation
        "transactional_ddl": False,
    }


class ProviderInfo(BaseModel):
    """Provider metadata"""

    id: str  # Driver name used on the command line, e.g. 'mysql'
    name: str  # Human-readable name
    version: str
    description: str
    docs_url: str | None = None


class Provider(ABC):
    """Main Provider interface"""

    @property
    @abstractmethod
    def info(self) -> ProviderInfo:
        """Provider metadata"""

    @property
    @abstractmethod
    def capabilities(self) -> ProviderCapabilities:
        """Provider capabilities"""

    @abstractmethod
    def create_rules(self) -> SchemaRules:
        """Schema rules of this dialect"""

    @abstractmethod
    def get_sql_generator(self, schema: Schema) -> BaseSQLGenerator:
        """
        Get a SQL generator for one migration run

        Args:
            schema: Declarative target schema

        Returns:
            Fresh generator instance
        """


class BaseProvider(Provider):
    """Provider built from a generator class and a rules class"""

    generator_class: type[BaseSQLGenerator]
    rules_class: type[SchemaRules] = SchemaRules

    def create_rules(self) -> SchemaRules:
        return self.rules_class()

    def get_sql_generator(self, schema: Schema) -> BaseSQLGenerator:
        return self.generator_class(schema, self.create_rules())
