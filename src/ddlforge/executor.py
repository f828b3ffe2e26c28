"""
Migration Executor

Binds one run's configuration to its collaborators: the connection factory,
the optional reader factory and the serialization callback. ``run`` loads
the declarative schema, picks the provider for the configured driver and
lets its SQL generator produce the script.
"""

import logging
from collections.abc import Callable
from typing import Any

from ddlforge.config import ExecutorConfiguration
from ddlforge.exceptions import SchemaDefinitionError
from ddlforge.providers import ProviderRegistry
from ddlforge.providers.base.sql_generator import BaseSQLGenerator
from ddlforge.providers.base.statements import SerializationCallback, SqlStatement
from ddlforge.schema import Schema, load_schema
from ddlforge.snapshot.reader import SchemaReader

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[str | None], Any]
ReaderFactory = Callable[[Any], SchemaReader]


def no_connection(connection_string: str | None) -> None:
    """Connection factory for runs that read the current schema from a snapshot file"""
    del connection_string


class MigrationExecutor:
    """One configured migration run

    Args:
        configuration: What to migrate and how
        callback: Receives the finished fragments once, on success
        connection_factory: Opens the target connection; defaults to the dialect's own
        reader_factory: Builds the current-schema reader from the open connection
        schema: Declarative schema; loaded from ``configuration.schema_file`` when omitted
    """

    def __init__(
        self,
        configuration: ExecutorConfiguration,
        callback: SerializationCallback,
        connection_factory: ConnectionFactory | None = None,
        reader_factory: ReaderFactory | None = None,
        schema: Schema | None = None,
    ) -> None:
        self.configuration = configuration
        self.callback = callback
        self.reader_factory = reader_factory
        self._schema = schema

        if connection_factory is None and configuration.current_snapshot is not None:
            connection_factory = no_connection
        self.connection_factory = connection_factory

    @property
    def schema(self) -> Schema:
        if self._schema is None:
            if self.configuration.schema_file is None:
                raise SchemaDefinitionError("No schema given and no schema file configured")
            self._schema = load_schema(self.configuration.schema_file)
        return self._schema

    def create_generator(self) -> BaseSQLGenerator:
        """
        Build the SQL generator for the configured driver

        Raises:
            UnknownDriverError: If the driver is not registered
        """
        provider = ProviderRegistry.require(self.configuration.driver)
        return provider.get_sql_generator(self.schema)

    def run(self) -> tuple[SqlStatement, ...]:
        """
        Generate the migration script and hand it to the callback

        Returns:
            The fragments passed to the callback

        Raises:
            MigrationError: The run failed; nothing was passed to the callback
            SchemaDefinitionError: The declarative schema is invalid
        """
        generator = self.create_generator()
        logger.info(
            "Generating %s migration for schema '%s'",
            self.configuration.driver,
            self.schema.name,
        )
        fragments = generator.execute(self)
        logger.info("Generated %d script fragment(s)", len(fragments))
        return fragments
