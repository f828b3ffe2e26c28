"""
Schema Snapshot Models

Normalized, immutable description of a database structure. A "current"
snapshot is read from the live target; a "new" snapshot is projected from
the declarative schema. Snapshots compare structurally.
"""

from typing import TYPE_CHECKING, Optional, Protocol

from pydantic import BaseModel, ConfigDict

from ddlforge.db_types import DbType, parse_type, requires_length
from ddlforge.exceptions import SchemaDefinitionError
from ddlforge.rules import SchemaRules
from ddlforge.schema.models import Schema, SchemaColumn, SchemaTable

if TYPE_CHECKING:
    from .reader import SchemaReader


class DataColumn(BaseModel):
    """Column as stored in the database"""

    model_config = ConfigDict(frozen=True)

    name: str
    db_type: DbType
    length: Optional[int] = None
    scale: Optional[int] = None
    nullable: bool = True
    default: Optional[str] = None
    enum_values: tuple[str, ...] = ()
    collation: Optional[str] = None

    def same_type(self, other: "DataColumn") -> bool:
        """Type, length, scale, enum values and collation match"""
        return (
            self.db_type == other.db_type
            and self.length == other.length
            and self.scale == other.scale
            and self.enum_values == other.enum_values
            and self.collation == other.collation
        )

    def same_null_default(self, other: "DataColumn") -> bool:
        return self.nullable == other.nullable and self.default == other.default


class DataIndex(BaseModel):
    """Secondary index"""

    model_config = ConfigDict(frozen=True)

    name: str
    columns: tuple[str, ...]
    unique: bool = False


class DataForeignKey(BaseModel):
    """Foreign key relationship"""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    columns: tuple[str, ...]
    referenced_table: str
    referenced_columns: tuple[str, ...]
    on_delete: str = "NO ACTION"
    on_update: str = "NO ACTION"

    @property
    def signature(self) -> tuple:
        """Structural identity; names are not reported by every dialect"""
        return (
            self.columns,
            self.referenced_table,
            self.referenced_columns,
            self.on_delete,
            self.on_update,
        )


class DataTable(BaseModel):
    """Table with its columns, keys and indexes"""

    model_config = ConfigDict(frozen=True)

    name: str
    columns: tuple[DataColumn, ...] = ()
    primary_key: tuple[str, ...] = ()
    indexes: tuple[DataIndex, ...] = ()
    foreign_keys: tuple[DataForeignKey, ...] = ()
    charset: Optional[str] = None
    collation: Optional[str] = None

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def get_column(self, name: str) -> DataColumn | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def get_index(self, name: str) -> DataIndex | None:
        for index in self.indexes:
            if index.name == name:
                return index
        return None


class ProjectionContext(Protocol):
    """Dialect decisions needed while projecting a declarative schema

    Implemented by every SQL generator.
    """

    rules: SchemaRules

    def get_default_collation(self, charset: str) -> str | None: ...

    def get_column_length(
        self, db_type: DbType, length: int | None, scale: int | None
    ) -> tuple[int | None, int | None]: ...


class DefaultProjection:
    """Dialect-neutral projection used when no generator is involved"""

    def __init__(self, rules: SchemaRules | None = None):
        self.rules = rules or SchemaRules()

    def get_default_collation(self, charset: str) -> str | None:
        del charset
        return None

    def get_column_length(
        self, db_type: DbType, length: int | None, scale: int | None
    ) -> tuple[int | None, int | None]:
        return default_column_length(db_type, length, scale)


def default_column_length(
    db_type: DbType, length: int | None, scale: int | None
) -> tuple[int | None, int | None]:
    """Keep length for length types and precision/scale for DECIMAL, drop the rest"""
    if requires_length(db_type):
        return length, None
    if db_type == DbType.DECIMAL:
        return length, scale if length is not None else None
    return None, None


class DataSchema(BaseModel):
    """Structural snapshot of a whole schema"""

    model_config = ConfigDict(frozen=True)

    tables: dict[str, DataTable] = {}

    def get_table(self, name: str) -> DataTable | None:
        return self.tables.get(name)

    @classmethod
    def from_tables(cls, tables: list[DataTable]) -> "DataSchema":
        return cls(tables={table.name: table for table in tables})

    @classmethod
    def from_reader(cls, reader: "SchemaReader") -> "DataSchema":
        return reader.read()

    @classmethod
    def from_schema(
        cls, schema: Schema, context: ProjectionContext | None = None
    ) -> "DataSchema":
        """
        Project a declarative schema into a snapshot

        Args:
            schema: Declarative schema
            context: Dialect callbacks (the running SQL generator)

        Raises:
            SchemaDefinitionError: For unknown types or invalid definitions
        """
        context = context or DefaultProjection()
        context.rules.validate_schema(schema)

        return cls.from_tables([_project_table(schema, table, context) for table in schema.tables])


def _project_table(schema: Schema, table: SchemaTable, context: ProjectionContext) -> DataTable:
    charset: str | None = table.charset or schema.charset
    collation = table.collation or schema.collation
    if collation is None and charset:
        collation = context.get_default_collation(charset)
    if collation is None or not context.rules.compare_collations:
        charset = None
        collation = None

    foreign_keys = tuple(
        DataForeignKey(
            name=foreign_key.name or f"fk_{table.name}_{'_'.join(foreign_key.columns)}",
            columns=tuple(foreign_key.columns),
            referenced_table=foreign_key.referenced_table,
            referenced_columns=tuple(foreign_key.referenced_columns),
            on_delete=foreign_key.on_delete,
            on_update=foreign_key.on_update,
        )
        for foreign_key in table.foreign_keys
    )

    return DataTable(
        name=table.name,
        columns=tuple(_project_column(table, column, context) for column in table.columns),
        primary_key=tuple(table.primary_key),
        indexes=tuple(
            DataIndex(name=index.name, columns=tuple(index.columns), unique=index.unique)
            for index in table.indexes
        ),
        foreign_keys=foreign_keys,
        charset=charset,
        collation=collation,
    )


def _project_column(
    table: SchemaTable, column: SchemaColumn, context: ProjectionContext
) -> DataColumn:
    db_type = parse_type(column.type)
    length, scale = context.get_column_length(db_type, column.length, column.scale)
    if requires_length(db_type) and length is None:
        raise SchemaDefinitionError(
            f"column '{table.name}.{column.name}' of type '{column.type}' requires a length"
        )

    # Key columns are never nullable
    nullable = column.nullable and column.name not in table.primary_key

    return DataColumn(
        name=column.name,
        db_type=db_type,
        length=length,
        scale=scale,
        nullable=nullable,
        default=column.default,
        enum_values=tuple(column.enum_values or ()),
        collation=column.collation if context.rules.compare_collations else None,
    )
