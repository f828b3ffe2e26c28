"""Schema snapshots: normalized structure of a database at one point in time"""

from .models import (
    DataColumn,
    DataForeignKey,
    DataIndex,
    DataSchema,
    DataTable,
    DefaultProjection,
    ProjectionContext,
)
from .reader import SchemaReader, SnapshotFileReader, StaticSchemaReader, write_snapshot

__all__ = [
    "DataColumn",
    "DataForeignKey",
    "DataIndex",
    "DataSchema",
    "DataTable",
    "DefaultProjection",
    "ProjectionContext",
    "SchemaReader",
    "SnapshotFileReader",
    "StaticSchemaReader",
    "write_snapshot",
]
