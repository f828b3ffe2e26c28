"""
Schema Readers

A reader produces the "current" snapshot of a migration target. Live
readers are built per dialect by the SQL generator; the readers here serve
snapshots that were captured earlier.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError

from ddlforge.exceptions import MigrationError

from .models import DataSchema


class SchemaReader(ABC):
    """Produces a snapshot of the current database structure"""

    @abstractmethod
    def read(self) -> DataSchema:
        """Read the current structure"""

    def __call__(self) -> DataSchema:
        return self.read()


class StaticSchemaReader(SchemaReader):
    """Returns a snapshot it was given"""

    def __init__(self, snapshot: DataSchema | None = None):
        self.snapshot = snapshot or DataSchema()

    def read(self) -> DataSchema:
        return self.snapshot


class SnapshotFileReader(SchemaReader):
    """Reads a snapshot previously written with ``write_snapshot``"""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def read(self) -> DataSchema:
        if not self.path.exists():
            raise MigrationError(f"Snapshot file not found: {self.path}")
        try:
            return DataSchema.model_validate(json.loads(self.path.read_text()))
        except (json.JSONDecodeError, ValidationError) as err:
            raise MigrationError(f"Invalid snapshot file {self.path}", err) from err


def write_snapshot(snapshot: DataSchema, path: Path | str) -> Path:
    """Write a snapshot as JSON, creating parent directories"""
    snapshot_path = Path(path)
    snapshot_path.parent.mkdir(parents=True, exist_ok=True)
    snapshot_path.write_text(json.dumps(snapshot.model_dump(mode="json"), indent=2))
    return snapshot_path
