"""
Schema Change Types

A change is one structural step from the current snapshot towards the new
one. The differ emits changes; SQL generators turn each change into DDL.
"""

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ddlforge.snapshot.models import (
    DataColumn,
    DataForeignKey,
    DataIndex,
    DataSchema,
    DataTable,
)


class ChangeCategory(StrEnum):
    """Change category for grouping"""

    TABLE = "table"
    COLUMN = "column"
    INDEX = "index"
    CONSTRAINT = "constraint"


class ChangeType(StrEnum):
    """Structural change kind"""

    CREATE_TABLE = "create_table"
    DROP_TABLE = "drop_table"
    ALTER_TABLE = "alter_table"
    ADD_COLUMN = "add_column"
    DROP_COLUMN = "drop_column"
    ALTER_COLUMN_TYPE = "alter_column_type"
    ALTER_COLUMN_NULL_DEFAULT = "alter_column_null_default"
    ADD_INDEX = "add_index"
    DROP_INDEX = "drop_index"
    ADD_FOREIGN_KEY = "add_foreign_key"
    DROP_FOREIGN_KEY = "drop_foreign_key"

    @property
    def category(self) -> ChangeCategory:
        if self in (ChangeType.CREATE_TABLE, ChangeType.DROP_TABLE, ChangeType.ALTER_TABLE):
            return ChangeCategory.TABLE
        if self in (ChangeType.ADD_INDEX, ChangeType.DROP_INDEX):
            return ChangeCategory.INDEX
        if self in (ChangeType.ADD_FOREIGN_KEY, ChangeType.DROP_FOREIGN_KEY):
            return ChangeCategory.CONSTRAINT
        return ChangeCategory.COLUMN

    @property
    def is_destructive(self) -> bool:
        return self in (ChangeType.DROP_TABLE, ChangeType.DROP_COLUMN)


# Default execution phase per change type. Within the dependency graph these
# act as the tie-breaker: drops of dependents first, then creates, alters,
# drops of targets, and finally indexes and foreign keys.
CHANGE_PHASES: dict[ChangeType, int] = {
    ChangeType.DROP_FOREIGN_KEY: 0,
    ChangeType.DROP_INDEX: 1,
    ChangeType.CREATE_TABLE: 2,
    ChangeType.ADD_COLUMN: 3,
    ChangeType.ALTER_COLUMN_TYPE: 4,
    ChangeType.ALTER_COLUMN_NULL_DEFAULT: 5,
    ChangeType.ALTER_TABLE: 6,
    ChangeType.DROP_COLUMN: 7,
    ChangeType.DROP_TABLE: 8,
    ChangeType.ADD_INDEX: 9,
    ChangeType.ADD_FOREIGN_KEY: 10,
}


class SchemaChange(BaseModel):
    """One structural change

    ``table_def`` carries the new table definition for CREATE_TABLE and
    ALTER_TABLE, and the dropped definition for DROP_TABLE.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: ChangeType
    table: str
    table_def: Optional[DataTable] = None
    old_table: Optional[DataTable] = None
    column: Optional[DataColumn] = None
    old_column: Optional[DataColumn] = None
    index: Optional[DataIndex] = None
    foreign_key: Optional[DataForeignKey] = None

    @property
    def phase(self) -> int:
        return CHANGE_PHASES[self.type]

    @property
    def subject(self) -> str:
        """Name of the changed object inside the table (column, index, key)"""
        if self.column is not None:
            return self.column.name
        if self.index is not None:
            return self.index.name
        if self.foreign_key is not None:
            return self.foreign_key.name or ",".join(self.foreign_key.columns)
        return ""

    def describe(self) -> str:
        subject = self.subject
        target = f"{self.table}.{subject}" if subject else self.table
        return f"{self.type.value} {target}"


def create_change(change_type: ChangeType, table: str, **fields) -> SchemaChange:
    """
    Helper to build a change with a deterministic id

    Args:
        change_type: Kind of change
        table: Table the change applies to
        **fields: Remaining SchemaChange fields (column, index, ...)

    Returns:
        SchemaChange instance
    """
    change = SchemaChange(id="", type=change_type, table=table, **fields)
    subject = change.subject
    change_id = f"{change_type.value}:{table}"
    if subject:
        change_id += f".{subject}"
    return change.model_copy(update={"id": change_id})


class DataSchemaDifference(BaseModel):
    """Ordered changes that turn ``current`` into ``new``"""

    model_config = ConfigDict(frozen=True)

    current: DataSchema
    new: DataSchema
    changes: tuple[SchemaChange, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.changes

    def of_type(self, *change_types: ChangeType) -> list[SchemaChange]:
        return [change for change in self.changes if change.type in change_types]

    def for_table(self, table: str) -> list[SchemaChange]:
        return [change for change in self.changes if change.table == table]

    @property
    def touches_foreign_keys(self) -> bool:
        return bool(self.of_type(ChangeType.ADD_FOREIGN_KEY, ChangeType.DROP_FOREIGN_KEY))
