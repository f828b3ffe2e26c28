"""
Schema Differ

Compares the current and the new snapshot and produces the ordered changes
that turn one into the other.

Ordering is computed with a dependency graph: foreign keys are dropped before
either endpoint goes away, tables and columns exist before foreign keys and
indexes refer to them, and primary keys are released before their columns
are dropped.
"""

import logging
from collections.abc import Iterable

from ddlforge.rules import SchemaRules
from ddlforge.snapshot.models import DataColumn, DataSchema, DataTable

from .changes import ChangeType, DataSchemaDifference, SchemaChange, create_change
from .dependency_graph import DependencyGraph, DependencyType

logger = logging.getLogger(__name__)


class SchemaDiffer:
    """Structural diff between two snapshots

    Args:
        current: Snapshot of the live database
        new: Snapshot projected from the declarative schema
        rules: Dialect rules (controls collation comparison)
        no_constraints_or_indexes: Omit every foreign key and index change
    """

    def __init__(
        self,
        current: DataSchema,
        new: DataSchema,
        rules: SchemaRules | None = None,
        no_constraints_or_indexes: bool = False,
    ) -> None:
        self.current = current
        self.new = new
        self.rules = rules or SchemaRules()
        self.no_constraints_or_indexes = no_constraints_or_indexes
        self.dependency_graph: DependencyGraph | None = None

    def compute(self) -> DataSchemaDifference:
        """Compute the ordered difference

        Raises:
            CircularDependencyError: If the changes cannot be ordered
        """
        changes = self._collect_changes()
        graph = self._build_dependency_graph(changes)
        ordered = graph.topological_sort()

        logger.debug("Computed %d schema change(s)", len(ordered))
        return DataSchemaDifference(current=self.current, new=self.new, changes=tuple(ordered))

    # ====================
    # CHANGE DETECTION
    # ====================

    def _collect_changes(self) -> list[SchemaChange]:
        changes: list[SchemaChange] = []

        for name, table in self.new.tables.items():
            old_table = self.current.get_table(name)
            if old_table is None:
                changes.extend(self._create_table_changes(table))
            else:
                changes.extend(self._diff_table(old_table, table))

        for name, old_table in self.current.tables.items():
            if self.new.get_table(name) is None:
                changes.extend(self._drop_table_changes(old_table))

        return self._with_unique_ids(changes)

    def _create_table_changes(self, table: DataTable) -> list[SchemaChange]:
        changes = [create_change(ChangeType.CREATE_TABLE, table.name, table_def=table)]
        if self.no_constraints_or_indexes:
            return changes

        for index in table.indexes:
            changes.append(create_change(ChangeType.ADD_INDEX, table.name, index=index))
        for foreign_key in table.foreign_keys:
            changes.append(
                create_change(ChangeType.ADD_FOREIGN_KEY, table.name, foreign_key=foreign_key)
            )
        return changes

    def _drop_table_changes(self, table: DataTable) -> list[SchemaChange]:
        changes: list[SchemaChange] = []
        if not self.no_constraints_or_indexes:
            for foreign_key in table.foreign_keys:
                changes.append(
                    create_change(ChangeType.DROP_FOREIGN_KEY, table.name, foreign_key=foreign_key)
                )
        changes.append(create_change(ChangeType.DROP_TABLE, table.name, table_def=table))
        return changes

    def _diff_table(self, old: DataTable, new: DataTable) -> list[SchemaChange]:
        changes: list[SchemaChange] = []

        if not self.no_constraints_or_indexes:
            changes.extend(self._diff_foreign_keys(old, new))
            changes.extend(self._diff_indexes(old, new))

        for column in new.columns:
            old_column = old.get_column(column.name)
            if old_column is None:
                changes.append(create_change(ChangeType.ADD_COLUMN, new.name, column=column))
                continue

            if not self._same_type(old_column, column):
                changes.append(
                    create_change(
                        ChangeType.ALTER_COLUMN_TYPE,
                        new.name,
                        column=column,
                        old_column=old_column,
                    )
                )
            if not old_column.same_null_default(column):
                changes.append(
                    create_change(
                        ChangeType.ALTER_COLUMN_NULL_DEFAULT,
                        new.name,
                        column=column,
                        old_column=old_column,
                    )
                )

        for old_column in old.columns:
            if new.get_column(old_column.name) is None:
                changes.append(create_change(ChangeType.DROP_COLUMN, new.name, column=old_column))

        if old.primary_key != new.primary_key or not self._same_table_options(old, new):
            changes.append(
                create_change(ChangeType.ALTER_TABLE, new.name, table_def=new, old_table=old)
            )

        return changes

    def _diff_foreign_keys(self, old: DataTable, new: DataTable) -> list[SchemaChange]:
        changes: list[SchemaChange] = []
        old_keys = {foreign_key.signature: foreign_key for foreign_key in old.foreign_keys}
        new_keys = {foreign_key.signature: foreign_key for foreign_key in new.foreign_keys}

        for signature, foreign_key in old_keys.items():
            if signature not in new_keys:
                changes.append(
                    create_change(ChangeType.DROP_FOREIGN_KEY, old.name, foreign_key=foreign_key)
                )
        for signature, foreign_key in new_keys.items():
            if signature not in old_keys:
                changes.append(
                    create_change(ChangeType.ADD_FOREIGN_KEY, new.name, foreign_key=foreign_key)
                )
        return changes

    def _diff_indexes(self, old: DataTable, new: DataTable) -> list[SchemaChange]:
        changes: list[SchemaChange] = []

        for index in old.indexes:
            if new.get_index(index.name) != index:
                changes.append(create_change(ChangeType.DROP_INDEX, old.name, index=index))
        for index in new.indexes:
            if old.get_index(index.name) != index:
                changes.append(create_change(ChangeType.ADD_INDEX, new.name, index=index))
        return changes

    def _same_type(self, old: DataColumn, new: DataColumn) -> bool:
        if self.rules.compare_collations:
            return old.same_type(new)
        return old.model_copy(update={"collation": None}).same_type(
            new.model_copy(update={"collation": None})
        )

    def _same_table_options(self, old: DataTable, new: DataTable) -> bool:
        if not self.rules.compare_collations:
            return True
        return old.charset == new.charset and old.collation == new.collation

    @staticmethod
    def _with_unique_ids(changes: list[SchemaChange]) -> list[SchemaChange]:
        seen: dict[str, int] = {}
        unique: list[SchemaChange] = []
        for change in changes:
            count = seen.get(change.id, 0)
            seen[change.id] = count + 1
            if count:
                change = change.model_copy(update={"id": f"{change.id}#{count}"})
            unique.append(change)
        return unique

    # ====================
    # DEPENDENCIES
    # ====================

    def _build_dependency_graph(self, changes: list[SchemaChange]) -> DependencyGraph:
        graph = DependencyGraph()
        for change in changes:
            graph.add_change(change)

        for change in changes:
            for dependency_id, dep_type in self._dependencies_of(change, changes):
                graph.add_edge(dependency_id, change.id, dep_type)

        self.dependency_graph = graph
        return graph

    def _dependencies_of(
        self, change: SchemaChange, changes: list[SchemaChange]
    ) -> Iterable[tuple[str, DependencyType]]:
        """Yield (id of change that must come first, reason) for ``change``"""
        if change.type == ChangeType.ADD_FOREIGN_KEY:
            yield from self._add_foreign_key_dependencies(change, changes)
        elif change.type == ChangeType.ADD_INDEX:
            columns = set(change.index.columns)
            for other in changes:
                if other.table != change.table:
                    continue
                if other.type == ChangeType.CREATE_TABLE:
                    yield other.id, DependencyType.TABLE_EXISTS
                elif other.type in (ChangeType.ADD_COLUMN, ChangeType.ALTER_COLUMN_TYPE):
                    if other.column.name in columns:
                        yield other.id, DependencyType.COLUMN_EXISTS
                elif other.type == ChangeType.DROP_INDEX and other.index.name == change.index.name:
                    yield other.id, DependencyType.REPLACE
        elif change.type in (ChangeType.DROP_TABLE, ChangeType.DROP_COLUMN):
            yield from self._release_dependencies(change, changes)
        elif change.type == ChangeType.ALTER_COLUMN_TYPE:
            yield from self._release_dependencies(change, changes)
        elif change.type == ChangeType.ALTER_COLUMN_NULL_DEFAULT:
            for other in changes:
                if (
                    other.type == ChangeType.ALTER_COLUMN_TYPE
                    and other.table == change.table
                    and other.column.name == change.column.name
                ):
                    yield other.id, DependencyType.COLUMN_ORDERING
        elif change.type == ChangeType.ALTER_TABLE:
            new_key = set(change.table_def.primary_key)
            for other in changes:
                if other.table != change.table:
                    if other.type == ChangeType.DROP_FOREIGN_KEY and (
                        other.foreign_key.referenced_table == change.table
                    ):
                        yield other.id, DependencyType.RELEASE_REFERENCE
                    continue
                if other.type in (ChangeType.ADD_COLUMN, ChangeType.ALTER_COLUMN_TYPE):
                    if other.column.name in new_key:
                        yield other.id, DependencyType.COLUMN_EXISTS

    def _add_foreign_key_dependencies(
        self, change: SchemaChange, changes: list[SchemaChange]
    ) -> Iterable[tuple[str, DependencyType]]:
        foreign_key = change.foreign_key
        endpoints = {
            change.table: set(foreign_key.columns),
            foreign_key.referenced_table: set(foreign_key.referenced_columns),
        }
        if change.table == foreign_key.referenced_table:
            endpoints[change.table] = set(foreign_key.columns) | set(foreign_key.referenced_columns)

        for other in changes:
            if other.table not in endpoints:
                continue
            columns = endpoints[other.table]
            if other.type == ChangeType.CREATE_TABLE:
                yield other.id, DependencyType.TABLE_EXISTS
            elif other.type in (ChangeType.ADD_COLUMN, ChangeType.ALTER_COLUMN_TYPE):
                if other.column.name in columns:
                    yield other.id, DependencyType.COLUMN_EXISTS
            elif (
                other.type == ChangeType.ALTER_TABLE
                and other.table == foreign_key.referenced_table
            ):
                yield other.id, DependencyType.KEY_EXISTS
            elif (
                other.type == ChangeType.DROP_FOREIGN_KEY
                and other.table == change.table
                and foreign_key.name is not None
                and other.foreign_key.name == foreign_key.name
            ):
                yield other.id, DependencyType.REPLACE

    def _release_dependencies(
        self, change: SchemaChange, changes: list[SchemaChange]
    ) -> Iterable[tuple[str, DependencyType]]:
        """Foreign keys, indexes and keys that must go before a table or column changes"""
        column = change.column.name if change.column is not None else None

        for other in changes:
            if other.type == ChangeType.DROP_FOREIGN_KEY:
                foreign_key = other.foreign_key
                if column is None:
                    if change.table in (other.table, foreign_key.referenced_table):
                        yield other.id, DependencyType.RELEASE_REFERENCE
                elif (other.table == change.table and column in foreign_key.columns) or (
                    foreign_key.referenced_table == change.table
                    and column in foreign_key.referenced_columns
                ):
                    yield other.id, DependencyType.RELEASE_REFERENCE
            elif other.type == ChangeType.DROP_INDEX and other.table == change.table:
                if column is None or column in other.index.columns:
                    yield other.id, DependencyType.RELEASE_INDEX
            elif (
                change.type == ChangeType.DROP_COLUMN
                and other.type == ChangeType.ALTER_TABLE
                and other.table == change.table
                and column in other.old_table.primary_key
            ):
                yield other.id, DependencyType.RELEASE_KEY
