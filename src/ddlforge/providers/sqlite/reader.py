"""
SQLite Schema Reader

Builds the current snapshot of a SQLite database from ``sqlite_master`` and
the ``table_info``, ``index_list``, ``index_info`` and ``foreign_key_list``
pragmas. Enum values are recovered from the table definition with sqlglot.
"""

import logging
import sqlite3
from typing import Any

import sqlglot
from sqlglot import expressions as exp
from sqlglot.errors import ParseError

from ddlforge.db_types import DbType, parse_type, split_type_spec
from ddlforge.exceptions import MigrationError, SchemaDefinitionError
from ddlforge.snapshot.models import (
    DataColumn,
    DataForeignKey,
    DataIndex,
    DataSchema,
    DataTable,
    default_column_length,
)
from ddlforge.snapshot.reader import SchemaReader

logger = logging.getLogger(__name__)


def quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


class SqliteSchemaReader(SchemaReader):
    """Reads tables, keys, indexes and foreign keys of an open SQLite connection"""

    def __init__(self, connection: sqlite3.Connection):
        self.connection = connection

    def read(self) -> DataSchema:
        rows = self._query(
            "SELECT name, sql FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        tables = [self._read_table(name, sql or "") for name, sql in rows]
        logger.debug("Read %d table(s) from SQLite", len(tables))
        return DataSchema.from_tables(tables)

    def _query(self, sql: str) -> list[tuple[Any, ...]]:
        return list(self.connection.execute(sql).fetchall())

    def _read_table(self, name: str, create_sql: str) -> DataTable:
        columns: list[DataColumn] = []
        key_positions: dict[str, int] = {}

        for _cid, column, declared, notnull, default, pk in self._query(
            f"PRAGMA table_info({quote(name)})"
        ):
            if pk:
                key_positions[column] = pk
            nullable = not notnull and not pk
            columns.append(
                self._read_column(name, column, declared, nullable, default, create_sql)
            )

        return DataTable(
            name=name,
            columns=tuple(columns),
            primary_key=tuple(sorted(key_positions, key=key_positions.__getitem__)),
            indexes=tuple(self._read_indexes(name)),
            foreign_keys=tuple(self._read_foreign_keys(name)),
        )

    def _read_column(
        self,
        table: str,
        name: str,
        declared: str,
        nullable: bool,
        default: str | None,
        create_sql: str,
    ) -> DataColumn:
        if not declared:
            db_type, args = DbType.UNSET, []
        else:
            type_name, args = split_type_spec(declared)
            try:
                db_type = parse_type(type_name)
            except SchemaDefinitionError as err:
                raise MigrationError(
                    f"Column '{table}.{name}' has unsupported type '{declared}'", err
                ) from err

        length = int(args[0]) if args else None
        scale = int(args[1]) if len(args) > 1 else None
        length, scale = default_column_length(db_type, length, scale)

        enum_values: tuple[str, ...] = ()
        if db_type == DbType.ENUMERATION:
            enum_values = enum_check_values(create_sql, name)

        return DataColumn(
            name=name,
            db_type=db_type,
            length=length,
            scale=scale,
            nullable=nullable,
            default=default,
            enum_values=enum_values,
        )

    def _primary_key(self, table: str) -> tuple[str, ...]:
        key_positions = {
            column: pk
            for _cid, column, _declared, _notnull, _default, pk in self._query(
                f"PRAGMA table_info({quote(table)})"
            )
            if pk
        }
        return tuple(sorted(key_positions, key=key_positions.__getitem__))

    def _read_indexes(self, table: str) -> list[DataIndex]:
        indexes = []
        for _seq, name, unique, origin, *_ in self._query(f"PRAGMA index_list({quote(table)})"):
            # Only explicitly created indexes; "pk" and "u" come from constraints
            if origin != "c":
                continue
            columns = [
                column
                for _seqno, _cid, column in sorted(
                    self._query(f"PRAGMA index_info({quote(name)})")
                )
            ]
            if None in columns:
                logger.info("Skipping expression index %s on %s", name, table)
                continue
            indexes.append(DataIndex(name=name, columns=tuple(columns), unique=bool(unique)))
        return sorted(indexes, key=lambda index: index.name)

    def _read_foreign_keys(self, table: str) -> list[DataForeignKey]:
        grouped: dict[int, list[tuple[Any, ...]]] = {}
        for row in self._query(f"PRAGMA foreign_key_list({quote(table)})"):
            grouped.setdefault(row[0], []).append(row)

        foreign_keys = []
        for key_id in sorted(grouped):
            rows = sorted(grouped[key_id], key=lambda row: row[1])
            _id, _seq, referenced_table, _from, _to, on_update, on_delete, _match = rows[0]
            referenced_columns = tuple(row[4] for row in rows)
            if None in referenced_columns:
                # REFERENCES without columns points at the primary key
                referenced_columns = self._primary_key(referenced_table)
                if len(referenced_columns) != len(rows):
                    raise MigrationError(
                        f"Foreign key on '{table}' references '{referenced_table}' "
                        "without columns, and its primary key does not match"
                    )
            foreign_keys.append(
                DataForeignKey(
                    columns=tuple(row[3] for row in rows),
                    referenced_table=referenced_table,
                    referenced_columns=referenced_columns,
                    on_delete=on_delete,
                    on_update=on_update,
                )
            )
        return foreign_keys


def enum_check_values(create_sql: str, column: str) -> tuple[str, ...]:
    """
    Recover enum values from the ``CHECK ("col" IN (...))`` written for enum columns

    Returns an empty tuple when the column has no such check or the table
    definition cannot be parsed.
    """
    try:
        parsed = sqlglot.parse_one(create_sql, dialect="sqlite")
    except ParseError as e:
        logger.warning("Cannot parse definition of enum column '%s': %s", column, e)
        return ()

    for check in parsed.find_all(exp.In):
        subject = check.this
        if isinstance(subject, exp.Column) and subject.name == column:
            return tuple(
                value.name
                for value in check.expressions
                if isinstance(value, exp.Literal) and value.is_string
            )
    return ()
