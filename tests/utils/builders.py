"""
Builders for snapshots and declarative schema documents

Keep tests focused on the attribute under test; everything else gets a
sensible default.
"""

from typing import Any

from ddlforge.db_types import DbType
from ddlforge.snapshot.models import DataColumn, DataSchema, DataTable


def column(name: str, db_type: DbType = DbType.INT, **fields: Any) -> DataColumn:
    return DataColumn(name=name, db_type=db_type, **fields)


def table(name: str, *columns: DataColumn, **fields: Any) -> DataTable:
    if not columns:
        columns = (column("id", nullable=False),)
        fields.setdefault("primary_key", ("id",))
    return DataTable(name=name, columns=columns, **fields)


def snapshot(*tables: DataTable) -> DataSchema:
    return DataSchema.from_tables(list(tables))


def schema_dict(*tables: dict, name: str = "shop", **fields: Any) -> dict:
    """Declarative schema document as it would appear in a JSON file"""
    return {"name": name, "tables": list(tables), **fields}

