"""
Portable column types

Every dialect spelling of a column type maps to one ``DbType``. The alias
table is plain data: supporting a new spelling is a one-line edit.
"""

import re
from enum import StrEnum

from .exceptions import SchemaDefinitionError


class DbType(StrEnum):
    """Canonical column type"""

    UNSET = "unset"
    BINARY = "binary"
    BLOB = "blob"
    DATE_TIME = "date_time"
    DECIMAL = "decimal"
    DOUBLE = "double"
    FIXED_BINARY = "fixed_binary"
    FIXED_STRING = "fixed_string"
    GUID = "guid"
    INT = "int"
    LONG_BLOB = "long_blob"
    LONG_TEXT = "long_text"
    MEDIUM_BLOB = "medium_blob"
    MEDIUM_TEXT = "medium_text"
    SMALL_INT = "small_int"
    STRING = "string"
    TEXT = "text"
    TINY_BLOB = "tiny_blob"
    TINY_INT = "tiny_int"
    TINY_TEXT = "tiny_text"
    MEDIUM_INT = "medium_int"
    BIG_INT = "big_int"
    FLOAT = "float"
    DATE = "date"
    TIMESTAMP = "timestamp"
    TIME = "time"
    YEAR = "year"
    ENUMERATION = "enumeration"


LENGTH_TYPES = frozenset(
    {
        DbType.STRING,
        DbType.FIXED_STRING,
        DbType.BINARY,
        DbType.FIXED_BINARY,
    }
)

LENGTHLESS_TYPES = frozenset(
    {
        DbType.UNSET,
        DbType.INT,
        DbType.TEXT,
        DbType.BLOB,
        DbType.DATE_TIME,
        DbType.SMALL_INT,
        DbType.MEDIUM_INT,
        DbType.BIG_INT,
        DbType.FLOAT,
        DbType.DOUBLE,
        DbType.DECIMAL,
        DbType.DATE,
        DbType.TIMESTAMP,
        DbType.TIME,
        DbType.YEAR,
        DbType.TINY_BLOB,
        DbType.TINY_TEXT,
        DbType.MEDIUM_BLOB,
        DbType.MEDIUM_TEXT,
        DbType.LONG_BLOB,
        DbType.LONG_TEXT,
        DbType.ENUMERATION,
        DbType.TINY_INT,
        DbType.GUID,
    }
)

# Lower-case spelling -> canonical type
TYPE_ALIASES: dict[str, DbType] = {
    "int": DbType.INT,
    "integer": DbType.INT,
    "int4": DbType.INT,
    "serial": DbType.INT,
    "double": DbType.DOUBLE,
    "real": DbType.DOUBLE,
    "double precision": DbType.DOUBLE,
    "float8": DbType.DOUBLE,
    "decimal": DbType.DECIMAL,
    "dec": DbType.DECIMAL,
    "numeric": DbType.DECIMAL,
    "money": DbType.DECIMAL,
    "bool": DbType.TINY_INT,
    "boolean": DbType.TINY_INT,
    "tinyint": DbType.TINY_INT,
    "bit": DbType.TINY_INT,
    "smallint": DbType.SMALL_INT,
    "int2": DbType.SMALL_INT,
    "mediumint": DbType.MEDIUM_INT,
    "bigint": DbType.BIG_INT,
    "int8": DbType.BIG_INT,
    "bigserial": DbType.BIG_INT,
    "float": DbType.FLOAT,
    "float4": DbType.FLOAT,
    "varchar": DbType.STRING,
    "character varying": DbType.STRING,
    "nvarchar": DbType.STRING,
    "text": DbType.TEXT,
    "ntext": DbType.TEXT,
    "blob": DbType.BLOB,
    "bytea": DbType.BLOB,
    "datetime": DbType.DATE_TIME,
    "datetime2": DbType.DATE_TIME,
    "timestamp without time zone": DbType.DATE_TIME,
    "date": DbType.DATE,
    "timestamp": DbType.TIMESTAMP,
    "timestamptz": DbType.TIMESTAMP,
    "timestamp with time zone": DbType.TIMESTAMP,
    "time": DbType.TIME,
    "year": DbType.YEAR,
    "char": DbType.FIXED_STRING,
    "character": DbType.FIXED_STRING,
    "nchar": DbType.FIXED_STRING,
    "binary": DbType.FIXED_BINARY,
    "varbinary": DbType.BINARY,
    "tinyblob": DbType.TINY_BLOB,
    "tinytext": DbType.TINY_TEXT,
    "mediumblob": DbType.MEDIUM_BLOB,
    "mediumtext": DbType.MEDIUM_TEXT,
    "longblob": DbType.LONG_BLOB,
    "longtext": DbType.LONG_TEXT,
    "enum": DbType.ENUMERATION,
    "guid": DbType.GUID,
    "uuid": DbType.GUID,
    "uniqueidentifier": DbType.GUID,
}

_TYPE_SPEC_RE = re.compile(r"^\s*([^(]+?)\s*(?:\((.*)\))?\s*$", re.DOTALL)


def requires_length(db_type: DbType) -> bool:
    """Whether DDL for this type needs an explicit length, e.g. ``VARCHAR(50)``"""
    if db_type in LENGTH_TYPES:
        return True
    if db_type in LENGTHLESS_TYPES:
        return False
    raise AssertionError(f"Unexpected DB type: {db_type!r}")


def parse_type(name: str) -> DbType:
    """
    Map a dialect type name to its canonical type (case-insensitive)

    Args:
        name: Type name as written in a schema file or reported by a database

    Returns:
        Canonical DbType

    Raises:
        SchemaDefinitionError: If the name is not a known alias
    """
    db_type = TYPE_ALIASES.get(" ".join(name.lower().split()))
    if db_type is None:
        raise SchemaDefinitionError(f"Unexpected data type '{name}'")
    return db_type


def split_type_spec(spec: str) -> tuple[str, list[str]]:
    """
    Split a declared column type into its name and arguments

    Example:
        >>> split_type_spec("DECIMAL(10, 2)")
        ('DECIMAL', ['10', '2'])
    """
    match = _TYPE_SPEC_RE.match(spec)
    if match is None:
        raise SchemaDefinitionError(f"Cannot parse column type '{spec}'")

    name, args = match.group(1), match.group(2)
    if not args:
        return name, []
    return name, _split_arguments(args)


def _split_arguments(args: str) -> list[str]:
    """Split on commas outside single-quoted literals"""
    parts: list[str] = []
    current: list[str] = []
    in_quote = False

    for char in args:
        if char == "'":
            in_quote = not in_quote
        if char == "," and not in_quote:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)

    parts.append("".join(current).strip())
    return parts
