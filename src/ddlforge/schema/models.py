"""
Declarative Schema Models

The target structure as authored by the user. Field types are dialect
spellings ("varchar", "int", ...) resolved through ``parse_type`` when the
schema is projected into a snapshot.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ReferentialAction = Literal["NO ACTION", "RESTRICT", "CASCADE", "SET NULL", "SET DEFAULT"]


class SchemaColumn(BaseModel):
    """Column definition"""

    name: str
    type: str
    length: Optional[int] = None
    scale: Optional[int] = None
    nullable: bool = True
    default: Optional[str] = None  # SQL expression, e.g. "'active'" or "0"
    enum_values: Optional[list[str]] = Field(None, alias="enumValues")
    collation: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class SchemaIndex(BaseModel):
    """Secondary index"""

    name: str
    columns: list[str]
    unique: bool = False


class SchemaForeignKey(BaseModel):
    """Foreign key to another table"""

    name: Optional[str] = None
    columns: list[str]
    referenced_table: str = Field(..., alias="referencedTable")
    referenced_columns: list[str] = Field(..., alias="referencedColumns")
    on_delete: ReferentialAction = Field("NO ACTION", alias="onDelete")
    on_update: ReferentialAction = Field("NO ACTION", alias="onUpdate")

    model_config = ConfigDict(populate_by_name=True)


class SchemaTable(BaseModel):
    """Table definition"""

    name: str
    columns: list[SchemaColumn] = []
    primary_key: list[str] = Field([], alias="primaryKey")
    indexes: list[SchemaIndex] = []
    foreign_keys: list[SchemaForeignKey] = Field([], alias="foreignKeys")
    charset: Optional[str] = None
    collation: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class Schema(BaseModel):
    """Declarative schema"""

    name: str
    database: Optional[str] = None  # Defaults to name
    charset: str = "utf8mb4"
    collation: Optional[str] = None
    tables: list[SchemaTable] = []

    @property
    def database_name(self) -> str:
        return self.database or self.name

    def get_table(self, name: str) -> SchemaTable | None:
        for table in self.tables:
            if table.name == name:
                return table
        return None
