"""Execution configuration for a migration run"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_DRIVER = "mysql"


class ExecutorConfiguration(BaseModel):
    """What to migrate, where to, and how

    ``current_snapshot`` replaces live reading with a snapshot file written
    earlier by ``ddlforge snapshot``; no connection is opened then unless a
    connection factory is given.
    """

    model_config = ConfigDict(frozen=True)

    schema_file: Optional[Path] = None
    connection_string: Optional[str] = None
    no_constraints_or_indexes: bool = False
    driver: str = DEFAULT_DRIVER
    current_snapshot: Optional[Path] = None
