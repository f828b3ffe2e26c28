"""Test utilities"""

from .builders import column, schema_dict, snapshot, table
from .cli_helpers import invoke_cli
from .fakes import FakeConnection, RecordingCallback

__all__ = [
    "FakeConnection",
    "RecordingCallback",
    "column",
    "invoke_cli",
    "schema_dict",
    "snapshot",
    "table",
]
