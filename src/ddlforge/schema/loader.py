"""Load declarative schema files"""

import json
from pathlib import Path

from pydantic import ValidationError

from ddlforge.exceptions import SchemaDefinitionError

from .models import Schema


def load_schema(path: Path | str) -> Schema:
    """
    Read and validate a JSON schema file

    Raises:
        FileNotFoundError: If the file does not exist
        SchemaDefinitionError: If the file is not valid JSON or misses required fields
    """
    schema_path = Path(path)
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    try:
        data = json.loads(schema_path.read_text())
    except json.JSONDecodeError as err:
        raise SchemaDefinitionError(f"Invalid JSON in {schema_path}: {err}") from err

    return parse_schema(data, source=str(schema_path))


def parse_schema(data: dict, source: str = "<schema>") -> Schema:
    """Validate an already-decoded schema document"""
    try:
        return Schema.model_validate(data)
    except ValidationError as err:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in err.errors()
        )
        raise SchemaDefinitionError(f"Invalid schema in {source}: {problems}") from err
