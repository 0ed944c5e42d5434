"""
definition/schema.py: JSON Schema check for raw field definitions.

Usage:
    from formguard.definition.schema import check_field_schema

    issues = check_field_schema("email", {"type": "email", "required": True})
    for issue in issues:
        print(issue)

Definitions arrive as already-parsed mappings, so Python values that have no
JSON counterpart (dates, tuples) are normalised before the schema runs.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

_SCHEMAS_DIR = Path(__file__).parent / "schemas"

FIELD_SCHEMA = "field.schema.json"


@dataclass
class SchemaIssue:
    """A single structural problem in a field definition."""

    key: str
    message: str
    path: str = ""  # path within the definition, e.g. "tags[1]"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"{self.key}{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


@lru_cache(maxsize=None)
def _load_validator(name: str) -> Draft202012Validator:
    schema_path = _SCHEMAS_DIR / name
    with schema_path.open() as fh:
        schema = json.load(fh)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def _to_json_like(obj: Any) -> Any:
    """
    Recursively convert a parsed definition into JSON-compatible values.

    Temporal bounds become ISO strings, Decimals floats and tuples lists.
    Mapping keys are stringified since option values may be integers.
    """
    if isinstance(obj, dict):
        return {str(k): _to_json_like(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_json_like(item) for item in obj]
    if isinstance(obj, (date, time)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    return obj


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def check_field_schema(key: str, definition: Any) -> list[SchemaIssue]:
    """
    Check one raw field definition against the field schema.

    Args:
        key:        Field name (used in the issue messages).
        definition: The raw definition mapping.

    Returns:
        A list of :class:`SchemaIssue` objects (empty on success).
    """
    if not isinstance(definition, dict):
        return [SchemaIssue(key=key, message="Definition must be a mapping")]

    validator = _load_validator(FIELD_SCHEMA)
    doc = _to_json_like(definition)

    return [
        SchemaIssue(key=key, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(doc), key=_json_path)
    ]
