"""
Schema Validation Utilities

Validates persisted JSON data against the packaged schemas before it is
turned back into model objects. Persisted data comes from outside the
process (a file or any other key-value store) and may be stale or corrupted,
so nothing is deserialized without passing through here first.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema.exceptions import best_match


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class SchemaValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_recent_files(data: Any) -> None:
    """
    Validate a persisted recent-files payload.

    Args:
        data: Decoded JSON payload (expected: list of entry objects)

    Raises:
        SchemaValidationError: If the payload does not match the schema
    """
    schema = _load_schema("recent_files")
    validator = jsonschema.Draft202012Validator(schema)
    errors = list(validator.iter_errors(data))
    if errors:
        first = best_match(errors)
        raise SchemaValidationError(
            f"Schema validation failed: {first.message}",
            path=".".join(str(p) for p in first.absolute_path),
            errors=[e.message for e in errors],
        )
