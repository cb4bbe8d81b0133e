"""JSON schemas for persisted toolkit data."""

from .validator import SchemaValidationError, validate_recent_files

__all__ = [
    "SchemaValidationError",
    "validate_recent_files",
]
