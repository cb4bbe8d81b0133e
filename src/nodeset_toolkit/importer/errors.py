"""
Module: importer.errors

Purpose:
    The stable error taxonomy surfaced to callers of the import pipeline,
    the message templates behind it, and the exceptions raised by the
    pipeline's collaborators.

Key Classes:
    - ErrorCode: Stable error codes
    - NodesetImportError: One failure event (immutable value, not raised)
    - ParseError: Raised by the nodeset parser; aborts the whole batch
    - ImportInProgressError: Raised when a session is already importing
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    INVALID_FORMAT = "INVALID_FORMAT"
    MISSING_ELEMENTS = "MISSING_ELEMENTS"
    DUPLICATE = "DUPLICATE"
    NAMESPACE_CONFLICT = "NAMESPACE_CONFLICT"
    PARSE_ERROR = "PARSE_ERROR"


ERROR_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.FILE_TOO_LARGE: "File exceeds the maximum size of {size} MB",
    ErrorCode.INVALID_FORMAT: "Invalid nodeset file: {details}",
    ErrorCode.MISSING_ELEMENTS: (
        "Missing required models: {elements}. "
        "Select all required model files together."
    ),
    ErrorCode.DUPLICATE: "This nodeset has already been loaded",
    ErrorCode.NAMESPACE_CONFLICT: "Namespace conflict detected: {elements}",
    ErrorCode.PARSE_ERROR: "Failed to parse nodeset file: {details}",
}


def format_message(code: ErrorCode, **values: Any) -> str:
    """
    Fill the message template for ``code``.

    Example:
        >>> format_message(ErrorCode.FILE_TOO_LARGE, size="10.0")
        'File exceeds the maximum size of 10.0 MB'
    """
    return ERROR_MESSAGES[code].format(**values)


@dataclass(frozen=True)
class NodesetImportError:
    """
    A single failure event of an import (immutable).

    Surfaced through the result of an import and discarded afterwards;
    never persisted.

    Attributes:
        code: Stable error code.
        message: Human-readable message built from the code's template.
        file_name: File the failure belongs to, if any.
        details: Extra context (joined validation messages, sizes, ...).
    """

    code: ErrorCode
    message: str
    file_name: Optional[str] = None
    details: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.file_name is not None:
            d["fileName"] = self.file_name
        if self.details is not None:
            d["details"] = self.details
        return d


class ParseError(Exception):
    """Raised when a nodeset file cannot be turned into a model."""

    def __init__(self, message: str, file_name: str = "", line: Optional[int] = None):
        super().__init__(message)
        self.file_name = file_name
        self.line = line


class ImportInProgressError(RuntimeError):
    """Raised when an import is started while another one is still running."""
