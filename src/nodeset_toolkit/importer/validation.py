"""
Module: importer.validation

Purpose:
    Structural check of a nodeset before it is checksummed or parsed.
    A failed check only skips the offending file; the rest of the batch
    carries on.

Key Classes:
    - ValidationIssue: One problem found in the document
    - ValidationResult: Outcome of validate_xml()

Key Functions:
    - validate_xml(): Well-formedness plus root-element check
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from lxml import etree

from .xml_utils import local_name, make_parser

NODESET_ROOT = "UANodeSet"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    message: str
    line: Optional[int] = None


@dataclass(frozen=True)
class ValidationResult:
    """
    Result of validating one document.

    Attributes:
        is_valid: True when no issue was found.
        errors: Issues in the order they were detected.
    """
    is_valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)

    @property
    def messages(self) -> List[str]:
        return [issue.message for issue in self.errors]

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(is_valid=True)

    @classmethod
    def failed(cls, errors: List[ValidationIssue]) -> ValidationResult:
        return cls(is_valid=False, errors=list(errors))


def validate_xml(text: str) -> ValidationResult:
    """
    Validate that ``text`` is a well-formed nodeset document.

    Checks:
    1. The text is non-empty, well-formed XML (every syntax error reported
       by the parser is returned, with its line number)
    2. The root element is <UANodeSet> (in any XML namespace)

    Args:
        text: Raw file content

    Returns:
        ValidationResult listing every issue found
    """
    if not text.strip():
        return ValidationResult.failed([ValidationIssue("Document is empty")])

    parser = make_parser()
    try:
        root = etree.fromstring(text.encode("utf-8"), parser)
    except etree.XMLSyntaxError as e:
        issues = [
            ValidationIssue(f"Line {entry.line}: {entry.message.strip()}", line=entry.line)
            for entry in parser.error_log
            if entry.level >= etree.ErrorLevels.ERROR
        ]
        if not issues:
            issues = [ValidationIssue(str(e), line=e.lineno)]
        return ValidationResult.failed(issues)

    root_name = local_name(root)
    if root_name != NODESET_ROOT:
        return ValidationResult.failed([
            ValidationIssue(
                f"Root element must be <{NODESET_ROOT}>, found <{root_name}>",
                line=root.sourceline,
            )
        ])
    return ValidationResult.ok()
