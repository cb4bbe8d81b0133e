"""Content checksums used for duplicate detection."""

from __future__ import annotations

import hashlib
from typing import AbstractSet


def generate_checksum(text: str) -> str:
    """
    SHA-256 hex digest of the UTF-8 encoded text.

    Depends on content only, so the same nodeset saved under two different
    names yields the same checksum.

    Example:
        >>> len(generate_checksum("<UANodeSet/>"))
        64
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def detect_duplicate(checksum: str, known_checksums: AbstractSet[str]) -> bool:
    return checksum in known_checksums
