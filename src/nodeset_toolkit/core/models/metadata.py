"""
Module: metadata

Purpose:
    Provides NodesetMetadata - the lightweight summary record produced for
    every accepted nodeset file. Frozen: conflict resolution builds a new
    record with replaced namespaces before the record is committed.

Key Functions:
    - NodesetMetadata.namespace_uris: URIs in declaration order
    - NodesetMetadata.with_namespaces(): Copy with a new namespace table
    - NodesetMetadata.to_dict(): Serialization for logs and the CLI

Dependencies:
    - dataclasses (std)
    - datetime (std)
    - .namespaces.Namespace

Used By:
    - importer.metadata (creation)
    - importer.conflicts (rename)
    - importer.session (registration)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from .namespaces import Namespace


@dataclass(frozen=True)
class NodesetMetadata:
    """
    Summary of one accepted nodeset (immutable).

    Attributes:
        id: Stable identifier generated at extraction time.
        name: Display name (the file name).
        checksum: SHA-256 hex digest of the file content.
        namespaces: Namespace table in declaration order.
        node_count: Number of UA nodes in the parsed model.
        loaded_at: UTC timestamp taken when the metadata was extracted.
        file_name: Name of the source file.
        file_size: Declared size of the source file in bytes.
        model_uri: URI of the first <Model> declared by the file, if any.
        model_version: Version attribute of that model, if any.
        publication_date: PublicationDate attribute of that model, if any.

    Invariants:
        - node_count >= 0
        - checksum is non-empty
    """

    id: str
    name: str
    checksum: str
    namespaces: Tuple[Namespace, ...]
    node_count: int
    loaded_at: datetime
    file_name: str = ""
    file_size: int = 0
    model_uri: Optional[str] = None
    model_version: Optional[str] = None
    publication_date: Optional[str] = None

    def __post_init__(self) -> None:
        if self.node_count < 0:
            raise ValueError(f"node_count cannot be negative: {self.node_count}")
        if not self.checksum:
            raise ValueError("checksum cannot be empty")
        # Accept any sequence but store a tuple so the record stays hashable
        if not isinstance(self.namespaces, tuple):
            object.__setattr__(self, "namespaces", tuple(self.namespaces))

    @property
    def namespace_uris(self) -> Tuple[str, ...]:
        return tuple(ns.uri for ns in self.namespaces)

    def with_namespaces(self, namespaces: Sequence[Namespace]) -> NodesetMetadata:
        """Return a copy with a replaced namespace table."""
        return replace(self, namespaces=tuple(namespaces))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "checksum": self.checksum,
            "namespaces": [ns.to_dict() for ns in self.namespaces],
            "node_count": self.node_count,
            "loaded_at": self.loaded_at.isoformat(),
            "file_name": self.file_name,
            "file_size": self.file_size,
            "model_uri": self.model_uri,
            "model_version": self.model_version,
            "publication_date": self.publication_date,
        }
