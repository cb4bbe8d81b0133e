"""
Module: importer.conflicts

Purpose:
    Detection and resolution of namespace URI collisions between an
    incoming nodeset and the nodesets already accepted in the session.

Key Functions:
    - detect_namespace_conflicts(): Incoming URIs that are already loaded
    - resolve_namespace_conflict(): Apply the configured strategy

Conflicts are detected incrementally: a file accepted earlier in the same
batch already counts as loaded for every later file.

Strategies:
    - REJECT: skip the file
    - RENAME: append "#<metadata id>" to every conflicting URI
    - MERGE / WARN_AND_CONTINUE: accept unchanged (identical behavior)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from nodeset_toolkit.core.models import Namespace, NodesetMetadata
from .config import ConflictStrategy

RENAME_SEPARATOR = "#"


class ConflictAction(str, Enum):
    REJECT = "reject"
    RENAME = "rename"
    CONTINUE = "continue"


@dataclass(frozen=True)
class ConflictResolution:
    """
    Outcome of resolving a namespace conflict.

    Attributes:
        action: What the orchestrator should do with the file.
        updated_metadata: Metadata to accept instead of the original
            (set for RENAME only).
    """
    action: ConflictAction
    updated_metadata: Optional[NodesetMetadata] = None


def detect_namespace_conflicts(
    incoming: Sequence[Namespace],
    existing: Iterable[Sequence[Namespace]],
) -> List[str]:
    """
    Find incoming namespace URIs that are already loaded.

    Args:
        incoming: Namespace table of the file being imported
        existing: Namespace tables of every nodeset accepted so far

    Returns:
        Conflicting URIs in incoming order, each reported once

    Example:
        >>> a = [Namespace.at(1, "urn:a"), Namespace.at(2, "urn:b")]
        >>> detect_namespace_conflicts(a, [[Namespace.at(1, "urn:b")]])
        ['urn:b']
    """
    existing_uris = {ns.uri for table in existing for ns in table}
    conflicts: List[str] = []
    for ns in incoming:
        if ns.uri in existing_uris and ns.uri not in conflicts:
            conflicts.append(ns.uri)
    return conflicts


def resolve_namespace_conflict(
    strategy: ConflictStrategy,
    metadata: NodesetMetadata,
    conflicts: Sequence[str],
) -> ConflictResolution:
    """
    Apply ``strategy`` to a file whose namespaces collide.

    Only called when detect_namespace_conflicts() found something.

    Args:
        strategy: Session-wide conflict strategy
        metadata: Metadata of the incoming file
        conflicts: URIs reported by detect_namespace_conflicts()

    Returns:
        ConflictResolution; for RENAME it carries a new metadata record whose
        conflicting URIs end in "#<metadata.id>"
    """
    if strategy == ConflictStrategy.REJECT:
        return ConflictResolution(action=ConflictAction.REJECT)

    if strategy == ConflictStrategy.RENAME:
        conflicting = set(conflicts)
        renamed = [
            ns.with_uri(f"{ns.uri}{RENAME_SEPARATOR}{metadata.id}") if ns.uri in conflicting else ns
            for ns in metadata.namespaces
        ]
        return ConflictResolution(
            action=ConflictAction.RENAME,
            updated_metadata=metadata.with_namespaces(renamed),
        )

    # MERGE and WARN_AND_CONTINUE: accept as-is
    return ConflictResolution(action=ConflictAction.CONTINUE)
