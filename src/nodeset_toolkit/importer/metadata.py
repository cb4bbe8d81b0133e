"""
Module: importer.metadata

Purpose:
    Derives the NodesetMetadata summary of an accepted file from its raw
    text and parsed model.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from nodeset_toolkit.core.models import Namespace, NodesetMetadata, NodesetModel


def extract_metadata(
    text: str,
    model: NodesetModel,
    file_name: str,
    file_size: int,
    checksum: str,
) -> NodesetMetadata:
    """
    Build the metadata record for one parsed nodeset.

    The id is a fresh UUID and loaded_at is taken now, at extraction time,
    not when the file was read.

    Args:
        text: Raw XML of the file (its size is used when no size was declared)
        model: Parsed model of the same file
        file_name: Name of the source file
        file_size: Declared size of the source file in bytes
        checksum: Content checksum of ``text``

    Returns:
        NodesetMetadata with namespaces in declaration order
    """
    namespaces = tuple(
        Namespace.at(index, uri)
        for index, uri in enumerate(model.namespace_uris, start=1)
        if uri
    )
    first_model = model.models[0] if model.models else None

    return NodesetMetadata(
        id=str(uuid.uuid4()),
        name=file_name,
        checksum=checksum,
        namespaces=namespaces,
        node_count=model.node_count,
        loaded_at=datetime.now(timezone.utc),
        file_name=file_name,
        file_size=file_size if file_size > 0 else len(text.encode("utf-8")),
        model_uri=first_model.uri if first_model else None,
        model_version=first_model.version if first_model else None,
        publication_date=first_model.publication_date if first_model else None,
    )
