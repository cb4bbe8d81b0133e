"""
Module: namespaces

Purpose:
    Provides the Namespace dataclass - one entry of a nodeset's namespace
    table. URIs must be unique across every nodeset loaded in a session,
    which is enforced by importer.conflicts, not here.

Dependencies:
    - dataclasses (std)

Used By:
    - core.models.metadata.NodesetMetadata
    - importer.metadata
    - importer.conflicts
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict

# Namespace index 0 is always the OPC UA base namespace and is never listed
# in a nodeset's <NamespaceUris> table.
BASE_NAMESPACE_URI = "http://opcfoundation.org/UA/"


@dataclass(frozen=True, slots=True)
class Namespace:
    """
    A single namespace table entry (immutable).

    Attributes:
        index: Namespace index as used in node ids ("ns=<index>;...").
        uri: Globally scoped namespace URI.
        prefix: Short display prefix, "ns<index>".

    Example:
        >>> ns = Namespace.at(1, "http://example.com/Boiler/")
        >>> ns.prefix
        'ns1'
    """

    index: int
    uri: str
    prefix: str

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Namespace index cannot be negative: {self.index}")
        if not self.uri:
            raise ValueError("Namespace uri cannot be empty")

    @classmethod
    def at(cls, index: int, uri: str) -> Namespace:
        """Create a namespace with the default prefix for its index."""
        return cls(index=index, uri=uri, prefix=f"ns{index}")

    def with_uri(self, uri: str) -> Namespace:
        """Return a copy carrying a different URI."""
        return replace(self, uri=uri)

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "uri": self.uri, "prefix": self.prefix}
