"""
Module: nodes

Purpose:
    Parsed, in-memory representation of a nodeset file. The importer treats
    NodesetModel as opaque and hands it to consumers unmodified; tree and
    graph views are built from it elsewhere.

Key Classes:
    - NodeReference: One reference between two nodes
    - UANode: One node (object, variable, type, ...)
    - ModelInfo: One <Model> declaration with its required models
    - NodesetModel: The whole parsed file

Node ids are stored in expanded form, "nsu=<namespace uri>;<identifier>",
so that ids from different files of one batch can be compared directly.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, Optional, Tuple


def expanded_node_id(namespace_uri: str, identifier: str) -> str:
    """Build the expanded textual form of a node id."""
    return f"nsu={namespace_uri};{identifier}"


@dataclass(frozen=True, slots=True)
class NodeReference:
    """A reference from the owning node to ``target``."""

    reference_type: str
    target: str
    is_forward: bool = True


@dataclass(frozen=True)
class UANode:
    """
    A single node of the information model.

    Attributes:
        node_id: Expanded node id.
        node_class: Node class without the "UA" prefix ("Object", "Variable", ...).
        browse_name: BrowseName attribute as written in the file.
        display_name: First <DisplayName> text, falls back to browse_name.
        parent_node_id: Expanded ParentNodeId, if declared.
        references: Outgoing and inverse references in document order.
    """

    node_id: str
    node_class: str
    browse_name: str
    display_name: str = ""
    parent_node_id: Optional[str] = None
    references: Tuple[NodeReference, ...] = ()


@dataclass(frozen=True, slots=True)
class ModelInfo:
    """A <Model> element of the nodeset header."""

    uri: str
    version: Optional[str] = None
    publication_date: Optional[str] = None
    required_models: Tuple[str, ...] = ()


@dataclass(frozen=True)
class NodesetModel:
    """
    Parsed nodeset file (immutable).

    Attributes:
        file_name: Name of the source file.
        namespace_uris: The file's namespace table; position i is index i + 1.
        models: Declared models in document order.
        aliases: Alias name -> expanded node id.
        nodes: Nodes in document order.
        unresolved_references: References whose target was found neither in
            this file, nor in another file of the same batch, nor in the base
            namespace.
    """

    file_name: str
    namespace_uris: Tuple[str, ...]
    models: Tuple[ModelInfo, ...] = ()
    aliases: Dict[str, str] = field(default_factory=dict, hash=False, compare=False)
    nodes: Tuple[UANode, ...] = ()
    unresolved_references: Tuple[NodeReference, ...] = ()

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @cached_property
    def _node_index(self) -> Dict[str, UANode]:
        return {node.node_id: node for node in self.nodes}

    def get_node(self, node_id: str) -> Optional[UANode]:
        """Find a node by expanded node id."""
        return self._node_index.get(node_id)

    def count_by_class(self) -> Dict[str, int]:
        """Number of nodes per node class."""
        return dict(Counter(node.node_class for node in self.nodes))
