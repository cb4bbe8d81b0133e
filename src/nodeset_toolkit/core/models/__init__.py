"""
Core Models Package

Immutable data models shared by the importer and its consumers.

All models in this package are frozen dataclasses. Any change (such as a
namespace rename during conflict resolution) creates a new instance, so a
record handed to a consumer can never change underneath it.
"""

from .namespaces import Namespace, BASE_NAMESPACE_URI
from .metadata import NodesetMetadata
from .nodes import ModelInfo, NodeReference, NodesetModel, UANode, expanded_node_id

__all__ = [
    "BASE_NAMESPACE_URI",
    "ModelInfo",
    "Namespace",
    "NodeReference",
    "NodesetMetadata",
    "NodesetModel",
    "UANode",
    "expanded_node_id",
]
