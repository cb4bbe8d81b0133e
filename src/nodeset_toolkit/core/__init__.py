"""
Nodeset Toolkit Core Package

Shared data models and persisted-data schemas. Nothing in here performs I/O
except loading the packaged JSON schemas.
"""

from .models import Namespace, NodesetMetadata, NodesetModel, UANode

__all__ = [
    "Namespace",
    "NodesetMetadata",
    "NodesetModel",
    "UANode",
]
