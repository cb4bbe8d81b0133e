"""
Unit Tests for Core Models

Tests for Namespace, NodesetMetadata and NodesetModel.
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from nodeset_toolkit.core.models import (
    Namespace,
    NodeReference,
    NodesetMetadata,
    NodesetModel,
    UANode,
    expanded_node_id,
)


def _metadata(**overrides) -> NodesetMetadata:
    values = dict(
        id="meta-1",
        name="Boiler.NodeSet2.xml",
        checksum="ab" * 32,
        namespaces=[Namespace.at(1, "urn:boiler")],
        node_count=2,
        loaded_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return NodesetMetadata(**values)


class TestNamespace:
    """Tests for the Namespace value type."""

    def test_at_derives_prefix_from_index(self):
        ns = Namespace.at(3, "urn:x")
        assert ns.prefix == "ns3"
        assert ns.index == 3

    def test_with_uri_keeps_index_and_prefix(self):
        ns = Namespace.at(2, "urn:x").with_uri("urn:x#abc")
        assert (ns.index, ns.uri, ns.prefix) == (2, "urn:x#abc", "ns2")

    def test_empty_uri_rejected(self):
        with pytest.raises(ValueError):
            Namespace.at(1, "")

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError):
            Namespace(index=-1, uri="urn:x", prefix="ns")

    def test_is_immutable(self):
        ns = Namespace.at(1, "urn:x")
        with pytest.raises(FrozenInstanceError):
            ns.uri = "urn:y"


class TestNodesetMetadata:
    """Tests for NodesetMetadata."""

    def test_namespaces_stored_as_tuple(self):
        md = _metadata()
        assert isinstance(md.namespaces, tuple)
        assert md.namespace_uris == ("urn:boiler",)

    def test_with_namespaces_returns_new_record(self):
        md = _metadata()
        renamed = md.with_namespaces([Namespace.at(1, "urn:boiler#meta-1")])
        assert renamed.namespace_uris == ("urn:boiler#meta-1",)
        assert md.namespace_uris == ("urn:boiler",)
        assert renamed.id == md.id

    def test_negative_node_count_rejected(self):
        with pytest.raises(ValueError):
            _metadata(node_count=-1)

    def test_empty_checksum_rejected(self):
        with pytest.raises(ValueError):
            _metadata(checksum="")

    def test_to_dict_serializes_timestamp(self):
        data = _metadata().to_dict()
        assert data["loaded_at"] == "2024-01-15T00:00:00+00:00"
        assert data["namespaces"] == [{"index": 1, "uri": "urn:boiler", "prefix": "ns1"}]


class TestNodesetModel:
    """Tests for NodesetModel lookups."""

    @pytest.fixture
    def model(self) -> NodesetModel:
        boiler = expanded_node_id("urn:boiler", "i=5001")
        temp = expanded_node_id("urn:boiler", "i=5002")
        return NodesetModel(
            file_name="Boiler.NodeSet2.xml",
            namespace_uris=("urn:boiler",),
            nodes=(
                UANode(boiler, "Object", "1:Boiler", references=(NodeReference("HasComponent", temp),)),
                UANode(temp, "Variable", "1:Temperature", parent_node_id=boiler),
            ),
        )

    def test_node_count(self, model):
        assert model.node_count == 2

    def test_get_node_by_expanded_id(self, model):
        node = model.get_node("nsu=urn:boiler;i=5002")
        assert node is not None
        assert node.browse_name == "1:Temperature"

    def test_get_node_missing_returns_none(self, model):
        assert model.get_node("nsu=urn:boiler;i=1") is None

    def test_count_by_class(self, model):
        assert model.count_by_class() == {"Object": 1, "Variable": 1}
