"""
Module: importer.parser

Purpose:
    Turns the raw text of one nodeset file into a NodesetModel. The raw text
    of every file in the current batch is passed alongside, so references
    that point into another file of the same batch resolve.

Key Functions:
    - parse_nodeset_file(): Main entry point
    - normalize_node_id(): Convert "ns=1;i=5001" into expanded form

Dependencies:
    - lxml: XML parsing
    - nodeset_toolkit.core.models: NodesetModel and friends

Used By:
    - importer.pipeline: Step 4 of the per-file sequence

A ParseError raised here aborts the whole batch, unlike validation,
duplicate and conflict failures which only skip one file.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from lxml import etree

from nodeset_toolkit.core.models import (
    BASE_NAMESPACE_URI,
    ModelInfo,
    NodeReference,
    NodesetModel,
    UANode,
    expanded_node_id,
)
from .errors import ParseError
from .xml_utils import child, children, local_name, parse_document

logger = logging.getLogger(__name__)

NODE_ELEMENTS = frozenset({
    "UAObject",
    "UAVariable",
    "UAMethod",
    "UAObjectType",
    "UAVariableType",
    "UADataType",
    "UAReferenceType",
    "UAView",
})

# ns=<index>; or nsu=<uri>; followed by i=, s=, g= or b=
_NODE_ID_RE = re.compile(r"^(?:ns=(\d+);|nsu=([^;]+);)?([isgb]=.+)$", re.DOTALL)


def parse_nodeset_file(
    text: str,
    file_name: str,
    batch_contents: Sequence[str] = (),
) -> NodesetModel:
    """
    Parse one nodeset file.

    Args:
        text: Raw XML of the file
        file_name: Name of the file (carried into the model and errors)
        batch_contents: Raw XML of every file in the current batch,
            including this one

    Returns:
        NodesetModel with expanded node ids

    Raises:
        ParseError: If the document is not parseable, is not a nodeset,
            or contains a node id that cannot be interpreted
    """
    try:
        root = parse_document(text)
    except etree.XMLSyntaxError as e:
        raise ParseError(f"{file_name}: {e}", file_name=file_name, line=e.lineno) from e

    if local_name(root) != "UANodeSet":
        raise ParseError(
            f"{file_name}: root element is <{local_name(root)}>, expected <UANodeSet>",
            file_name=file_name,
            line=root.sourceline,
        )

    namespace_uris = _read_namespace_uris(root)
    models = _read_models(root)
    raw_aliases = _read_aliases(root)

    aliases: Dict[str, str] = {}
    for alias, raw_id in raw_aliases.items():
        aliases[alias] = _normalize_or_raise(raw_id, namespace_uris, {}, file_name, None)

    nodes: List[UANode] = []
    for element in root:
        tag = local_name(element)
        if tag not in NODE_ELEMENTS:
            continue
        nodes.append(_read_node(element, tag, namespace_uris, aliases, file_name))

    known_ids = {node.node_id for node in nodes}
    for other in batch_contents:
        known_ids |= _index_node_ids(other)

    unresolved = tuple(
        ref
        for node in nodes
        for ref in node.references
        if ref.target not in known_ids and not _is_base_node(ref.target)
    )
    if unresolved:
        logger.debug(f"{file_name}: {len(unresolved)} references not resolved within the batch")

    return NodesetModel(
        file_name=file_name,
        namespace_uris=namespace_uris,
        models=models,
        aliases=aliases,
        nodes=tuple(nodes),
        unresolved_references=unresolved,
    )


def normalize_node_id(
    raw: str,
    namespace_uris: Sequence[str],
    aliases: Optional[Dict[str, str]] = None,
) -> Optional[str]:
    """
    Convert a node id as written in a file into expanded form.

    Aliases are expanded first. Namespace index 0 (or no index) is the base
    namespace; index k refers to the file's k-th <Uri>.

    Returns:
        Expanded node id, or None if ``raw`` is not a valid node id or uses
        a namespace index the file does not declare

    Example:
        >>> normalize_node_id("ns=1;i=5001", ["urn:boiler"])
        'nsu=urn:boiler;i=5001'
    """
    value = raw.strip()
    if aliases and value in aliases:
        return aliases[value]

    match = _NODE_ID_RE.match(value)
    if not match:
        return None
    index_text, explicit_uri, identifier = match.groups()
    if explicit_uri:
        return expanded_node_id(explicit_uri, identifier)

    index = int(index_text) if index_text else 0
    if index == 0:
        return expanded_node_id(BASE_NAMESPACE_URI, identifier)
    if index > len(namespace_uris):
        return None
    return expanded_node_id(namespace_uris[index - 1], identifier)


# ─────────────────────────────────────────────────────────────────────────────
# Header sections
# ─────────────────────────────────────────────────────────────────────────────

def _read_namespace_uris(root: etree._Element) -> Tuple[str, ...]:
    table = child(root, "NamespaceUris")
    if table is None:
        return ()
    return tuple((uri.text or "").strip() for uri in children(table, "Uri"))


def _read_models(root: etree._Element) -> Tuple[ModelInfo, ...]:
    models_element = child(root, "Models")
    if models_element is None:
        return ()
    models = []
    for model in children(models_element, "Model"):
        uri = model.get("ModelUri")
        if not uri:
            continue
        required = tuple(
            req.get("ModelUri")
            for req in children(model, "RequiredModel")
            if req.get("ModelUri")
        )
        models.append(ModelInfo(
            uri=uri,
            version=model.get("Version"),
            publication_date=model.get("PublicationDate"),
            required_models=required,
        ))
    return tuple(models)


def _read_aliases(root: etree._Element) -> Dict[str, str]:
    aliases_element = child(root, "Aliases")
    if aliases_element is None:
        return {}
    return {
        alias.get("Alias"): (alias.text or "").strip()
        for alias in children(aliases_element, "Alias")
        if alias.get("Alias")
    }


# ─────────────────────────────────────────────────────────────────────────────
# Nodes
# ─────────────────────────────────────────────────────────────────────────────

def _read_node(
    element: etree._Element,
    tag: str,
    namespace_uris: Tuple[str, ...],
    aliases: Dict[str, str],
    file_name: str,
) -> UANode:
    line = element.sourceline
    raw_id = element.get("NodeId")
    if not raw_id:
        raise ParseError(f"{file_name}: <{tag}> at line {line} has no NodeId", file_name=file_name, line=line)
    browse_name = element.get("BrowseName")
    if not browse_name:
        raise ParseError(
            f"{file_name}: node {raw_id} at line {line} has no BrowseName",
            file_name=file_name,
            line=line,
        )

    node_id = _normalize_or_raise(raw_id, namespace_uris, aliases, file_name, line)

    parent_node_id = None
    raw_parent = element.get("ParentNodeId")
    if raw_parent:
        parent_node_id = _normalize_or_raise(raw_parent, namespace_uris, aliases, file_name, line)

    display_element = child(element, "DisplayName")
    display_name = (display_element.text or "").strip() if display_element is not None else ""
    if not display_name:
        # BrowseName is "<ns index>:<name>" or just "<name>"
        display_name = browse_name.split(":", 1)[-1]

    references: List[NodeReference] = []
    references_element = child(element, "References")
    if references_element is not None:
        for ref in children(references_element, "Reference"):
            ref_line = ref.sourceline
            target = _normalize_or_raise(ref.text or "", namespace_uris, aliases, file_name, ref_line)
            ref_type = _normalize_or_raise(
                ref.get("ReferenceType", ""), namespace_uris, aliases, file_name, ref_line
            )
            is_forward = (ref.get("IsForward") or "true").strip().lower() != "false"
            references.append(NodeReference(reference_type=ref_type, target=target, is_forward=is_forward))

    return UANode(
        node_id=node_id,
        node_class=tag[2:],
        browse_name=browse_name,
        display_name=display_name,
        parent_node_id=parent_node_id,
        references=tuple(references),
    )


def _normalize_or_raise(
    raw: str,
    namespace_uris: Sequence[str],
    aliases: Dict[str, str],
    file_name: str,
    line: Optional[int],
) -> str:
    normalized = normalize_node_id(raw, namespace_uris, aliases)
    if normalized is None:
        where = f" at line {line}" if line else ""
        raise ParseError(
            f"{file_name}: invalid node id {raw.strip()!r}{where}",
            file_name=file_name,
            line=line,
        )
    return normalized


def _is_base_node(node_id: str) -> bool:
    return node_id.startswith(f"nsu={BASE_NAMESPACE_URI};")


@lru_cache(maxsize=16)
def _index_node_ids(text: str) -> FrozenSet[str]:
    """
    Expanded ids of every node declared by another file of the batch.

    Problems in the other file are ignored here; that file reports them
    when it is parsed itself.
    """
    try:
        root = parse_document(text)
    except etree.XMLSyntaxError:
        return frozenset()
    namespace_uris = _read_namespace_uris(root)
    ids = set()
    for element in root:
        if local_name(element) not in NODE_ELEMENTS:
            continue
        raw_id = element.get("NodeId")
        normalized = normalize_node_id(raw_id, namespace_uris) if raw_id else None
        if normalized:
            ids.add(normalized)
    return frozenset(ids)
