"""
Module: importer.xml_utils

Purpose:
    Shared lxml helpers for the validator, the dependency extractor and the
    parser. Every document is parsed with the same hardened parser: no
    entity expansion, no DTD loading, no network access.

Key Functions:
    - parse_document(): Parse text into a root element
    - local_name(): Element tag without its XML namespace
    - iter_local(): Iterate descendants by local tag name
"""

from __future__ import annotations

from typing import Iterator

from lxml import etree


def make_parser() -> etree.XMLParser:
    """Create a hardened parser. Text is always handed over as UTF-8 bytes."""
    return etree.XMLParser(
        encoding="utf-8",
        resolve_entities=False,
        load_dtd=False,
        no_network=True,
        huge_tree=False,
        remove_comments=True,
    )


def parse_document(text: str, parser: etree.XMLParser | None = None) -> etree._Element:
    """
    Parse XML text into its root element.

    The text has already been decoded, so any encoding declaration in the
    prolog is ignored and the content is re-encoded as UTF-8.

    Raises:
        etree.XMLSyntaxError: If the text is not well-formed
    """
    if parser is None:
        parser = make_parser()
    return etree.fromstring(text.encode("utf-8"), parser)


def local_name(element: etree._Element) -> str:
    """Tag name without namespace; empty for comments and processing instructions."""
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname


def iter_local(root: etree._Element, name: str) -> Iterator[etree._Element]:
    """Iterate all descendants (and root) whose local tag name is ``name``."""
    return root.iter("{*}" + name)


def child(element: etree._Element, name: str) -> etree._Element | None:
    """First direct child with the given local name."""
    for candidate in element:
        if local_name(candidate) == name:
            return candidate
    return None


def children(element: etree._Element, name: str) -> list[etree._Element]:
    """All direct children with the given local name."""
    return [candidate for candidate in element if local_name(candidate) == name]
