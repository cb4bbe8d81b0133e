"""
Module: importer.dependencies

Purpose:
    Pre-flight scan of a nodeset for the external models it requires
    (<Models><Model><RequiredModel ModelUri="..."/>). Used only when a batch
    holds a single file: a lone file that needs other models cannot be
    resolved, so the operator is asked to select them together.
"""

from __future__ import annotations

import logging
from typing import List

from lxml import etree

from nodeset_toolkit.core.models import BASE_NAMESPACE_URI
from .xml_utils import iter_local, parse_document

logger = logging.getLogger(__name__)


def get_required_models(xml_text: str) -> List[str]:
    """
    List the model URIs a nodeset requires, in document order.

    The OPC UA base model is always present and never reported. Text that
    is not well-formed yields an empty list; the validator reports it.

    Args:
        xml_text: Raw nodeset XML

    Returns:
        Required model URIs, excluding the base model

    Example:
        >>> get_required_models(
        ...     '<UANodeSet><Models><Model ModelUri="urn:a">'
        ...     '<RequiredModel ModelUri="http://opcfoundation.org/UA/"/>'
        ...     '<RequiredModel ModelUri="urn:di"/></Model></Models></UANodeSet>'
        ... )
        ['urn:di']
    """
    try:
        root = parse_document(xml_text)
    except etree.XMLSyntaxError as e:
        logger.debug(f"Skipping required-model scan of malformed XML: {e}")
        return []

    required: List[str] = []
    for element in iter_local(root, "RequiredModel"):
        model_uri = element.get("ModelUri")
        if model_uri and model_uri != BASE_NAMESPACE_URI:
            required.append(model_uri)
    return required
