"""Find where a catalog entry is declared in the workspace document.

Navigation needs a position rather than a value, so this re-reads the
document as a YAML node graph (``yaml.compose``) instead of using the cached
catalog data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from catalog_lens.resolver import DEFAULT_CATALOG, target_catalog_name

logger = logging.getLogger(__name__)

STR_TAG = "tag:yaml.org,2002:str"
NULL_TAG = "tag:yaml.org,2002:null"


@dataclass
class CatalogLocation:
    """Position of a catalog entry (1-based line and column)."""

    path: Optional[Path]
    line: int
    column: int
    key: str

    def __str__(self) -> str:
        prefix = f"{self.path}:" if self.path else ""
        return f"{prefix}{self.line}:{self.column}"


def _lookup(node: yaml.Node, key: str) -> Optional[tuple[yaml.Node, yaml.Node]]:
    """Return the (key, value) node pair for a string key of a mapping node.

    Duplicate keys resolve to the last occurrence, matching what
    ``yaml.safe_load`` keeps.
    """
    if not isinstance(node, yaml.MappingNode):
        return None
    found = None
    for key_node, value_node in node.value:
        if (
            isinstance(key_node, yaml.ScalarNode)
            and key_node.tag == STR_TAG
            and key_node.value == key
        ):
            found = (key_node, value_node)
    return found


def locate_entry(
    text: str,
    package_name: str,
    catalog_reference: str,
    path: Optional[Path] = None,
) -> Optional[CatalogLocation]:
    """Locate the entry a catalog reference resolves to.

    The value scalar is preferred as the target; an entry without a value
    falls back to its key.

    Args:
        text: Workspace document text.
        package_name: Dependency name to look up.
        catalog_reference: ``catalog:``, ``catalog`` or ``catalog:<name>``.
        path: Document path recorded in the result.

    Returns:
        CatalogLocation, or None when the entry does not exist.
    """
    target = target_catalog_name(catalog_reference)
    if target is None or not text.strip():
        return None

    try:
        root = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as e:
        logger.warning("Failed to parse %s: %s", path or "workspace document", e)
        return None
    if root is None:
        return None

    if target is DEFAULT_CATALOG:
        section = _lookup(root, "catalog")
    else:
        catalogs = _lookup(root, "catalogs")
        section = _lookup(catalogs[1], target) if catalogs else None
    if section is None:
        return None

    entry = _lookup(section[1], package_name)
    if entry is None:
        return None

    key_node, value_node = entry
    anchor = key_node
    if isinstance(value_node, yaml.ScalarNode) and not (
        value_node.tag == NULL_TAG and value_node.value == ""
    ):
        anchor = value_node

    return CatalogLocation(
        path=path,
        line=anchor.start_mark.line + 1,
        column=anchor.start_mark.column + 1,
        key=package_name,
    )
