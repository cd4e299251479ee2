"""Classification and lookup of pnpm catalog references.

A catalog reference is the value a ``package.json`` dependency uses instead of
a version range:

- ``catalog`` or ``catalog:`` selects the default catalog
- ``catalog:<name>`` selects the named catalog ``<name>``

Everything here is pure: no I/O and no caching.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from catalog_lens.store import CatalogData

CATALOG_PREFIX = "catalog"
NAMED_PREFIX = "catalog:"


class _DefaultCatalog:
    """Sentinel type for the unnamed default catalog."""

    def __repr__(self) -> str:
        return "<default>"


DEFAULT_CATALOG = _DefaultCatalog()

CatalogTarget = Union[_DefaultCatalog, str]


def is_catalog_reference(value: str) -> bool:
    """Return True if ``value`` refers to a catalog.

    ``catalogfoo`` shares the prefix but has no colon, so it is a plain
    version string rather than a reference.
    """
    if not value.startswith(CATALOG_PREFIX):
        return False
    if value == CATALOG_PREFIX:
        return True
    return ":" in value


def target_catalog_name(value: str) -> Optional[CatalogTarget]:
    """Return the catalog a reference points at.

    Args:
        value: A string, normally one that passed ``is_catalog_reference``.

    Returns:
        ``DEFAULT_CATALOG`` for ``catalog`` and ``catalog:``, the catalog name
        for ``catalog:<name>``, or None when ``value`` has no catalog target.
    """
    if not is_catalog_reference(value):
        return None
    if value in (CATALOG_PREFIX, NAMED_PREFIX):
        return DEFAULT_CATALOG
    if value.startswith(NAMED_PREFIX):
        return value[len(NAMED_PREFIX):]
    # e.g. "catalogx:y" carries a colon but no catalog name
    return None


def resolve(
    data: Optional["CatalogData"],
    package_name: str,
    catalog_reference: str,
) -> Optional[str]:
    """Resolve a package's catalog reference to a version string.

    Args:
        data: Parsed catalog data, or None when no catalog is available.
        package_name: Dependency name, e.g. ``react``.
        catalog_reference: Value from the dependency map, e.g. ``catalog:react17``.

    Returns:
        The version string, or None if anything along the way is missing.
    """
    if data is None:
        return None

    target = target_catalog_name(catalog_reference)
    if target is None:
        return None

    if target is DEFAULT_CATALOG:
        return data.default_catalog.get(package_name)

    catalog = data.named_catalogs.get(target)
    if catalog is None:
        return None
    return catalog.get(package_name)
