"""Catalog references in package.json manifests."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from catalog_lens.resolver import is_catalog_reference
from catalog_lens.store import CatalogStore

logger = logging.getLogger(__name__)

DEPENDENCY_SECTIONS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)


@dataclass
class CatalogDependency:
    """A dependency declared with a catalog reference."""

    section: str
    package_name: str
    reference: str


@dataclass
class CatalogHint:
    """A catalog dependency together with its resolved version."""

    dependency: CatalogDependency
    version: str

    @property
    def text(self) -> str:
        return placeholder_text(self.version)


def load_manifest(path: Path | str) -> Optional[dict[str, Any]]:
    """Load a package.json file.

    Args:
        path: Path to the manifest.

    Returns:
        Parsed manifest, or None if the file is missing or not a JSON object.
    """
    path = Path(path)

    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        return None
    return data


def iter_catalog_dependencies(
    manifest: dict[str, Any],
    sections: Sequence[str] = DEPENDENCY_SECTIONS,
) -> Iterator[CatalogDependency]:
    """Yield the dependencies of a manifest that use catalog references."""
    for section in sections:
        deps = manifest.get(section)
        if not isinstance(deps, dict):
            continue
        for package_name, value in deps.items():
            if isinstance(value, str) and is_catalog_reference(value):
                yield CatalogDependency(section, package_name, value)


def placeholder_text(version: str) -> str:
    """Inline replacement shown for a folded catalog reference."""
    return f'"{version}"'


def collect_hints(
    store: CatalogStore,
    manifest: dict[str, Any],
    sections: Sequence[str] = DEPENDENCY_SECTIONS,
) -> list[CatalogHint]:
    """Resolve every catalog dependency of a manifest.

    Dependencies whose reference does not resolve are left out.
    """
    hints = []
    for dep in iter_catalog_dependencies(manifest, sections):
        version = store.resolve_version(dep.package_name, dep.reference)
        if version is not None:
            hints.append(CatalogHint(dep, version))
    return hints
