"""Cached access to the catalogs declared in ``pnpm-workspace.yaml``.

The store parses the workspace document lazily and keeps the result until the
generation counter moves. The counter is bumped by ``refresh()`` (called from
file watchers and at startup) and whenever the document disappears, is
replaced by a different file at the same path, or is rewritten in place.

Parsed data is published as one immutable ``(generation, CatalogData)`` tuple,
so concurrent readers always see either the old or the new snapshot.
"""

from __future__ import annotations

import logging
import stat
import threading
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

import yaml

from catalog_lens import locator
from catalog_lens.resolver import resolve

logger = logging.getLogger(__name__)

WORKSPACE_FILENAME = "pnpm-workspace.yaml"

DEFAULT_SECTION = "catalog"
NAMED_SECTION = "catalogs"

TextLoader = Callable[[Path], str]


def _frozen(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class CatalogData:
    """Catalog entries of one successful parse of the workspace document."""

    default_catalog: Mapping[str, str] = field(default_factory=lambda: _frozen({}))
    named_catalogs: Mapping[str, Mapping[str, str]] = field(default_factory=lambda: _frozen({}))

    @classmethod
    def build(
        cls,
        default_catalog: Mapping[str, str],
        named_catalogs: Mapping[str, Mapping[str, str]],
    ) -> "CatalogData":
        """Create read-only catalog data from plain dicts."""
        return cls(
            default_catalog=_frozen(default_catalog),
            named_catalogs=_frozen(
                {name: _frozen(entries) for name, entries in named_catalogs.items()}
            ),
        )


def _project_entries(section: Any) -> dict[str, str]:
    """Keep the string-to-string entries of a catalog mapping."""
    if not isinstance(section, dict):
        return {}
    return {
        key: value
        for key, value in section.items()
        if isinstance(key, str) and isinstance(value, str)
    }


def project_catalog_data(tree: Any) -> Optional[CatalogData]:
    """Project a loaded YAML tree onto catalog data.

    Args:
        tree: Result of ``yaml.safe_load`` on the workspace document.

    Returns:
        CatalogData with empty sections for missing keys, or None when the
        top level is not a mapping.
    """
    if tree is None:
        return CatalogData()
    if not isinstance(tree, dict):
        logger.warning(
            "Top-level %s content must be a mapping, got %s",
            WORKSPACE_FILENAME,
            type(tree).__name__,
        )
        return None

    default_catalog = _project_entries(tree.get(DEFAULT_SECTION))

    named_catalogs: dict[str, dict[str, str]] = {}
    named_section = tree.get(NAMED_SECTION)
    if isinstance(named_section, dict):
        for name, section in named_section.items():
            if not isinstance(name, str) or not isinstance(section, dict):
                continue
            named_catalogs[name] = _project_entries(section)

    return CatalogData.build(default_catalog, named_catalogs)


def parse_workspace_text(text: str, source: str = WORKSPACE_FILENAME) -> Optional[CatalogData]:
    """Parse workspace document text into catalog data.

    Blank text and malformed YAML both yield None. Malformed YAML is logged,
    blank text is not.
    """
    if not text.strip():
        return None

    try:
        tree = yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.warning("Failed to parse %s: %s", source, e)
        return None

    data = project_catalog_data(tree)
    if data is not None:
        logger.info(
            "Parsed %s: defaultCatalog=%d entries, namedCatalogs=%d entries",
            source,
            len(data.default_catalog),
            len(data.named_catalogs),
        )
    return data


def read_document_text(path: Path) -> str:
    """Read the workspace document, tolerating a UTF-8 byte order mark."""
    return path.read_text(encoding="utf-8-sig")


FileIdentity = tuple[int, int, int, int, int]


def _file_identity(path: Path) -> Optional[FileIdentity]:
    """Return a stat fingerprint of a regular file, or None if there is none.

    Inode numbers are reused when a file is deleted and recreated, so size
    and change times are part of the fingerprint.
    """
    try:
        st = path.stat()
    except OSError:
        return None
    if not stat.S_ISREG(st.st_mode):
        return None
    return (st.st_dev, st.st_ino, st.st_size, st.st_mtime_ns, st.st_ctime_ns)


class CatalogStore:
    """Single source of truth for the catalogs of one project.

    Create one store per project root and share it between callers.
    """

    def __init__(
        self,
        project_root: Path | str,
        filename: str = WORKSPACE_FILENAME,
        loader: Optional[TextLoader] = None,
    ):
        """Initialize the store.

        Args:
            project_root: Directory expected to hold the workspace document.
            filename: Name of the workspace document.
            loader: Callable returning a document's text. Defaults to reading
                the file as UTF-8.
        """
        self.project_root = Path(project_root)
        self.filename = filename
        self._loader = loader or read_document_text

        self._lock = threading.Lock()
        self._generation = 0
        self._recompute_count = 0
        self._document: Optional[Path] = None
        self._identity: Optional[FileIdentity] = None
        self._snapshot: Optional[tuple[int, Optional[CatalogData]]] = None

    @property
    def generation(self) -> int:
        """Current cache generation token."""
        with self._lock:
            return self._generation

    @property
    def recompute_count(self) -> int:
        """Number of times catalog data has been recomputed."""
        with self._lock:
            return self._recompute_count

    def invalidate(self) -> None:
        """Mark cached data stale; the next read recomputes it."""
        with self._lock:
            self._generation += 1

    def refresh(self) -> None:
        """Invalidate cached data after the workspace document changed."""
        self.invalidate()
        logger.debug("Catalog cache invalidated for %s", self.project_root)

    def locate_document(self) -> Optional[Path]:
        """Find the workspace document under the project root.

        The found path is remembered while its stat fingerprint is unchanged.
        When the file disappears, is recreated or is edited, the cached data
        is invalidated along with the remembered path.

        Returns:
            Path to the document, or None if the project has none.
        """
        with self._lock:
            cached = self._document
            known_identity = self._identity

        if cached is not None:
            if _file_identity(cached) == known_identity:
                return cached
            with self._lock:
                if self._document == cached:
                    self._document = None
                    self._identity = None
                    self._generation += 1
            logger.debug("Workspace document %s is no longer valid", cached)

        candidate = self.project_root / self.filename
        identity = _file_identity(candidate)
        if identity is None:
            return None

        with self._lock:
            if identity != self._identity:
                self._identity = identity
                self._generation += 1
            self._document = candidate
        return candidate

    def has_catalog_document(self) -> bool:
        """Return True if the project has a workspace document."""
        return self.locate_document() is not None

    def current_data(self) -> Optional[CatalogData]:
        """Return catalog data for the current generation.

        Recomputes at most once per generation for sequential callers.
        Concurrent callers racing on a stale generation may both recompute.
        """
        document = self.locate_document()
        with self._lock:
            generation = self._generation
            snapshot = self._snapshot
        if snapshot is not None and snapshot[0] == generation:
            return snapshot[1]

        data = self._compute(document)

        with self._lock:
            # A refresh while computing means the result may already be stale.
            if self._generation == generation:
                self._snapshot = (generation, data)
        return data

    def _compute(self, document: Optional[Path]) -> Optional[CatalogData]:
        with self._lock:
            self._recompute_count += 1
        if document is None:
            return None
        return parse_workspace_text(self._read(document), source=str(document))

    def _read(self, document: Path) -> str:
        try:
            return self._loader(document)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s: %s", document, e)
            return ""

    def resolve_version(self, package_name: str, catalog_reference: str) -> Optional[str]:
        """Resolve a dependency's catalog reference to a version string.

        Args:
            package_name: The name of the package.
            catalog_reference: The catalog reference (e.g. "catalog:" or "catalog:react18").

        Returns:
            The resolved version or None if not found.
        """
        return resolve(self.current_data(), package_name, catalog_reference)

    def get_default_catalog(self) -> Optional[Mapping[str, str]]:
        """Gets the default catalog."""
        data = self.current_data()
        return data.default_catalog if data is not None else None

    def get_named_catalogs(self) -> Optional[Mapping[str, Mapping[str, str]]]:
        """Gets the named catalogs."""
        data = self.current_data()
        return data.named_catalogs if data is not None else None

    def locate_entry(
        self, package_name: str, catalog_reference: str
    ) -> Optional[locator.CatalogLocation]:
        """Find where a referenced catalog entry is declared in the document."""
        document = self.locate_document()
        if document is None:
            return None
        return locator.locate_entry(
            self._read(document), package_name, catalog_reference, path=document
        )
