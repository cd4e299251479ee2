"""Keep a CatalogStore in sync with the workspace document on disk."""

from __future__ import annotations

import hashlib
import logging
import threading
from pathlib import Path
from typing import Iterable, Optional

from catalog_lens.store import CatalogStore

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0


def document_fingerprint(path: Path | str) -> Optional[str]:
    """Fingerprint the workspace document by content.

    Polling compares fingerprints, so a missing or unreadable document maps
    to None and its appearance or disappearance reads as a change.
    """
    try:
        content = Path(path).read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.debug("Cannot fingerprint %s: %s", path, e)
        return None
    return hashlib.sha256(content).hexdigest()


def is_workspace_event(path: Path | str, project_root: Path | str, filename: str) -> bool:
    """Return True if a changed path is the workspace document of the project."""
    path = Path(path)
    if path.name != filename:
        return False
    try:
        path.resolve().relative_to(Path(project_root).resolve())
    except ValueError:
        return False
    return True


class WorkspaceWatcher:
    """Refresh a store when its workspace document changes.

    Changes arrive either as batches of file-system events through
    ``handle_events`` or are detected by polling the document's content hash.
    """

    def __init__(self, store: CatalogStore, poll_interval: float = DEFAULT_POLL_INTERVAL):
        self.store = store
        self.poll_interval = poll_interval
        self._fingerprint = document_fingerprint(self._document_path)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def _document_path(self) -> Path:
        return self.store.project_root / self.store.filename

    def handle_events(self, paths: Iterable[Path | str]) -> bool:
        """Refresh the store once if any path in the batch is the workspace document.

        Returns:
            True if the store was refreshed.
        """
        if any(
            is_workspace_event(p, self.store.project_root, self.store.filename)
            for p in paths
        ):
            self.store.refresh()
            return True
        return False

    def check(self) -> bool:
        """Poll the document once; refresh the store if its content changed.

        Creation and deletion count as changes.

        Returns:
            True if the store was refreshed.
        """
        fingerprint = document_fingerprint(self._document_path)
        if fingerprint == self._fingerprint:
            return False
        self._fingerprint = fingerprint
        logger.info("Detected change to %s", self._document_path)
        self.store.refresh()
        return True

    def _run(self) -> None:
        while not self._stop.wait(self.poll_interval):
            self.check()

    def start(self) -> "WorkspaceWatcher":
        """Start polling in a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return self
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="catalog-lens-watcher", daemon=True
        )
        self._thread.start()
        return self

    def stop(self) -> None:
        """Stop polling and wait for the thread to exit."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> "WorkspaceWatcher":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.stop()


def activate(
    store: CatalogStore, poll_interval: float = DEFAULT_POLL_INTERVAL
) -> Optional[WorkspaceWatcher]:
    """Prepare a store at session start.

    Does nothing for projects without a workspace document. Otherwise the
    store is refreshed once and a started watcher is returned.
    """
    if not store.has_catalog_document():
        logger.debug("No %s under %s", store.filename, store.project_root)
        return None
    store.refresh()
    return WorkspaceWatcher(store, poll_interval=poll_interval).start()
