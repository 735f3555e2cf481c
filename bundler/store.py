"""In-memory file store keyed by canonical URL."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .document import Content, FileEntry, Provenance
from .errors import BuildInProgressError

LOGGER = logging.getLogger(__name__)


class FileStore:
    """Mapping from canonical URL to file content.

    The store is populated during ingestion and rewritten by the reconciler.
    While a build holds :meth:`build_session`, direct mutation raises
    :class:`BuildInProgressError`; the build mutates through the
    :class:`StoreWriter` it was handed instead.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, FileEntry] = {}
        self._version = 0
        self._building = False

    @property
    def version(self) -> int:
        """Counter bumped on every mutation."""
        return self._version

    @property
    def building(self) -> bool:
        return self._building

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, url: str) -> Optional[FileEntry]:
        return self._entries.get(url)

    def urls(self) -> List[str]:
        return list(self._entries)

    def entries(self) -> List[FileEntry]:
        return list(self._entries.values())

    def add(self, url: str, content: Content) -> None:
        """Add an original file; a repeated URL replaces the earlier content."""
        self._check_unlocked()
        if url in self._entries:
            LOGGER.debug("Replacing previously ingested %s", url)
        self._set(FileEntry(url=url, content=content))

    def remove(self, url: str) -> None:
        self._check_unlocked()
        self._delete(url)

    def clear(self) -> None:
        self._check_unlocked()
        self._entries.clear()
        self._version += 1

    @contextmanager
    def build_session(self) -> Iterator["StoreWriter"]:
        """Hold the store exclusively for one build."""
        if self._building:
            raise BuildInProgressError("A build is already in progress")
        self._building = True
        try:
            yield StoreWriter(self)
        finally:
            self._building = False

    def _check_unlocked(self) -> None:
        if self._building:
            raise BuildInProgressError(
                "The file store cannot be modified while a build is in progress"
            )

    def _set(self, entry: FileEntry) -> None:
        self._entries[entry.url] = entry
        self._version += 1

    def _delete(self, url: str) -> None:
        if self._entries.pop(url, None) is not None:
            self._version += 1


class StoreWriter:
    """Mutation handle issued to the build that owns the store."""

    def __init__(self, store: FileStore) -> None:
        self._store = store

    def remove(self, url: str) -> None:
        self._store._delete(url)

    def upsert(self, url: str, content: Content) -> None:
        self._store._set(
            FileEntry(url=url, content=content, provenance=Provenance.BUNDLED)
        )
