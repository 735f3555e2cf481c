"""Bundling engine: ingestion barrier plus the synchronous build phase.

A build runs in two phases. Files stream in first, in any order, through
:meth:`BundleEngine.add_file` or :meth:`BundleEngine.ingest`. Nothing can be
resolved until every file is known, so :meth:`BundleEngine.build` waits for
the explicit end-of-input signal before it parses anything. After that
barrier the build is a deterministic function of the file store and the
options.

Example usage:

    engine = BundleEngine(BundleOptions(root="app", entrypoints=["index.html"]))
    await engine.ingest(iter_project_files("app"))
    result = await engine.build()
    for path, content in result.files:
        ...
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Tuple, Union

from .config import BundleOptions
from .document import Content
from .errors import BundlerError, BuildInProgressError, IngestionAbortedError, OutOfRootError
from .graph import build_graph
from .inliner import inline_bundles, link_standalone_documents
from .manifest import BundleManifest, generate_manifest
from .parser import DocumentParser, SoupParser
from .reconcile import emit, reconcile, serialize_bundles
from .store import FileStore
from .strategy import followed_kinds
from .urls import path_to_url

LOGGER = logging.getLogger(__name__)

FileSource = Union[Iterable[Tuple[str, Content]], AsyncIterator[Tuple[str, Content]]]


@dataclass
class BundleResult:
    """Output of a build: the final file set and the manifest behind it."""

    files: List[Tuple[str, Content]] = field(default_factory=list)
    manifest: BundleManifest = field(default_factory=BundleManifest)
    stats: Dict[str, Any] = field(default_factory=dict)


class BundleEngine:
    """Owns one file store for the duration of a single build."""

    def __init__(
        self, options: BundleOptions, parser: Optional[DocumentParser] = None
    ) -> None:
        self.options = options
        self.parser = parser or SoupParser()
        self.store = FileStore()
        self.manifest: Optional[BundleManifest] = None
        self._input_complete = asyncio.Event()
        self._aborted = False
        self._built = False

    @property
    def input_complete(self) -> bool:
        return self._input_complete.is_set() and not self._aborted

    @property
    def aborted(self) -> bool:
        return self._aborted

    def add_file(self, path: str, content: Content) -> str:
        """Ingest one file and return its canonical URL.

        A path outside the project root aborts the whole build.
        """
        if self._aborted:
            raise IngestionAbortedError("Ingestion was aborted")
        if self._input_complete.is_set():
            raise BundlerError(f"Cannot add {path} after the end of input")
        try:
            url = path_to_url(self.options.root, path)
        except OutOfRootError:
            self.abort()
            raise
        self.store.add(url, content)
        return url

    def end_input(self) -> None:
        """Signal that every file has been ingested."""
        LOGGER.debug("End of input: %d files", len(self.store))
        self._input_complete.set()

    def abort(self) -> None:
        """Discard all state; pending and later builds produce no output."""
        if self.store.building:
            raise BuildInProgressError("Cannot abort a build that is already running")
        self._aborted = True
        self.store.clear()
        self.manifest = None
        self._input_complete.set()
        LOGGER.info("Ingestion aborted, discarded all files")

    async def ingest(self, files: FileSource) -> None:
        """Ingest every ``(path, content)`` pair, then signal end of input."""
        try:
            async for path, content in _iterate_files(files):
                self.add_file(path, content)
        except (Exception, asyncio.CancelledError):
            if not self._aborted:
                self.abort()
            raise
        self.end_input()

    async def build(self) -> BundleResult:
        """Wait for the end of input, then bundle and emit the final file set."""
        await self._input_complete.wait()
        if self._aborted:
            raise IngestionAbortedError("Ingestion was aborted; no output produced")
        if self._built:
            raise BundlerError("This engine has already completed a build")

        input_count = len(self.store)
        with self.store.build_session() as writer:
            graph = build_graph(self.store, self.parser)
            manifest = generate_manifest(graph, self.options)
            kinds = followed_kinds(self.options.inline_scripts, self.options.inline_css)
            merged = inline_bundles(graph, manifest, kinds)
            merged.update(link_standalone_documents(graph, manifest))
            outputs = serialize_bundles(self.parser, merged)
            reconcile(writer, manifest, outputs)

        self._built = True
        self.manifest = manifest
        files = emit(self.store, self.options.root)
        stats = {
            "input_files": input_count,
            "output_files": len(files),
            "bundles": len(manifest),
            "merged_files": sum(len(bundle.merged_files) for bundle in manifest),
        }
        LOGGER.info(
            "Bundled %d files into %d (%d bundles)",
            input_count,
            len(files),
            len(manifest),
        )
        return BundleResult(files=files, manifest=manifest, stats=stats)


async def _iterate_files(source: FileSource):
    if hasattr(source, "__aiter__"):
        async for item in source:
            yield item
        return
    for item in source:
        yield item
