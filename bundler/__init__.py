"""Bundle multi-document web applications into fewer delivery files.

This module provides a clean API for merging HTML entrypoints and the
fragments, scripts and stylesheets they reference into a minimal set of
bundles. It supports:

- Default bundling: every entrypoint absorbs what only it depends on
- Shell-merge bundling: a shared app shell absorbs common dependencies
- Optional inlining of external scripts and stylesheets
- Streaming ingestion with an explicit end-of-input barrier

Example usage:

    from bundler import BundleOptions, bundle_directory, bundle_files

    # Bundle a project directory
    options = BundleOptions(root="app", entrypoints=["index.html"])
    result = bundle_directory(options)
    for path, content in result.files:
        print(path)

    # Shell + fragments
    options = BundleOptions(
        root="app",
        entrypoints=["src/view-one.html", "src/view-two.html"],
        shell="src/app-shell.html",
    )
    result = bundle_directory(options)
    print(result.manifest.to_json())

    # In-memory files, paths relative to the root
    result = bundle_files(
        [("index.html", "<link rel=import href=part.html>"),
         ("part.html", "<p>part</p>")],
        BundleOptions(root="app", entrypoints=["index.html"]),
    )
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional

from .config import (
    BundleOptions,
    BundleOverrides,
    ProjectConfig,
    ProjectConfigError,
    build_bundle_options,
    load_project_config,
)
from .document import Document, FileEntry, Provenance, Reference, ReferenceKind
from .engine import BundleEngine, BundleResult, FileSource
from .errors import (
    BuildInProgressError,
    BundlerError,
    IngestionAbortedError,
    MalformedDocumentError,
    MissingDependencyError,
    OutOfRootError,
    SerializationError,
    StrategyConflictError,
)
from .ingest import iter_project_files
from .manifest import Bundle, BundleManifest, generate_manifest
from .parser import DocumentParser, SoupParser
from .urls import path_to_url, url_to_path

__all__ = [
    # Document types
    "Document",
    "FileEntry",
    "Provenance",
    "Reference",
    "ReferenceKind",
    # Manifest
    "Bundle",
    "BundleManifest",
    "generate_manifest",
    # Engine
    "BundleEngine",
    "BundleResult",
    "DocumentParser",
    "SoupParser",
    # Config
    "BundleOptions",
    "BundleOverrides",
    "ProjectConfig",
    "ProjectConfigError",
    "build_bundle_options",
    "load_project_config",
    # Identity mapping
    "path_to_url",
    "url_to_path",
    "iter_project_files",
    # Errors
    "BundlerError",
    "BuildInProgressError",
    "IngestionAbortedError",
    "MalformedDocumentError",
    "MissingDependencyError",
    "OutOfRootError",
    "SerializationError",
    "StrategyConflictError",
    # Bundling
    "bundle_files",
    "bundle_files_async",
    "bundle_directory",
    "bundle_directory_async",
]


async def bundle_files_async(
    files: FileSource,
    options: BundleOptions,
    *,
    parser: Optional[DocumentParser] = None,
) -> BundleResult:
    """
    Bundle an in-memory file set.

    Args:
        files: ``(path, content)`` pairs, sync or async, in any order.
        options: Bundle options (root, entrypoint URLs, shell, inlining).
        parser: Optional parser/serializer collaborator.

    Returns:
        BundleResult with the final file set and the manifest.

    Raises:
        BundlerError: Any build failure; no partial output is produced.
    """
    engine = BundleEngine(options, parser=parser)
    await engine.ingest(files)
    return await engine.build()


def bundle_files(
    files: FileSource,
    options: BundleOptions,
    *,
    parser: Optional[DocumentParser] = None,
) -> BundleResult:
    """Synchronous wrapper for bundle_files_async."""
    return asyncio.run(bundle_files_async(files, options, parser=parser))


async def bundle_directory_async(
    options: BundleOptions,
    *,
    exclude: Optional[Iterable[str]] = None,
    parser: Optional[DocumentParser] = None,
) -> BundleResult:
    """
    Bundle every file under ``options.root``.

    Args:
        options: Bundle options.
        exclude: Directories to leave out, typically the build output.
        parser: Optional parser/serializer collaborator.

    Returns:
        BundleResult with the final file set and the manifest.
    """
    return await bundle_files_async(
        iter_project_files(options.root, exclude=exclude), options, parser=parser
    )


def bundle_directory(
    options: BundleOptions,
    *,
    exclude: Optional[Iterable[str]] = None,
    parser: Optional[DocumentParser] = None,
) -> BundleResult:
    """Synchronous wrapper for bundle_directory_async."""
    return asyncio.run(
        bundle_directory_async(options, exclude=exclude, parser=parser)
    )
