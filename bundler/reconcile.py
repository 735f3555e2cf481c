"""Reconcile the original file set with the bundled output."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

from .document import Content
from .errors import SerializationError
from .manifest import BundleManifest
from .parser import DocumentParser
from .store import FileStore, StoreWriter
from .urls import url_to_path

LOGGER = logging.getLogger(__name__)


def serialize_bundles(parser: DocumentParser, merged: Dict[str, Any]) -> Dict[str, str]:
    """Serialize every merged tree before anything in the store changes."""
    outputs: Dict[str, str] = {}
    for url, tree in merged.items():
        try:
            outputs[url] = parser.serialize(tree)
        except Exception as exc:
            raise SerializationError(url, str(exc)) from exc
    return outputs


def reconcile(
    writer: StoreWriter, manifest: BundleManifest, outputs: Dict[str, str]
) -> None:
    """Drop merged members and install every rewritten document.

    ``outputs`` holds the bundles under their canonical URLs plus any
    standalone documents repointed at them.
    """
    removed = 0
    for bundle in manifest:
        for url in bundle.merged_files:
            writer.remove(url)
            removed += 1
    for url, content in outputs.items():
        writer.upsert(url, content)
    LOGGER.info("Installed %d documents, removed %d merged files", len(outputs), removed)


def emit(store: FileStore, root: str) -> List[Tuple[str, Content]]:
    """Return the store as ``(path, content)`` pairs ordered by URL."""
    return [
        (url_to_path(root, entry.url), entry.content)
        for entry in sorted(store.entries(), key=lambda item: item.url)
    ]
