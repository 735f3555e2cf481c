"""Dependency graph over the documents of a completed file store."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import AbstractSet, Deque, Dict, List, Set

from .document import Document, Reference, ReferenceKind
from .errors import MalformedDocumentError, MissingDependencyError
from .parser import DocumentParser
from .references import parse_references
from .store import FileStore

LOGGER = logging.getLogger(__name__)

ALL_KINDS: AbstractSet[ReferenceKind] = frozenset(ReferenceKind)


@dataclass
class DependencyGraph:
    """Directed graph keyed by canonical URL; edges are document references."""

    documents: Dict[str, Document] = field(default_factory=dict)

    def __contains__(self, url: object) -> bool:
        return url in self.documents

    @property
    def nodes(self) -> List[str]:
        return list(self.documents)

    def document(self, url: str) -> Document:
        return self.documents[url]

    def references(self, url: str) -> List[Reference]:
        return self.documents[url].references

    def dependencies(
        self, url: str, kinds: AbstractSet[ReferenceKind] = ALL_KINDS
    ) -> List[str]:
        """Direct targets of ``url`` in source order, first occurrence only."""
        seen: Set[str] = set()
        targets: List[str] = []
        for reference in self.references(url):
            if reference.kind not in kinds or reference.target in seen:
                continue
            seen.add(reference.target)
            targets.append(reference.target)
        return targets

    def reachable(
        self,
        url: str,
        kinds: AbstractSet[ReferenceKind] = ALL_KINDS,
        stop: AbstractSet[str] = frozenset(),
    ) -> List[str]:
        """Breadth-first closure from ``url`` (included), safe on cycles.

        URLs in ``stop`` are neither included nor walked through.
        """
        order: List[str] = [url]
        seen: Set[str] = {url}
        queue: Deque[str] = deque([url])
        while queue:
            current = queue.popleft()
            for target in self.dependencies(current, kinds):
                if target in seen or target in stop:
                    continue
                seen.add(target)
                order.append(target)
                queue.append(target)
        return order


def build_graph(store: FileStore, parser: DocumentParser) -> DependencyGraph:
    """Parse every HTML document in ``store`` and link its references.

    The store must hold the complete file set: a reference can only be
    validated once its target is known to exist or not.
    """
    graph = DependencyGraph()
    edge_count = 0
    for entry in sorted(store.entries(), key=lambda item: item.url):
        document = Document(url=entry.url, content=entry.content)
        if document.is_html:
            document.tree = parse_document(parser, entry.url, entry.text)
            document.references = _linked_references(document, store)
            edge_count += len(document.references)
        graph.documents[entry.url] = document

    LOGGER.info(
        "Dependency graph: %d documents, %d references", len(graph.documents), edge_count
    )
    return graph


def parse_document(parser: DocumentParser, url: str, content: str):
    try:
        return parser.parse(content)
    except MalformedDocumentError as exc:
        if exc.url is None:
            exc.url = url
        raise
    except Exception as exc:
        raise MalformedDocumentError(str(exc), url=url) from exc


def _linked_references(document: Document, store: FileStore) -> List[Reference]:
    linked: List[Reference] = []
    for reference in parse_references(document.url, document.tree):
        if reference.target == document.url:
            LOGGER.warning(
                "Dropping self-reference %r in %s", reference.href, document.url
            )
            reference.node.decompose()
            continue
        if reference.target not in store:
            raise MissingDependencyError(document.url, reference.target)
        linked.append(reference)
    return linked
