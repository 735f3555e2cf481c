"""Helpers for extracting outbound references from parsed documents."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Tuple

from .document import Reference, ReferenceKind
from .urls import resolve_url

LOGGER = logging.getLogger(__name__)


def parse_references(url: str, tree: Any) -> List[Reference]:
    """Collect the references of one document in source order.

    External specifiers (other origins, ``data:`` URLs, template bindings)
    and specifiers escaping the project root are not references.
    """
    references: List[Reference] = []
    for tag, kind, href in _iter_reference_tags(tree):
        target = resolve_url(url, href)
        if target is None:
            LOGGER.debug("Leaving external %s reference %r in %s", kind.value, href, url)
            continue
        references.append(
            Reference(source=url, target=target, kind=kind, href=href, node=tag)
        )
    return references


def reference_kind(tag: Any) -> Optional[ReferenceKind]:
    """Classify an element, or return None when it carries no reference."""
    if tag.name == "script":
        return ReferenceKind.SCRIPT if tag.has_attr("src") else None
    if tag.name != "link" or not tag.has_attr("href"):
        return None
    rels = _rel_values(tag)
    if "import" in rels:
        if (tag.get("type") or "").strip().lower() == "css":
            return ReferenceKind.STYLESHEET
        return ReferenceKind.IMPORT
    if "stylesheet" in rels:
        return ReferenceKind.STYLESHEET
    return None


def reference_attribute(kind: ReferenceKind) -> str:
    return "src" if kind is ReferenceKind.SCRIPT else "href"


def _iter_reference_tags(tree: Any) -> Iterable[Tuple[Any, ReferenceKind, str]]:
    for tag in tree.find_all(["link", "script"]):
        kind = reference_kind(tag)
        if kind is None:
            continue
        yield tag, kind, tag.get(reference_attribute(kind)) or ""


def _rel_values(tag: Any) -> List[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [value.strip().lower() for value in rel]
