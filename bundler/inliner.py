"""Merge the members of each bundle into its canonical document tree.

Each reference kind maps to one inlining policy:

- imports are replaced by the imported document's content, after the
  imported document's own references have been merged into it,
- scripts become inline ``<script>`` elements,
- stylesheets become ``<style>`` elements with ``url()`` rebased.

A per-bundle set of inlined URLs (seeded with the canonical URL) makes a
second reference to the same target a plain removal. The same set breaks
cycles, because a back-edge always points at a URL already in it.

The canonical tree is edited in place and the trees of the other members
are consumed: their nodes move into the canonical tree.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import AbstractSet, Any, Callable, Dict, List, Set

from bs4 import BeautifulSoup, Doctype

from .document import Content, Document, Reference, ReferenceKind
from .errors import MalformedDocumentError, StrategyConflictError
from .graph import DependencyGraph
from .manifest import Bundle, BundleManifest
from .references import reference_attribute
from .urls import rebase_css_urls, rebase_href, relative_url

LOGGER = logging.getLogger(__name__)

URL_ATTRIBUTES = ("href", "src", "action", "poster")
_SCRIPT_CLOSE = re.compile(r"</(script)", re.IGNORECASE)


@dataclass
class _BundleContext:
    graph: DependencyGraph
    manifest: BundleManifest
    bundle: Bundle
    tree: BeautifulSoup
    kinds: AbstractSet[ReferenceKind]
    inlined: Set[str] = field(default_factory=set)
    linked_bundles: Set[str] = field(default_factory=set)
    standalone: bool = False


def inline_bundles(
    graph: DependencyGraph,
    manifest: BundleManifest,
    kinds: AbstractSet[ReferenceKind],
) -> Dict[str, Any]:
    """Inline every bundle of ``manifest``; returns merged trees by bundle URL.

    Bundles whose canonical document is not HTML have nothing to merge and
    are left out of the result.
    """
    merged: Dict[str, Any] = {}
    for bundle in manifest:
        canonical = graph.document(bundle.url)
        if canonical.tree is None:
            LOGGER.warning("Skipping non-HTML bundle entrypoint %s", bundle.url)
            continue
        merged[bundle.url] = inline_bundle(graph, manifest, bundle, kinds)
    return merged


def inline_bundle(
    graph: DependencyGraph,
    manifest: BundleManifest,
    bundle: Bundle,
    kinds: AbstractSet[ReferenceKind],
) -> BeautifulSoup:
    canonical = graph.document(bundle.url)
    context = _BundleContext(
        graph=graph,
        manifest=manifest,
        bundle=bundle,
        tree=canonical.tree,
        kinds=kinds,
        inlined={bundle.url},
    )
    _inline_references(context, canonical)
    missed = [url for url in bundle.merged_files if url not in context.inlined]
    if missed:
        # Reconcile deletes every merged file, so this would lose content.
        raise StrategyConflictError(
            f"Bundle {bundle.url} never inlined its members {', '.join(missed)}"
        )
    LOGGER.debug("Inlined %d files into %s", len(context.inlined) - 1, bundle.url)
    return canonical.tree


def _inline_references(context: _BundleContext, document: Document) -> None:
    for reference in document.references:
        if reference.target in context.bundle and reference.kind in context.kinds:
            _INLINE_POLICIES[reference.kind](context, reference)
        else:
            _link_external(context, reference)


def _inline_import(context: _BundleContext, reference: Reference) -> None:
    if _already_inlined(context, reference):
        return
    document = context.graph.document(reference.target)
    if document.tree is None:
        raise MalformedDocumentError(
            f"Imported from {reference.source} but is not an HTML document",
            url=reference.target,
        )
    _rebase_own_urls(document, context.bundle.url)
    _inline_references(context, document)
    for node in _document_nodes(document.tree):
        reference.node.insert_before(node.extract())
    reference.node.decompose()


def _inline_script(context: _BundleContext, reference: Reference) -> None:
    if _already_inlined(context, reference):
        return
    script = context.tree.new_tag("script")
    for name, value in reference.node.attrs.items():
        if name != "src":
            script[name] = value
    script.string = _SCRIPT_CLOSE.sub(r"<\\/\1", _text_of(context, reference.target))
    reference.node.replace_with(script)


def _inline_stylesheet(context: _BundleContext, reference: Reference) -> None:
    if _already_inlined(context, reference):
        return
    style = context.tree.new_tag("style")
    media = reference.node.get("media")
    if media:
        style["media"] = media
    style.string = rebase_css_urls(
        _text_of(context, reference.target), reference.target, context.bundle.url
    )
    reference.node.replace_with(style)


_INLINE_POLICIES: Dict[ReferenceKind, Callable[[_BundleContext, Reference], None]] = {
    ReferenceKind.IMPORT: _inline_import,
    ReferenceKind.SCRIPT: _inline_script,
    ReferenceKind.STYLESHEET: _inline_stylesheet,
}


def _already_inlined(context: _BundleContext, reference: Reference) -> bool:
    """Claim ``reference.target``; drop the node if it was claimed before."""
    if reference.target in context.inlined:
        LOGGER.debug(
            "Dropping repeated %s of %s in %s",
            reference.kind.value,
            reference.target,
            reference.source,
        )
        reference.node.decompose()
        return True
    context.inlined.add(reference.target)
    return False


def _link_external(context: _BundleContext, reference: Reference) -> None:
    """Keep a reference to a document outside this bundle resolvable."""
    attribute = reference_attribute(reference.kind)
    owner = context.manifest.bundle_for(reference.target)
    if owner is not None and owner is not context.bundle:
        if reference.kind is ReferenceKind.IMPORT:
            if owner.url in context.linked_bundles:
                reference.node.decompose()
                return
            context.linked_bundles.add(owner.url)
            reference.node[attribute] = relative_url(context.bundle.url, owner.url)
            return
        if reference.target != owner.url:
            _link_hoisted_asset(context, reference)
            return
    reference.node[attribute] = rebase_href(
        reference.href, reference.source, context.bundle.url
    )


def _link_hoisted_asset(context: _BundleContext, reference: Reference) -> None:
    """Handle a script or stylesheet merged into another bundle.

    Within a bundle that loads after its owner, a document-level reference
    is already satisfied and is dropped. Stylesheets outside ``<head>`` are
    scoped to where they sit (a ``<dom-module>`` template, say), and a
    standalone document may load without the owner at all: both get their
    own inline copy.
    """
    scoped = (
        reference.kind is ReferenceKind.STYLESHEET
        and reference.node.find_parent("head") is None
    )
    if context.standalone or scoped:
        _INLINE_POLICIES[reference.kind](context, reference)
        return
    reference.node.decompose()


def link_standalone_documents(
    graph: DependencyGraph, manifest: BundleManifest
) -> Dict[str, Any]:
    """Repoint standalone HTML documents that reference merged files.

    Returns the edited trees by URL; documents with nothing to repoint are
    left out and pass through unchanged.
    """
    merged = {url for bundle in manifest for url in bundle.merged_files}
    relinked: Dict[str, Any] = {}
    for url in graph.nodes:
        document = graph.document(url)
        if document.tree is None or manifest.bundle_for(url) is not None:
            continue
        if not any(reference.target in merged for reference in document.references):
            continue
        context = _BundleContext(
            graph=graph,
            manifest=manifest,
            bundle=Bundle(url=url, files=(url,), strategy="standalone"),
            tree=document.tree,
            kinds=frozenset(),
            inlined={url},
            standalone=True,
        )
        for reference in document.references:
            if reference.target in merged:
                _link_external(context, reference)
        relinked[url] = document.tree
    if relinked:
        LOGGER.info("Repointed %d standalone documents at bundles", len(relinked))
    return relinked


def _rebase_own_urls(document: Document, bundle_url: str) -> None:
    """Rebase a member's relative URLs before its nodes move into the bundle."""
    references = {id(reference.node) for reference in document.references}
    for tag in document.tree.find_all(True):
        if id(tag) in references:
            continue
        for attribute in URL_ATTRIBUTES:
            value = tag.get(attribute)
            if isinstance(value, str):
                tag[attribute] = rebase_href(value, document.url, bundle_url)
        style = tag.get("style")
        if isinstance(style, str):
            tag["style"] = rebase_css_urls(style, document.url, bundle_url)
        if tag.name == "style" and tag.string:
            tag.string = rebase_css_urls(str(tag.string), document.url, bundle_url)


def _document_nodes(tree: BeautifulSoup) -> List[Any]:
    containers = [
        node for node in (tree.find("head"), tree.find("body")) if node is not None
    ]
    if not containers:
        containers = [tree.html if tree.html is not None else tree]
    nodes: List[Any] = []
    for container in containers:
        nodes.extend(node for node in container.contents if not isinstance(node, Doctype))
    return nodes


def _text_of(context: _BundleContext, url: str) -> str:
    content: Content = context.graph.document(url).content
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content
