"""Strategies deciding how the dependency graph splits into bundles.

Two strategies are supported:

- ``default``: every entrypoint owns the documents only it can reach.
  Documents reachable from two or more entrypoints stay standalone files,
  since merging them would duplicate their content.
- ``shell-merge``: a shell document shared by every route owns everything
  it can reach, including dependencies it shares with fragments. Each
  fragment then owns what is left that only it can reach.

Claims are processed shell first, then entrypoints in declaration order,
and the first claim wins. Entrypoints are never merged into another bundle,
and reachability stops at them: what lies behind an entrypoint belongs to
that entrypoint's side of the partition, not to whoever links to it.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Dict, Iterable, List, Optional, Set, Tuple

from .document import ReferenceKind
from .errors import MissingDependencyError, StrategyConflictError
from .graph import DependencyGraph

LOGGER = logging.getLogger(__name__)

DEFAULT_STRATEGY = "default"
SHELL_MERGE_STRATEGY = "shell-merge"

Partition = Dict[str, List[str]]


def followed_kinds(
    inline_scripts: bool, inline_css: bool
) -> AbstractSet[ReferenceKind]:
    """Reference kinds whose targets get merged; imports are always merged."""
    kinds = {ReferenceKind.IMPORT}
    if inline_scripts:
        kinds.add(ReferenceKind.SCRIPT)
    if inline_css:
        kinds.add(ReferenceKind.STYLESHEET)
    return frozenset(kinds)


def partition_graph(
    graph: DependencyGraph,
    entrypoints: Iterable[str],
    shell: Optional[str],
    kinds: AbstractSet[ReferenceKind],
) -> Tuple[str, Partition]:
    """Pick the strategy for ``shell`` and return its tag and partition."""
    if shell:
        return SHELL_MERGE_STRATEGY, shell_merge_partition(
            graph, entrypoints, shell, kinds
        )
    return DEFAULT_STRATEGY, default_partition(graph, entrypoints, kinds)


def default_partition(
    graph: DependencyGraph,
    entrypoints: Iterable[str],
    kinds: AbstractSet[ReferenceKind],
) -> Partition:
    ordered = _ordered(entrypoints)
    reach = _reachability(graph, ordered, kinds)
    return _claim_exclusive(ordered, reach, claimed=set())


def shell_merge_partition(
    graph: DependencyGraph,
    entrypoints: Iterable[str],
    shell: str,
    kinds: AbstractSet[ReferenceKind],
) -> Partition:
    if shell not in graph:
        raise StrategyConflictError(
            f"Shell {shell} is not part of the project's documents"
        )
    ordered = _ordered([shell, *entrypoints])
    reach = _reachability(graph, ordered, kinds)

    shell_members = list(reach[shell])
    partition: Partition = {shell: shell_members}
    partition.update(
        _claim_exclusive(ordered[1:], reach, claimed=set(shell_members))
    )
    LOGGER.debug("Shell %s hoisted %d documents", shell, len(shell_members) - 1)
    return partition


def _claim_exclusive(
    owners: List[str],
    reach: Dict[str, List[str]],
    claimed: Set[str],
) -> Partition:
    reach_sets = {owner: set(reach[owner]) for owner in owners}
    partition: Partition = {}
    for owner in owners:
        others = [reach_sets[other] for other in owners if other != owner]
        members = [owner]
        for url in reach[owner][1:]:
            if url in claimed or any(url in other for other in others):
                continue
            members.append(url)
        claimed.update(members)
        partition[owner] = members
    return partition


def _reachability(
    graph: DependencyGraph,
    entrypoints: List[str],
    kinds: AbstractSet[ReferenceKind],
) -> Dict[str, List[str]]:
    """Reach of each entrypoint, cut at every other entrypoint.

    The inliner links to other entrypoints instead of merging them, so
    nothing behind one can end up in the bundle that links to it.
    """
    for url in entrypoints:
        if url not in graph:
            raise MissingDependencyError(None, url)
    entry_set = frozenset(entrypoints)
    return {
        url: graph.reachable(url, kinds, stop=entry_set - {url}) for url in entrypoints
    }


def _ordered(urls: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(urls))
