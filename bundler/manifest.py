"""Bundle manifest: the planned output bundles of one build."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Tuple

from .errors import StrategyConflictError
from .graph import DependencyGraph
from .strategy import followed_kinds, partition_graph

if TYPE_CHECKING:
    from .config import BundleOptions

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bundle:
    """One output document and the files merged into it.

    ``files`` starts with the canonical ``url`` and follows breadth-first
    order from it, which is also the order content gets inlined in.
    """

    url: str
    files: Tuple[str, ...]
    strategy: str

    def __contains__(self, url: object) -> bool:
        return url in self.files

    @property
    def merged_files(self) -> Tuple[str, ...]:
        """Members that disappear from the output once inlined."""
        return self.files[1:]

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "files": list(self.files), "strategy": self.strategy}


@dataclass(frozen=True)
class BundleManifest:
    """Immutable collection of bundles, validated as a partition."""

    bundles: Tuple[Bundle, ...] = ()

    def __post_init__(self) -> None:
        owners: Dict[str, str] = {}
        for bundle in self.bundles:
            if not bundle.files or bundle.files[0] != bundle.url:
                raise StrategyConflictError(
                    f"Bundle {bundle.url} must list its own URL first"
                )
            for url in bundle.files:
                if url in owners:
                    raise StrategyConflictError(
                        f"{url} assigned to both {owners[url]} and {bundle.url}"
                    )
                owners[url] = bundle.url

    def __iter__(self) -> Iterator[Bundle]:
        return iter(self.bundles)

    def __len__(self) -> int:
        return len(self.bundles)

    @property
    def canonical_urls(self) -> List[str]:
        return [bundle.url for bundle in self.bundles]

    def bundle_for(self, url: str) -> Optional[Bundle]:
        """Return the bundle ``url`` is a member of, if any."""
        for bundle in self.bundles:
            if url in bundle:
                return bundle
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"bundles": [bundle.to_dict() for bundle in self.bundles]}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)


def generate_manifest(graph: DependencyGraph, options: "BundleOptions") -> BundleManifest:
    """Plan the bundles for ``graph``; a pure function of its inputs."""
    kinds = followed_kinds(options.inline_scripts, options.inline_css)
    strategy, partition = partition_graph(
        graph, options.entrypoints, options.shell, kinds
    )
    bundles = tuple(
        Bundle(url=url, files=tuple(members), strategy=strategy)
        for url, members in partition.items()
    )
    manifest = BundleManifest(bundles=bundles)
    LOGGER.info(
        "Manifest (%s): %d bundles merging %d files",
        strategy,
        len(bundles),
        sum(len(bundle.merged_files) for bundle in bundles),
    )
    return manifest
