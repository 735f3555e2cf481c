"""Data structures representing project documents and their references."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union

Content = Union[str, bytes]

HTML_EXTENSIONS = (".html", ".htm")


class ReferenceKind(str, Enum):
    """Kinds of outbound references a document can carry."""

    IMPORT = "import"
    SCRIPT = "script"
    STYLESHEET = "stylesheet"


class Provenance(str, Enum):
    ORIGINAL = "original"
    BUNDLED = "bundled"


@dataclass(slots=True)
class Reference:
    """Outbound reference from one document to another.

    ``node`` is the element in the source document's tree that carries the
    reference; the inliner replaces, removes or rewrites it in place.
    """

    source: str
    target: str
    kind: ReferenceKind
    href: str
    node: Any = field(default=None, repr=False, compare=False)


@dataclass(slots=True)
class FileEntry:
    """A single file held by the store."""

    url: str
    content: Content
    provenance: Provenance = Provenance.ORIGINAL

    @property
    def text(self) -> str:
        if isinstance(self.content, bytes):
            return self.content.decode("utf-8", errors="replace")
        return self.content


@dataclass(slots=True)
class Document:
    """A graph node: a file plus its parsed tree and outbound references."""

    url: str
    content: Content
    tree: Optional[Any] = field(default=None, repr=False)
    references: List[Reference] = field(default_factory=list)

    @property
    def is_html(self) -> bool:
        return is_html_url(self.url) and isinstance(self.content, str)


def is_html_url(url: str) -> bool:
    return url.lower().endswith(HTML_EXTENSIONS)
