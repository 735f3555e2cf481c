"""Parser/serializer collaborator used by the engine.

The engine never touches markup grammar itself. It asks a
:class:`DocumentParser` for a tree, edits the tree through BeautifulSoup's
element API and hands it back for serialization.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from bs4 import BeautifulSoup

from .errors import MalformedDocumentError


@runtime_checkable
class DocumentParser(Protocol):
    """Turns document text into a mutable tree and back."""

    def parse(self, content: str) -> Any:
        ...

    def serialize(self, tree: Any) -> str:
        ...


class SoupParser:
    """BeautifulSoup-backed parser using the stdlib ``html.parser`` builder.

    ``html.parser`` keeps fragments as they are written: it does not wrap
    imported fragments in ``<html>``/``<body>`` the way lxml or html5lib do.
    """

    features = "html.parser"

    def parse(self, content: str) -> BeautifulSoup:
        try:
            return BeautifulSoup(content, self.features)
        except Exception as exc:
            raise MalformedDocumentError(f"Could not parse document: {exc}") from exc

    def serialize(self, tree: Any) -> str:
        if not isinstance(tree, BeautifulSoup):
            raise MalformedDocumentError(
                f"Expected a parsed document, got {type(tree).__name__}"
            )
        try:
            return tree.decode(formatter="minimal")
        except Exception as exc:
            raise MalformedDocumentError(
                f"Could not serialize document: {exc}"
            ) from exc
