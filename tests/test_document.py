"""Tests for bundler.document, bundler.parser and bundler.errors."""

import pytest
from bs4 import BeautifulSoup

from bundler.document import Document, FileEntry, Reference, ReferenceKind, is_html_url
from bundler.errors import (
    BuildInProgressError,
    BundlerError,
    MalformedDocumentError,
    MissingDependencyError,
    OutOfRootError,
)
from bundler.parser import DocumentParser, SoupParser


class TestDocument:
    def test_html_detection(self):
        assert Document(url="index.html", content="<p/>").is_html is True
        assert Document(url="page.HTM", content="<p/>").is_html is True
        assert Document(url="app.js", content="x").is_html is False
        assert Document(url="index.html", content=b"\xff").is_html is False

    def test_is_html_url(self):
        assert is_html_url("src/view.html")
        assert not is_html_url("src/view.css")

    def test_reference_equality_ignores_node(self):
        first = Reference("a.html", "b.html", ReferenceKind.IMPORT, "b.html", node=object())
        second = Reference("a.html", "b.html", ReferenceKind.IMPORT, "b.html", node=object())
        assert first == second

    def test_file_entry_text_decodes_bytes(self):
        assert FileEntry(url="a.txt", content=b"caf\xc3\xa9").text == "café"

    def test_reference_kind_values(self):
        assert ReferenceKind("stylesheet") is ReferenceKind.STYLESHEET


class TestSoupParser:
    def test_satisfies_protocol(self):
        assert isinstance(SoupParser(), DocumentParser)

    def test_round_trip_keeps_fragment_shape(self):
        parser = SoupParser()
        markup = '<dom-module id="x-card"><template><p>card</p></template></dom-module>'
        assert parser.serialize(parser.parse(markup)) == markup

    def test_parse_returns_soup(self):
        assert isinstance(SoupParser().parse("<p>x</p>"), BeautifulSoup)

    def test_serialize_rejects_foreign_objects(self):
        with pytest.raises(MalformedDocumentError):
            SoupParser().serialize("<p>x</p>")


class TestErrors:
    def test_all_errors_are_bundler_errors(self):
        assert issubclass(OutOfRootError, BundlerError)
        assert issubclass(BuildInProgressError, RuntimeError)

    def test_malformed_document_mentions_url(self):
        error = MalformedDocumentError("unclosed tag", url="a.html")
        assert str(error) == "a.html: unclosed tag"
        assert str(MalformedDocumentError("unclosed tag")) == "unclosed tag"

    def test_missing_dependency_messages(self):
        assert "index.html references missing document b.html" == str(
            MissingDependencyError("index.html", "b.html")
        )
        assert "Entrypoint" in str(MissingDependencyError(None, "index.html"))
