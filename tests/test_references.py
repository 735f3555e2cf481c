"""Tests for bundler.references module."""

from bs4 import BeautifulSoup

from bundler.document import ReferenceKind
from bundler.references import parse_references, reference_attribute, reference_kind


def _soup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


class TestReferenceKind:
    def test_html_import(self):
        tag = _soup('<link rel="import" href="a.html">').link
        assert reference_kind(tag) is ReferenceKind.IMPORT

    def test_css_import(self):
        tag = _soup('<link rel="import" type="css" href="a.css">').link
        assert reference_kind(tag) is ReferenceKind.STYLESHEET

    def test_stylesheet(self):
        tag = _soup('<link rel="stylesheet" href="a.css">').link
        assert reference_kind(tag) is ReferenceKind.STYLESHEET

    def test_script_with_src(self):
        tag = _soup('<script src="a.js"></script>').script
        assert reference_kind(tag) is ReferenceKind.SCRIPT

    def test_inline_script_is_not_a_reference(self):
        assert reference_kind(_soup("<script>var a;</script>").script) is None

    def test_other_link_rel(self):
        assert reference_kind(_soup('<link rel="icon" href="a.ico">').link) is None

    def test_link_without_href(self):
        assert reference_kind(_soup('<link rel="import">').link) is None

    def test_reference_attribute(self):
        assert reference_attribute(ReferenceKind.SCRIPT) == "src"
        assert reference_attribute(ReferenceKind.IMPORT) == "href"


class TestParseReferences:
    def test_document_order_and_resolution(self):
        tree = _soup(
            '<link rel="stylesheet" href="../styles/app.css">'
            '<link rel="import" href="view.html">'
            '<script src="/lib/app.js"></script>'
        )
        references = parse_references("src/index.html", tree)
        assert [(ref.kind, ref.target) for ref in references] == [
            (ReferenceKind.STYLESHEET, "styles/app.css"),
            (ReferenceKind.IMPORT, "src/view.html"),
            (ReferenceKind.SCRIPT, "lib/app.js"),
        ]
        assert all(ref.source == "src/index.html" for ref in references)

    def test_node_handle_points_into_tree(self):
        tree = _soup('<div><link rel="import" href="a.html"></div>')
        (reference,) = parse_references("index.html", tree)
        assert reference.node is tree.div.link
        assert reference.href == "a.html"

    def test_external_references_skipped(self):
        tree = _soup(
            '<script src="https://cdn.example.com/x.js"></script>'
            '<link rel="stylesheet" href="//fonts.example.com/f.css">'
            '<link rel="import" href="{{base}}view.html">'
        )
        assert parse_references("index.html", tree) == []

    def test_out_of_root_skipped(self):
        tree = _soup('<link rel="import" href="../../outside.html">')
        assert parse_references("index.html", tree) == []

    def test_repeated_references_kept(self):
        tree = _soup('<link rel="import" href="a.html"><link rel="import" href="a.html">')
        assert len(parse_references("index.html", tree)) == 2
