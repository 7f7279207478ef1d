"""Tests for document loading and image discovery."""

from pathlib import Path

import pytest

from markmail.document.loader import (
    load_document,
    load_document_file,
    parse_dimension,
)
from markmail.exceptions import ParseError


class TestParseDimension:
    """Tests for parse_dimension."""

    def test_plain_integer(self):
        assert parse_dimension("120") == 120

    def test_px_suffix(self):
        assert parse_dimension("120px") == 120
        assert parse_dimension(" 64 PX ") == 64

    def test_absent(self):
        assert parse_dimension(None) is None

    def test_percentage_ignored(self):
        assert parse_dimension("50%") is None

    def test_zero_ignored(self):
        assert parse_dimension("0") is None

    def test_garbage_ignored(self):
        assert parse_dimension("wide") is None


class TestLoadDocument:
    """Tests for load_document."""

    def test_identifiers_in_scan_order(self, tmp_path):
        """N images yield part-0..part-N-1 in document order."""
        markup = (
            "<html><body>"
            '<p><img src="a.png"></p>'
            '<div><span><img src="b.png"></span></div>'
            '<img src="c.png">'
            "</body></html>"
        )

        document = load_document(markup, tmp_path)

        assert [r.identifier for r in document.references] == ["part-0", "part-1", "part-2"]
        assert [r.src for r in document.references] == ["a.png", "b.png", "c.png"]

    def test_requested_dimensions(self, tmp_path):
        """Width/height attributes become requested dimensions."""
        markup = '<img src="a.png" width="100"><img src="b.png" width="40" height="30px">'

        document = load_document(markup, tmp_path)
        first, second = document.references

        assert (first.width, first.height) == (100, None)
        assert (second.width, second.height) == (40, 30)

    def test_image_without_src_skipped(self, tmp_path):
        """Images without a src attribute are not numbered."""
        markup = '<img alt="nothing"><img src="x.png"><img src="">'

        document = load_document(markup, tmp_path)

        assert len(document.references) == 1
        assert document.references[0].identifier == "part-0"
        assert document.references[0].src == "x.png"

    def test_no_images(self, tmp_path):
        document = load_document("<p>Hello</p>", tmp_path)
        assert document.references == []

    def test_nodes_are_live(self, tmp_path):
        """Rewriting a reference changes the serialized document."""
        document = load_document('<p><img src="a.png"></p>', tmp_path)

        document.references[0].rewrite_src()

        assert 'src="cid:part-0"' in document.serialize()
        assert "a.png" not in document.serialize()

    def test_base_dir_resolved(self, tmp_path):
        document = load_document("<p></p>", tmp_path / "sub" / "..")
        assert document.base_dir == tmp_path.resolve()

    def test_bytes_input(self, tmp_path):
        markup = '<html><head><meta charset="utf-8"></head><body><img src="ü.png"></body></html>'

        document = load_document(markup.encode("utf-8"), tmp_path)

        assert document.references[0].src == "ü.png"

    def test_undecodable_bytes(self, tmp_path):
        """Bytes that are invalid in their declared encoding raise ParseError."""
        markup = b'<html><head><meta charset="utf-8"></head><body>\xff\xfe\xfa</body></html>'

        with pytest.raises(ParseError):
            load_document(markup, tmp_path)

    def test_bytes_default_to_utf8(self, tmp_path):
        """Undeclared bytes must be UTF-8."""
        with pytest.raises(ParseError):
            load_document("<p>caf\u00e9</p>".encode("latin-1"), tmp_path)

    def test_declared_encoding_respected(self, tmp_path):
        markup = '<meta charset="iso-8859-1"><img src="caf\u00e9.png">'.encode("latin-1")

        document = load_document(markup, tmp_path)

        assert document.references[0].src == "caf\u00e9.png"


class TestLoadDocumentFile:
    """Tests for load_document_file."""

    def test_base_dir_is_parent(self, tmp_path):
        path = tmp_path / "docs" / "page.html"
        path.parent.mkdir()
        path.write_text('<img src="img/a.png">', encoding="utf-8")

        document = load_document_file(path)

        assert document.base_dir == path.parent.resolve()
        assert len(document.references) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(ParseError):
            load_document_file(Path(tmp_path / "missing.html"))
