"""Unit tests for core/parse.py and core/inline.py"""

from macaroni.core.blocks import parse_block_elements
from macaroni.core.inline import parse_inline_elements
from macaroni.core.models import Document
from macaroni.core.parse import discover_files, parse_document, parse_file


def test_parse_document_combines_passes(sample_md):
    """parse_document returns the block pass output and an empty inline list."""
    doc = parse_document(sample_md)
    assert isinstance(doc, Document)
    assert doc.block_elements == parse_block_elements(sample_md)
    assert doc.inline_elements == []


def test_inline_pass_is_empty():
    """The inline pass does not produce elements yet."""
    source = "Hello, [world](https://en.wikipedia.org/wiki/World)!"
    assert parse_inline_elements(source, parse_block_elements(source)) == []


def test_parse_document_single_paragraph():
    """A one-line document is a root and one paragraph spanning the whole input."""
    source = "Hello, [world](https://en.wikipedia.org/wiki/World)!"
    doc = parse_document(source)
    assert [b.type for b in doc.block_elements] == ["root", "paragraph"]
    line = doc.block_elements[1].lines[0]
    assert (line.start.offset, line.end.offset) == (0, len(source))


def test_discover_files_single(tmp_path):
    """discover_files returns a list with one file when given a markdown file path."""
    f = tmp_path / "doc.md"
    f.write_text("# Hello")
    assert discover_files(f) == [f]


def test_discover_files_non_md_skipped(tmp_path):
    """discover_files ignores non-markdown files."""
    (tmp_path / "notes.txt").write_text("text")
    assert discover_files(tmp_path) == []
    assert discover_files(tmp_path / "notes.txt") == []


def test_discover_files_dir(tmp_path):
    """discover_files finds markdown files recursively, sorted."""
    (tmp_path / "b.md").write_text("b")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "a.mdx").write_text("a")
    assert discover_files(tmp_path) == [tmp_path / "b.md", sub / "a.mdx"]


def test_parse_file_reads_utf8(tmp_path):
    """parse_file decodes UTF-8 so offsets count bytes of the original file."""
    f = tmp_path / "doc.md"
    f.write_text("# Grüße\n", encoding="utf-8")
    doc = parse_file(f)
    heading = doc.block_elements[1]
    assert heading.type == "atxHeading"
    assert heading.content_range.end.offset == len("# Grüße".encode("utf-8"))
    assert heading.content_range.end.character == len("# Grüße")


def test_discover_files_skips_other_extensions(tmp_path):
    """Only .md and .mdx files are discovered."""
    (tmp_path / "a.markdown").write_text("a")
    (tmp_path / "b.md").write_text("b")
    assert discover_files(tmp_path) == [tmp_path / "b.md"]
