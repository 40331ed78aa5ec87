"""Unit tests for core/export.py"""

import json

import pytest

from macaroni.core.export import block_range, format_range, to_json, to_wire, write_document
from macaroni.core.models import Document
from macaroni.core.parse import parse_document


def test_to_wire_tagged_camel_case():
    """Elements carry a `type` tag next to their camelCase payload fields."""
    doc = parse_document("# Hi")
    assert to_wire(doc) == {
        "blockElements": [
            {"type": "root"},
            {
                "type": "atxHeading",
                "level": 1,
                "contentRange": {
                    "start": {"line": 0, "character": 2, "offset": 2},
                    "end": {"line": 0, "character": 4, "offset": 4},
                },
            },
        ],
        "inlineElements": [],
    }


def test_to_wire_fenced_code_without_info():
    """A missing info string is encoded as null."""
    block = to_wire(parse_document("```\nx\n```"))["blockElements"][1]
    assert block["type"] == "fencedCodeBlock"
    assert block["infoRange"] is None
    assert len(block["lines"]) == 1


def test_to_wire_blocks_only():
    """blocks_only drops the inline element list."""
    assert "inlineElements" not in to_wire(parse_document("text"), blocks_only=True)


def test_wire_encoding_validates_back(sample_md):
    """The wire dict validates back into an equal Document."""
    doc = parse_document(sample_md)
    assert Document.model_validate(to_wire(doc)).model_dump() == doc.model_dump()


def test_to_json_indent():
    """indent 0 yields compact single-line JSON."""
    doc = parse_document("> quote\n")
    assert "\n" not in to_json(doc, indent=0)
    assert json.loads(to_json(doc, indent=4)) == to_wire(doc)


def test_to_json_keeps_unicode():
    """Non-ASCII text is written as-is rather than escaped."""
    doc = parse_document("😀")
    assert json.loads(to_json(doc))["blockElements"][1]["lines"][0]["end"]["offset"] == 4


@pytest.mark.parametrize("source,index,expected", [
    ("# Hi", 0, "-"),
    ("# Hi", 1, "1:3-1:5"),
    ("> a\nb", 1, "-"),
    ("> a\nb", 2, "1:3-2:2"),
    ("```\n```", 1, "-"),
    ("    x\n    y", 1, "1:5-2:6"),
])
def test_block_range_formatting(source, index, expected):
    """Ranges print 1-based; blocks without content print `-`."""
    block = parse_document(source).block_elements[index]
    assert format_range(block_range(block)) == expected


def test_write_document_mirrors_source_dir(tmp_path, monkeypatch):
    """write_document places <stem>.json under output_dir / source parent."""
    monkeypatch.chdir(tmp_path)
    out = write_document(parse_document("# T"), tmp_path.joinpath("docs", "guide.md").relative_to(tmp_path), tmp_path / "dist")
    assert out == tmp_path / "dist" / "docs" / "guide.json"
    assert json.loads(out.read_text(encoding="utf-8"))["blockElements"][1]["type"] == "atxHeading"


def test_write_document_absolute_source(tmp_path):
    """Absolute source paths are nested under output_dir rather than escaping it."""
    source = tmp_path / "src" / "page.md"
    out = write_document(parse_document("p"), source, tmp_path / "dist")
    assert out.is_relative_to(tmp_path / "dist")
    assert out.name == "page.json"
