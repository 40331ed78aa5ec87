"""Wire encoding of parsed documents: camelCase, type-tagged JSON"""

import json
from pathlib import Path
from typing import Any, Optional, assert_never

from macaroni.core.models import (
    AtxHeading,
    BlockElement,
    BlockQuote,
    Document,
    FencedCodeBlock,
    IndentedCodeBlock,
    Paragraph,
    Range,
    Root,
    SetextHeading,
)


def to_wire(doc: Document, blocks_only: bool = False) -> dict[str, Any]:
    """Return the document as a plain dict; every element carries its `type` tag next to its fields."""
    data = doc.model_dump(mode='json', by_alias=True)
    if blocks_only:
        data.pop('inlineElements', None)
    return data


def to_json(doc: Document, indent: int = 2, blocks_only: bool = False) -> str:
    return json.dumps(to_wire(doc, blocks_only), indent=indent or None, ensure_ascii=False)


def block_range(block: BlockElement) -> Optional[Range]:
    """The source span a block covers, or None for blocks without recorded content."""
    match block:
        case Root() | BlockQuote():
            return None
        case Paragraph() | FencedCodeBlock() | IndentedCodeBlock():
            if not block.lines:
                return None
            return Range(start=block.lines[0].start, end=block.lines[-1].end)
        case AtxHeading() | SetextHeading():
            return block.content_range
        case _:
            assert_never(block)


def format_range(range_: Optional[Range]) -> str:
    """`line:character-line:character`, 1-based like editor gutters; `-` for no range."""
    if range_ is None:
        return "-"
    start, end = range_.start, range_.end
    return f"{start.line + 1}:{start.character + 1}-{end.line + 1}:{end.character + 1}"


def write_document(
    doc: Document,
    source: Path,
    output_dir: Path,
    indent: int = 2,
    blocks_only: bool = False,
    ) -> Path:
    """Write the document JSON for source.

    Output path mirrors the source directory structure (anchor dropped for absolute paths):
      output_dir / source.parent / source.stem.json
    """
    parent = source.parent.relative_to(source.anchor) if source.is_absolute() else source.parent
    dest_dir = output_dir / parent
    dest_dir.mkdir(parents=True, exist_ok=True)
    json_path = dest_dir / f"{source.stem}.json"
    json_path.write_text(to_json(doc, indent, blocks_only), encoding='utf-8')
    return json_path
