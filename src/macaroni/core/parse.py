"""File discovery and document assembly from the block and inline passes"""

import logging
from pathlib import Path

from macaroni.core.blocks import parse_block_elements
from macaroni.core.inline import parse_inline_elements
from macaroni.core.models import Document


logger = logging.getLogger(__name__)

MD_EXTENSIONS = {'.md', '.mdx'}


def parse_document(source: str) -> Document:
    """Parse block elements, then the inline elements within them."""
    block_elements = parse_block_elements(source)
    inline_elements = parse_inline_elements(source, block_elements)
    return Document(block_elements=block_elements, inline_elements=inline_elements)


def discover_files(path: Path) -> list[Path]:
    """Return sorted markdown files under path, or [path] if it is a single markdown file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in MD_EXTENSIONS and p.is_file())


def parse_file(path: Path) -> Document:
    """Read a UTF-8 markdown file and parse it."""
    source = path.read_text(encoding='utf-8')
    logger.debug("Parsing %s (%d chars)", path, len(source))
    return parse_document(source)
