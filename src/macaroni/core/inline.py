"""Inline-structure pass over the contents of leaf blocks"""

from macaroni.core.models import BlockElement, InlineElement


def parse_inline_elements(source: str, block_elements: list[BlockElement]) -> list[InlineElement]:
    """Return the inline elements inside block_elements. Inline parsing is not implemented yet."""
    return []
