"""Position-annotated block and inline element models"""

from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


HeadingLevel = Annotated[int, Field(ge=1, le=6)]


class _WireModel(BaseModel):
    """Base for models serialized with camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Position(_WireModel):
    """A location in the source: 0-based line, codepoint within the line, absolute byte offset."""
    model_config = ConfigDict(frozen=True)
    line:      int = Field(default=0, ge=0)
    character: int = Field(default=0, ge=0)
    offset:    int = Field(default=0, ge=0)


class Range(_WireModel):
    """A (start, end) pair of positions; start never lies after end."""
    model_config = ConfigDict(frozen=True)
    start: Position
    end:   Position

    @model_validator(mode="after")
    def _check_order(self) -> "Range":
        if self.start.offset > self.end.offset:
            raise ValueError(f"Range start offset {self.start.offset} is after end offset {self.end.offset}")
        return self


class _Block(_WireModel):
    container: ClassVar[bool] = False

    @property
    def is_container(self) -> bool:
        return self.container

    @property
    def is_leaf(self) -> bool:
        return not self.container


class Root(_Block):
    """Implicit document-level container; always the first block, exactly once."""
    container: ClassVar[bool] = True
    type: Literal["root"] = "root"


class BlockQuote(_Block):
    """`> quoted` container. Its children follow it in the flat block list."""
    container: ClassVar[bool] = True
    type: Literal["blockQuote"] = "blockQuote"


class Paragraph(_Block):
    type:  Literal["paragraph"] = "paragraph"
    lines: list[Range] = Field(default_factory=list)   # one range per source line, lazy lines included


class AtxHeading(_Block):
    """`# heading`; content_range excludes the opening and closing `#` runs and padding."""
    type:          Literal["atxHeading"] = "atxHeading"
    level:         HeadingLevel
    content_range: Range


class SetextHeading(_Block):
    """Paragraph text underlined by `===` (level 1) or `---` (level 2)."""
    type:          Literal["setextHeading"] = "setextHeading"
    level:         HeadingLevel
    content_range: Range


class FencedCodeBlock(_Block):
    type:       Literal["fencedCodeBlock"] = "fencedCodeBlock"
    info_range: Optional[Range] = None
    lines:      list[Range] = Field(default_factory=list)


class IndentedCodeBlock(_Block):
    type:  Literal["indentedCodeBlock"] = "indentedCodeBlock"
    lines: list[Range] = Field(default_factory=list)


BlockElement = Annotated[
    Union[Root, BlockQuote, Paragraph, AtxHeading, SetextHeading, FencedCodeBlock, IndentedCodeBlock],
    Field(discriminator="type"),
]


class InlineLink(_WireModel):
    """`[text](destination "title")`"""
    type:              Literal["inlineLink"] = "inlineLink"
    text_range:        Range
    destination_range: Range
    title_range:       Optional[Range] = None


class ReferenceLink(_WireModel):
    type: Literal["referenceLink"] = "referenceLink"


class CodeSpan(_WireModel):
    type: Literal["codeSpan"] = "codeSpan"


class Text(_WireModel):
    """Raw text, including emphasis and other inlines that carry no ranges of their own."""
    type:  Literal["text"] = "text"
    range: Range


InlineElement = Annotated[
    Union[InlineLink, ReferenceLink, CodeSpan, Text],
    Field(discriminator="type"),
]


class Document(_WireModel):
    """Parse result: the flat block sequence plus the inline elements found inside it."""
    model_config = ConfigDict(frozen=True)
    block_elements:  list[BlockElement]
    inline_elements: list[InlineElement] = Field(default_factory=list)
