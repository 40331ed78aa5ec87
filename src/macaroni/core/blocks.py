"""Block-structure pass: line-by-line container matching over a flat block list"""

import logging
from typing import NamedTuple, Optional, assert_never

from macaroni.core.models import (
    AtxHeading,
    BlockElement,
    BlockQuote,
    FencedCodeBlock,
    IndentedCodeBlock,
    Paragraph,
    Position,
    Range,
    Root,
    SetextHeading,
)
from macaroni.core.utils.utf8 import is_continuation_byte


logger = logging.getLogger(__name__)

CODE_INDENT = 4     # columns of indentation that make a line "indented"
TAB_STOP = 4

SPACE, TAB, NEWLINE, CARRIAGE_RETURN = b' \t\n\r'
GT, HASH, BACKTICK, TILDE, EQUALS, DASH = b'>#`~=-'
WHITESPACE = (SPACE, TAB)
LINE_ENDINGS = (NEWLINE, CARRIAGE_RETURN)


class ScannerMisalignedError(RuntimeError):
    """The scanner was expected at a line terminator or end of input but was not."""


class _Mark(NamedTuple):
    offset:    int
    character: int
    column:    int


class _Fence(NamedTuple):
    char:   int
    length: int
    indent: int     # columns before the opening fence, stripped from content lines


class BlockParser:
    """Splits source text into block elements, one line at a time.

    Blocks are stored in a flat list in the order they were opened; Root is
    always element 0. Which blocks are still open is tracked in a separate
    stack of indices into that list (outermost first). A block's children are
    the blocks appended after it while it was open, so no tree is built.

    Each line goes through the same steps:

    1. Walk the open blocks from the root inward and find the last one whose
       continuation condition holds (a `>` for a block quote, non-blank text
       for a paragraph, indentation for an indented code block, ...).
    2. From there, while the current block is a container (or a paragraph,
       which any new block interrupts), try the block-start recognizers and
       append each block found, closing everything deeper first.
    3. If nothing new started and the deepest open block is a paragraph, the
       rest of the line is a lazy continuation of it.
    4. Otherwise close every block deeper than the last match.
    5. Whatever is left on the line becomes content of the deepest open block
       or a new paragraph.

    Three coordinates are tracked together: byte offset, codepoint within the
    line, and display column. The column is tab-stop aware and only feeds the
    indentation checks.
    """

    def __init__(self, source: str):
        # lone surrogates encode as 3-byte sequences
        self.data = source.encode("utf-8", errors="surrogatepass")

        self.offset = 0
        self.character = 0
        self.column = 0
        self.line = 0

        self.indent = 0
        self.tab_leftovers = 0
        self._indent_start = _Mark(0, 0, 0)

        self.blocks: list[BlockElement] = [Root()]
        self.open_blocks: list[int] = [0]
        self._fences: dict[int, _Fence] = {}

    def parse(self) -> list[BlockElement]:
        while self.offset < len(self.data):
            self._parse_line()
        self._close_children_of(0)
        logger.debug("Parsed %d block(s) from %d byte(s)", len(self.blocks), len(self.data))
        return self.blocks

    def _parse_line(self) -> None:
        last_match = self._last_match()
        opened = self._open_new_blocks(last_match)

        if not opened and not self._continue_paragraph():
            self._close_children_of(last_match)

        tip = self.blocks[self.open_blocks[-1]]
        match tip:
            case Paragraph() | SetextHeading():
                pass
            case AtxHeading():
                line_end = self._peek_line()
                start = tip.content_range.start
                tip.content_range = Range(start=start, end=self._atx_content_end(start, line_end))
                self._set_position(line_end)
            case FencedCodeBlock():
                # the opening fence line carries no content
                if not opened:
                    fence = self._fences[self.open_blocks[-1]]
                    tip.lines.append(self._consume_content_line(fence.indent))
            case IndentedCodeBlock():
                tip.lines.append(self._consume_content_line(CODE_INDENT))
            case Root() | BlockQuote():
                if not self._is_at_line_end():
                    start = self._position()
                    self._consume_line()
                    self._append_child(Paragraph(lines=[Range(start=start, end=self._position())]))
            case _:
                assert_never(tip)

        self._consume_line_end()

    def _last_match(self) -> int:
        """Return the open-stack index of the deepest block that stays open on this line."""
        for open_index, block_index in enumerate(self.open_blocks):
            self._consume_spaces()
            if not self._matches(block_index):
                return open_index - 1
        return len(self.open_blocks) - 1

    def _matches(self, block_index: int) -> bool:
        block = self.blocks[block_index]
        match block:
            case Root():
                return True
            case BlockQuote():
                if self._is_indented() or self._peek() != GT:
                    return False
                self._consume_block_quote_marker()
                return True
            case Paragraph():
                return not self._is_at_line_end()
            case AtxHeading() | SetextHeading():
                return False
            case FencedCodeBlock():
                return not self._consume_closing_fence(self._fences[block_index])
            case IndentedCodeBlock():
                return self._is_indented() or self._is_at_line_end()
            case _:
                assert_never(block)

    def _open_new_blocks(self, open_index: int) -> bool:
        """Append every block that starts on this line below open_index; True if any did."""
        block_index = self.open_blocks[open_index]
        is_paragraph = isinstance(self.blocks[block_index], Paragraph)

        if is_paragraph:
            self._consume_spaces()
            if self._parse_setext_underline(block_index):
                return True

        opened = False
        while self.blocks[block_index].is_container or is_paragraph:
            self._consume_spaces()
            new_block = self._parse_block_start()
            if new_block is None:
                break

            if is_paragraph:
                # the interrupted paragraph closes; the new block becomes its sibling
                open_index -= 1
                is_paragraph = False

            self._insert_child(open_index, new_block)
            open_index = len(self.open_blocks) - 1
            block_index = self.open_blocks[open_index]
            opened = True
            self.indent = 0

        return opened

    def _parse_block_start(self) -> Optional[BlockElement]:
        for recognizer in (
            self._parse_block_quote_start,
            self._parse_atx_heading_start,
            self._parse_fenced_code_block_start,
            self._parse_indented_code_block_start,
        ):
            block = recognizer()
            if block is not None:
                return block
        return None

    def _parse_block_quote_start(self) -> Optional[BlockQuote]:
        if self._is_indented() or self._peek() != GT:
            return None
        self._consume_block_quote_marker()
        return BlockQuote()

    def _parse_atx_heading_start(self) -> Optional[AtxHeading]:
        if self._is_indented() or self._peek() != HASH:
            return None

        hashes_end = self._scan(self.offset, (HASH,))
        level = hashes_end - self.offset
        if level > 6 or not (self._is_line_end_at(hashes_end) or self.data[hashes_end] in WHITESPACE):
            return None

        for _ in range(level):
            self._advance()
        self._consume_spaces()
        position = self._position()
        return AtxHeading(level=level, content_range=Range(start=position, end=position))

    def _parse_fenced_code_block_start(self) -> Optional[FencedCodeBlock]:
        char = self._peek()
        if self._is_indented() or char not in (BACKTICK, TILDE):
            return None

        run_end = self._scan(self.offset, (char,))
        length = run_end - self.offset
        if length < 3:
            return None

        line_end = self._peek_line()
        if char == BACKTICK and BACKTICK in self.data[run_end:line_end.offset]:
            return None

        # the new block is appended at the end of the flat list
        self._fences[len(self.blocks)] = _Fence(char, length, self.indent)

        for _ in range(length):
            self._advance()
        self._consume_spaces()
        info_start = self._position()
        info_end = self._trim_back(info_start, line_end, WHITESPACE)
        self._set_position(line_end)

        info_range = Range(start=info_start, end=info_end) if info_end.offset > info_start.offset else None
        return FencedCodeBlock(info_range=info_range)

    def _parse_indented_code_block_start(self) -> Optional[IndentedCodeBlock]:
        # indented code cannot interrupt a paragraph, lazily continued or not
        tip = self.blocks[self.open_blocks[-1]]
        if isinstance(tip, Paragraph) or not self._is_indented() or self._is_at_line_end():
            return None
        return IndentedCodeBlock()

    def _parse_setext_underline(self, paragraph_index: int) -> bool:
        """Turn the paragraph into a setext heading if this line is a `===` or `---` underline."""
        char = self._peek()
        if self._is_indented() or char not in (EQUALS, DASH):
            return False

        run_end = self._scan(self.offset, (char,))
        if not self._is_line_end_at(self._scan(run_end, WHITESPACE)):
            return False

        paragraph = self.blocks[paragraph_index]
        start = paragraph.lines[0].start
        end = self._trim_back(start, paragraph.lines[-1].end, WHITESPACE)
        self.blocks[paragraph_index] = SetextHeading(
            level=1 if char == EQUALS else 2,
            content_range=Range(start=start, end=end),
        )
        self._consume_line()
        return True

    def _consume_closing_fence(self, fence: _Fence) -> bool:
        if self._is_indented() or self._peek() != fence.char:
            return False

        run_end = self._scan(self.offset, (fence.char,))
        if run_end - self.offset < fence.length:
            return False
        if not self._is_line_end_at(self._scan(run_end, WHITESPACE)):
            return False

        self._consume_line()
        return True

    def _continue_paragraph(self) -> bool:
        tip = self.blocks[self.open_blocks[-1]]
        if not isinstance(tip, Paragraph) or self._is_at_line_end():
            return False

        start = self._position()
        end = self._peek_line()
        tip.lines.append(Range(start=start, end=end))
        self._set_position(end)
        return True

    def _close_children_of(self, parent_open_index: int) -> None:
        for block_index in self.open_blocks[parent_open_index + 1:]:
            block = self.blocks[block_index]
            if isinstance(block, IndentedCodeBlock):
                while block.lines and self._is_blank(block.lines[-1]):
                    block.lines.pop()
            self._fences.pop(block_index, None)
        del self.open_blocks[parent_open_index + 1:]

    def _insert_child(self, parent_open_index: int, child: BlockElement) -> None:
        self._close_children_of(parent_open_index)
        self._append_child(child)

    def _append_child(self, child: BlockElement) -> None:
        assert self.blocks[self.open_blocks[-1]].is_container, "Attempting to append a child to a leaf block"
        self.open_blocks.append(len(self.blocks))
        self.blocks.append(child)

    # --- content helpers ---

    def _atx_content_end(self, start: Position, line_end: Position) -> Position:
        """Trim trailing whitespace and an optional closing `#` run from a heading line."""
        end = self._trim_back(start, line_end, WHITESPACE)
        without_hashes = self._trim_back(start, end, (HASH,))
        if without_hashes.offset > start.offset and self.data[without_hashes.offset - 1] not in WHITESPACE:
            # `# foo#`: the closing run must be separated from the text
            return end
        return self._trim_back(start, without_hashes, WHITESPACE)

    def _consume_content_line(self, columns: int) -> Range:
        """Consume the rest of a code line, keeping indentation beyond `columns`."""
        start = self._strip_indent(columns)
        end = self._peek_line()
        self._set_position(end)
        return Range(start=start, end=end)

    def _strip_indent(self, columns: int) -> Position:
        """Position after at most `columns` columns of the whitespace run that ends here."""
        offset, character, column = self._indent_start
        stripped = 0
        while stripped < columns and offset < self.offset:
            width = 1 if self.data[offset] == SPACE else TAB_STOP - column % TAB_STOP
            offset += 1
            character += 1
            column += width
            stripped += width
        return Position(line=self.line, character=character, offset=offset)

    def _trim_back(self, start: Position, end: Position, chars: tuple[int, ...]) -> Position:
        # only ASCII bytes are trimmed, so offset and character move together
        while end.offset > start.offset and self.data[end.offset - 1] in chars:
            end = Position(line=end.line, character=end.character - 1, offset=end.offset - 1)
        return end

    def _is_blank(self, range_: Range) -> bool:
        return all(b in WHITESPACE for b in self.data[range_.start.offset:range_.end.offset])

    # --- scanning ---

    def _peek(self) -> Optional[int]:
        return self.data[self.offset] if self.offset < len(self.data) else None

    def _scan(self, offset: int, chars: tuple[int, ...]) -> int:
        """Return the offset after the run of `chars` starting at offset, without consuming."""
        while offset < len(self.data) and self.data[offset] in chars:
            offset += 1
        return offset

    def _advance(self) -> None:
        """Consume one non-tab byte."""
        byte = self.data[self.offset]
        self.offset += 1
        if not is_continuation_byte(byte):
            self.character += 1
            self.column += 1

    def _consume_block_quote_marker(self) -> None:
        self._advance()
        if self._peek() in WHITESPACE:
            self._consume_columns(1)
        self.indent = 0

    def _consume_columns(self, count: int) -> None:
        """Consume `count` display columns; a tab byte is passed only once its full width is spent."""
        while count > 0:
            if self.tab_leftovers:
                taken = min(count, self.tab_leftovers)
                count -= taken
                self.tab_leftovers -= taken
                self.column += taken
                if not self.tab_leftovers:
                    self.offset += 1
                    self.character += 1
            elif self._peek() == TAB:
                self.tab_leftovers = TAB_STOP - self.column % TAB_STOP
            elif self._is_at_line_end():
                return
            else:
                byte = self.data[self.offset]
                self._advance()
                if not is_continuation_byte(byte):
                    count -= 1

    def _consume_spaces(self) -> None:
        """Consume spaces and tabs, adding their display width to the current indent."""
        if not self.indent:
            self._indent_start = _Mark(self.offset, self.character, self.column)
        old_column = self.column

        if self.tab_leftovers:
            # rest of a tab that was partially consumed as a marker's optional space
            self.column += self.tab_leftovers
            self.tab_leftovers = 0
            self.offset += 1
            self.character += 1

        while (byte := self._peek()) in WHITESPACE:
            self.offset += 1
            self.character += 1
            self.column += 1 if byte == SPACE else TAB_STOP - self.column % TAB_STOP

        self.indent += self.column - old_column

    def _peek_line(self) -> Position:
        offset, character = self.offset, self.character
        while offset < len(self.data) and self.data[offset] not in LINE_ENDINGS:
            if not is_continuation_byte(self.data[offset]):
                character += 1
            offset += 1
        return Position(line=self.line, character=character, offset=offset)

    def _consume_line(self) -> None:
        self._set_position(self._peek_line())

    def _consume_line_end(self) -> None:
        self.tab_leftovers = 0
        self.indent = 0

        byte = self._peek()
        if byte is None:
            return
        if byte not in LINE_ENDINGS:
            raise ScannerMisalignedError(
                f"Expected a line terminator or end of input at line {self.line}, "
                f"offset {self.offset}; got byte {byte:#04x}"
            )

        self.offset += 1
        if byte == CARRIAGE_RETURN and self._peek() == NEWLINE:
            self.offset += 1
        self.line += 1
        self.character = 0
        self.column = 0

    def _position(self) -> Position:
        return Position(line=self.line, character=self.character, offset=self.offset)

    def _set_position(self, position: Position) -> None:
        self.line = position.line
        self.character = position.character
        self.offset = position.offset
        self.tab_leftovers = 0

    def _is_indented(self) -> bool:
        return self.indent >= CODE_INDENT

    def _is_at_line_end(self) -> bool:
        return self._is_line_end_at(self.offset)

    def _is_line_end_at(self, offset: int) -> bool:
        return offset >= len(self.data) or self.data[offset] in LINE_ENDINGS


def parse_block_elements(source: str) -> list[BlockElement]:
    """Run the block-structure pass over source and return the flat block list."""
    return BlockParser(source).parse()
