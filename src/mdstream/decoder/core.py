"""Line-classifying decoder producing a lazy token stream.

Each pull drains the pending queue first; only when it is empty is the
next line read and classified. A line maps to all of its tokens at once,
so the queue never holds more than one line's worth of tokens and the
decoder never reads ahead of the line it is classifying.

Block classification order for a line outside fenced code:
indented code, fence start, ATX heading, block quote, details/admonition,
thematic break, table row, list marker, footnote definition, link
reference definition, paragraph.

Thread Safety:
Decoder instances are single-use and single-consumer.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from typing import IO

from mdstream.config import DecodeConfig, get_decode_config
from mdstream.decoder.classifiers import (
    DetailsClassifierMixin,
    FenceClassifierMixin,
    FootnoteClassifierMixin,
    HeadingClassifierMixin,
    LinkRefClassifierMixin,
    ListClassifierMixin,
    QuoteClassifierMixin,
    TableClassifierMixin,
    ThematicClassifierMixin,
)
from mdstream.decoder.inline import InlineScannerMixin
from mdstream.decoder.modes import ContainerKind, DecoderMode, LineEnd, ListLevel, ListMarker
from mdstream.lines import LineSource
from mdstream.tokens import Token, TokenType, WarningKind
from mdstream.utils.logger import log_warning

_IMAGE_LINE_TYPES = frozenset({TokenType.IMAGE_REF, TokenType.IMAGE_NUM})


class Decoder(
    # Classifiers (pure logic, no state changes)
    HeadingClassifierMixin,
    FenceClassifierMixin,
    ThematicClassifierMixin,
    QuoteClassifierMixin,
    DetailsClassifierMixin,
    TableClassifierMixin,
    ListClassifierMixin,
    FootnoteClassifierMixin,
    LinkRefClassifierMixin,
    # Inline content
    InlineScannerMixin,
):
    """Lazy, single-pass Markdown decoder.

    Usage:
        >>> list(Decoder.from_text("# Hello\\n\\nWorld"))
        [Token(HEADING1), Token(TEXT, 'Hello'), Token(PARAGRAPH), Token(TEXT, 'World')]

    Line source faults surface as DecodeError from ``next()`` and end the
    iteration; the decoder must not be resumed after one.

    """

    __slots__ = (
        "_lines",
        "_config",
        "_pending",
        "_out",  # Tokens of the line being classified
        "_warnings",  # Warnings of the line being classified
        "_raw_line",
        "_mode",
        "_paragraph_starting",
        "_blank_seen",
        "_fence_char",
        "_fence_count",
        "_fence_indent",
        "_container",
        "_container_broken",  # Quote interrupted by a blank line
        "_lists",
        "_indented_code",
        "_code_blanks",  # Blank lines held back inside indented code
        "_table_width",
        "_table_rows",
        "_line_end",
        "_image_line",  # Previous paragraph line was a lone image
    )

    def __init__(
        self,
        lines: Iterable[str],
        *,
        config: DecodeConfig | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize decoder over a line source.

        Args:
            lines: A LineSource, or any iterable of lines without terminators
            config: Decode configuration (defaults to the active context config)
            source_file: Optional source path for error messages
        """
        if not isinstance(lines, LineSource):
            lines = LineSource(iter(lines), source_file)
        self._lines: LineSource = lines
        self._config = config if config is not None else get_decode_config()

        self._pending: deque[Token] = deque()
        self._out: list[Token] = []
        self._warnings: list[Token] = []
        self._raw_line = ""
        self._mode = DecoderMode.BLOCK

        # Paragraph state
        self._paragraph_starting = True
        self._blank_seen = False
        self._line_end = LineEnd.BREAK
        self._image_line = False

        # Fenced code state
        self._fence_char = ""
        self._fence_count = 0
        self._fence_indent = 0

        # Container state
        self._container: ContainerKind | None = None
        self._container_broken = False
        self._lists: list[ListLevel] = []

        # Indented code state
        self._indented_code = False
        self._code_blanks = 0

        # Table state
        self._table_width: int | None = None
        self._table_rows = 0

    @classmethod
    def from_text(
        cls, text: str, *, config: DecodeConfig | None = None, source_file: str | None = None
    ) -> Decoder:
        """Create a decoder over an in-memory string."""
        return cls(LineSource.from_text(text, source_file), config=config)

    @classmethod
    def from_bytes(
        cls, data: bytes, *, config: DecodeConfig | None = None, source_file: str | None = None
    ) -> Decoder:
        """Create a decoder over UTF-8 bytes.

        Raises:
            DecodeError: If the buffer is not valid UTF-8
        """
        return cls(LineSource.from_bytes(data, source_file), config=config)

    @classmethod
    def from_stream(
        cls,
        reader: IO[bytes] | IO[str],
        *,
        config: DecodeConfig | None = None,
        source_file: str | None = None,
    ) -> Decoder:
        """Create a decoder that reads one line at a time from a stream."""
        return cls(LineSource.from_stream(reader, source_file), config=config)

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        while not self._pending:
            # StopIteration from the line source ends the token stream
            self._decode_line(next(self._lines))
        return self._pending.popleft()

    @property
    def lineno(self) -> int:
        """Number of lines read so far."""
        return self._lines.lineno

    # =========================================================================
    # Line dispatch
    # =========================================================================

    def _decode_line(self, raw: str) -> None:
        """Classify one line and queue its tokens."""
        if self._mode is DecoderMode.BLOCK and self._config.text_transformer is not None:
            raw = self._config.text_transformer(raw)

        self._raw_line = raw
        self._out = []
        self._warnings = []

        if not raw.strip():
            if self._mode is DecoderMode.CODE_FENCE:
                self._emit(Token(TokenType.CODEBLOCK, ""))
            else:
                self._on_blank_line(breaks_quote=True)
        else:
            content = self._enter_container(raw)
            if content is not None:
                if self._mode is DecoderMode.CODE_FENCE:
                    self._fence_line(content)
                else:
                    self._classify_block(content)
                self._blank_seen = False

        self._pending.extend(self._warnings)
        self._pending.extend(self._out)

    def _emit(self, token: Token) -> None:
        self._out.append(token)

    def _warn(self, kind: WarningKind) -> None:
        """Record a warning for the current line."""
        if not self._config.warnings_enabled:
            return
        token = Token(TokenType.WARNING, self._raw_line, number=self._lines.lineno, warning=kind)
        log_warning(token, "emitted")
        self._warnings.append(token)

    def _inline(self, text: str) -> list[Token]:
        """Split text into inline tokens, or a single TEXT when disabled."""
        if self._config.inline_enabled:
            return self._scan_inline(text)
        return [Token(TokenType.TEXT, text)] if text else []

    def _on_blank_line(self, *, breaks_quote: bool) -> None:
        self._paragraph_starting = True
        self._blank_seen = True
        self._image_line = False
        self._table_width = None
        if self._indented_code:
            self._code_blanks += 1
        if breaks_quote and self._container is ContainerKind.QUOTE:
            self._container_broken = True

    # =========================================================================
    # Containers
    # =========================================================================

    def _enter_container(self, raw: str) -> str | None:
        """Strip the open container's prefix from a non-blank line.

        Closes the container when the line does not belong to it.

        Returns:
            Content to classify, or None when the line was fully handled.
        """
        container = self._container
        if container is None:
            return raw

        if container is ContainerKind.QUOTE:
            inner = None if self._container_broken else self._strip_quote_marker(raw)
            if inner is not None:
                if not inner.strip():
                    # `>` alone: a blank line inside the quote
                    if self._mode is DecoderMode.CODE_FENCE:
                        self._emit(Token(TokenType.CODEBLOCK, ""))
                    else:
                        self._on_blank_line(breaks_quote=False)
                    return None
                return inner

        elif _is_indented(raw):
            return _strip_indent(raw, 4)

        elif (
            container is ContainerKind.FOOTNOTE
            and not self._blank_seen
            and not self._paragraph_starting
            and self._mode is DecoderMode.BLOCK
            and self._try_classify_footnote_def(raw) is None
        ):
            # Lazy continuation of the footnote text
            return raw

        self._close_container()
        return raw

    def _close_container(self) -> None:
        if self._mode is DecoderMode.CODE_FENCE:
            self._mode = DecoderMode.BLOCK
        self._end_indented_code()
        self._close_lists(0)
        self._table_width = None

        if self._container is ContainerKind.FOOTNOTE:
            self._emit(Token(TokenType.FOOTNOTE_CLOSE))
        else:
            self._emit(Token(TokenType.QUOTE_CLOSE))

        self._container = None
        self._container_broken = False
        self._paragraph_starting = True

    def _close_lists(self, indent: int) -> None:
        """Close every list level whose content starts right of indent."""
        while self._lists and self._lists[-1].content_indent > indent:
            self._lists.pop()
            self._emit(Token(TokenType.LIST_CLOSE))

    def _begin_block(self, indent: int) -> None:
        """Prepare for a new block starting at the given indent."""
        self._close_lists(indent)
        self._table_width = None
        self._image_line = False

    def _end_indented_code(self) -> None:
        self._indented_code = False
        self._code_blanks = 0

    # =========================================================================
    # Block classification
    # =========================================================================

    def _fence_line(self, content: str) -> None:
        """Handle a line inside a fenced code block."""
        if self._is_fence_close(content):
            self._mode = DecoderMode.BLOCK
            self._paragraph_starting = True
            return
        self._emit(Token(TokenType.CODEBLOCK, _strip_indent(content, self._fence_indent)))

    def _classify_block(self, content: str) -> None:
        """Classify a non-blank line in BLOCK mode."""
        indent = _indent_width(content)
        stripped = content.lstrip(" \t")
        config = self._config

        # Indented code: only where a paragraph could start
        if indent >= 4 and not self._lists and (self._paragraph_starting or self._indented_code):
            self._indented_code_line(content)
            return
        self._end_indented_code()

        shallow = indent < 4 or bool(self._lists)

        if shallow:
            fence = self._try_classify_fence_start(stripped)
            if fence is not None:
                self._begin_block(indent)
                self._fence_char, self._fence_count, language = fence
                self._fence_indent = indent
                self._mode = DecoderMode.CODE_FENCE
                self._emit(Token(TokenType.SYNTAX_HIGHLIGHTING, language))
                self._paragraph_starting = True
                return

            heading_tokens = self._try_classify_atx_heading(stripped)
            if heading_tokens is not None:
                self._begin_block(indent)
                self._out.extend(heading_tokens)
                self._paragraph_starting = True
                return
            if self._paragraph_starting and self._is_ambiguous_heading(stripped):
                self._warn(WarningKind.AMBIGUOUS_HEADING)

        top_level = self._container is None and indent < 4

        if top_level:
            quote = self._try_classify_block_quote(stripped)
            if quote is not None:
                self._open_quote(*quote)
                return

            if config.admonitions_enabled:
                details = self._try_classify_details(stripped)
                if details is not None:
                    self._open_details(*details)
                    return

        if shallow:
            rule = self._try_classify_thematic_break(stripped)
            if rule is not None:
                self._begin_block(indent)
                self._emit(rule)
                self._paragraph_starting = True
                return

            if config.tables_enabled:
                cells = self._split_table_row(stripped)
                if cells is not None:
                    self._table_row(cells, indent)
                    return

            marker = self._try_classify_list_marker(stripped, indent)
            if marker is not None:
                self._list_item(marker)
                return

        if top_level and config.footnotes_enabled:
            footnote = self._try_classify_footnote_def(stripped)
            if footnote is not None:
                self._open_footnote(*footnote)
                return

        if indent < 4 and self._paragraph_starting:
            definition = self._try_classify_link_reference_def(stripped)
            if definition is not None:
                self._begin_block(indent)
                self._out.extend(definition)
                return

        self._paragraph_line(stripped, indent)

    def _indented_code_line(self, content: str) -> None:
        if not self._indented_code:
            self._begin_block(0)
            self._emit(Token(TokenType.SYNTAX_HIGHLIGHTING, ""))
            self._indented_code = True
        for _ in range(self._code_blanks):
            self._emit(Token(TokenType.CODEBLOCK, ""))
        self._code_blanks = 0
        self._emit(Token(TokenType.CODEBLOCK, _strip_indent(content, 4)))
        self._paragraph_starting = True

    def _open_quote(self, tokens: list[Token], inner: str) -> None:
        self._begin_block(0)
        self._out.extend(tokens)
        self._container = ContainerKind.QUOTE
        self._container_broken = False
        self._paragraph_starting = True
        if inner.strip():
            self._classify_block(inner)

    def _open_details(self, tokens: list[Token], title: str) -> None:
        self._begin_block(0)
        self._out.extend(tokens)
        self._container = ContainerKind.INDENTED
        if title:
            self._emit(Token(TokenType.PARAGRAPH))
            self._out.extend(self._inline(title))
        self._paragraph_starting = True

    def _open_footnote(self, identifier: str, rest: str) -> None:
        self._begin_block(0)
        self._emit(Token(TokenType.FOOTNOTE_OPEN, identifier))
        self._container = ContainerKind.FOOTNOTE
        self._paragraph_starting = False
        self._content_tokens(rest, continuation=False)

    def _table_row(self, cells: list[str], indent: int) -> None:
        if self._table_width is None:
            self._begin_block(indent)
            self._table_width = len(cells)
            self._table_rows = 0

        alignments = self._classify_delimiter_row(cells) if self._table_rows == 1 else None
        if alignments is not None:
            if len(alignments) != self._table_width:
                self._warn(WarningKind.TABLE_COLUMN_MISMATCH)
            for alignment in alignments:
                self._emit(Token(alignment))
        else:
            for cell in cells:
                self._emit(Token(TokenType.TABLE_CELL))
                self._out.extend(self._inline(cell))

        self._emit(Token(TokenType.LINE_BREAK))
        self._table_rows += 1
        self._paragraph_starting = True

    def _list_item(self, marker: ListMarker) -> None:
        self._table_width = None
        self._image_line = False
        lists = self._lists

        while lists and marker.indent < lists[-1].indent:
            lists.pop()
            self._emit(Token(TokenType.LIST_CLOSE))

        if lists and marker.indent < lists[-1].content_indent and lists[-1].ordered != marker.ordered:
            # Same level, different list type
            lists.pop()
            self._emit(Token(TokenType.LIST_CLOSE))

        if not lists or marker.indent >= lists[-1].content_indent:
            lists.append(ListLevel(marker.ordered, marker.indent, marker.content_indent))
            self._emit(
                Token(TokenType.ORDERED_LIST if marker.ordered else TokenType.UNORDERED_LIST)
            )
        else:
            lists[-1].content_indent = marker.content_indent

        self._emit(Token(TokenType.LIST_ITEM))

        rest = marker.rest
        if self._config.task_lists_enabled and not marker.ordered:
            checked, rest = self._split_task_marker(rest)
            if checked is not None:
                self._emit(Token(TokenType.LIST_TASK, flag=checked))

        self._paragraph_starting = False
        self._content_tokens(rest, continuation=False)

    def _paragraph_line(self, stripped: str, indent: int) -> None:
        if self._paragraph_starting:
            self._begin_block(indent)
            self._emit(Token(TokenType.PARAGRAPH))
            self._paragraph_starting = False
            self._content_tokens(stripped, continuation=False)
        else:
            self._content_tokens(stripped, continuation=True)

    def _content_tokens(self, text: str, *, continuation: bool) -> None:
        """Emit the inline tokens of a paragraph, item, or footnote line.

        Continuation lines get CAPTION after a lone image, and otherwise
        carry the separating space the encoders would not add themselves.
        """
        hard_break = False
        if text.endswith("  "):
            hard_break = True
        elif (len(text) - len(text.rstrip("\\"))) % 2:
            # An odd backslash run ends in an unescaped backslash
            hard_break = True
            text = text[:-1]

        tokens = self._inline(text.rstrip())

        if continuation and tokens:
            if self._image_line:
                self._emit(Token(TokenType.CAPTION))
            elif self._line_end is LineEnd.TEXT:
                if tokens[0].type is not TokenType.TEXT:
                    tokens.insert(0, Token(TokenType.TEXT, ""))
            elif self._line_end is LineEnd.OTHER:
                if tokens[0].type is TokenType.TEXT:
                    tokens[0] = Token(TokenType.TEXT, " " + tokens[0].value)
                else:
                    tokens.insert(0, Token(TokenType.TEXT, " "))

        self._image_line = _is_image_only(tokens)
        self._out.extend(tokens)

        if hard_break:
            self._emit(Token(TokenType.LINE_BREAK))
            self._line_end = LineEnd.BREAK
        elif not tokens or tokens[-1].type is TokenType.LINE_BREAK:
            self._line_end = LineEnd.BREAK
        elif tokens[-1].type is TokenType.TEXT:
            self._line_end = LineEnd.TEXT
        else:
            self._line_end = LineEnd.OTHER


# =============================================================================
# Helpers
# =============================================================================


def _indent_width(line: str) -> int:
    """Leading whitespace width, with tabs advancing to the next multiple of 4."""
    width = 0
    for char in line:
        if char == " ":
            width += 1
        elif char == "\t":
            width += 4 - width % 4
        else:
            break
    return width


def _is_indented(line: str) -> bool:
    return line.startswith(("    ", "\t"))


def _strip_indent(line: str, columns: int) -> str:
    """Remove up to `columns` columns of leading whitespace."""
    width = 0
    pos = 0
    while pos < len(line) and width < columns:
        char = line[pos]
        if char == " ":
            width += 1
        elif char == "\t":
            width += 4 - width % 4
        else:
            break
        pos += 1
    return line[pos:]


def _is_image_only(tokens: list[Token]) -> bool:
    if not tokens or tokens[0].type not in _IMAGE_LINE_TYPES:
        return False
    return all(t.type in (TokenType.LINK_VAL, TokenType.TITLE) for t in tokens[1:])
