"""Markdown encoder: token stream back to canonical Markdown text.

Blocks are separated by a blank line, consecutive TEXT tokens are joined
with a single space, and the output always ends with one newline. Quotes,
lists, details, and footnotes keep a stack of line prefixes so that every
line written inside them decodes back into the same container.

Every TokenType has a Markdown form. WARNING tokens write nothing.

Thread Safety:
MarkdownEncoder instances are single-use; encode() consumes the stream.

"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from mdstream.decoder.charsets import ALERT_KINDS
from mdstream.encoders.protocol import checked_tokens
from mdstream.encoders.sink import Sink
from mdstream.tokens import Token, TokenType
from mdstream.utils.logger import get_logger, log_warning

logger = get_logger(__name__)

_TOGGLE_MARKERS: dict[TokenType, str] = {
    TokenType.ITALIC: "*",
    TokenType.BOLD: "**",
    TokenType.BOLD_ITALIC: "***",
    TokenType.SUPERSCRIPT: "^",
    TokenType.SUBSCRIPT: "~",
    TokenType.STRIKETHROUGH: "~~",
    TokenType.HIGHLIGHT: "==",
}

_ALIGNMENT_MARKERS: dict[TokenType, str] = {
    TokenType.TABLE_LEFT: "---",
    TokenType.TABLE_CENTERED: ":---:",
    TokenType.TABLE_RIGHT: "---:",
}

_INLINE_ESCAPE = re.compile(r"([\\`*_\[\]<~^])")
_HIGHLIGHT_RUN = re.compile(r"={2,}")
_BARE_URL = re.compile(r"(https?):(//)")
_LINE_START_ESCAPE = re.compile(r"^([#>|+!?-]|\d{1,9}(?=[.)]))")


class _Leaf(Enum):
    """Leaf block currently being written."""

    NONE = auto()
    PARAGRAPH = auto()
    HEADING = auto()
    CODE = auto()
    TABLE = auto()


class _Kind(Enum):
    QUOTE = auto()
    INDENTED = auto()  # details and `!!!` admonitions
    FOOTNOTE = auto()
    LIST = auto()
    ITEM = auto()


class _Link(Enum):
    """Where a link or definition stands after its first token."""

    NONE = auto()
    REF = auto()  # [text] written, destination may follow
    DEST = auto()  # (url written, `)` still owed
    KEY = auto()  # [key]: written
    DEF = auto()  # [key]: url written


@dataclass(slots=True)
class _Container:
    kind: _Kind
    prefix: str
    list_type: TokenType | None = None
    counter: int = 0


class MarkdownEncoder:
    """Serialize a token stream to Markdown.

    Usage:
        >>> from mdstream.encoders.sink import StringBuilder
        >>> out = StringBuilder()
        >>> MarkdownEncoder([Token(TokenType.HEADING1), Token(TokenType.TEXT, "H1")], out).encode()
        >>> out.build()
        '# H1\\n'

    """

    __slots__ = (
        "_tokens",
        "_sink",
        "_stack",
        "_prefix",
        "_leaf",
        "_not_first",
        "_gap",  # Separator owed before the next block, overriding the blank line
        "_last_text",
        "_at_line_start",
        "_break_pending",
        "_pending_quote",
        "_heading_id",
        "_link",
        "_row_open",
        "_row_done",
    )

    def __init__(self, tokens: Iterable[Token], sink: Any) -> None:
        """Initialize encoder.

        Args:
            tokens: Token iterable, consumed by encode()
            sink: Object with a write() method (text or binary)
        """
        self._tokens = tokens
        self._sink = Sink(sink)
        self._stack: list[_Container] = []
        self._prefix = ""
        self._leaf = _Leaf.NONE
        self._not_first = False
        self._gap: str | None = None
        self._last_text = False
        self._at_line_start = True
        self._break_pending = False
        self._pending_quote = False
        self._heading_id = ""
        self._link = _Link.NONE
        self._row_open = False
        self._row_done = False

    def encode(self) -> None:
        """Write the whole token stream, then a trailing newline.

        Raises:
            EncodeError: On the first sink fault or non-Token item
        """
        for _, token in checked_tokens(self._tokens):
            self._encode_token(token)

        if self._pending_quote:
            self._pending_quote = False
            self._open_quote()
        self._end_leaf()
        self._write("\n")

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _encode_token(self, token: Token) -> None:
        if self._pending_quote:
            self._pending_quote = False
            if token.type is TokenType.ADMONITION:
                self._open_admonition(token.value)
                return
            if token.type is TokenType.DETAILS:
                self._open_details(token)
                return
            self._open_quote()

        if self._link is not _Link.NONE and token.type not in (TokenType.LINK_VAL, TokenType.TITLE):
            self._finish_link()

        match token.type:
            case TokenType.TEXT:
                self._text(token.value)

            case TokenType.PARAGRAPH:
                self._start_block()
                self._leaf = _Leaf.PARAGRAPH

            case (
                TokenType.HEADING1
                | TokenType.HEADING2
                | TokenType.HEADING3
                | TokenType.HEADING4
                | TokenType.HEADING5
                | TokenType.HEADING6
            ):
                self._start_block()
                self._write("#" * token.heading_level + " ")
                self._at_line_start = False
                self._leaf = _Leaf.HEADING

            case TokenType.HEADING_ID:
                self._heading_id = token.value

            case TokenType.QUOTE_OPEN:
                self._pending_quote = True

            case TokenType.QUOTE_CLOSE:
                self._close_container((_Kind.QUOTE, _Kind.INDENTED), token)

            case TokenType.ADMONITION:
                self._open_admonition(token.value)

            case TokenType.DETAILS:
                self._open_details(token)

            case TokenType.ORDERED_LIST | TokenType.UNORDERED_LIST | TokenType.DEFINITION_LIST:
                self._open_list(token.type)

            case TokenType.LIST_ITEM:
                self._list_item()

            case TokenType.LIST_CLOSE:
                self._close_container((_Kind.LIST,), token)

            case TokenType.LIST_TASK:
                self._inline("[x] " if token.flag else "[ ] ")

            case TokenType.SYNTAX_HIGHLIGHTING:
                self._start_block()
                self._write("```" + token.value)
                self._leaf = _Leaf.CODE

            case TokenType.CODEBLOCK:
                if self._leaf is not _Leaf.CODE:
                    self._start_block()
                    self._write("```")
                    self._leaf = _Leaf.CODE
                if token.value:
                    self._write("\n" + self._prefix + token.value)
                else:
                    self._write("\n" + self._prefix.rstrip())

            case TokenType.CODE:
                self._inline(_code_span(token.value))

            case TokenType.HORIZONTAL_RULE:
                self._start_block()
                self._write("---")

            case TokenType.TABLE_CELL:
                self._table_cell()

            case TokenType.TABLE_LEFT | TokenType.TABLE_CENTERED | TokenType.TABLE_RIGHT:
                self._table_cell()
                self._write(_ALIGNMENT_MARKERS[token.type])

            case TokenType.LINE_BREAK:
                self._line_break()

            case TokenType.CAPTION:
                self._ensure_leaf()
                self._newline()

            case TokenType.LINK:
                self._inline(f"<{token.value}>")

            case TokenType.LINK_REF:
                self._inline(f"[{_escape_label(token.value)}]")
                self._link = _Link.REF

            case TokenType.IMAGE_REF:
                self._inline(f"![{_escape_label(token.value)}]")
                self._link = _Link.REF

            case TokenType.LINK_NUM:
                self._inline(f"[{_escape_label(token.value)}][{token.number or 0}]")

            case TokenType.IMAGE_NUM:
                self._inline(f"![{_escape_label(token.value)}][{token.number or 0}]")

            case TokenType.LINK_KEY:
                self._start_block()
                self._write(f"[{_escape_label(token.value)}]:")
                self._link = _Link.KEY

            case TokenType.LINK_VAL:
                self._link_value(token.value)

            case TokenType.TITLE:
                self._link_title(token.value)

            case TokenType.COMMENT:
                self._start_block()
                self._write(f"[{_escape_label(token.value)}]: #")

            case TokenType.FOOTNOTE_REF:
                self._inline(f"[^{token.value}]")

            case TokenType.FOOTNOTE_OPEN:
                self._start_block()
                self._write(f"[^{token.value}]: ")
                self._push(_Kind.FOOTNOTE, "    ")
                self._at_line_start = False
                self._leaf = _Leaf.PARAGRAPH

            case TokenType.FOOTNOTE_CLOSE:
                self._close_container((_Kind.FOOTNOTE,), token)

            case TokenType.UNDERLINE:
                self._inline("<ins>" if token.flag else "</ins>")

            case (
                TokenType.ITALIC
                | TokenType.BOLD
                | TokenType.BOLD_ITALIC
                | TokenType.SUPERSCRIPT
                | TokenType.SUBSCRIPT
                | TokenType.STRIKETHROUGH
                | TokenType.HIGHLIGHT
            ):
                self._inline(_TOGGLE_MARKERS[token.type])

            case TokenType.WARNING:
                log_warning(token, "skipped by markdown encoder")

    # =========================================================================
    # Output helpers
    # =========================================================================

    def _write(self, text: str) -> None:
        self._sink.write(text)

    def _newline(self) -> None:
        self._write("\n" + self._prefix)
        self._at_line_start = True
        self._last_text = False
        self._break_pending = False

    def _push(self, kind: _Kind, prefix: str, list_type: TokenType | None = None) -> None:
        self._stack.append(_Container(kind, prefix, list_type))
        self._prefix += prefix

    def _pop(self) -> _Container:
        container = self._stack.pop()
        self._prefix = self._prefix[: len(self._prefix) - len(container.prefix)]
        return container

    def _take_gap(self, default: str) -> str:
        gap = self._gap if self._gap is not None else default
        self._gap = None
        return gap

    def _start_block(self) -> None:
        """End the current leaf and write the separator for a new block."""
        self._end_leaf()
        default = "\n" + self._prefix.rstrip() + "\n" + self._prefix if self._not_first else ""
        gap = self._take_gap(default)
        self._write(gap)
        if gap or not self._not_first:
            self._at_line_start = True
        self._not_first = True

    def _end_leaf(self) -> None:
        if self._link is not _Link.NONE:
            self._finish_link()
        match self._leaf:
            case _Leaf.HEADING:
                if self._heading_id:
                    self._write(f" {{#{self._heading_id}}}")
            case _Leaf.CODE:
                self._write("\n" + self._prefix + "```")
            case _Leaf.TABLE:
                if self._row_open:
                    self._write(" |")
        self._leaf = _Leaf.NONE
        self._heading_id = ""
        self._last_text = False
        self._break_pending = False
        self._row_open = False
        self._row_done = False

    def _ensure_leaf(self) -> None:
        """Open an implicit paragraph for inline content outside any block."""
        if self._leaf is _Leaf.NONE or self._leaf is _Leaf.CODE:
            self._start_block()
            self._leaf = _Leaf.PARAGRAPH

    def _inline(self, text: str) -> None:
        """Write non-TEXT inline markup."""
        self._ensure_leaf()
        self._gap = None
        if self._break_pending:
            self._newline()
        self._write(text)
        self._at_line_start = False
        self._last_text = False

    def _text(self, value: str) -> None:
        self._ensure_leaf()
        self._gap = None
        if self._break_pending:
            self._newline()
        if self._last_text:
            self._write(" ")
            self._at_line_start = False
        escaped = _escape_text(value, self._at_line_start, in_table=self._leaf is _Leaf.TABLE)
        if self._leaf is _Leaf.HEADING and escaped.endswith("#"):
            # An unescaped trailing # run reads back as a closing sequence
            escaped = escaped[:-1] + "\\#"
        self._write(escaped)
        if value:
            self._at_line_start = False
        self._last_text = True

    def _line_break(self) -> None:
        if self._leaf is _Leaf.TABLE:
            if self._row_open:
                self._write(" |")
                self._row_open = False
            self._row_done = True
            self._last_text = False
            return
        self._ensure_leaf()
        self._write("\\")
        self._break_pending = True
        self._last_text = False

    # =========================================================================
    # Containers
    # =========================================================================

    def _open_quote(self) -> None:
        self._start_block()
        self._push(_Kind.QUOTE, "> ")
        self._write("> ")
        self._gap = ""
        self._at_line_start = True

    def _open_admonition(self, kind: str) -> None:
        if kind.upper() in ALERT_KINDS:
            self._open_quote()
            self._write(f"[!{kind.upper()}]")
            self._gap = "\n" + self._prefix
        else:
            self._start_block()
            self._write(f"!!! {kind}")
            self._push(_Kind.INDENTED, "    ")
            self._gap = "\n" + self._prefix

    def _open_details(self, token: Token) -> None:
        self._start_block()
        marker = "+++" if token.flag else "++"
        self._write(f"{marker} {token.value}".rstrip())
        self._push(_Kind.INDENTED, "    ")
        self._gap = "\n" + self._prefix

    def _open_list(self, list_type: TokenType) -> None:
        if self._stack and self._stack[-1].kind is _Kind.ITEM:
            # Nested list: tight, directly under the item text
            self._end_leaf()
            self._gap = "\n" + self._prefix
        else:
            self._start_block()
            self._gap = ""
        self._push(_Kind.LIST, "", list_type)

    def _list_item(self) -> None:
        self._end_leaf()
        if self._stack and self._stack[-1].kind is _Kind.ITEM:
            self._pop()
            # An empty item never used its gap; the next marker needs its own line
            self._gap = None

        if not self._stack or self._stack[-1].kind is not _Kind.LIST:
            # Item outside a list opens an unordered one
            self._open_list(TokenType.UNORDERED_LIST)

        lst = self._stack[-1]
        lst.counter += 1
        if lst.list_type is TokenType.ORDERED_LIST:
            marker = f"{lst.counter}. "
        elif lst.list_type is TokenType.DEFINITION_LIST:
            marker = ": "
        else:
            marker = "- "

        self._write(self._take_gap("\n" + self._prefix) + marker)
        self._push(_Kind.ITEM, " " * len(marker))
        self._not_first = True
        self._gap = ""
        self._leaf = _Leaf.PARAGRAPH
        self._at_line_start = False

    def _close_container(self, kinds: tuple[_Kind, ...], token: Token) -> None:
        """Pop containers up to and including the nearest of the given kinds."""
        if not any(c.kind in kinds for c in self._stack):
            logger.debug("Ignoring unmatched %s", token.type.name)
            return
        self._end_leaf()
        while True:
            container = self._pop()
            if container.kind in kinds:
                break
        self._gap = None

    # =========================================================================
    # Tables and links
    # =========================================================================

    def _table_cell(self) -> None:
        if self._leaf is not _Leaf.TABLE:
            self._start_block()
            self._leaf = _Leaf.TABLE
        if self._row_done:
            self._write("\n" + self._prefix)
            self._row_done = False
        self._write(" | " if self._row_open else "| ")
        self._row_open = True
        self._last_text = False
        self._at_line_start = False

    def _link_value(self, url: str) -> None:
        match self._link:
            case _Link.REF:
                self._write("(" + _destination(url))
                self._link = _Link.DEST
            case _Link.KEY:
                self._write(" " + _destination(url))
                self._link = _Link.DEF
            case _:
                self._inline(f"<{url}>")

    def _link_title(self, title: str) -> None:
        quoted = '"' + title.replace("\\", "\\\\").replace('"', '\\"') + '"'
        match self._link:
            case _Link.DEST:
                self._write(" " + quoted + ")")
                self._link = _Link.NONE
            case _Link.DEF:
                self._write(" " + quoted)
                self._link = _Link.NONE
            case _:
                self._text(quoted)

    def _finish_link(self) -> None:
        if self._link is _Link.DEST:
            self._write(")")
        self._link = _Link.NONE


# =============================================================================
# Escaping
# =============================================================================


def _escape_text(text: str, at_line_start: bool, *, in_table: bool = False) -> str:
    """Escape TEXT so that it decodes back to the same TEXT."""
    if not text:
        return text
    text = _INLINE_ESCAPE.sub(r"\\\1", text)
    text = _HIGHLIGHT_RUN.sub(lambda m: "\\=" * len(m.group()), text)
    text = _BARE_URL.sub(r"\1\\:\2", text)
    if in_table:
        text = text.replace("|", "\\|")
    if at_line_start:
        text = _LINE_START_ESCAPE.sub(_escape_line_start, text, count=1)
    return text


def _escape_line_start(match: re.Match[str]) -> str:
    marker = match.group(1)
    if marker[0].isdigit():
        # 1. / 1) must not start an ordered list
        return marker + "\\"
    return "\\" + marker


def _escape_label(text: str) -> str:
    return text.replace("\\", "\\\\").replace("[", "\\[").replace("]", "\\]")


def _destination(url: str) -> str:
    if not url or any(c in url for c in " ()<>"):
        return f"<{url}>"
    return url


def _code_span(code: str) -> str:
    """Wrap code in a backtick run longer than any run inside it."""
    longest = max((len(run) for run in re.findall(r"`+", code)), default=0)
    fence = "`" * (longest + 1)
    if not code.strip(" "):
        # All-space content is never trimmed when read back
        return f"{fence}{code}{fence}"
    if code.startswith(("`", " ")) or code.endswith(("`", " ")):
        return f"{fence} {code} {fence}"
    return f"{fence}{code}{fence}"
