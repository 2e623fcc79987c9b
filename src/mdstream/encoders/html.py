"""HTML encoder: token stream to HTML with explicit closing.

A block opener first closes whatever block is open; containers (quotes,
lists, items, footnotes) and inline toggles are tracked on stacks and
closed explicitly, including at end of stream. A close for something
that was never opened is ignored, so every tag written is balanced for
any token sequence.

All text and attribute values are HTML-escaped.

Thread Safety:
HtmlEncoder instances are single-use; encode() consumes the stream.

"""

from __future__ import annotations

import html
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any
from urllib.parse import quote as url_quote

from mdstream.encoders.protocol import checked_tokens
from mdstream.encoders.sink import Sink
from mdstream.highlighting import highlight
from mdstream.tokens import Token, TokenType
from mdstream.utils.logger import get_logger, log_warning
from mdstream.utils.text import escape_comment, escape_html, slugify

logger = get_logger(__name__)

_INLINE_TAGS: dict[TokenType, tuple[str, str]] = {
    TokenType.ITALIC: ("<em>", "</em>"),
    TokenType.BOLD: ("<strong>", "</strong>"),
    TokenType.BOLD_ITALIC: ("<strong><em>", "</em></strong>"),
    TokenType.SUPERSCRIPT: ("<sup>", "</sup>"),
    TokenType.SUBSCRIPT: ("<sub>", "</sub>"),
    TokenType.STRIKETHROUGH: ("<del>", "</del>"),
    TokenType.HIGHLIGHT: ("<mark>", "</mark>"),
    TokenType.UNDERLINE: ("<u>", "</u>"),
    TokenType.CAPTION: ('<span class="caption">', "</span>"),
}

_ALIGNMENTS: dict[TokenType, str] = {
    TokenType.TABLE_LEFT: "left",
    TokenType.TABLE_CENTERED: "center",
    TokenType.TABLE_RIGHT: "right",
}

_LIST_TAGS: dict[TokenType, str] = {
    TokenType.UNORDERED_LIST: "ul",
    TokenType.ORDERED_LIST: "ol",
    TokenType.DEFINITION_LIST: "dl",
}


def _encode_url(url: str) -> str:
    """Percent-encode a URL for an href or src attribute.

    Returns URL safe for the attribute (still needs escape_html for quotes).
    """
    decoded = html.unescape(url)
    return url_quote(decoded, safe="/:?#[]@!$&'()*+,;=-_.~%")


def _footnote_anchor(ident: str) -> str:
    """Anchor id shared by a footnote reference and its definition."""
    return slugify(ident) or escape_html(ident)


class _Leaf(Enum):
    NONE = auto()
    PARAGRAPH = auto()
    HEADING = auto()
    INLINE = auto()  # item or term text, nothing to close
    CODE = auto()
    TABLE = auto()


class _Kind(Enum):
    QUOTE = auto()
    LIST = auto()
    ITEM = auto()
    FOOTNOTE = auto()


@dataclass(slots=True)
class _Open:
    kind: _Kind
    close: str
    tag: str = ""


@dataclass(slots=True)
class _PendingLink:
    """A link, image, or definition waiting for its LINK_VAL and TITLE."""

    type: TokenType
    text: str
    number: int | None = None
    url: str | None = None
    title: str | None = None


class HtmlEncoder:
    """Serialize a token stream to HTML.

    Usage:
        >>> from mdstream.encoders.sink import StringBuilder
        >>> out = StringBuilder()
        >>> HtmlEncoder([Token(TokenType.HEADING1), Token(TokenType.TEXT, "H1")], out).encode()
        >>> out.build()
        '<h1>H1</h1>\\n'

    """

    __slots__ = (
        "_tokens",
        "_sink",
        "_highlight",
        "_stack",
        "_inline_stack",
        "_leaf",
        "_heading_level",
        "_heading_tag",  # `<hN` written, `>` still owed
        "_last_text",
        "_pending_quote",
        "_link",
        "_definitions",
        "_code_language",
        "_code_lines",
        "_table_body",
        "_row_open",
        "_row_is_alignment",
        "_cell_tag",
        "_cell_index",
        "_alignments",
    )

    def __init__(self, tokens: Iterable[Token], sink: Any, *, highlight: bool = False) -> None:
        """Initialize encoder.

        Args:
            tokens: Token iterable, consumed by encode()
            sink: Object with a write() method (text or binary)
            highlight: Send code blocks with a language through
                mdstream.highlighting
        """
        self._tokens = tokens
        self._sink = Sink(sink)
        self._highlight = highlight
        self._stack: list[_Open] = []
        self._inline_stack: list[TokenType] = []
        self._leaf = _Leaf.NONE
        self._heading_level = 0
        self._heading_tag = False
        self._last_text = False
        self._pending_quote = False
        self._link: _PendingLink | None = None
        self._definitions: dict[str, tuple[str, str | None]] = {}
        self._code_language = ""
        self._code_lines: list[str] = []
        self._table_body = False
        self._row_open = False
        self._row_is_alignment = False
        self._cell_tag = ""
        self._cell_index = 0
        self._alignments: list[str] = []

    def encode(self) -> None:
        """Write the whole token stream and close everything left open.

        Raises:
            EncodeError: On the first sink fault or non-Token item
        """
        for _, token in checked_tokens(self._tokens):
            self._encode_token(token)

        if self._pending_quote:
            self._pending_quote = False
            self._open_container(_Kind.QUOTE, "<blockquote>\n", "</blockquote>\n")
        self._close_leaf()
        while self._stack:
            self._write(self._stack.pop().close)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _encode_token(self, token: Token) -> None:
        ttype = token.type

        if self._heading_tag and ttype is not TokenType.HEADING_ID:
            self._finish_heading_tag()

        if self._pending_quote:
            self._pending_quote = False
            if ttype is TokenType.ADMONITION:
                self._open_admonition(token.value)
                return
            if ttype is TokenType.DETAILS:
                self._open_details(token)
                return
            self._open_container(_Kind.QUOTE, "<blockquote>\n", "</blockquote>\n")

        if self._link is not None and ttype not in (TokenType.LINK_VAL, TokenType.TITLE):
            self._resolve_link()

        match ttype:
            case TokenType.TEXT:
                self._ensure_inline()
                if self._last_text:
                    self._write(" ")
                self._write(escape_html(token.value))
                self._last_text = True

            case TokenType.PARAGRAPH:
                self._close_leaf()
                self._write("<p>")
                self._leaf = _Leaf.PARAGRAPH

            case (
                TokenType.HEADING1
                | TokenType.HEADING2
                | TokenType.HEADING3
                | TokenType.HEADING4
                | TokenType.HEADING5
                | TokenType.HEADING6
            ):
                self._close_leaf()
                self._heading_level = token.heading_level
                self._write(f"<h{self._heading_level}")
                self._heading_tag = True
                self._leaf = _Leaf.HEADING

            case TokenType.HEADING_ID:
                if self._heading_tag:
                    self._write(f' id="{escape_html(token.value)}"')
                    self._finish_heading_tag()
                else:
                    logger.debug("Ignoring HEADING_ID outside a heading opener")

            case TokenType.QUOTE_OPEN:
                self._pending_quote = True

            case TokenType.QUOTE_CLOSE:
                self._close_container(_Kind.QUOTE, token)

            case TokenType.ADMONITION:
                self._open_admonition(token.value)

            case TokenType.DETAILS:
                self._open_details(token)

            case TokenType.ORDERED_LIST | TokenType.UNORDERED_LIST | TokenType.DEFINITION_LIST:
                tag = _LIST_TAGS[ttype]
                self._open_container(_Kind.LIST, f"<{tag}>\n", f"</{tag}>\n", tag)

            case TokenType.LIST_ITEM:
                self._list_item()

            case TokenType.LIST_CLOSE:
                self._close_container(_Kind.LIST, token)

            case TokenType.LIST_TASK:
                self._ensure_inline()
                checked = " checked" if token.flag else ""
                self._write(f'<input type="checkbox" disabled{checked} /> ')
                self._last_text = False

            case TokenType.SYNTAX_HIGHLIGHTING:
                self._open_code(token.value)

            case TokenType.CODEBLOCK:
                if self._leaf is not _Leaf.CODE:
                    self._open_code("")
                if self._buffering_code():
                    self._code_lines.append(token.value)
                else:
                    self._write(escape_html(token.value) + "\n")

            case TokenType.CODE:
                self._inline_html(f"<code>{escape_html(token.value)}</code>")

            case TokenType.HORIZONTAL_RULE:
                self._close_leaf()
                self._write("<hr />\n")

            case TokenType.TABLE_CELL:
                self._table_cell()

            case TokenType.TABLE_LEFT | TokenType.TABLE_CENTERED | TokenType.TABLE_RIGHT:
                self._table_alignment(_ALIGNMENTS[ttype])

            case TokenType.LINE_BREAK:
                if self._leaf is _Leaf.TABLE:
                    self._end_row()
                else:
                    self._inline_html("<br />\n")

            case TokenType.LINK:
                url = escape_html(_encode_url(token.value))
                self._inline_html(f'<a href="{url}">{escape_html(token.value)}</a>')

            case TokenType.LINK_REF | TokenType.IMAGE_REF | TokenType.LINK_NUM | TokenType.IMAGE_NUM:
                self._ensure_inline()
                self._link = _PendingLink(ttype, token.value, token.number)

            case TokenType.LINK_KEY:
                self._close_leaf()
                self._link = _PendingLink(ttype, token.value)

            case TokenType.LINK_VAL:
                if self._link is not None and self._link.url is None:
                    self._link.url = token.value
                else:
                    url = escape_html(_encode_url(token.value))
                    self._inline_html(f'<a href="{url}">{escape_html(token.value)}</a>')

            case TokenType.TITLE:
                if self._link is not None and self._link.title is None:
                    self._link.title = token.value
                else:
                    self._inline_html(escape_html(f'"{token.value}"'))

            case TokenType.COMMENT:
                self._close_leaf()
                self._write(f"<!-- {escape_comment(token.value)} -->\n")

            case TokenType.FOOTNOTE_REF:
                anchor = _footnote_anchor(token.value)
                self._inline_html(
                    f'<sup class="footnote-ref"><a href="#fn-{anchor}" id="fnref-{anchor}">'
                    f"{escape_html(token.value)}</a></sup>"
                )

            case TokenType.FOOTNOTE_OPEN:
                anchor = _footnote_anchor(token.value)
                self._open_container(
                    _Kind.FOOTNOTE, f'<div class="footnote" id="fn-{anchor}">\n', "</div>\n"
                )
                self._write("<p>")
                self._leaf = _Leaf.PARAGRAPH

            case TokenType.FOOTNOTE_CLOSE:
                self._close_container(_Kind.FOOTNOTE, token)

            case (
                TokenType.ITALIC
                | TokenType.BOLD
                | TokenType.BOLD_ITALIC
                | TokenType.SUPERSCRIPT
                | TokenType.SUBSCRIPT
                | TokenType.STRIKETHROUGH
                | TokenType.HIGHLIGHT
                | TokenType.UNDERLINE
            ):
                self._toggle(ttype, bool(token.flag))

            case TokenType.CAPTION:
                self._toggle(ttype, TokenType.CAPTION not in self._inline_stack)

            case TokenType.WARNING:
                log_warning(token, "skipped by html encoder")

    # =========================================================================
    # Leaf blocks and inline content
    # =========================================================================

    def _write(self, text: str) -> None:
        self._sink.write(text)

    def _finish_heading_tag(self) -> None:
        self._write(">")
        self._heading_tag = False

    def _ensure_inline(self) -> None:
        """Make sure inline content has an open element to go into."""
        match self._leaf:
            case _Leaf.PARAGRAPH | _Leaf.HEADING | _Leaf.INLINE:
                return
            case _Leaf.TABLE:
                if not self._cell_tag:
                    self._table_cell()
                return

        self._close_leaf()
        top = self._stack[-1] if self._stack else None
        if top is not None and top.kind is _Kind.LIST:
            if top.tag == "dl":
                self._open_container(_Kind.ITEM, "<dt>", "</dt>\n")
                self._leaf = _Leaf.INLINE
            else:
                self._list_item()
        else:
            self._write("<p>")
            self._leaf = _Leaf.PARAGRAPH

    def _inline_html(self, markup: str) -> None:
        self._ensure_inline()
        self._write(markup)
        self._last_text = False

    def _toggle(self, ttype: TokenType, opening: bool) -> None:
        open_tag, close_tag = _INLINE_TAGS[ttype]
        if opening:
            if ttype in self._inline_stack:
                logger.debug("Ignoring %s opened twice", ttype.name)
                return
            self._ensure_inline()
            self._write(open_tag)
            self._inline_stack.append(ttype)
        else:
            if ttype not in self._inline_stack:
                logger.debug("Ignoring unmatched %s close", ttype.name)
                return
            # Close everything opened inside it as well
            while True:
                top = self._inline_stack.pop()
                self._write(_INLINE_TAGS[top][1])
                if top is ttype:
                    break
        self._last_text = False

    def _close_inline(self) -> None:
        while self._inline_stack:
            self._write(_INLINE_TAGS[self._inline_stack.pop()][1])

    def _close_leaf(self) -> None:
        """Close the open leaf block, if any."""
        if self._heading_tag:
            self._finish_heading_tag()
        if self._link is not None:
            self._resolve_link()
        self._close_inline()

        match self._leaf:
            case _Leaf.PARAGRAPH:
                self._write("</p>\n")
            case _Leaf.HEADING:
                self._write(f"</h{self._heading_level}>\n")
            case _Leaf.CODE:
                self._close_code()
            case _Leaf.TABLE:
                self._close_table()

        self._leaf = _Leaf.NONE
        self._last_text = False

    # =========================================================================
    # Code blocks
    # =========================================================================

    def _open_code(self, language: str) -> None:
        self._close_leaf()
        self._leaf = _Leaf.CODE
        self._code_language = language
        self._code_lines = []
        if not self._buffering_code():
            lang_class = f' class="language-{escape_html(language)}"' if language else ""
            self._write(f"<pre><code{lang_class}>")

    def _buffering_code(self) -> bool:
        return self._highlight and bool(self._code_language)

    def _close_code(self) -> None:
        if self._buffering_code():
            code = "".join(line + "\n" for line in self._code_lines)
            self._write(highlight(code, self._code_language).rstrip("\n") + "\n")
            self._code_lines = []
        else:
            self._write("</code></pre>\n")

    # =========================================================================
    # Tables
    # =========================================================================

    def _open_table(self) -> None:
        self._close_leaf()
        self._write("<table>\n<thead>\n")
        self._leaf = _Leaf.TABLE
        self._table_body = False
        self._row_open = False
        self._row_is_alignment = False
        self._cell_tag = ""
        self._alignments = []

    def _table_cell(self) -> None:
        if self._leaf is not _Leaf.TABLE:
            self._open_table()
        self._close_cell()
        if self._row_is_alignment:
            self._end_row()
        if not self._row_open:
            self._write("<tr>\n")
            self._row_open = True
            self._cell_index = 0

        tag = "td" if self._table_body else "th"
        align = ""
        if self._cell_index < len(self._alignments):
            align = f' style="text-align: {self._alignments[self._cell_index]}"'
        self._write(f"<{tag}{align}>")
        self._cell_tag = tag
        self._cell_index += 1

    def _table_alignment(self, alignment: str) -> None:
        if self._leaf is not _Leaf.TABLE:
            self._open_table()
        if self._row_open and not self._row_is_alignment:
            self._end_row()
        if not self._row_is_alignment:
            self._row_is_alignment = True
            self._alignments = []
        self._alignments.append(alignment)

    def _close_cell(self) -> None:
        if self._cell_tag:
            self._close_inline()
            self._write(f"</{self._cell_tag}>\n")
            self._cell_tag = ""
            self._last_text = False

    def _end_row(self) -> None:
        """End the current row; the first row closes the table head."""
        self._close_cell()
        if self._row_is_alignment:
            self._row_is_alignment = False
            return
        if self._row_open:
            self._write("</tr>\n")
            self._row_open = False
            if not self._table_body:
                self._write("</thead>\n<tbody>\n")
                self._table_body = True

    def _close_table(self) -> None:
        self._close_cell()
        if self._row_open:
            self._write("</tr>\n")
            self._row_open = False
        self._row_is_alignment = False
        self._write("</tbody>\n" if self._table_body else "</thead>\n")
        self._write("</table>\n")

    # =========================================================================
    # Containers
    # =========================================================================

    def _open_container(self, kind: _Kind, open_markup: str, close_markup: str, tag: str = "") -> None:
        self._close_leaf()
        self._write(open_markup)
        self._stack.append(_Open(kind, close_markup, tag))

    def _open_admonition(self, kind: str) -> None:
        css = escape_html(kind.lower())
        self._open_container(_Kind.QUOTE, f'<div class="admonition {css}">\n', "</div>\n")
        self._write(f'<p class="admonition-title">{escape_html(kind.title())}</p>\n')

    def _open_details(self, token: Token) -> None:
        opened = " open" if token.flag else ""
        self._open_container(_Kind.QUOTE, f"<details{opened}>\n", "</details>\n")
        self._write(f"<summary>{escape_html(token.value)}</summary>\n")

    def _list_item(self) -> None:
        self._close_leaf()
        if self._stack and self._stack[-1].kind is _Kind.ITEM:
            self._write(self._stack.pop().close)
        if not self._stack or self._stack[-1].kind is not _Kind.LIST:
            # Item outside a list opens an unordered one
            self._open_container(_Kind.LIST, "<ul>\n", "</ul>\n", "ul")

        tag = "dd" if self._stack[-1].tag == "dl" else "li"
        self._open_container(_Kind.ITEM, f"<{tag}>", f"</{tag}>\n")
        self._leaf = _Leaf.INLINE

    def _close_container(self, kind: _Kind, token: Token) -> None:
        """Close containers up to and including the nearest one of kind."""
        if not any(o.kind is kind for o in self._stack):
            logger.debug("Ignoring unmatched %s", token.type.name)
            return
        self._close_leaf()
        while True:
            opened = self._stack.pop()
            self._write(opened.close)
            if opened.kind is kind:
                break

    # =========================================================================
    # Links
    # =========================================================================

    def _resolve_link(self) -> None:
        """Write the pending link or image, or record a definition."""
        link = self._link
        self._link = None
        if link is None:
            return

        if link.type is TokenType.LINK_KEY:
            if link.url is not None:
                self._definitions[link.text.lower()] = (link.url, link.title)
            return

        url, title = link.url, link.title
        if url is None:
            key = str(link.number) if link.number is not None else link.text
            url, title = self._definitions.get(key.lower(), (None, None))

        image = link.type in (TokenType.IMAGE_REF, TokenType.IMAGE_NUM)
        if url is None:
            # Unresolved reference stays literal
            literal = f"![{link.text}]" if image else f"[{link.text}]"
            if link.number is not None:
                literal += f"[{link.number}]"
            self._inline_html(escape_html(literal))
            return

        href = escape_html(_encode_url(url))
        title_attr = f' title="{escape_html(title)}"' if title else ""
        if image:
            self._inline_html(f'<img src="{href}" alt="{escape_html(link.text)}"{title_attr} />')
        else:
            self._inline_html(f'<a href="{href}"{title_attr}>{escape_html(link.text)}</a>')
