"""Inline scanning for the mdstream decoder.

Splits the content of one line into TEXT and inline tokens: toggles
(emphasis, strikethrough, highlight, super/subscript, underline), code
spans, links, images, footnote references, and hard breaks.

Toggles are emitted only as matched open/close pairs within the line.
A delimiter whose partner never materializes is turned back into literal
text in a final pass, and adjacent text is merged so that one line never
yields two TEXT tokens in a row.

Thread Safety:
All scan state is local to a single _scan_inline() call.

"""

from __future__ import annotations

import re

from mdstream.decoder.charsets import (
    ASCII_PUNCTUATION,
    INLINE_SPECIAL,
    URL_TRAILING_PUNCTUATION,
)
from mdstream.decoder.classifiers.link_ref import unescape
from mdstream.tokens import MAX_REFERENCE_NUMBER, Token, TokenType, WarningKind

_DELIMITERS: dict[str, TokenType] = {
    "***": TokenType.BOLD_ITALIC,
    "**": TokenType.BOLD,
    "*": TokenType.ITALIC,
    "___": TokenType.BOLD_ITALIC,
    "__": TokenType.BOLD,
    "_": TokenType.ITALIC,
    "~~": TokenType.STRIKETHROUGH,
    "~": TokenType.SUBSCRIPT,
    "^": TokenType.SUPERSCRIPT,
    "==": TokenType.HIGHLIGHT,
}

_AUTOLINK = re.compile(r"<([a-zA-Z][a-zA-Z0-9+.-]{1,31}:[^\s<>]*)>")
_BARE_URL = re.compile(r"https?://[^\s<>]+")
_LINE_BREAK_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)
_UNDERLINE_OPEN = re.compile(r"<(u|ins)>", re.IGNORECASE)
_UNDERLINE_CLOSE = re.compile(r"</(u|ins)>", re.IGNORECASE)
_FOOTNOTE_REF = re.compile(r"\[\^([\w-]+)\]")
_NUMBERED = re.compile(r"\[(\d+)\]")
# (url "title"), (<url> 'title'), (url (title))
_DESTINATION = re.compile(
    r"\([ \t]*(?:<([^<>]*)>|((?:[^\s()\\]|\\.)*))"
    r"(?:[ \t]+(?:\"((?:[^\"\\]|\\.)*)\"|'((?:[^'\\]|\\.)*)'|\(((?:[^()\\]|\\.)*)\)))?[ \t]*\)"
)


class InlineScannerMixin:
    """Mixin providing inline scanning.

    Required Host Methods:
        - _warn(kind) -> None

    """

    def _warn(self, kind: WarningKind) -> None:
        """Record a warning for the current line. Implemented by Decoder."""
        raise NotImplementedError

    def _scan_inline(self, text: str) -> list[Token]:
        """Scan one line of content into inline tokens.

        Args:
            text: Line content without leading indentation

        Returns:
            Tokens in source order; never two TEXT tokens in a row.
        """
        if not text:
            return []

        out: list[Token] = []
        buf: list[str] = []
        # Open toggles: type -> (index in out, delimiter run)
        opened: dict[TokenType, tuple[int, str]] = {}
        pos = 0
        text_len = len(text)

        def flush() -> None:
            if buf:
                out.append(Token(TokenType.TEXT, "".join(buf)))
                buf.clear()

        while pos < text_len:
            char = text[pos]

            if char not in INLINE_SPECIAL:
                buf.append(char)
                pos += 1
                continue

            # Backslash escape
            if char == "\\":
                if pos + 1 < text_len and text[pos + 1] in ASCII_PUNCTUATION:
                    buf.append(text[pos + 1])
                    pos += 2
                else:
                    buf.append(char)
                    pos += 1
                continue

            # Code span
            if char == "`":
                end = self._scan_code_span(text, pos)
                if end is None:
                    run = _run_length(text, pos)
                    buf.append(text[pos : pos + run])
                    pos += run
                    continue
                code, pos = end
                flush()
                out.append(Token(TokenType.CODE, code))
                continue

            if char == "<":
                result = self._scan_angle(text, pos, opened, out, flush)
                if result is None:
                    buf.append(char)
                    pos += 1
                else:
                    pos = result
                continue

            if char == "!" and text.startswith("![", pos):
                result = self._scan_link(text, pos + 1, image=True)
                if result is None:
                    buf.append(char)
                    pos += 1
                    continue
                tokens, pos = result
                flush()
                out.extend(tokens)
                continue

            if char == "[":
                result = self._scan_link(text, pos, image=False)
                if result is None:
                    buf.append(char)
                    pos += 1
                    continue
                tokens, pos = result
                flush()
                out.extend(tokens)
                continue

            if char == "h":
                match = _BARE_URL.match(text, pos) if pos == 0 or not text[pos - 1].isalnum() else None
                if match is None:
                    buf.append(char)
                    pos += 1
                    continue
                url = match.group(0).rstrip(URL_TRAILING_PUNCTUATION)
                flush()
                out.append(Token(TokenType.LINK, url))
                pos += len(url)
                continue

            if char == "!":
                buf.append(char)
                pos += 1
                continue

            # Toggle delimiter run: * _ ~ ^ =
            run = _run_length(text, pos)
            delim = text[pos : pos + run]
            kind = _DELIMITERS.get(delim)
            if kind is None:
                buf.append(delim)
                pos += run
                continue

            before = text[pos - 1] if pos > 0 else ""
            after = text[pos + run] if pos + run < text_len else ""

            if kind in opened:
                if opened[kind][1] == delim and _can_close(delim, before, after):
                    flush()
                    out.append(Token(kind, flag=False))
                    del opened[kind]
                else:
                    buf.append(delim)
            elif _can_open(delim, before, after) and _has_closer(text, pos + run, delim):
                flush()
                opened[kind] = (len(out), delim)
                out.append(Token(kind, flag=True))
            else:
                buf.append(delim)
            pos += run

        flush()

        # Openers whose closer was swallowed by a code span or link stay literal
        for index, delim in opened.values():
            out[index] = Token(TokenType.TEXT, delim)

        return _merge_text(out)

    # =========================================================================
    # Scanners for individual constructs
    # =========================================================================

    def _scan_code_span(self, text: str, pos: int) -> tuple[str, int] | None:
        """Match a code span opening at pos.

        Returns:
            (code, position after closing run), or None if unterminated.
        """
        run = _run_length(text, pos)
        search = pos + run
        while True:
            close = text.find("`" * run, search)
            if close == -1:
                return None
            close_run = _run_length(text, close)
            if close_run == run:
                break
            search = close + close_run

        code = text[pos + run : close]
        if len(code) > 1 and code[0] == " " and code[-1] == " " and code.strip():
            code = code[1:-1]
        return code, close + run

    def _scan_angle(self, text, pos, opened, out, flush) -> int | None:
        """Match an autolink, `<br>`, or underline tag at pos.

        Returns:
            Position after the construct, or None to treat `<` as text.
        """
        match = _AUTOLINK.match(text, pos)
        if match:
            flush()
            out.append(Token(TokenType.LINK, match.group(1)))
            return match.end()

        match = _LINE_BREAK_TAG.match(text, pos)
        if match:
            flush()
            out.append(Token(TokenType.LINE_BREAK))
            return match.end()

        match = _UNDERLINE_OPEN.match(text, pos)
        if match and TokenType.UNDERLINE not in opened:
            tag = match.group(1).lower()
            if re.search(rf"</{tag}>", text[match.end() :], re.IGNORECASE):
                flush()
                opened[TokenType.UNDERLINE] = (len(out), match.group(0))
                out.append(Token(TokenType.UNDERLINE, flag=True))
                return match.end()

        match = _UNDERLINE_CLOSE.match(text, pos)
        if match and TokenType.UNDERLINE in opened:
            flush()
            out.append(Token(TokenType.UNDERLINE, flag=False))
            del opened[TokenType.UNDERLINE]
            return match.end()

        return None

    def _scan_link(self, text: str, pos: int, *, image: bool) -> tuple[list[Token], int] | None:
        """Match a link, image, or footnote reference whose `[` is at pos.

        Returns:
            (tokens, position after the construct), or None for literal text.
        """
        if not image:
            match = _FOOTNOTE_REF.match(text, pos)
            if match and not text.startswith(":", match.end()):
                return [Token(TokenType.FOOTNOTE_REF, match.group(1))], match.end()

        close = _find_label_end(text, pos + 1)
        if close is None:
            return None

        label = unescape(text[pos + 1 : close])
        if not label.strip():
            return None

        after = close + 1

        match = _DESTINATION.match(text, after)
        if match:
            url = match.group(1) if match.group(1) is not None else match.group(2)
            tokens = [
                Token(TokenType.IMAGE_REF if image else TokenType.LINK_REF, label),
                Token(TokenType.LINK_VAL, unescape(url)),
            ]
            title = next((g for g in match.group(3, 4, 5) if g is not None), None)
            if title is not None:
                tokens.append(Token(TokenType.TITLE, unescape(title)))
            return tokens, match.end()

        match = _NUMBERED.match(text, after)
        if match:
            number = int(match.group(1))
            if number > MAX_REFERENCE_NUMBER:
                self._warn(WarningKind.REFERENCE_OUT_OF_RANGE)
                # The whole construct stays literal, label included
                literal = ("!" if image else "") + text[pos : match.end()]
                return [Token(TokenType.TEXT, literal)], match.end()
            kind = TokenType.IMAGE_NUM if image else TokenType.LINK_NUM
            return [Token(kind, label, number=number)], match.end()

        return [Token(TokenType.IMAGE_REF if image else TokenType.LINK_REF, label)], after


# =============================================================================
# Helpers
# =============================================================================


def _run_length(text: str, pos: int) -> int:
    """Count repeats of text[pos] starting at pos."""
    char = text[pos]
    end = pos
    while end < len(text) and text[end] == char:
        end += 1
    return end - pos


def _find_label_end(text: str, start: int) -> int | None:
    """Find the `]` closing a link label, skipping escapes."""
    pos = start
    while pos < len(text):
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "[":
            return None
        if char == "]":
            return pos
        pos += 1
    return None


def _can_open(delim: str, before: str, after: str) -> bool:
    if not after or after.isspace():
        return False
    # Intraword underscores stay literal: snake_case_name
    return not (delim[0] == "_" and before.isalnum())


def _can_close(delim: str, before: str, after: str) -> bool:
    if not before or before.isspace():
        return False
    return not (delim[0] == "_" and after.isalnum())


def _has_closer(text: str, start: int, delim: str) -> bool:
    """Check that a run equal to delim can close later in the line."""
    char = delim[0]
    pos = start
    text_len = len(text)
    while pos < text_len:
        current = text[pos]
        if current == "\\":
            # Escaped characters never join a delimiter run
            pos += 2
            continue
        if current != char:
            pos += 1
            continue
        run = _run_length(text, pos)
        if run == len(delim):
            before = text[pos - 1]
            after = text[pos + run] if pos + run < text_len else ""
            if _can_close(delim, before, after):
                return True
        pos += run
    return False


def _merge_text(tokens: list[Token]) -> list[Token]:
    """Merge adjacent TEXT tokens and drop empty ones."""
    merged: list[Token] = []
    for token in tokens:
        if token.type is TokenType.TEXT:
            if not token.value:
                continue
            if merged and merged[-1].type is TokenType.TEXT:
                merged[-1] = Token(TokenType.TEXT, merged[-1].value + token.value)
                continue
        merged.append(token)
    return merged
