"""Validating pass-through for token streams.

The token model does not make unmatched open/close sequences impossible.
``validate`` layers that guarantee on top of any stream without changing
the tokens: it yields every token unchanged and raises TokenStreamError
at the first structural violation.

Checked:
- an inline toggle closed without being open, or opened twice
- an inline toggle still open at a block boundary or end of stream
- QUOTE_CLOSE, LIST_CLOSE, FOOTNOTE_CLOSE that does not close the
  innermost open container of its kind

Containers still open at end of stream are allowed: the decoder never
emits trailing closes, and encoders close them.

Example:
    >>> from mdstream import decode, to_html
    >>> html = to_html(validate(decode("*a* and **b**")))

"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from mdstream.errors import TokenStreamError
from mdstream.tokens import (
    BLOCK_OPENERS,
    CONTAINER_CLOSERS,
    INLINE_TOGGLES,
    Token,
    TokenType,
)

_CONTAINER_OPENERS: dict[TokenType, TokenType] = {
    TokenType.QUOTE_OPEN: TokenType.QUOTE_CLOSE,
    TokenType.ORDERED_LIST: TokenType.LIST_CLOSE,
    TokenType.UNORDERED_LIST: TokenType.LIST_CLOSE,
    TokenType.DEFINITION_LIST: TokenType.LIST_CLOSE,
    TokenType.FOOTNOTE_OPEN: TokenType.FOOTNOTE_CLOSE,
}

# Tokens that end the inline run of the current line or cell
_BOUNDARIES: frozenset[TokenType] = (
    BLOCK_OPENERS
    | CONTAINER_CLOSERS
    | frozenset(_CONTAINER_OPENERS)
    | {
        TokenType.LIST_ITEM,
        TokenType.SYNTAX_HIGHLIGHTING,
        TokenType.CODEBLOCK,
        TokenType.HORIZONTAL_RULE,
        TokenType.TABLE_CELL,
        TokenType.LINK_KEY,
        TokenType.COMMENT,
    }
)


def validate(tokens: Iterable[Token]) -> Iterator[Token]:
    """Yield tokens unchanged, raising on unmatched open/close sequences.

    Args:
        tokens: Any token iterable (consumed lazily)

    Yields:
        The same tokens, in order

    Raises:
        TokenStreamError: At the first violation, carrying its index
    """
    open_toggles: set[TokenType] = set()
    containers: list[TokenType] = []  # expected closer per open container
    index = -1

    for index, token in enumerate(tokens):
        ttype = token.type

        if ttype in INLINE_TOGGLES:
            if token.flag:
                if ttype in open_toggles:
                    raise TokenStreamError(f"{ttype.name} opened twice", index, token)
                open_toggles.add(ttype)
            else:
                if ttype not in open_toggles:
                    raise TokenStreamError(
                        f"{ttype.name} closed without being open", index, token
                    )
                open_toggles.discard(ttype)

        elif ttype in _BOUNDARIES:
            if open_toggles:
                names = ", ".join(sorted(t.name for t in open_toggles))
                raise TokenStreamError(f"unclosed {names} before {ttype.name}", index, token)

            if ttype in _CONTAINER_OPENERS:
                containers.append(_CONTAINER_OPENERS[ttype])
            elif ttype in CONTAINER_CLOSERS:
                if not containers or containers[-1] is not ttype:
                    raise TokenStreamError(
                        f"{ttype.name} does not match an open container", index, token
                    )
                containers.pop()

        yield token

    if open_toggles:
        names = ", ".join(sorted(t.name for t in open_toggles))
        raise TokenStreamError(f"unclosed {names} at end of stream", index + 1)
