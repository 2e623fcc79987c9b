"""Encoder protocol — stable interface for token stream encoders.

Any encoder constructed over a token iterable and an output sink that
implements ``encode() -> None`` conforms to this protocol.

Example:
    from mdstream.encoders.protocol import Encoder

    def write_all(encoder: Encoder) -> None:
        encoder.encode()

"""

from collections.abc import Iterable, Iterator
from typing import Protocol

from mdstream.errors import EncodeError
from mdstream.tokens import Token


class Encoder(Protocol):
    """Protocol for token stream encoders.

    The built-in ``MarkdownEncoder`` and ``HtmlEncoder`` conform to this
    protocol. An encoder consumes its token iterable exactly once.

    """

    def encode(self) -> None:
        """Consume the token stream and write it to the sink.

        Raises:
            EncodeError: On the first sink fault, or on a non-Token item.

        """
        ...


def checked_tokens(tokens: Iterable[Token]) -> Iterator[tuple[int, Token]]:
    """Yield (index, token) pairs, rejecting anything that is not a Token."""
    for index, token in enumerate(tokens):
        if not isinstance(token, Token):
            raise EncodeError(f"item {index} is not a Token: {type(token).__name__}")
        yield index, token
