"""
mdstream — Streaming Markdown token codec

Decodes Markdown into a flat, lazy stream of typed tokens and encodes
token streams back into canonical Markdown or HTML. There is no syntax
tree: structure is carried by token order alone.

Quick Start:
    >>> from mdstream import decode, to_html, to_markdown
    >>> tokens = list(decode("# Hello\\n\\nSome *text*"))
    >>> to_html(tokens)
    '<h1>Hello</h1>\\n<p>Some <em>text</em></p>\\n'
    >>> to_markdown(tokens)
    '# Hello\\n\\nSome *text*\\n'

Streaming:
    >>> with open("README.md", "rb") as f:
    ...     for token in decode_stream(f):
    ...         ...

Installation:
    pip install mdstream              # Core codec (zero deps)
    pip install mdstream[syntax]      # + Syntax highlighting via Rosettes
"""

from collections.abc import Iterable
from typing import IO

from mdstream.config import (
    DecodeConfig,
    decode_config_context,
    get_decode_config,
    reset_decode_config,
    set_decode_config,
)
from mdstream.decoder import Decoder
from mdstream.encoders import Encoder, HtmlEncoder, MarkdownEncoder, StringBuilder
from mdstream.errors import DecodeError, EncodeError, MdStreamError, TokenStreamError
from mdstream.lines import LineSource
from mdstream.serialization import from_dict, from_json, to_dict, to_json
from mdstream.tokens import Token, TokenType, WarningKind
from mdstream.validation import validate

__version__ = "0.1.0"


def decode(
    source: str | bytes,
    *,
    config: DecodeConfig | None = None,
    source_file: str | None = None,
) -> Decoder:
    """Decode Markdown source into a lazy token stream.

    Args:
        source: Markdown text, or UTF-8 bytes
        config: Decode configuration (defaults to the active context config)
        source_file: Optional source file path for error messages

    Returns:
        Decoder, an iterator of Token

    Raises:
        DecodeError: If bytes input is not valid UTF-8

    Example:
        >>> list(decode("# Hello"))
        [Token(HEADING1), Token(TEXT, 'Hello')]
    """
    if isinstance(source, bytes | bytearray | memoryview):
        return Decoder.from_bytes(bytes(source), config=config, source_file=source_file)
    return Decoder.from_text(source, config=config, source_file=source_file)


def decode_stream(
    reader: IO[bytes] | IO[str],
    *,
    config: DecodeConfig | None = None,
    source_file: str | None = None,
) -> Decoder:
    """Decode Markdown read one line at a time from a file-like object.

    Read and encoding faults surface as DecodeError while iterating.
    """
    return Decoder.from_stream(reader, config=config, source_file=source_file)


def to_markdown(tokens: Iterable[Token]) -> str:
    """Encode a token stream as canonical Markdown.

    Example:
        >>> to_markdown([Token(TokenType.PARAGRAPH), Token(TokenType.TEXT, "a"),
        ...              Token(TokenType.TEXT, "b")])
        'a b\\n'
    """
    out = StringBuilder()
    MarkdownEncoder(tokens, out).encode()
    return out.build()


def to_html(tokens: Iterable[Token], *, highlight: bool = False) -> str:
    """Encode a token stream as HTML.

    Args:
        tokens: Token stream (consumed)
        highlight: Enable syntax highlighting for code blocks

    Example:
        >>> to_html([Token(TokenType.HEADING1), Token(TokenType.TEXT, "H1")])
        '<h1>H1</h1>\\n'
    """
    out = StringBuilder()
    HtmlEncoder(tokens, out, highlight=highlight).encode()
    return out.build()


def normalize(source: str | bytes, *, config: DecodeConfig | None = None) -> str:
    """Decode Markdown and re-encode it in canonical form."""
    return to_markdown(decode(source, config=config))


def render(
    source: str | bytes,
    *,
    config: DecodeConfig | None = None,
    highlight: bool = False,
) -> str:
    """Decode Markdown and render it to HTML.

    Example:
        >>> render("Paragraph 1\\n\\nParagraph 2")
        '<p>Paragraph 1</p>\\n<p>Paragraph 2</p>\\n'
    """
    return to_html(decode(source, config=config), highlight=highlight)


__all__ = [  # noqa: RUF022 — grouped by category for maintainability
    # Version
    "__version__",
    # Core API
    "decode",
    "decode_stream",
    "to_markdown",
    "to_html",
    "normalize",
    "render",
    # Pipeline components
    "LineSource",
    "Decoder",
    "Encoder",
    "MarkdownEncoder",
    "HtmlEncoder",
    "StringBuilder",
    # Tokens
    "Token",
    "TokenType",
    "WarningKind",
    # Validation
    "validate",
    # Serialization
    "to_dict",
    "from_dict",
    "to_json",
    "from_json",
    # Configuration (ContextVar-based)
    "DecodeConfig",
    "get_decode_config",
    "set_decode_config",
    "reset_decode_config",
    "decode_config_context",
    # Errors
    "MdStreamError",
    "DecodeError",
    "EncodeError",
    "TokenStreamError",
]
