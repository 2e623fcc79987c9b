"""Encoders turning a token stream back into Markdown or HTML.

Both encoders consume their token iterable exactly once and write to any
object with a ``write`` method.
"""

from mdstream.encoders.html import HtmlEncoder
from mdstream.encoders.markdown import MarkdownEncoder
from mdstream.encoders.protocol import Encoder
from mdstream.encoders.sink import Sink, StringBuilder

__all__ = [
    "Encoder",
    "HtmlEncoder",
    "MarkdownEncoder",
    "Sink",
    "StringBuilder",
]
