"""Markdown decoder producing a flat, lazy token stream.

Usage:
    >>> from mdstream.decoder import Decoder
    >>> list(Decoder.from_text("Paragraph 1\\n\\nParagraph 2\\n"))
    [Token(PARAGRAPH), Token(TEXT, 'Paragraph 1'), Token(PARAGRAPH), Token(TEXT, 'Paragraph 2')]

"""

from mdstream.decoder.core import Decoder
from mdstream.decoder.modes import ContainerKind, DecoderMode

__all__ = [
    "ContainerKind",
    "Decoder",
    "DecoderMode",
]
