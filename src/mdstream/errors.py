"""Exception classes for mdstream.

Faults that stop the operation in progress (DecodeError, EncodeError) are
raised. Recoverable decoding ambiguities are never raised; they travel in
the token stream as WARNING tokens.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdstream.tokens import Token


class MdStreamError(Exception):
    """Base exception for all mdstream errors.

    Subclass this for specific error categories.
    """

    pass


class DecodeError(MdStreamError):
    """I/O or text-encoding fault while reading Markdown input.

    Fatal to the decode in progress. The token iterator that raised it
    must not be resumed.
    """

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize decode error with optional location.

        Args:
            message: Error description
            lineno: Line number where the fault occurred (1-indexed)
            source_file: Path to source file (optional)
        """
        self.message = message
        self.lineno = lineno
        self.source_file = source_file

        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
        if location:
            location = location.rstrip(":") + " "

        super().__init__(f"{location}{message}")


class EncodeError(MdStreamError):
    """Error while encoding a token stream.

    Raised when the output sink fails to accept a write, or when the
    stream contains an object that is not a Token.
    """

    pass


class TokenStreamError(MdStreamError):
    """Structural error found by the token stream validator.

    Raised for unmatched open/close sequences.
    """

    def __init__(self, message: str, index: int, token: Token | None = None) -> None:
        """Initialize token stream error.

        Args:
            message: Description of the violation
            index: 0-based position of the offending token in the stream
            token: The offending token (None at end of stream)
        """
        self.index = index
        self.token = token
        super().__init__(f"token {index}: {message}")
