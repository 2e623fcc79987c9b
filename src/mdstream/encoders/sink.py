"""Output sinks for the encoders.

Encoders write ``str`` fragments. A sink is anything with a ``write``
method: a StringBuilder, a text file, or a binary file (fragments are
encoded as UTF-8 on the way out).

Thread Safety:
StringBuilder and Sink instances belong to a single encode() call.

"""

from __future__ import annotations

import io
from typing import Any

from mdstream.errors import EncodeError


class StringBuilder:
    """Efficient in-memory sink.

    Appends to a list, joins once at the end.
    O(n) total vs O(n²) for repeated string concatenation.

    Usage:
            >>> sb = StringBuilder()
            >>> sb.write("<h1>")
            >>> sb.write("Hello")
            >>> sb.build()
            '<h1>Hello'

    """

    __slots__ = ("_parts",)

    def __init__(self) -> None:
        self._parts: list[str] = []

    def write(self, s: str) -> int:
        """Append a string (empty strings are skipped)."""
        if s:
            self._parts.append(s)
        return len(s)

    def build(self) -> str:
        """Join all parts into final string."""
        return "".join(self._parts)

    getvalue = build

    def __len__(self) -> int:
        """Return number of parts (not total length)."""
        return len(self._parts)

    def __bool__(self) -> bool:
        return bool(self._parts)


class Sink:
    """Adapter giving encoders a uniform ``write(str)``.

    Binary targets receive UTF-8 bytes. Any OSError raised by the target
    becomes an EncodeError; the encoder stops at the first one.
    """

    __slots__ = ("_target", "_binary")

    def __init__(self, target: Any) -> None:
        if not callable(getattr(target, "write", None)):
            raise EncodeError(f"output sink has no write() method: {type(target).__name__}")
        self._target = target
        self._binary = _is_binary(target)

    def write(self, text: str) -> None:
        if not text:
            return
        try:
            if self._binary:
                self._target.write(text.encode("utf-8"))
            else:
                self._target.write(text)
        except OSError as e:
            raise EncodeError(f"write failed: {e}") from e


def _is_binary(target: Any) -> bool:
    if isinstance(target, io.TextIOBase | StringBuilder):
        return False
    if isinstance(target, io.BufferedIOBase | io.RawIOBase):
        return True
    mode = getattr(target, "mode", "")
    return isinstance(mode, str) and "b" in mode
