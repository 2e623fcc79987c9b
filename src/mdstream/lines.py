"""Line sources feeding the decoder.

A LineSource is a lazy, finite iterator of text lines without their line
terminators. It is the only place in the pipeline that may block on I/O,
and the only place that sees raw bytes.

Thread Safety:
LineSource instances are single-use and single-consumer.

"""

from __future__ import annotations

from collections.abc import Iterator
from typing import IO

from mdstream.errors import DecodeError


class LineSource:
    """Lazy iterator of lines from text, bytes, or a readable stream.

    Usage:
        >>> lines = LineSource.from_text("a\\nb")
        >>> list(lines)
        ['a', 'b']

    A trailing ``\\r`` is removed from every line so CRLF input decodes
    the same as LF input.

    """

    __slots__ = ("_lines", "_source_file", "lineno")

    def __init__(self, lines: Iterator[str], source_file: str | None = None) -> None:
        self._lines = lines
        self._source_file = source_file
        self.lineno = 0

    @classmethod
    def from_text(cls, text: str, source_file: str | None = None) -> LineSource:
        """Create a line source over an in-memory string."""
        return cls(_split_text(text), source_file)

    @classmethod
    def from_bytes(cls, data: bytes, source_file: str | None = None) -> LineSource:
        """Create a line source over UTF-8 bytes.

        The whole buffer is validated up front.

        Raises:
            DecodeError: If the buffer is not valid UTF-8. The error carries
                the line number of the first invalid byte.
        """
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            lineno = data[: e.start].count(b"\n") + 1
            raise DecodeError(f"invalid UTF-8: {e.reason}", lineno, source_file) from e
        return cls.from_text(text, source_file)

    @classmethod
    def from_stream(cls, reader: IO[bytes] | IO[str], source_file: str | None = None) -> LineSource:
        """Create a line source that reads one line at a time from a stream.

        Binary streams are decoded line by line as UTF-8.
        """
        if source_file is None:
            name = getattr(reader, "name", None)
            source_file = name if isinstance(name, str) else None
        return cls(_read_stream(reader, source_file), source_file)

    def __iter__(self) -> LineSource:
        return self

    def __next__(self) -> str:
        line = next(self._lines)
        self.lineno += 1
        if line.endswith("\r"):
            line = line[:-1]
        return line

    @property
    def source_file(self) -> str | None:
        return self._source_file


def _split_text(text: str) -> Iterator[str]:
    """Yield lines of text, slicing one window at a time."""
    pos = 0
    text_len = len(text)
    while True:
        idx = text.find("\n", pos)
        if idx == -1:
            if pos < text_len:
                yield text[pos:]
            return
        yield text[pos:idx]
        pos = idx + 1


def _read_stream(reader: IO[bytes] | IO[str], source_file: str | None) -> Iterator[str]:
    """Yield decoded lines from a stream, wrapping faults in DecodeError."""
    lineno = 0
    while True:
        try:
            raw = reader.readline()
        except UnicodeDecodeError as e:
            # Text-mode streams decode on read
            raise DecodeError(f"invalid UTF-8: {e.reason}", lineno + 1, source_file) from e
        except OSError as e:
            raise DecodeError(f"read failed: {e}", lineno + 1, source_file) from e

        if not raw:
            return
        lineno += 1

        if isinstance(raw, bytes):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DecodeError(f"invalid UTF-8: {e.reason}", lineno, source_file) from e
        else:
            line = raw

        yield line[:-1] if line.endswith("\n") else line
