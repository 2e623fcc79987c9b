"""Tests for line sources."""

import io

import pytest

from mdstream import DecodeError, LineSource


class TestFromText:
    """In-memory text splitting."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("", []),
            ("a", ["a"]),
            ("a\n", ["a"]),
            ("a\nb", ["a", "b"]),
            ("a\n\nb\n", ["a", "", "b"]),
            ("\n", [""]),
            ("a\r\nb\r\n", ["a", "b"]),
        ],
    )
    def test_split(self, text: str, expected: list[str]) -> None:
        assert list(LineSource.from_text(text)) == expected

    def test_lineno_counts_lines_read(self) -> None:
        lines = LineSource.from_text("a\nb\nc")
        next(lines)
        next(lines)
        assert lines.lineno == 2


class TestFromBytes:
    """UTF-8 validation up front."""

    def test_valid(self) -> None:
        assert list(LineSource.from_bytes("é\nü".encode())) == ["é", "ü"]

    def test_invalid_reports_line(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            LineSource.from_bytes(b"one\ntwo\nth\xc3ree")
        assert exc_info.value.lineno == 3

    def test_source_file_in_message(self) -> None:
        with pytest.raises(DecodeError, match=r"^notes\.md:1 invalid UTF-8"):
            LineSource.from_bytes(b"\xff", source_file="notes.md")


class TestFromStream:
    """Line-at-a-time reading."""

    def test_text_stream(self) -> None:
        assert list(LineSource.from_stream(io.StringIO("a\nb\n"))) == ["a", "b"]

    def test_binary_stream(self) -> None:
        assert list(LineSource.from_stream(io.BytesIO(b"a\r\nb"))) == ["a", "b"]

    def test_reads_lazily(self) -> None:
        reader = io.StringIO("a\nb\nc\n")
        lines = LineSource.from_stream(reader)
        assert next(lines) == "a"
        assert reader.readline() == "b\n"

    def test_invalid_utf8_line(self) -> None:
        lines = LineSource.from_stream(io.BytesIO(b"ok\nbad \xff\n"))
        assert next(lines) == "ok"
        with pytest.raises(DecodeError) as exc_info:
            next(lines)
        assert exc_info.value.lineno == 2

    def test_read_failure(self) -> None:
        class FailingReader:
            def readline(self) -> str:
                raise OSError("device gone")

        with pytest.raises(DecodeError, match="read failed: device gone"):
            list(LineSource.from_stream(FailingReader()))  # type: ignore[arg-type]

    def test_name_used_as_source_file(self) -> None:
        reader = io.BytesIO(b"x")
        reader.name = "doc.md"  # type: ignore[attr-defined]
        assert LineSource.from_stream(reader).source_file == "doc.md"
