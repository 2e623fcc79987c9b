"""Tests for the exception hierarchy."""

import pytest

from mdstream import DecodeError, EncodeError, MdStreamError, Token, TokenStreamError, TokenType


class TestHierarchy:
    """All errors share one base class."""

    @pytest.mark.parametrize("error_type", [DecodeError, EncodeError, TokenStreamError])
    def test_subclasses_base(self, error_type: type[Exception]) -> None:
        assert issubclass(error_type, MdStreamError)


class TestDecodeError:
    """Location formatting."""

    def test_message_only(self) -> None:
        assert str(DecodeError("bad input")) == "bad input"

    def test_line_only(self) -> None:
        assert str(DecodeError("bad input", 4)) == "4 bad input"

    def test_file_and_line(self) -> None:
        error = DecodeError("bad input", 4, "doc.md")
        assert str(error) == "doc.md:4 bad input"
        assert error.message == "bad input"
        assert error.lineno == 4
        assert error.source_file == "doc.md"


class TestTokenStreamError:
    """Index and offending token."""

    def test_fields(self) -> None:
        token = Token(TokenType.QUOTE_CLOSE)
        error = TokenStreamError("does not match", 5, token)
        assert error.index == 5
        assert error.token is token
        assert str(error) == "token 5: does not match"
