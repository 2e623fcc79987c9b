"""Tests for mdstream.serialization — token stream JSON round-trip."""

import json

import pytest

from mdstream import Token, TokenType, WarningKind, decode
from mdstream.serialization import from_dict, from_json, to_dict, to_json


class TestToDict:
    """Dict form of single tokens."""

    def test_text(self) -> None:
        assert to_dict(Token(TokenType.TEXT, "hi")) == {
            "_type": "Token",
            "type": "TEXT",
            "value": "hi",
            "flag": None,
            "number": None,
            "warning": None,
        }

    def test_warning(self) -> None:
        data = to_dict(
            Token(TokenType.WARNING, "#x", number=3, warning=WarningKind.AMBIGUOUS_HEADING)
        )
        assert data["warning"] == "AMBIGUOUS_HEADING"
        assert data["number"] == 3


class TestRoundTrip:
    """Verify round-trip serialization of decoded streams."""

    def test_toggle(self) -> None:
        token = Token(TokenType.BOLD, flag=True)
        assert from_dict(to_dict(token)) == token

    def test_numbered_link(self) -> None:
        token = Token(TokenType.LINK_NUM, "x", number=7)
        assert from_dict(to_dict(token)) == token

    def test_decoded_document(self) -> None:
        source = "# Title {#t}\n\n- [x] *done*\n\n| a |\n| --: |\n\n#Oops\n"
        tokens = list(decode(source))
        assert from_json(to_json(tokens)) == tokens

    def test_missing_fields_take_defaults(self) -> None:
        assert from_dict({"_type": "Token", "type": "PARAGRAPH"}) == Token(TokenType.PARAGRAPH)


class TestDeterminism:
    """Output is stable for golden files."""

    def test_sorted_keys(self) -> None:
        raw = json.loads(to_json([Token(TokenType.TEXT, "a")]))
        assert list(raw[0]) == sorted(raw[0])

    def test_indent(self) -> None:
        assert "\n" in to_json([Token(TokenType.HEADING1)], indent=2)
        assert "\n" not in to_json([Token(TokenType.HEADING1)])


class TestErrors:
    """Malformed input raises ValueError."""

    def test_missing_type_discriminator(self) -> None:
        with pytest.raises(ValueError, match="Missing '_type'"):
            from_dict({"type": "TEXT"})

    def test_wrong_type_discriminator(self) -> None:
        with pytest.raises(ValueError, match="Unknown serialized type"):
            from_dict({"_type": "Node", "type": "TEXT"})

    def test_unknown_token_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown token type"):
            from_dict({"_type": "Token", "type": "NOPE"})

    def test_unknown_warning_kind(self) -> None:
        with pytest.raises(ValueError, match="Unknown warning kind"):
            from_dict({"_type": "Token", "type": "WARNING", "warning": "NOPE"})

    def test_not_an_array(self) -> None:
        with pytest.raises(ValueError, match="Expected a JSON array"):
            from_json('{"_type": "Token"}')
