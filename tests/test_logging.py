"""Tests for logger namespacing and warning records."""

import logging

import pytest

from mdstream import Token, TokenType, decode, to_html, to_markdown
from mdstream.utils.logger import get_logger


class TestGetLogger:
    """Every logger lives under the mdstream namespace."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("mymodule", "mdstream.mymodule"),
            ("mdstream.decoder.core", "mdstream.decoder.core"),
            ("mdstream", "mdstream"),
            ("mdstreamer", "mdstream.mdstreamer"),
        ],
    )
    def test_prefix(self, name: str, expected: str) -> None:
        assert get_logger(name).name == expected


class TestWarningRecords:
    """WARNING tokens are mirrored to the mdstream.warnings logger."""

    def test_decoder_logs_emitted_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="mdstream.warnings"):
            list(decode("Intro\n\n#Title"))
        assert [r.getMessage() for r in caplog.records] == [
            "line 3: AMBIGUOUS_HEADING emitted: '#Title'"
        ]

    @pytest.mark.parametrize(("encode", "name"), [(to_markdown, "markdown"), (to_html, "html")])
    def test_encoders_log_skipped_warning(
        self, caplog: pytest.LogCaptureFixture, encode, name: str
    ) -> None:
        tokens = [Token(TokenType.WARNING, "x"), Token(TokenType.PARAGRAPH), Token(TokenType.TEXT, "x")]
        with caplog.at_level(logging.DEBUG, logger="mdstream.warnings"):
            encode(tokens)
        assert [r.getMessage() for r in caplog.records] == [
            f"line None: WARNING skipped by {name} encoder: 'x'"
        ]

    def test_silent_above_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="mdstream"):
            list(decode("#Title"))
        assert caplog.records == []
