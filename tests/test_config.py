"""Tests for ContextVar-based decode configuration.

Validates thread isolation, context manager behavior, and that a decoder
captures the active config when it is constructed.
"""

from threading import Thread

import pytest

from mdstream import (
    DecodeConfig,
    Decoder,
    TokenType,
    decode,
    decode_config_context,
    get_decode_config,
    reset_decode_config,
    set_decode_config,
)


class TestDecodeConfigDataclass:
    """Test DecodeConfig frozen dataclass behavior."""

    def test_default_values(self) -> None:
        """Default config enables every extension."""
        config = DecodeConfig()
        assert config.inline_enabled is True
        assert config.tables_enabled is True
        assert config.task_lists_enabled is True
        assert config.footnotes_enabled is True
        assert config.admonitions_enabled is True
        assert config.warnings_enabled is True
        assert config.text_transformer is None

    def test_immutability(self) -> None:
        """Config is frozen and cannot be modified."""
        config = DecodeConfig()
        with pytest.raises(AttributeError):
            config.tables_enabled = False  # type: ignore[misc]

    def test_from_dict_ignores_unknown_keys(self) -> None:
        config = DecodeConfig.from_dict({"tables_enabled": False, "unknown_key": "ignored"})
        assert config.tables_enabled is False
        assert config.inline_enabled is True


class TestContextVarFunctions:
    """Test get/set/reset functions."""

    def teardown_method(self) -> None:
        """Reset config after each test."""
        reset_decode_config()

    def test_set_and_get(self) -> None:
        set_decode_config(DecodeConfig(tables_enabled=False))
        assert get_decode_config().tables_enabled is False

    def test_reset_restores_default(self) -> None:
        set_decode_config(DecodeConfig(tables_enabled=False))
        reset_decode_config()
        assert get_decode_config().tables_enabled is True


class TestDecodeConfigContext:
    """Test decode_config_context context manager."""

    def test_nested_contexts(self) -> None:
        with decode_config_context(DecodeConfig(tables_enabled=False)):
            assert get_decode_config().tables_enabled is False
            with decode_config_context(DecodeConfig(footnotes_enabled=False)):
                assert get_decode_config().footnotes_enabled is False
                assert get_decode_config().tables_enabled is True
            assert get_decode_config().tables_enabled is False
        assert get_decode_config().tables_enabled is True

    def test_context_restores_on_exception(self) -> None:
        with pytest.raises(ValueError, match="test"):
            with decode_config_context(DecodeConfig(tables_enabled=False)):
                raise ValueError("test")
        assert get_decode_config().tables_enabled is True

    def test_decoder_captures_config_at_construction(self) -> None:
        """Leaving the context after construction does not change decoding."""
        with decode_config_context(DecodeConfig(tables_enabled=False)):
            decoder = Decoder.from_text("| a |")
        assert [t.type for t in decoder] == [TokenType.PARAGRAPH, TokenType.TEXT]


class TestThreadIsolation:
    """Test thread-local configuration isolation."""

    def test_thread_isolation(self) -> None:
        """Each thread decodes with its own config."""
        results: dict[int, list[TokenType]] = {}

        def worker(thread_id: int, config: DecodeConfig) -> None:
            set_decode_config(config)
            results[thread_id] = [t.type for t in decode("| a |")]

        configs = [DecodeConfig(tables_enabled=True), DecodeConfig(tables_enabled=False)]
        threads = [Thread(target=worker, args=(i, c)) for i, c in enumerate(configs)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results[0][0] is TokenType.TABLE_CELL
        assert results[1][0] is TokenType.PARAGRAPH
        assert get_decode_config().tables_enabled is True
