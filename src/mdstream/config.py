"""ContextVar-based decode configuration for mdstream.

Provides thread-local configuration using Python's ContextVars (PEP 567).
A Decoder reads the active config once, at construction.

Usage:
    from mdstream.config import DecodeConfig, decode_config_context

    with decode_config_context(DecodeConfig(tables_enabled=False)):
        tokens = list(Decoder.from_text(source))

    # Or pass it explicitly
    decoder = Decoder.from_text(source, config=DecodeConfig(inline_enabled=False))

"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DecodeConfig:
    """Immutable decode configuration.

    Attributes:
        inline_enabled: Split text content into inline tokens (emphasis,
            code spans, links). When off, every line is a single TEXT.
        tables_enabled: Recognize pipe tables
        task_lists_enabled: Recognize [ ] / [x] after list markers
        footnotes_enabled: Recognize [^id]: definitions
        admonitions_enabled: Recognize > [!NOTE], !!!, ??? and +++ blocks
        warnings_enabled: Emit WARNING tokens for ambiguous input. When off,
            the decoder degrades silently.
        text_transformer: Optional callback applied to every non-code line

    """

    inline_enabled: bool = True
    tables_enabled: bool = True
    task_lists_enabled: bool = True
    footnotes_enabled: bool = True
    admonitions_enabled: bool = True
    warnings_enabled: bool = True
    text_transformer: Callable[[str], str] | None = None

    @classmethod
    def from_dict(cls, config_dict: dict) -> "DecodeConfig":
        """Create DecodeConfig from dictionary.

        Only includes keys that are valid DecodeConfig fields; unknown keys
        are silently ignored.

        Example:
            >>> config = DecodeConfig.from_dict({
            ...     "tables_enabled": False,
            ...     "unknown_key": "ignored",
            ... })
            >>> config.tables_enabled
            False

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: DecodeConfig = DecodeConfig()

_decode_config: ContextVar[DecodeConfig] = ContextVar(
    "decode_config",
    default=_DEFAULT_CONFIG,
)


def get_decode_config() -> DecodeConfig:
    """Get current decode configuration (thread-local)."""
    return _decode_config.get()


def set_decode_config(config: DecodeConfig) -> None:
    """Set decode configuration for current context.

    Args:
        config: DecodeConfig instance to use for this context.

    """
    _decode_config.set(config)


def reset_decode_config() -> None:
    """Reset to default configuration."""
    _decode_config.set(_DEFAULT_CONFIG)


@contextmanager
def decode_config_context(config: DecodeConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with decode_config_context(DecodeConfig(tables_enabled=False)):
        ...     get_decode_config().tables_enabled
        False

    """
    previous = _decode_config.get()
    _decode_config.set(config)
    try:
        yield
    finally:
        _decode_config.set(previous)


__all__ = [
    "DecodeConfig",
    "decode_config_context",
    "get_decode_config",
    "reset_decode_config",
    "set_decode_config",
]
