"""Syntax highlighting for code blocks in HTML output.

Optional. When mdstream[syntax] is installed, Rosettes is used
automatically; any object implementing the Highlighter protocol, or a
plain ``(code, language) -> html`` callable, can be injected instead.

Usage:
    from mdstream import to_html
    html = to_html(tokens, highlight=True)

    # Manual injection
    from mdstream.highlighting import set_highlighter

    def my_highlighter(code: str, language: str) -> str:
        return f'<pre class="language-{language}"><code>{code}</code></pre>'

    set_highlighter(my_highlighter)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from mdstream.utils.logger import get_logger
from mdstream.utils.text import escape_html

logger = get_logger(__name__)


class Highlighter(Protocol):
    """Protocol for syntax highlighters.

    Highlighters take code and language and return HTML markup with
    syntax highlighting applied, including the surrounding ``<pre>``.
    """

    def highlight(self, code: str, language: str) -> str:
        """Highlight code with syntax colors.

        Contract:
            - MUST return balanced HTML
            - MUST escape HTML entities in code
            - SHOULD fall back to plain text for unknown languages
        """
        ...

    def supports_language(self, language: str) -> bool:
        """Check if highlighter supports the given language.

        Contract:
            - MUST NOT raise exceptions
        """
        ...


SimpleHighlighter = Callable[[str, str], str]

_highlighter: Highlighter | SimpleHighlighter | None = None
_tried_rosettes: bool = False


def set_highlighter(highlighter: Highlighter | SimpleHighlighter | None) -> None:
    """Set the global syntax highlighter.

    Args:
        highlighter: A Highlighter implementation, or a function taking
            (code, language) and returning HTML. None clears it.
    """
    global _highlighter
    _highlighter = highlighter


def _try_import_rosettes() -> bool:
    """Try to import and configure the Rosettes highlighter."""
    global _highlighter, _tried_rosettes

    if _tried_rosettes:
        return _highlighter is not None

    _tried_rosettes = True

    try:
        import rosettes  # type: ignore[import-not-found]
    except ImportError:
        logger.debug("rosettes not installed; code blocks render unhighlighted")
        return False

    class RosettesHighlighter:
        """Rosettes-based highlighter implementing the Highlighter protocol."""

        def highlight(self, code: str, language: str) -> str:
            result: str = rosettes.highlight(code, language=language)
            return result

        def supports_language(self, language: str) -> bool:
            try:
                result: bool = rosettes.supports_language(language)
                return result
            except Exception:
                return False

    _highlighter = RosettesHighlighter()
    return True


def _plain(code: str, language: str) -> str:
    lang_class = f' class="language-{escape_html(language)}"' if language else ""
    return f"<pre><code{lang_class}>{escape_html(code)}</code></pre>"


def highlight(code: str, language: str) -> str:
    """Highlight code using the configured highlighter.

    Falls back to a plain ``<pre><code>`` block if no highlighter is
    available, or if the highlighter fails on this input.

    Args:
        code: Source code, newline-terminated lines
        language: Language identifier from the fence info string

    Returns:
        HTML markup (highlighted if available, plain otherwise)
    """
    if _highlighter is None:
        _try_import_rosettes()

    highlighter = _highlighter
    if highlighter is None:
        return _plain(code, language)

    try:
        if hasattr(highlighter, "highlight") and callable(highlighter.highlight):
            if hasattr(highlighter, "supports_language") and not highlighter.supports_language(
                language
            ):
                return _plain(code, language)
            return highlighter.highlight(code, language)
        return highlighter(code, language)
    except Exception as e:
        logger.debug("Highlighter failed for %r: %s", language, e)
        return _plain(code, language)


def has_highlighter() -> bool:
    """Check if a syntax highlighter is available."""
    if _highlighter is not None:
        return True
    return _try_import_rosettes()


def get_highlighter() -> Highlighter | SimpleHighlighter | None:
    """Get the current highlighter, loading Rosettes if needed."""
    if _highlighter is None:
        _try_import_rosettes()
    return _highlighter
