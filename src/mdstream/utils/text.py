"""Text processing utilities for mdstream.

Example:
    >>> from mdstream.utils.text import slugify
    >>> slugify("Hello World!")
    'hello-world'
"""

from __future__ import annotations

import html as html_module
import re


def slugify(text: str, separator: str = "-") -> str:
    """Convert text to a URL-safe slug with Unicode support.

    Used for footnote anchors and heading ids. Keeps Unicode word
    characters so international identifiers survive.

    Args:
        text: Text to slugify
        separator: Character to use between words (default: '-')

    Returns:
        Lowercase slug of word characters and separators

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
        >>> slugify("Café")
        'café'
    """
    if not text:
        return ""

    text = html_module.unescape(text).lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[-\s]+", separator, text)
    return text.strip(separator)


def escape_html(text: str) -> str:
    """Escape HTML special characters in text and attribute values.

    Escapes <, >, &, and " but NOT single quotes, matching what
    CommonMark renderers produce.

    Examples:
        >>> escape_html('<a href="x">&</a>')
        '&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;'
    """
    if not text:
        return ""
    return html_module.escape(text, quote=False).replace('"', "&quot;")


def escape_comment(text: str) -> str:
    """Make text safe to place inside an HTML comment."""
    return text.replace("--", "- -").replace(">", "&gt;")
