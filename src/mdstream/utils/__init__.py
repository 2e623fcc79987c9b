"""Utility modules for mdstream.

Provides:
- text: slugify, escape_html for text processing
- logger: get_logger for logging
"""

from mdstream.utils.logger import get_logger
from mdstream.utils.text import escape_comment, escape_html, slugify

__all__ = [
    "escape_comment",
    "escape_html",
    "get_logger",
    "slugify",
]
