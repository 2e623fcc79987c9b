"""Thematic break classifier mixin."""

from __future__ import annotations

from mdstream.decoder.charsets import THEMATIC_BREAK_CHARS
from mdstream.tokens import Token, TokenType


class ThematicClassifierMixin:
    """Mixin providing thematic break classification."""

    def _try_classify_thematic_break(self, content: str) -> Token | None:
        """Try to classify content as thematic break.

        Thematic breaks are 3+ of the same character (-, *, _) with
        optional spaces/tabs between them.

        Args:
            content: Line content with leading whitespace stripped

        Returns:
            HORIZONTAL_RULE token if valid break, None otherwise.
        """
        if not content:
            return None

        char = content[0]
        if char not in THEMATIC_BREAK_CHARS:
            return None

        count = 0
        for c in content:
            if c == char:
                count += 1
            elif c in " \t":
                continue
            else:
                return None

        if count >= 3:
            return Token(TokenType.HORIZONTAL_RULE)

        return None
