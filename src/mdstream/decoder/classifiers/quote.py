"""Block quote and GitHub alert classifier mixin."""

from __future__ import annotations

import re

from mdstream.config import DecodeConfig
from mdstream.decoder.charsets import ALERT_KINDS
from mdstream.tokens import Token, TokenType

_ALERT = re.compile(r"\[!(\w+)\]\s*(.*)$")


class QuoteClassifierMixin:
    """Mixin providing block quote classification."""

    _config: DecodeConfig

    def _strip_quote_marker(self, content: str) -> str | None:
        """Remove a leading `>` and one optional space.

        Returns:
            The quoted content, or None if the line is not quoted.
        """
        stripped = content.lstrip(" ")
        if not stripped.startswith(">"):
            return None
        rest = stripped[1:]
        if rest.startswith((" ", "\t")):
            rest = rest[1:]
        return rest

    def _try_classify_block_quote(self, content: str) -> tuple[list[Token], str] | None:
        """Try to classify content as the first line of a block quote.

        `> [!WARNING]` (NOTE, TIP, WARNING, CAUTION, IMPORTANT) on the
        opening line marks the quote as an admonition.

        Args:
            content: Line content with leading whitespace stripped

        Returns:
            ([QUOTE_OPEN, (ADMONITION)], remaining inner content) if quoted,
            None otherwise.
        """
        inner = self._strip_quote_marker(content)
        if inner is None:
            return None

        tokens = [Token(TokenType.QUOTE_OPEN)]

        if self._config.admonitions_enabled:
            match = _ALERT.match(inner)
            if match and match.group(1).upper() in ALERT_KINDS:
                tokens.append(Token(TokenType.ADMONITION, match.group(1).lower()))
                inner = match.group(2)

        return tokens, inner
