"""Link reference definition and comment classifier mixin."""

from __future__ import annotations

import re

from mdstream.tokens import Token, TokenType

# [label]: <url> "title"   /   [label]: url 'title'   /   [label]: url (title)
_LINK_DEF = re.compile(
    r"\[((?:[^\]\\^]|\\.)(?:[^\]\\]|\\.)*)\]:[ \t]*"
    r"(?:<([^<>]*)>|(\S+))"
    r"(?:[ \t]+(?:\"([^\"]*)\"|'([^']*)'|\(([^()]*)\)))?[ \t]*$"
)

_ESCAPE = re.compile(r"\\([!-/:-@\[-`{-~])")


def unescape(text: str) -> str:
    """Remove backslash escapes before ASCII punctuation."""
    return _ESCAPE.sub(r"\1", text)


class LinkRefClassifierMixin:
    """Mixin providing link reference definition classification."""

    def _try_classify_link_reference_def(self, content: str) -> list[Token] | None:
        """Try to classify content as a link reference definition.

        `[key]: url "title"` produces LINK_KEY, LINK_VAL, and an optional
        TITLE. A definition pointing at `#` is a comment:
        `[Some comment text]: #` produces a single COMMENT.

        Args:
            content: Line content with leading whitespace stripped

        Returns:
            Definition tokens if valid, None otherwise.
        """
        if not content.startswith("["):
            return None

        match = _LINK_DEF.match(content)
        if match is None:
            return None

        label = unescape(match.group(1))
        url = match.group(2) if match.group(2) is not None else match.group(3)

        if url == "#":
            return [Token(TokenType.COMMENT, label)]

        tokens = [
            Token(TokenType.LINK_KEY, label),
            Token(TokenType.LINK_VAL, unescape(url)),
        ]
        title = next((g for g in match.group(4, 5, 6) if g is not None), None)
        if title is not None:
            tokens.append(Token(TokenType.TITLE, unescape(title)))
        return tokens
