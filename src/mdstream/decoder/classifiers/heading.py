"""ATX heading classifier mixin."""

import re

from mdstream.tokens import Token, TokenType, heading

_HEADING_ID = re.compile(r"\s*\{#([\w:.-]+)\}\s*$")


class HeadingClassifierMixin:
    """Mixin providing ATX heading classification."""

    def _inline(self, text: str) -> list[Token]:
        """Split text into inline tokens. Implemented by Decoder."""
        raise NotImplementedError

    def _try_classify_atx_heading(self, content: str) -> list[Token] | None:
        """Try to classify content as ATX heading.

        ATX headings start with 1-6 # characters followed by space, tab, or
        end of line. Seven or more # is never a heading. A trailing
        `{#custom-id}` becomes a HEADING_ID token placed right after the
        opener, and a trailing # sequence preceded by a space is removed.

        Args:
            content: Line content with leading whitespace stripped

        Returns:
            [HEADINGn, (HEADING_ID), content tokens...] if valid, None otherwise.
        """
        level = 0
        content_len = len(content)
        while level < content_len and content[level] == "#":
            level += 1

        if level == 0 or level > 6:
            return None

        if level < content_len and content[level] not in " \t":
            return None

        title = content[level:].strip()

        # Remove closing # sequence (if preceded by space, or the whole title)
        if title.endswith("#"):
            trailing_start = len(title)
            while trailing_start > 0 and title[trailing_start - 1] == "#":
                trailing_start -= 1
            if trailing_start == 0:
                title = ""
            elif title[trailing_start - 1] in " \t":
                title = title[: trailing_start - 1].rstrip()

        tokens = [Token(heading(level))]

        match = _HEADING_ID.search(title)
        if match:
            tokens.append(Token(TokenType.HEADING_ID, match.group(1)))
            title = title[: match.start()]

        tokens.extend(self._inline(title) or [Token(TokenType.TEXT, "")])
        return tokens

    def _is_ambiguous_heading(self, content: str) -> bool:
        """Check for # runs that look like a heading but are not one.

        `#Title` (no space after the marker) and 7+ # both qualify.
        """
        if not content.startswith("#"):
            return False
        level = len(content) - len(content.lstrip("#"))
        if level > 6:
            return True
        return level < len(content) and content[level] not in " \t"
