"""Fenced code classifier mixin."""

from __future__ import annotations

from mdstream.decoder.charsets import FENCE_CHARS


class FenceClassifierMixin:
    """Mixin providing fenced code block classification."""

    _fence_char: str
    _fence_count: int

    def _try_classify_fence_start(self, content: str) -> tuple[str, int, str] | None:
        """Try to classify content as a fenced code block start.

        Fences are 3+ backticks or tildes. The info string after the fence
        names the language; its first word is kept. Backtick fences cannot
        have backticks in their info string.

        Args:
            content: Line content with leading whitespace stripped

        Returns:
            (fence_char, fence_count, language) if valid, None otherwise.
        """
        if not content or content[0] not in FENCE_CHARS:
            return None

        fence_char = content[0]
        count = 0
        while count < len(content) and content[count] == fence_char:
            count += 1

        if count < 3:
            return None

        info = content[count:].strip()
        if fence_char == "`" and "`" in info:
            return None

        language = info.split()[0] if info else ""
        return fence_char, count, language

    def _is_fence_close(self, content: str) -> bool:
        """Check whether content closes the currently open fence.

        The closing fence uses the same character, is at least as long as
        the opening fence, and carries nothing but trailing whitespace.
        """
        stripped = content.strip()
        if len(stripped) < self._fence_count:
            return False
        return all(c == self._fence_char for c in stripped)
