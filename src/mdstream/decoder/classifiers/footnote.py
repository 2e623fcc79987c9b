"""Footnote definition classifier mixin."""

from __future__ import annotations


class FootnoteClassifierMixin:
    """Mixin providing footnote definition classification."""

    def _try_classify_footnote_def(self, content: str) -> tuple[str, str] | None:
        """Try to classify content as footnote definition.

        Format: [^identifier]: content

        Args:
            content: Line content with leading whitespace stripped

        Returns:
            (identifier, content) if valid, None otherwise. Content may be
            empty when the definition continues on following lines.
        """
        if not content.startswith("[^"):
            return None

        bracket_end = content.find("]:")
        if bracket_end < 3:
            return None

        identifier = content[2:bracket_end]

        # Identifier must be alphanumeric with dashes/underscores
        if not all(c.isalnum() or c in "-_" for c in identifier):
            return None

        return identifier, content[bracket_end + 2 :].strip()
