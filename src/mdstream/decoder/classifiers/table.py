"""Pipe table classifier mixin."""

from __future__ import annotations

import re

from mdstream.tokens import TokenType

_DELIMITER_CELL = re.compile(r"(:?)-+(:?)$")


class TableClassifierMixin:
    """Mixin providing pipe table row classification."""

    def _split_table_row(self, content: str) -> list[str] | None:
        """Split a pipe table row into raw cell strings.

        Rows must start with `|`. Pipes escaped with a backslash or inside
        code spans do not split cells; the escape is left for the inline
        scanner to remove.

        Args:
            content: Line content with leading whitespace stripped

        Returns:
            Stripped cell contents, or None if the line is not a table row.
        """
        if not content.startswith("|"):
            return None

        cells: list[str] = []
        current: list[str] = []
        in_code = False
        pos = 1
        content = content.rstrip()
        content_len = len(content)

        while pos < content_len:
            char = content[pos]
            if char == "\\" and pos + 1 < content_len:
                current.append(content[pos : pos + 2])
                pos += 2
                continue
            if char == "`":
                in_code = not in_code
            elif char == "|" and not in_code:
                cells.append("".join(current).strip())
                current = []
                pos += 1
                continue
            current.append(char)
            pos += 1

        # Text after the last pipe is a cell only when the row has no closing pipe
        tail = "".join(current).strip()
        if tail or not content.endswith("|") or content_len == 1:
            cells.append(tail)

        return cells

    def _classify_delimiter_row(self, cells: list[str]) -> list[TokenType] | None:
        """Classify split cells as a delimiter row.

        `:---` and `---` align left, `:---:` centers, `---:` aligns right.

        Returns:
            Alignment token types per column, or None for a regular row.
        """
        if not cells:
            return None

        alignments: list[TokenType] = []
        for cell in cells:
            match = _DELIMITER_CELL.match(cell.replace(" ", ""))
            if match is None:
                return None
            left, right = match.group(1), match.group(2)
            if left and right:
                alignments.append(TokenType.TABLE_CENTERED)
            elif right:
                alignments.append(TokenType.TABLE_RIGHT)
            else:
                alignments.append(TokenType.TABLE_LEFT)
        return alignments
