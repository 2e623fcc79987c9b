"""List marker classifier mixin."""

from __future__ import annotations

import re

from mdstream.decoder.charsets import ORDERED_LIST_DELIMITERS, UNORDERED_LIST_MARKERS
from mdstream.decoder.modes import ListMarker

_TASK = re.compile(r"\[([ xX])\](?:[ \t]+|$)")


class ListClassifierMixin:
    """Mixin providing list marker classification."""

    def _try_classify_list_marker(self, content: str, indent: int = 0) -> ListMarker | None:
        """Try to classify content as list item marker.

        Unordered markers are `-`, `*`, `+`; ordered markers are 1-9 digits
        followed by `.` or `)`. The marker must be followed by a space, a tab,
        or the end of the line.

        Args:
            content: Line content with leading whitespace stripped
            indent: Number of leading spaces

        Returns:
            ListMarker if valid, None otherwise.
        """
        if not content:
            return None

        if content[0] in UNORDERED_LIST_MARKERS:
            marker_len = 1
            ordered = False
        elif content[0].isdigit():
            pos = 0
            while pos < len(content) and content[pos].isdigit():
                pos += 1
            if pos > 9 or pos >= len(content) or content[pos] not in ORDERED_LIST_DELIMITERS:
                return None
            marker_len = pos + 1
            ordered = True
        else:
            return None

        if marker_len == len(content):
            return ListMarker(ordered, indent, indent + marker_len + 1, "")

        if content[marker_len] not in " \t":
            return None

        return ListMarker(
            ordered,
            indent,
            indent + marker_len + 1,
            content[marker_len + 1 :].strip(),
        )

    def _split_task_marker(self, rest: str) -> tuple[bool | None, str]:
        """Split a `[ ]` / `[x]` task marker off item content.

        Returns:
            (checked, remaining content); checked is None without a marker.
        """
        match = _TASK.match(rest)
        if match is None:
            return None, rest
        return match.group(1) != " ", rest[match.end() :]
