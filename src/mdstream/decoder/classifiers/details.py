"""Collapsible details and indented admonition classifier mixin.

Recognized openers (the body follows, indented by 4 spaces or a tab):

    +++ Summary            expanded details
    ++ Summary             collapsed details
    ???+ info "Summary"    expanded details
    ??? info "Summary"     collapsed details
    !!! warning "Title"    admonition, title becomes the first paragraph
"""

from __future__ import annotations

import re

from mdstream.tokens import Token, TokenType

_PLUS_DETAILS = re.compile(r"(\+\+\+?)[ \t]+(\S.*)$")
_QUESTION_DETAILS = re.compile(r"\?\?\?(\+?)[ \t]+([\w-]+)(?:[ \t]+\"([^\"]*)\")?[ \t]*$")
_ADMONITION = re.compile(r"!!![ \t]+([\w-]+)(?:[ \t]+\"([^\"]*)\")?[ \t]*$")


class DetailsClassifierMixin:
    """Mixin providing details / admonition block classification."""

    def _try_classify_details(self, content: str) -> tuple[list[Token], str] | None:
        """Try to classify content as a details or admonition opener.

        Args:
            content: Line content with leading whitespace stripped

        Returns:
            (marker tokens, title) if valid, None otherwise. The title is
            non-empty only for `!!!` admonitions that carry one.
        """
        match = _PLUS_DETAILS.match(content)
        if match:
            expanded = len(match.group(1)) == 3
            summary = match.group(2).strip()
            return [
                Token(TokenType.QUOTE_OPEN),
                Token(TokenType.DETAILS, summary, flag=expanded),
            ], ""

        match = _QUESTION_DETAILS.match(content)
        if match:
            expanded = match.group(1) == "+"
            summary = match.group(3) if match.group(3) is not None else match.group(2).title()
            return [
                Token(TokenType.QUOTE_OPEN),
                Token(TokenType.DETAILS, summary, flag=expanded),
            ], ""

        match = _ADMONITION.match(content)
        if match:
            return [
                Token(TokenType.QUOTE_OPEN),
                Token(TokenType.ADMONITION, match.group(1).lower()),
            ], match.group(2) or ""

        return None
