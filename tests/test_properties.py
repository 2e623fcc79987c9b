"""Property-based tests for decoder and encoder invariants using Hypothesis.

These tests verify that certain properties always hold regardless
of the input, helping catch edge cases that example-based tests miss.
"""

import re

from hypothesis import given, settings
from hypothesis import strategies as st

from mdstream import Token, TokenType, decode, normalize, to_html, to_markdown, validate

T = TokenType

# One line of plain words: nothing the decoder treats as markup
_words = st.from_regex(r"[A-Za-z0-9]{1,8}( [A-Za-z0-9]{1,8}){0,5}", fullmatch=True)

# Words carrying escapes, emphasis, code spans, and stray hashes. A leading
# `*` would start a list or rule, and ``` a fence, so both are left out.
_marked_words = st.from_regex(
    r"[A-Za-z0-9#*\\`]{1,8}( [A-Za-z0-9#*\\`]{1,8}){0,5}", fullmatch=True
).filter(lambda s: not s.startswith("*") and "```" not in s)

_token_values =st.text(alphabet='ab <>&"-#*[]', max_size=6)

_tokens = st.builds(
    Token,
    st.sampled_from(list(TokenType)),
    _token_values,
    st.one_of(st.none(), st.booleans()),
    st.one_of(st.none(), st.integers(min_value=0, max_value=5)),
)

_TAG = re.compile(r"<(/?)([a-z][a-z0-9]*)\b[^>]*?(/?)>")
_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)


def _assert_balanced(html: str) -> None:
    """Every opened element is closed, in nesting order."""
    stack: list[str] = []
    for closing, name, self_closing in _TAG.findall(_COMMENT.sub("", html)):
        if self_closing:
            continue
        if closing:
            assert stack, f"</{name}> without an open element in {html!r}"
            assert stack.pop() == name, f"</{name}> closes the wrong element in {html!r}"
        else:
            stack.append(name)
    assert not stack, f"unclosed {stack} in {html!r}"


class TestDecoderInvariants:
    """Invariants of decoded streams."""

    @given(st.text(max_size=500))
    @settings(max_examples=200)
    def test_never_raises_and_validates(self, source: str) -> None:
        """Any text decodes, and the stream has matched toggles and containers."""
        tokens = list(validate(decode(source)))
        assert all(isinstance(t, Token) for t in tokens)

    @given(st.text(alphabet="<>!/[]-#`~:*_=^|+\\()h \n", max_size=200))
    @settings(max_examples=200)
    def test_special_characters_validate(self, source: str) -> None:
        """Markup-heavy input still yields a well-formed stream."""
        list(validate(decode(source)))

    @given(st.text(max_size=300))
    @settings(max_examples=100)
    def test_no_adjacent_text_from_one_line(self, source: str) -> None:
        """A single line never yields two TEXT tokens in a row."""
        line = source.replace("\n", " ")
        tokens = list(decode(line))
        for first, second in zip(tokens, tokens[1:]):
            assert not (first.type is T.TEXT and second.type is T.TEXT)

    @given(
        _words,
        _words,
        st.integers(min_value=0, max_value=3),
        st.integers(min_value=1, max_value=4),
    )
    @settings(max_examples=100)
    def test_blank_lines_split_paragraphs(
        self, first: str, second: str, leading: int, blanks: int
    ) -> None:
        """Any number of blank lines separates exactly two paragraphs."""
        source = "\n" * leading + first + "\n" * (blanks + 1) + second
        assert list(decode(source)) == [
            Token(T.PARAGRAPH),
            Token(T.TEXT, first),
            Token(T.PARAGRAPH),
            Token(T.TEXT, second),
        ]


class TestMarkdownInvariants:
    """Invariants of the Markdown encoder."""

    @given(st.lists(_words, min_size=1, max_size=5))
    @settings(max_examples=100)
    def test_paragraph_lines_fold(self, lines: list[str]) -> None:
        """Consecutive paragraph lines are joined with single spaces."""
        assert normalize("\n".join(lines)) == " ".join(lines) + "\n"

    @given(
        st.lists(
            st.tuples(st.integers(min_value=0, max_value=6), _words),
            min_size=1,
            max_size=5,
        )
    )
    @settings(max_examples=100)
    def test_round_trip(self, blocks: list[tuple[int, str]]) -> None:
        """Headings and single-line paragraphs survive encode then decode."""
        source = "\n\n".join(
            ("#" * level + " " + text) if level else text for level, text in blocks
        )
        tokens = list(decode(source))
        assert list(decode(to_markdown(tokens))) == tokens

    @given(
        st.lists(
            st.tuples(st.integers(min_value=0, max_value=6), _marked_words),
            min_size=1,
            max_size=5,
        )
    )
    @settings(max_examples=300)
    def test_round_trip_with_markup(self, blocks: list[tuple[int, str]]) -> None:
        """Escapes, emphasis, and closing hashes survive encode then decode.

        Warnings are dropped: `#tag` warns when read, but is written back
        escaped and reads back silently.
        """
        source = "\n\n".join(
            ("#" * level + " " + text) if level else text for level, text in blocks
        )
        tokens = [t for t in decode(source) if t.type is not T.WARNING]
        assert [t for t in decode(to_markdown(tokens)) if t.type is not T.WARNING] == tokens

    @given(st.lists(_tokens, max_size=30))
    @settings(max_examples=200)
    def test_any_stream_encodes(self, tokens: list[Token]) -> None:
        """Arbitrary token sequences encode without raising."""
        assert to_markdown(tokens).endswith("\n")


class TestHtmlInvariants:
    """Invariants of the HTML encoder."""

    @given(st.lists(_tokens, max_size=30))
    @settings(max_examples=300)
    def test_any_stream_is_balanced(self, tokens: list[Token]) -> None:
        """Arbitrary token sequences produce properly nested HTML."""
        _assert_balanced(to_html(tokens))

    @given(st.text(max_size=300))
    @settings(max_examples=100)
    def test_decoded_text_is_balanced(self, source: str) -> None:
        _assert_balanced(to_html(decode(source)))
