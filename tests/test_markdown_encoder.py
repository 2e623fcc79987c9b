"""Tests for the Markdown encoder."""

import io

import pytest

from mdstream import EncodeError, MarkdownEncoder, Token, TokenType, decode, normalize, to_markdown

T = TokenType


def _text(value: str) -> Token:
    return Token(T.TEXT, value)


class TestBlocks:
    """Block layout and separation."""

    def test_heading(self) -> None:
        assert to_markdown([Token(T.HEADING1), _text("H1")]) == "# H1\n"

    def test_heading_id(self) -> None:
        tokens = [Token(T.HEADING2), Token(T.HEADING_ID, "custom"), _text("Title")]
        assert to_markdown(tokens) == "## Title {#custom}\n"

    def test_paragraph_text_is_joined(self) -> None:
        assert to_markdown([Token(T.PARAGRAPH), _text("a"), _text("b")]) == "a b\n"

    def test_blocks_separated_by_blank_line(self) -> None:
        tokens = [Token(T.PARAGRAPH), _text("a"), Token(T.HORIZONTAL_RULE), Token(T.PARAGRAPH), _text("b")]
        assert to_markdown(tokens) == "a\n\n---\n\nb\n"

    def test_empty_stream(self) -> None:
        assert to_markdown([]) == "\n"

    def test_text_without_opener_gets_paragraph(self) -> None:
        assert to_markdown([_text("loose")]) == "loose\n"

    def test_hard_break(self) -> None:
        tokens = [Token(T.PARAGRAPH), _text("a"), Token(T.LINE_BREAK), _text("b")]
        assert to_markdown(tokens) == "a\\\nb\n"

    def test_code_block(self) -> None:
        tokens = [
            Token(T.SYNTAX_HIGHLIGHTING, "py"),
            Token(T.CODEBLOCK, "x = 1"),
            Token(T.CODEBLOCK, ""),
        ]
        assert to_markdown(tokens) == "```py\nx = 1\n\n```\n"

    def test_warning_writes_nothing(self) -> None:
        tokens = [Token(T.WARNING, "#x", number=1), Token(T.PARAGRAPH), _text("#x")]
        assert to_markdown(tokens) == "\\#x\n"


class TestContainers:
    """Quotes, lists, details, and footnotes."""

    def test_quote(self) -> None:
        tokens = [
            Token(T.QUOTE_OPEN),
            Token(T.PARAGRAPH),
            _text("a"),
            Token(T.QUOTE_CLOSE),
            Token(T.PARAGRAPH),
            _text("b"),
        ]
        assert to_markdown(tokens) == "> a\n\nb\n"

    def test_quote_with_two_paragraphs(self) -> None:
        tokens = [Token(T.QUOTE_OPEN), Token(T.PARAGRAPH), _text("a"), Token(T.PARAGRAPH), _text("b")]
        assert to_markdown(tokens) == "> a\n>\n> b\n"

    def test_alert(self) -> None:
        tokens = [Token(T.QUOTE_OPEN), Token(T.ADMONITION, "note"), Token(T.PARAGRAPH), _text("x")]
        assert to_markdown(tokens) == "> [!NOTE]\n> x\n"

    def test_details(self) -> None:
        tokens = [
            Token(T.QUOTE_OPEN),
            Token(T.DETAILS, "More", flag=True),
            Token(T.PARAGRAPH),
            _text("hidden"),
            Token(T.QUOTE_CLOSE),
        ]
        assert to_markdown(tokens) == "+++ More\n    hidden\n"

    def test_nested_list(self) -> None:
        tokens = [
            Token(T.UNORDERED_LIST),
            Token(T.LIST_ITEM),
            _text("a"),
            Token(T.LIST_ITEM),
            _text("b"),
            Token(T.UNORDERED_LIST),
            Token(T.LIST_ITEM),
            _text("c"),
            Token(T.LIST_CLOSE),
            Token(T.LIST_ITEM),
            _text("d"),
            Token(T.LIST_CLOSE),
            Token(T.PARAGRAPH),
            _text("text"),
        ]
        assert to_markdown(tokens) == "- a\n- b\n  - c\n- d\n\ntext\n"

    def test_ordered_list_numbers_items(self) -> None:
        tokens = [Token(T.ORDERED_LIST), Token(T.LIST_ITEM), _text("one"), Token(T.LIST_ITEM), _text("two")]
        assert to_markdown(tokens) == "1. one\n2. two\n"

    def test_task_item(self) -> None:
        tokens = [Token(T.UNORDERED_LIST), Token(T.LIST_ITEM), Token(T.LIST_TASK, flag=True), _text("done")]
        assert to_markdown(tokens) == "- [x] done\n"

    def test_item_without_list(self) -> None:
        assert to_markdown([Token(T.LIST_ITEM), _text("a")]) == "- a\n"

    def test_footnote(self) -> None:
        tokens = [Token(T.FOOTNOTE_OPEN, "1"), _text("note"), Token(T.FOOTNOTE_CLOSE)]
        assert to_markdown(tokens) == "[^1]: note\n"


class TestInline:
    """Inline markup, links, and tables."""

    def test_toggles(self) -> None:
        tokens = [
            Token(T.PARAGRAPH),
            _text("Some "),
            Token(T.ITALIC, flag=True),
            _text("text"),
            Token(T.ITALIC, flag=False),
        ]
        assert to_markdown(tokens) == "Some *text*\n"

    def test_code_span_with_backtick(self) -> None:
        assert to_markdown([Token(T.PARAGRAPH), Token(T.CODE, "a`b")]) == "``a`b``\n"

    def test_inline_link(self) -> None:
        tokens = [
            Token(T.PARAGRAPH),
            _text("See "),
            Token(T.LINK_REF, "home"),
            Token(T.LINK_VAL, "https://x.org"),
            Token(T.TITLE, "T"),
            _text("."),
        ]
        assert to_markdown(tokens) == 'See [home](https://x.org "T").\n'

    def test_link_definition(self) -> None:
        tokens = [Token(T.LINK_KEY, "home"), Token(T.LINK_VAL, "https://x.org"), Token(T.TITLE, "Home")]
        assert to_markdown(tokens) == '[home]: https://x.org "Home"\n'

    def test_comment(self) -> None:
        assert to_markdown([Token(T.COMMENT, "note")]) == "[note]: #\n"

    def test_numbered_link(self) -> None:
        assert to_markdown([Token(T.PARAGRAPH), Token(T.LINK_NUM, "x", number=3)]) == "[x][3]\n"

    def test_table(self) -> None:
        tokens = [
            Token(T.TABLE_CELL),
            _text("a"),
            Token(T.TABLE_CELL),
            _text("b"),
            Token(T.LINE_BREAK),
            Token(T.TABLE_LEFT),
            Token(T.TABLE_RIGHT),
            Token(T.LINE_BREAK),
            Token(T.TABLE_CELL),
            _text("1"),
            Token(T.TABLE_CELL),
            _text("2"),
            Token(T.LINE_BREAK),
        ]
        assert to_markdown(tokens) == "| a | b |\n| --- | ---: |\n| 1 | 2 |\n"


class TestEscaping:
    """TEXT is escaped so that it decodes back unchanged."""

    def test_inline_specials(self) -> None:
        assert to_markdown([Token(T.PARAGRAPH), _text("*a* [b]")]) == "\\*a\\* \\[b\\]\n"

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("# not heading", "\\# not heading\n"),
            ("- not item", "\\- not item\n"),
            ("1. not item", "1\\. not item\n"),
            ("> not quote", "\\> not quote\n"),
        ],
    )
    def test_line_start(self, text: str, expected: str) -> None:
        assert to_markdown([Token(T.PARAGRAPH), _text(text)]) == expected

    def test_bare_url_escaped(self) -> None:
        assert to_markdown([Token(T.PARAGRAPH), _text("https://x.org")]) == "https\\://x.org\n"

    def test_pipe_in_table_cell(self) -> None:
        tokens = [Token(T.TABLE_CELL), _text("a|b"), Token(T.LINE_BREAK)]
        assert to_markdown(tokens) == "| a\\|b |\n"


class TestNormalize:
    """Decode then encode."""

    def test_folds_paragraph_lines(self) -> None:
        assert normalize("Some *text*\nmore") == "Some *text* more\n"

    @pytest.mark.parametrize(
        "source",
        [
            "# Title\n\nBody text\n",
            "- a\n- b\n  - c\n- d\n\ntext\n",
            "> a\n>\n> b\n",
            "```py\nx = 1\n```\n",
            "| a | b |\n| --- | ---: |\n| 1 | 2 |\n",
            "\\# not heading\n",
        ],
    )
    def test_canonical_input_is_stable(self, source: str) -> None:
        assert normalize(source) == source

    def test_empty_items_stay_separate(self) -> None:
        assert normalize("-\n-\n- x\n") == "- \n- \n- x\n"


class TestReadsBack:
    """Encoded text decodes to the tokens it came from."""

    @pytest.mark.parametrize(
        ("tokens", "expected"),
        [
            ([Token(T.HEADING2), _text("Issue #")], "## Issue \\#\n"),
            ([Token(T.HEADING1), _text("#")], "# \\#\n"),
            ([Token(T.HEADING3), _text("a ##")], "### a #\\#\n"),
            ([Token(T.HEADING1), _text("C#")], "# C\\#\n"),
        ],
    )
    def test_heading_trailing_hashes(self, tokens: list[Token], expected: str) -> None:
        assert to_markdown(tokens) == expected
        assert list(decode(expected)) == tokens

    def test_heading_trailing_hash_before_id(self) -> None:
        tokens = [Token(T.HEADING2), Token(T.HEADING_ID, "n"), _text("No #")]
        assert to_markdown(tokens) == "## No \\# {#n}\n"
        assert list(decode(to_markdown(tokens))) == tokens

    def test_backslash_before_hard_break(self) -> None:
        tokens = [Token(T.PARAGRAPH), _text("a\\"), Token(T.LINE_BREAK), _text("b")]
        assert to_markdown(tokens) == "a\\\\\\\nb\n"
        assert list(decode(to_markdown(tokens))) == tokens

    def test_escaped_delimiter_inside_toggle(self) -> None:
        tokens = [
            Token(T.PARAGRAPH),
            Token(T.ITALIC, flag=True),
            _text("a*"),
            Token(T.ITALIC, flag=False),
        ]
        assert to_markdown(tokens) == "*a\\**\n"
        assert list(decode(to_markdown(tokens))) == tokens

    def test_empty_list_items(self) -> None:
        tokens = [
            Token(T.UNORDERED_LIST),
            Token(T.LIST_ITEM),
            Token(T.LIST_ITEM),
            _text("x"),
        ]
        assert to_markdown(tokens + [Token(T.LIST_CLOSE)]) == "- \n- x\n"
        assert list(decode(to_markdown(tokens))) == tokens

    @pytest.mark.parametrize("code", [" ", "  "])
    def test_all_space_code_span(self, code: str) -> None:
        tokens = [Token(T.PARAGRAPH), Token(T.CODE, code)]
        assert to_markdown(tokens) == f"`{code}`\n"
        assert list(decode(to_markdown(tokens))) == tokens


class TestSinks:
    """Output sinks and encoder faults."""

    def test_binary_sink(self) -> None:
        out = io.BytesIO()
        MarkdownEncoder([Token(T.HEADING1), _text("Café")], out).encode()
        assert out.getvalue() == "# Café\n".encode()

    def test_text_sink(self) -> None:
        out = io.StringIO()
        MarkdownEncoder([Token(T.PARAGRAPH), _text("x")], out).encode()
        assert out.getvalue() == "x\n"

    def test_sink_without_write(self) -> None:
        with pytest.raises(EncodeError):
            MarkdownEncoder([], object())

    def test_failing_sink(self) -> None:
        class Broken:
            def write(self, text: str) -> int:
                raise OSError("disk full")

        with pytest.raises(EncodeError, match="disk full"):
            MarkdownEncoder([Token(T.PARAGRAPH), _text("x")], Broken()).encode()

    def test_non_token_item(self) -> None:
        with pytest.raises(EncodeError):
            to_markdown([Token(T.PARAGRAPH), "not a token"])  # type: ignore[list-item]
