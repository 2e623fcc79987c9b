"""Token and TokenType definitions for mdstream.

The decoder produces a flat stream of Token objects that the encoders
consume. There is no tree: nesting and block structure are expressed by
token order alone, and every consumer rebuilds structure with its own
open/close state.

Thread Safety:
Token is frozen (immutable) and safe to share across threads and between
several encoder passes. TokenType is an enum (inherently immutable).

Performance Note:
Text payloads are plain ``str`` slices of the input line. Python strings
cannot borrow from the caller's buffer, so every payload is an owned copy.

"""

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Token types produced by the decoder.

    Payload conventions (see Token):
    - value: text payload for content, link, and marker tokens
    - flag: open/close for inline toggles, checked for LIST_TASK,
      expanded for DETAILS
    - number: reference id for LINK_NUM / IMAGE_NUM, line number for WARNING

    """

    # Block openers
    PARAGRAPH = auto()  # blank-line separated
    HEADING1 = auto()  # # Heading
    HEADING2 = auto()  # ## Heading
    HEADING3 = auto()
    HEADING4 = auto()
    HEADING5 = auto()
    HEADING6 = auto()  # ###### Heading
    QUOTE_OPEN = auto()  # >
    QUOTE_CLOSE = auto()
    ORDERED_LIST = auto()  # 1.
    UNORDERED_LIST = auto()  # - * +
    DEFINITION_LIST = auto()  # term, then LIST_ITEM per ": definition"
    LIST_ITEM = auto()
    LIST_CLOSE = auto()

    # Leaf content
    TEXT = auto()
    CODE = auto()  # `code`
    CODEBLOCK = auto()  # one line of fenced or indented code
    SYNTAX_HIGHLIGHTING = auto()  # info string of the following code block

    # Inline toggles (flag: True opens, False closes)
    ITALIC = auto()  # * or _
    BOLD = auto()  # ** or __
    BOLD_ITALIC = auto()  # *** or ___
    SUPERSCRIPT = auto()  # ^
    SUBSCRIPT = auto()  # ~
    STRIKETHROUGH = auto()  # ~~
    HIGHLIGHT = auto()  # ==
    UNDERLINE = auto()  # <u></u> or <ins></ins>

    # Links and images
    LINK = auto()  # <https://example.org> or bare https://example.org
    LINK_NUM = auto()  # [My link][1]
    LINK_REF = auto()  # [My link]
    LINK_KEY = auto()  # [My link]: ... (definition key)
    LINK_VAL = auto()  # (url) after LINK_REF/IMAGE_REF, or definition value
    TITLE = auto()  # "My Title" after a LINK_VAL
    IMAGE_NUM = auto()  # ![alt][1]
    IMAGE_REF = auto()  # ![alt]

    # Structural extras
    ADMONITION = auto()  # > [!WARNING] or !!! warning
    DETAILS = auto()  # +++ Summary / ??? info "Summary"
    COMMENT = auto()  # [Some comment text]: #
    FOOTNOTE_REF = auto()  # [^id]
    FOOTNOTE_OPEN = auto()  # [^id]: text
    FOOTNOTE_CLOSE = auto()
    HEADING_ID = auto()  # # Heading {#custom-id}
    TABLE_LEFT = auto()  # :--- (or ---)
    TABLE_CENTERED = auto()  # :---:
    TABLE_RIGHT = auto()  # ---:
    TABLE_CELL = auto()  # | starts a cell
    LIST_TASK = auto()  # [ ] or [x]
    CAPTION = auto()  # line directly following an image-only line
    LINE_BREAK = auto()  # trailing two spaces, \, or <br>; ends a table row
    HORIZONTAL_RULE = auto()  # ---, ***, ___

    # Diagnostics
    WARNING = auto()


class WarningKind(Enum):
    """Recoverable classification ambiguities.

    The decoder reports these as WARNING tokens and keeps going with a
    conservative interpretation of the line.
    """

    # `#Ambiguous Heading` or 7+ `#`. Disambiguate with `# My Heading`
    # or `\# Line that starts with a #`.
    AMBIGUOUS_HEADING = auto()
    # Delimiter row has a different number of columns than the header row
    TABLE_COLUMN_MISMATCH = auto()
    # `[text][70000]`: numbered references must fit in 0..65535
    REFERENCE_OUT_OF_RANGE = auto()


HEADING_TYPES: tuple[TokenType, ...] = (
    TokenType.HEADING1,
    TokenType.HEADING2,
    TokenType.HEADING3,
    TokenType.HEADING4,
    TokenType.HEADING5,
    TokenType.HEADING6,
)

BLOCK_OPENERS: frozenset[TokenType] = frozenset({TokenType.PARAGRAPH, *HEADING_TYPES})

INLINE_TOGGLES: frozenset[TokenType] = frozenset(
    {
        TokenType.ITALIC,
        TokenType.BOLD,
        TokenType.BOLD_ITALIC,
        TokenType.SUPERSCRIPT,
        TokenType.SUBSCRIPT,
        TokenType.STRIKETHROUGH,
        TokenType.HIGHLIGHT,
        TokenType.UNDERLINE,
    }
)

TABLE_ALIGNMENTS: frozenset[TokenType] = frozenset(
    {TokenType.TABLE_LEFT, TokenType.TABLE_CENTERED, TokenType.TABLE_RIGHT}
)

CONTAINER_CLOSERS: frozenset[TokenType] = frozenset(
    {TokenType.QUOTE_CLOSE, TokenType.LIST_CLOSE, TokenType.FOOTNOTE_CLOSE}
)

NUMBERED_TYPES: frozenset[TokenType] = frozenset({TokenType.LINK_NUM, TokenType.IMAGE_NUM})

FLAG_TYPES: frozenset[TokenType] = INLINE_TOGGLES | {TokenType.LIST_TASK, TokenType.DETAILS}

TEXT_PAYLOAD_TYPES: frozenset[TokenType] = frozenset(
    {
        TokenType.TEXT,
        TokenType.CODE,
        TokenType.CODEBLOCK,
        TokenType.SYNTAX_HIGHLIGHTING,
        TokenType.LINK,
        TokenType.LINK_NUM,
        TokenType.LINK_REF,
        TokenType.LINK_KEY,
        TokenType.LINK_VAL,
        TokenType.TITLE,
        TokenType.IMAGE_NUM,
        TokenType.IMAGE_REF,
        TokenType.ADMONITION,
        TokenType.DETAILS,
        TokenType.COMMENT,
        TokenType.FOOTNOTE_REF,
        TokenType.FOOTNOTE_OPEN,
        TokenType.HEADING_ID,
        TokenType.WARNING,
    }
)

# u16 reference ids
MAX_REFERENCE_NUMBER = 0xFFFF


def heading(level: int) -> TokenType:
    """Return the heading token type for level 1..6."""
    if not 1 <= level <= 6:
        raise ValueError(f"heading level must be 1..6, got {level}")
    return HEADING_TYPES[level - 1]


@dataclass(frozen=True, slots=True)
class Token:
    """A token produced by the decoder.

    Attributes:
        type: The token type (from TokenType enum)
        value: Text payload (empty for payload-free tokens)
        flag: Open/close, checked, or expanded state (None when unused)
        number: Reference id, or the line number of a WARNING
        warning: Classification of a WARNING token

    Thread Safety:
        Frozen dataclass ensures immutability for safe sharing.

    """

    type: TokenType
    value: str = ""
    flag: bool | None = None
    number: int | None = None
    warning: WarningKind | None = None

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        parts = [self.type.name]
        if self.value or self.type in TEXT_PAYLOAD_TYPES:
            val = self.value
            if len(val) > 20:
                val = val[:17] + "..."
            parts.append(repr(val))
        if self.flag is not None:
            parts.append(str(self.flag))
        if self.number is not None:
            parts.append(f"#{self.number}")
        if self.warning is not None:
            parts.append(self.warning.name)
        return f"Token({', '.join(parts)})"

    @property
    def heading_level(self) -> int | None:
        """Heading level 1..6, or None for other tokens."""
        try:
            return HEADING_TYPES.index(self.type) + 1
        except ValueError:
            return None

    @property
    def line_text(self) -> str:
        """Original source line of a WARNING token."""
        return self.value

    @property
    def line_number(self) -> int | None:
        """1-based source line number of a WARNING token."""
        return self.number
