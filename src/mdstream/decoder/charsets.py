"""Character sets for O(1) classification.

All sets are frozensets for O(1) membership testing and immutability.

Usage:
    from mdstream.decoder.charsets import ASCII_PUNCTUATION

    if char in ASCII_PUNCTUATION:  # O(1) lookup
        ...
"""

# Characters a backslash can escape
ASCII_PUNCTUATION: frozenset[str] = frozenset("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")

# Characters that can start an inline construct
INLINE_SPECIAL: frozenset[str] = frozenset("\\`<![*_~^=h")

# Valid fence characters
FENCE_CHARS: frozenset[str] = frozenset("`~")

# List marker characters
UNORDERED_LIST_MARKERS: frozenset[str] = frozenset("-*+")

# Ordered list marker terminators
ORDERED_LIST_DELIMITERS: frozenset[str] = frozenset(".)")

# Thematic break characters
THEMATIC_BREAK_CHARS: frozenset[str] = frozenset("-*_")

# GitHub alert kinds accepted after `> [!`
ALERT_KINDS: frozenset[str] = frozenset({"NOTE", "TIP", "WARNING", "CAUTION", "IMPORTANT"})

# Trailing characters stripped from bare URLs
URL_TRAILING_PUNCTUATION: str = ".,:;!?)\"'"
