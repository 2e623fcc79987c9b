"""Token serialization — JSON round-trip for mdstream token streams.

Converts tokens to/from JSON-compatible dicts. Useful for:
- Golden files in tests (decode once, compare forever)
- Sending a decoded stream to another process
- Debugging and inspection

All output is deterministic (sorted keys) for golden-file stability.

Example:
    from mdstream import decode
    from mdstream.serialization import to_json, from_json

    tokens = list(decode("# Hello **World**"))
    json_str = to_json(tokens)
    assert from_json(json_str) == tokens

Thread Safety:
    All functions are pure — safe to call from any thread.

"""

import json
from collections.abc import Iterable
from dataclasses import fields
from typing import Any

from mdstream.tokens import Token, TokenType, WarningKind


def to_dict(token: Token) -> dict[str, Any]:
    """Convert a token to a JSON-compatible dict.

    Includes a ``_type`` discriminator field for deserialization. Enum
    members are stored by name.

    Args:
        token: Any mdstream Token.

    Returns:
        Dict with ``_type`` and all token fields.

    """
    result: dict[str, Any] = {"_type": "Token"}

    for f in fields(token):
        value = getattr(token, f.name)
        if isinstance(value, TokenType | WarningKind):
            value = value.name
        result[f.name] = value

    return result


def from_dict(data: dict[str, Any]) -> Token:
    """Reconstruct a token from a dict.

    Args:
        data: Dict with ``_type`` and token fields (as produced by to_dict).
            Missing optional fields take their defaults.

    Returns:
        Token (frozen dataclass).

    Raises:
        ValueError: If ``_type`` is missing or wrong, or an enum name is unknown.

    """
    type_name = data.get("_type")
    if type_name is None:
        msg = "Missing '_type' field in serialized token"
        raise ValueError(msg)
    if type_name != "Token":
        msg = f"Unknown serialized type: {type_name!r}"
        raise ValueError(msg)

    try:
        ttype = TokenType[data["type"]]
    except KeyError as e:
        msg = f"Unknown token type: {data.get('type')!r}"
        raise ValueError(msg) from e

    warning = data.get("warning")
    if warning is not None:
        try:
            warning = WarningKind[warning]
        except KeyError as e:
            msg = f"Unknown warning kind: {warning!r}"
            raise ValueError(msg) from e

    return Token(
        ttype,
        data.get("value", ""),
        flag=data.get("flag"),
        number=data.get("number"),
        warning=warning,
    )


def to_json(tokens: Iterable[Token], *, indent: int | None = None) -> str:
    """Serialize a token stream to a JSON array.

    Output is deterministic (sorted keys).

    Args:
        tokens: Tokens to serialize (consumed).
        indent: JSON indentation level (None for compact).

    Returns:
        JSON string.

    """
    return json.dumps([to_dict(t) for t in tokens], sort_keys=True, indent=indent)


def from_json(data: str) -> list[Token]:
    """Deserialize a token stream from a JSON string.

    Args:
        data: JSON string (as produced by to_json).

    Returns:
        List of tokens in stream order.

    Raises:
        ValueError: If the JSON is not an array of serialized tokens.

    """
    raw = json.loads(data)
    if not isinstance(raw, list):
        msg = f"Expected a JSON array, got {type(raw).__name__}"
        raise ValueError(msg)
    return [from_dict(item) for item in raw]
