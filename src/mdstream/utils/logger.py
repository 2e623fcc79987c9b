"""Logging for mdstream.

Every module logs under the ``mdstream`` namespace, so one call to
``logging.getLogger("mdstream").setLevel(...)`` tunes the whole codec.
The library never installs handlers.

Decode warnings travel in the token stream. ``log_warning`` mirrors each
one to the ``mdstream.warnings`` logger at debug level, once when the
decoder emits it and again when an encoder drops it.

Example:
    >>> import logging
    >>> from mdstream import decode
    >>> logging.basicConfig(level=logging.DEBUG)
    >>> tokens = list(decode("#Title"))  # line 1: AMBIGUOUS_HEADING emitted: '#Title'
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdstream.tokens import Token

_NAMESPACE = "mdstream"


def get_logger(name: str) -> logging.Logger:
    """Get the logger for a module, namespaced under ``mdstream``.

    Example:
        >>> get_logger("mymodule").name
        'mdstream.mymodule'
        >>> get_logger("mdstream.decoder.core").name
        'mdstream.decoder.core'
    """
    if name != _NAMESPACE and not name.startswith(_NAMESPACE + "."):
        name = f"{_NAMESPACE}.{name}"
    return logging.getLogger(name)


_warnings = get_logger("warnings")


def log_warning(token: Token, action: str) -> None:
    """Record what happened to a WARNING token.

    Args:
        token: The WARNING token; hand-built tokens may lack a kind or line
        action: Short verb phrase, e.g. "emitted" or "skipped by html encoder"
    """
    if not _warnings.isEnabledFor(logging.DEBUG):
        return
    kind = token.warning.name if token.warning is not None else "WARNING"
    _warnings.debug("line %s: %s %s: %r", token.number, kind, action, token.value)
