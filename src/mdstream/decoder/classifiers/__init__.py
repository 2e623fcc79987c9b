"""Block-level content classifiers for the mdstream decoder.

Each classifier is a mixin that provides classification logic for
a specific block type. Classifiers only inspect the line they are given;
the Decoder owns all state changes and token emission order.
"""

from mdstream.decoder.classifiers.details import (
    DetailsClassifierMixin,
)
from mdstream.decoder.classifiers.fence import (
    FenceClassifierMixin,
)
from mdstream.decoder.classifiers.footnote import (
    FootnoteClassifierMixin,
)
from mdstream.decoder.classifiers.heading import (
    HeadingClassifierMixin,
)
from mdstream.decoder.classifiers.link_ref import (
    LinkRefClassifierMixin,
)
from mdstream.decoder.classifiers.list import (
    ListClassifierMixin,
)
from mdstream.decoder.classifiers.quote import (
    QuoteClassifierMixin,
)
from mdstream.decoder.classifiers.table import (
    TableClassifierMixin,
)
from mdstream.decoder.classifiers.thematic import (
    ThematicClassifierMixin,
)

__all__ = [
    "DetailsClassifierMixin",
    "FenceClassifierMixin",
    "FootnoteClassifierMixin",
    "HeadingClassifierMixin",
    "LinkRefClassifierMixin",
    "ListClassifierMixin",
    "QuoteClassifierMixin",
    "TableClassifierMixin",
    "ThematicClassifierMixin",
]
