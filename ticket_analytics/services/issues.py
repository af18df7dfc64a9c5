from __future__ import annotations

import re

from ..models.aggregates import TechLayer

"""Issue tokenizer and technology-layer classifier.

``issue_list`` cells hold several issue phrases separated by semicolons, e.g.
"Bluetooth Issue; Finish Button Disabled". tokenize() splits them into atomic
tokens; classify() maps a token to a TechLayer with an ordered keyword table.
"""

__all__ = [
    "UNSPECIFIED",
    "LAYER_KEYWORDS",
    "tokenize",
    "classify",
]

UNSPECIFIED = "Unspecified"

# Placeholder strings leaked by upstream exports
_JUNK_TOKENS = frozenset({"null", "undefined"})
_SEPARATOR_RE = re.compile(r";+")

# Checked top to bottom, first match wins
LAYER_KEYWORDS: tuple[tuple[TechLayer, tuple[str, ...]], ...] = (
    (TechLayer.APP, ("app", "software", "finish button", "order stuck", "otp")),
    (TechLayer.HARDWARE, ("atg", "sensor", "battery", "hardware", "pump")),
    (TechLayer.CONNECTIVITY, ("bluetooth", "connectivity", "network", "offline")),
    (TechLayer.DATA_SYNC, ("sync", "data", "mismatch", "backend", "correction")),
)


def tokenize(issue_list: str) -> list[str]:
    """Split a ';'-separated issue field into trimmed tokens.

    Empty pieces and "null"/"undefined" are dropped. A field with nothing left
    yields ``["Unspecified"]`` so a ticket is never counted as zero issues.
    """
    tokens = [t.strip() for t in _SEPARATOR_RE.split(issue_list or "")]
    tokens = [t for t in tokens if t and t.lower() not in _JUNK_TOKENS]
    return tokens or [UNSPECIFIED]


def classify(token: str) -> TechLayer:
    lowered = token.lower()
    for layer, keywords in LAYER_KEYWORDS:
        if any(k in lowered for k in keywords):
            return layer
    return TechLayer.OTHER
