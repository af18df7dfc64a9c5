from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

"""Field resolver: logical field name -> raw spreadsheet cell.

Export tools rename columns freely ("Start time", "StartTime",
"Start Time (IST)"), so a field is described by an ordered list of candidate
headers and resolved in two phases:

1. exact key lookup, candidate by candidate;
2. case-insensitive substring scan of the row's actual keys, candidate by
   candidate, first row key (in row order) wins.

The exact phase runs first so an exact header is never shadowed by a fuzzy
hit on some other annotated column.
"""

__all__ = [
    "RawRow",
    "resolve",
    "cell_text",
]

RawRow = Mapping[str, Any]


def cell_text(value: Any) -> str:
    """Render a cell value as text; None / NaN become ""."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value)


def _present(value: Any) -> bool:
    return cell_text(value) != "" or isinstance(value, str)


def resolve(row: RawRow, candidate_keys: Sequence[str]) -> str:
    """Return the text of the first cell matching any candidate header, else ""."""
    for key in candidate_keys:
        if key in row and _present(row[key]):
            return cell_text(row[key])

    row_keys = [(k, str(k).lower()) for k in row.keys()]
    for key in candidate_keys:
        needle = key.lower()
        if not needle:
            continue
        for original, lowered in row_keys:
            if needle in lowered and _present(row[original]):
                return cell_text(row[original])
    return ""
