import re
from typing import Any, Iterable, Mapping

import pandas as pd


def normalize_header(header: Any) -> str:
    """
    Header key used for alias matching: lowercase with every whitespace removed.
    'Price After GST (INR)' -> 'priceaftergst(inr)'
    """
    return re.sub(r"\s+", "", str(header)).lower()


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def pick_value(row: Mapping[str, Any], aliases: Iterable[str]) -> str:
    """
    Return the first non-blank value found under any alias, trimmed.

    Each alias is tried as an exact key first, then against every header of
    the row ignoring case and whitespace. Returns "" when nothing matches.
    """
    normalized = {}
    for key in row.keys():
        normalized.setdefault(normalize_header(key), key)

    for alias in aliases:
        value = row.get(alias)
        if not is_blank(value):
            return str(value).strip()
        key = normalized.get(normalize_header(alias))
        if key is not None and not is_blank(row.get(key)):
            return str(row[key]).strip()
    return ""
