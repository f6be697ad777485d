import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

import pandas as pd

from pnl_app.utils.text_cleaner import is_blank

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_decimal(value: Any) -> Decimal:
    """
    Lenient numeric parse: '1,250.50' -> 1250.50. Anything unparseable is 0.
    """
    if is_blank(value):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    text = str(value).strip().replace(",", "")
    try:
        number = Decimal(text)
    except (InvalidOperation, ValueError):
        return ZERO
    return number if number.is_finite() else ZERO


def money(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def parse_date(value: Any) -> date | None:
    """
    Accepts YYYY-MM-DD and 'YYYY-MM-DD HH:MM:SS' directly; anything else goes
    through pandas' generic parser. Returns None when no date can be read.
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    head = text.split(" ")[0].split("T")[0]
    if _ISO_DATE.match(head):
        try:
            return date.fromisoformat(head)
        except ValueError:
            return None

    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.date()
