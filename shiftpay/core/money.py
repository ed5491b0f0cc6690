"""Parsing, rounding and display of monetary amounts."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0")

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_money(value: Any) -> Decimal | None:
    """Interpret a raw amount, returning ``None`` when it carries no number.

    Accepts numbers and text such as ``"800"``, ``"800.00"``, ``"800,00"``
    and ``"1.234,56"``. When a comma is present it is the decimal separator
    and dots are thousands separators.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            result = value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation:
            return None
        return result if result.is_finite() else None

    raw = str(value).strip()
    if not raw:
        return None
    if "," in raw:
        raw = raw.replace(".", "").replace(",", ".", 1)
    match = _NUMBER.search(raw)
    if not match:
        return None
    try:
        return Decimal(match.group(0))
    except InvalidOperation:  # pragma: no cover - regex guarantees digits
        return None


def format_currency(value: Decimal | None) -> str:
    """Render ``R$ 1.234,56``; missing amounts render as an em dash."""

    if value is None:
        return "—"
    text = f"{quantize(value):,.2f}"
    return "R$ " + text.replace(",", "_").replace(".", ",").replace("_", ".")
