"""Presentation-boundary formatting. The only place money gets rounded."""
from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

DEFAULT_CURRENCY = "NRs."
CENT = Decimal("0.01")


def money(amount: Decimal, currency: Optional[str] = DEFAULT_CURRENCY) -> str:
    rounded = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    text = f"{rounded:,.2f}"
    return f"{currency} {text}" if currency else text


def plain_amount(amount: Decimal) -> str:
    """Two fraction digits, no grouping: the form used in log details."""
    return f"{Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP):.2f}"


def day(value: Optional[date]) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%Y-%m-%d")


def timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %I:%M %p")
