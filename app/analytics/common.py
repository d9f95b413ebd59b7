"""
Safe math and formatting helpers used across the analytics modules.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

import pandas as pd

from app.config import CURRENCY_SYMBOL, LAKH, THOUSAND


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide safely, returning default if denominator is zero or NaN."""
    if denominator == 0 or pd.isna(denominator):
        return default
    result = numerator / denominator
    return default if pd.isna(result) else result


def pct(part: float, total: float) -> float:
    """part / total * 100, 0 when total is 0."""
    return safe_divide(part, total) * 100


def round_half_up(value: float, places: int = 1) -> float:
    """Round like a spreadsheet does (1.25 → 1.3), not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Class metrics
# ---------------------------------------------------------------------------

def fill_rate(average_checkins: float, capacity: float) -> float:
    """Average attendance as a percentage of capacity."""
    return pct(average_checkins, capacity)


def late_cancellation_rate(cancelled: float, checkins: float) -> float:
    """Late cancels / (check-ins + late cancels) * 100."""
    return pct(cancelled, checkins + cancelled)


def revenue_per_attendee(revenue: float, checkins: float) -> float:
    return safe_divide(revenue, checkins) if checkins > 0 else 0.0


# ---------------------------------------------------------------------------
# Currency
# ---------------------------------------------------------------------------

def _group_indian(digits: str) -> str:
    """Insert Indian digit-group separators: 12345678 → 1,23,45,678."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_currency(amount: float, compact: bool = False) -> str:
    """Render an INR amount: ₹1,23,457 or, compact, ₹1.2L / ₹4.5K."""
    if compact:
        if amount >= LAKH:
            return f"{CURRENCY_SYMBOL}{round_half_up(amount / LAKH):.1f}L"
        if amount >= THOUSAND:
            return f"{CURRENCY_SYMBOL}{round_half_up(amount / THOUSAND):.1f}K"
    whole = int(Decimal(str(abs(amount))).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    sign = "-" if amount < 0 and whole else ""
    return f"{sign}{CURRENCY_SYMBOL}{_group_indian(str(whole))}"
