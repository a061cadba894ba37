"""
Rate Desk - Formatting
Currency and percentage strings shared by the tabs, exports and
recommendation text. Ties round half away from zero (2.5 -> 3, 6.125 -> 6.13).
"""

import math
from decimal import ROUND_HALF_UP, Decimal


def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return math.isnan(float(value))
    except (TypeError, ValueError):
        return True


def _round_half_up(value: float, places: int) -> Decimal:
    value = float(value)
    if math.isinf(value):
        return Decimal(value)
    # repr gives the shortest decimal that round-trips, so 6.125 stays 6.125
    return Decimal(repr(value)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def round_half_up(value, places: int = 2) -> float:
    """Numeric rounding for exported cells, matching the displayed strings."""
    return float(_round_half_up(value, places))


def format_currency(value) -> str:
    """$1,428.57 style; zero, None and NaN render as $0.00."""
    if _is_missing(value) or float(value) == 0:
        return '$0.00'
    return f"${_round_half_up(value, 2):,.2f}"


def format_percentage(value) -> str:
    """0.3 -> '30.0%'; None and NaN render as '0%'."""
    if _is_missing(value):
        return '0%'
    return f"{_round_half_up(float(value) * 100, 1):.1f}%"


def format_whole_percentage(value) -> str:
    """0.6 -> '60%' (target margins)."""
    if _is_missing(value):
        return '0%'
    return f"{_round_half_up(float(value) * 100, 0):.0f}%"


def format_rate_or_na(value) -> str:
    """Client rate for a location that is not offered shows as N/A."""
    if _is_missing(value) or float(value) == 0:
        return 'N/A'
    return format_currency(value)


def format_margin_or_na(margin, cost) -> str:
    """Margin at a location; N/A where the role is not offered (cost 0)."""
    if _is_missing(cost) or float(cost) <= 0:
        return 'N/A'
    return format_percentage(margin)
