# copa_unique/performance/formatting.py
"""
Display formatting in pt-BR conventions (R$, "." thousands separator).
"""

import math
from typing import Optional


def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return math.isnan(float(value))
    except (TypeError, ValueError):
        return True


def format_brl(value) -> str:
    """
    Whole reais with pt-BR grouping.

    Examples:
        format_brl(1234.4) -> "R$ 1.234"
        format_brl(None)   -> "R$ 0"
    """
    if _is_missing(value):
        return "R$ 0"
    number = round(float(value))
    sign = "-" if number < 0 else ""
    grouped = f"{abs(int(number)):,}".replace(",", ".")
    return f"{sign}R$ {grouped}"


def format_brl_compact(value) -> str:
    """R$ 1.2M / R$ 850K / R$ 999"""
    if _is_missing(value):
        return "R$ 0"
    number = float(value)
    sign = "-" if number < 0 else ""
    number = abs(number)
    if number >= 1_000_000:
        return f"{sign}R$ {number / 1_000_000:.1f}M"
    if number >= 1_000:
        return f"{sign}R$ {number / 1_000:.0f}K"
    return f"{sign}R$ {number:.0f}"


def format_growth(value: Optional[float], decimals: int = 1) -> str:
    """+12.5% / -3.0% / 0% / — (undefined)"""
    if value is None:
        return "—"
    if _is_missing(value):
        return "—"
    if value == 0:
        return "0%"
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.{decimals}f}%"


def format_percent(value, decimals: int = 0) -> str:
    if _is_missing(value):
        return "0%"
    return f"{float(value):.{decimals}f}%"


__all__ = [
    'format_brl',
    'format_brl_compact',
    'format_growth',
    'format_percent',
]
