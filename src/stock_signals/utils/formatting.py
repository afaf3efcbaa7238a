"""Text formatting helpers for human-readable reasoning strings."""

import math


def to_confidence(ratio: float) -> int:
    """
    Convert a 0-1 ratio into an integer percentage.

    Rounds half up (0.125 -> 13) rather than Python's round-half-even,
    so confidence values do not depend on the parity of the integer part.

    Args:
        ratio: Ratio to convert (may exceed 1 for valuation gaps)

    Returns:
        Integer percentage, 0 for NaN input
    """
    if ratio is None or math.isnan(ratio) or math.isinf(ratio):
        return 0
    return int(math.floor(ratio * 100 + 0.5))


def format_currency(value: float) -> str:
    """Format a dollar amount with thousands separators, e.g. $1,234,567.89."""
    if value < 0:
        return f"-${abs(value):,.2f}"
    return f"${value:,.2f}"


def format_percent(ratio: float, decimals: int = 2) -> str:
    """Format a ratio as a percentage string, e.g. 0.1534 -> 15.34%."""
    return f"{ratio * 100:.{decimals}f}%"


def format_ratio(value: float, decimals: int = 2) -> str:
    """Format a plain multiple, e.g. 1.5 -> 1.50."""
    return f"{value:.{decimals}f}"
