"""Validation utilities for rule checks and ticker input."""

import math
import operator
import re
from collections.abc import Callable, Sequence

MIN_COMPARE_TICKERS = 2
MAX_COMPARE_TICKERS = 5

_TICKER_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9.\-]{0,14}$")


def check_rule(
    value: float | None,
    threshold: float,
    comparator: Callable[[float, float], bool] = operator.gt,
) -> bool | None:
    """
    Check a rule with nullable boolean semantics.

    If value is None or NaN, returns None (not False).

    Args:
        value: The value to check (may be None)
        threshold: The threshold to compare against
        comparator: Comparison function (default: operator.gt)

    Returns:
        True/False if value is present, None otherwise
    """
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return comparator(value, threshold)


def is_present(value: float | None) -> bool:
    """True when a metric holds a usable non-zero number."""
    if value is None:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return value != 0


def normalize_ticker(ticker: str) -> str:
    """
    Normalize a ticker symbol: uppercase, strip whitespace.

    Raises:
        ValueError: If the symbol is empty or contains invalid characters
    """
    symbol = ticker.upper().strip()
    if not _TICKER_PATTERN.match(symbol):
        raise ValueError(f"Invalid ticker '{ticker}'")
    return symbol


def validate_ticker_list(tickers: Sequence[str] | str) -> list[str]:
    """
    Validate the tickers of a comparison request.

    Accepts a list or a ';'-separated string. Duplicates are dropped while
    keeping first-seen order.

    Raises:
        ValueError: If fewer than 2 or more than 5 distinct tickers remain
    """
    if isinstance(tickers, str):
        tickers = [t for t in tickers.split(";") if t.strip()]

    symbols: list[str] = []
    for ticker in tickers:
        symbol = normalize_ticker(ticker)
        if symbol not in symbols:
            symbols.append(symbol)

    if not MIN_COMPARE_TICKERS <= len(symbols) <= MAX_COMPARE_TICKERS:
        raise ValueError(
            f"Must select between {MIN_COMPARE_TICKERS} and "
            f"{MAX_COMPARE_TICKERS} stocks, got {len(symbols)}"
        )
    return symbols
