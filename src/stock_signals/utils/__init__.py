"""Utility modules."""

from stock_signals.utils.formatting import format_currency, format_percent, to_confidence
from stock_signals.utils.indicators import (
    array_mean,
    calculate_adx,
    calculate_atr,
    calculate_bollinger_bands,
    calculate_ema,
    calculate_rsi,
    pct_change,
    rolling_mean,
    rolling_std,
    rolling_sum,
)
from stock_signals.utils.normalize import canonical_dumps, sanitize_nan_inf
from stock_signals.utils.provenance import build_error_response, build_meta
from stock_signals.utils.validators import check_rule, normalize_ticker, validate_ticker_list

__all__ = [
    "array_mean",
    "calculate_adx",
    "calculate_atr",
    "calculate_bollinger_bands",
    "calculate_ema",
    "calculate_rsi",
    "pct_change",
    "rolling_mean",
    "rolling_std",
    "rolling_sum",
    "canonical_dumps",
    "sanitize_nan_inf",
    "build_error_response",
    "build_meta",
    "check_rule",
    "format_currency",
    "format_percent",
    "to_confidence",
    "normalize_ticker",
    "validate_ticker_list",
]
