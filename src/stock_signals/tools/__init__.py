"""Orchestration tools over an injected data source."""

from stock_signals.tools.analyze import (
    analyze_ticker,
    company_metrics,
    compare_tickers,
    run_fundamentals,
    run_sentiment,
    run_technicals,
    run_valuation,
)

__all__ = [
    "analyze_ticker",
    "company_metrics",
    "compare_tickers",
    "run_fundamentals",
    "run_sentiment",
    "run_technicals",
    "run_valuation",
]
