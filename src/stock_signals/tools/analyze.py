"""Per-ticker orchestration: fetch data, run the four analyzers concurrently."""

import asyncio
import logging
import os
from collections.abc import Sequence
from datetime import date
from time import perf_counter
from typing import Any

import pandas as pd

from stock_signals.analysis.company_metrics import COMPANY_METRIC_LINE_ITEMS, calculate_company_metrics
from stock_signals.analysis.fundamentals import analyze_fundamentals
from stock_signals.analysis.sentiment import analyze_sentiment
from stock_signals.analysis.technicals import analyze_technicals
from stock_signals.analysis.valuation import VALUATION_LINE_ITEMS, analyze_valuation
from stock_signals.data.source import FinancialDataSource
from stock_signals.exceptions import MissingDataError
from stock_signals.models import AnalysisResult, TechnicalResult
from stock_signals.utils.normalize import sanitize_nan_inf
from stock_signals.utils.provenance import build_error_response, build_meta
from stock_signals.utils.validators import normalize_ticker, validate_ticker_list

logger = logging.getLogger(__name__)

TIMEOUT_SECONDS = float(os.environ.get("ANALYSIS_TIMEOUT_SECONDS", "30"))

PRICE_HISTORY_MONTHS = 3
INSIDER_TRADE_LIMIT = 1000
NEWS_LIMIT = 100


def _price_window(today: date | None = None) -> tuple[date, date]:
    """Start and end dates covering the last PRICE_HISTORY_MONTHS calendar months."""
    end = today or date.today()
    start = (pd.Timestamp(end) - pd.DateOffset(months=PRICE_HISTORY_MONTHS)).date()
    return start, end


async def run_technicals(source: FinancialDataSource, ticker: str) -> TechnicalResult | dict[str, str]:
    start, end = _price_window()
    bars = await source.get_prices(ticker, start, end)
    return analyze_technicals(bars)


async def run_fundamentals(source: FinancialDataSource, ticker: str) -> AnalysisResult:
    metrics = await source.get_financial_metrics(ticker, "ttm", limit=1)
    return analyze_fundamentals(metrics[0] if metrics else None)


async def run_sentiment(source: FinancialDataSource, ticker: str) -> AnalysisResult:
    trades, news = await asyncio.gather(
        source.get_insider_trades(ticker, limit=INSIDER_TRADE_LIMIT),
        source.get_company_news(ticker, limit=NEWS_LIMIT),
    )
    return analyze_sentiment(trades, news)


async def run_valuation(source: FinancialDataSource, ticker: str) -> AnalysisResult:
    metrics = await source.get_financial_metrics(ticker, "ttm", limit=1)
    if not metrics:
        raise MissingDataError("No financial metrics found", ticker=ticker)
    line_items = await source.search_line_items(ticker, list(VALUATION_LINE_ITEMS), "ttm", limit=2)
    return analyze_valuation(metrics[0], line_items)


ANALYZERS = (
    ("technicals", run_technicals),
    ("fundamentals", run_fundamentals),
    ("sentiment", run_sentiment),
    ("valuation", run_valuation),
)


async def analyze_ticker(source: FinancialDataSource, ticker: str) -> dict[str, Any]:
    """
    Run all four analyzers for one ticker with parallel execution.

    A failing or timed-out analyzer leaves its slot None and adds an entry to
    `failures`; the other analyzers still complete.

    Args:
        source: Financial data provider
        ticker: Stock ticker symbol

    Returns:
        Bundle with ticker, one result dict per analyzer, failures and meta
    """
    start_time = perf_counter()
    symbol = normalize_ticker(ticker)

    async def run_with_timing(name: str, coro: Any) -> tuple[str, Any | Exception, float]:
        analysis_start = perf_counter()
        try:
            result = await asyncio.wait_for(coro, timeout=TIMEOUT_SECONDS)
            return (name, result, (perf_counter() - analysis_start) * 1000)
        except TimeoutError:
            duration = (perf_counter() - analysis_start) * 1000
            return (name, TimeoutError(f"exceeded {TIMEOUT_SECONDS}s"), duration)
        except Exception as e:
            return (name, e, (perf_counter() - analysis_start) * 1000)

    results = await asyncio.gather(
        *[run_with_timing(name, runner(source, symbol)) for name, runner in ANALYZERS]
    )

    bundle: dict[str, Any] = {"ticker": symbol}
    failures: list[dict[str, Any]] = []

    for name, result, duration_ms in results:
        if isinstance(result, Exception):
            logger.warning("%s(%s) failed: %s: %s", name, symbol, type(result).__name__, result)
            failures.append(
                {
                    "analysis": name,
                    "error": type(result).__name__,
                    "message": str(result),
                    "duration_ms": round(duration_ms, 1),
                }
            )
            bundle[name] = None
        elif isinstance(result, dict) and result.get("error"):
            # Technical analysis reports missing prices as a value, not an exception
            logger.warning("%s(%s) returned no result: %s", name, symbol, result["error"])
            failures.append(
                {
                    "analysis": name,
                    "error": MissingDataError.__name__,
                    "message": result["error"],
                    "duration_ms": round(duration_ms, 1),
                }
            )
            bundle[name] = None
        else:
            bundle[name] = result.to_dict()

    bundle["failures"] = failures
    bundle["meta"] = build_meta("analyze", (perf_counter() - start_time) * 1000)
    return sanitize_nan_inf(bundle)


async def compare_tickers(
    source: FinancialDataSource,
    tickers: Sequence[str] | str,
) -> list[dict[str, Any]]:
    """
    Analyze 2-5 tickers concurrently.

    Raises:
        ValueError: If the ticker list is not 2-5 distinct valid symbols
    """
    symbols = validate_ticker_list(tickers)
    return list(await asyncio.gather(*[analyze_ticker(source, symbol) for symbol in symbols]))


async def company_metrics(source: FinancialDataSource, ticker: str) -> dict[str, Any]:
    """
    Screener metrics from the two most recent annual statements.

    Returns:
        CompanyMetrics as a dict, or an error response when fewer than two
        annual periods are available
    """
    start_time = perf_counter()
    symbol = normalize_ticker(ticker)

    items = await source.search_line_items(symbol, list(COMPANY_METRIC_LINE_ITEMS), "annual", limit=2)
    if len(items) < 2:
        return build_error_response(
            "missing_data",
            f"Need two annual periods for {symbol}, got {len(items)}",
            symbol=symbol,
        )

    result = calculate_company_metrics(items[0], items[1]).to_dict()
    result["ticker"] = result["ticker"] or symbol
    result["report_period"] = items[0].report_period
    result["meta"] = build_meta("company_metrics", (perf_counter() - start_time) * 1000)
    return result
