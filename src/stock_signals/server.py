"""Stock Signals MCP Server using FastMCP."""

import asyncio
import json
import logging
import os
from collections.abc import Awaitable, Callable
from time import perf_counter
from typing import Any

from fastmcp import FastMCP

from stock_signals import SCHEMA_VERSION, SERVER_VERSION
from stock_signals.data.financial_datasets import FinancialDatasetsClient, shutdown_executor
from stock_signals.data.source import FinancialDataSource
from stock_signals.exceptions import MissingDataError, StockSignalsError
from stock_signals.prompts.templates import build_comparison_messages, get_prompt, list_prompts, render_messages
from stock_signals.tools import (
    analyze_ticker,
    company_metrics,
    compare_tickers,
    run_fundamentals,
    run_sentiment,
    run_technicals,
    run_valuation,
)
from stock_signals.utils.normalize import sanitize_nan_inf
from stock_signals.utils.provenance import build_error_response, build_meta
from stock_signals.utils.validators import normalize_ticker

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Create FastMCP server instance
mcp = FastMCP(
    name="stock-signals",
)

_source: FinancialDataSource | None = None


def get_source() -> FinancialDataSource:
    """Shared data source, created on first use."""
    global _source
    if _source is None:
        _source = FinancialDatasetsClient()
    return _source


def set_source(source: FinancialDataSource | None) -> None:
    """Replace the shared data source (None resets to the default client)."""
    global _source
    _source = source


def _dumps(result: Any) -> str:
    return json.dumps(sanitize_nan_inf(result), indent=2, default=str)


async def _run_single(
    tool: str,
    symbol: str,
    runner: Callable[[FinancialDataSource, str], Awaitable[Any]],
) -> dict[str, Any]:
    """Run one analyzer and map failures to standard error responses."""
    start_time = perf_counter()
    try:
        ticker = normalize_ticker(symbol)
    except ValueError as e:
        return build_error_response("invalid_symbol", str(e), symbol=symbol)

    try:
        result = await runner(get_source(), ticker)
    except MissingDataError as e:
        return build_error_response("missing_data", str(e), symbol=ticker)
    except StockSignalsError as e:
        logger.warning("%s(%s) failed: %s", tool, ticker, e)
        return build_error_response("data_unavailable", str(e), symbol=ticker)

    if isinstance(result, dict):
        return build_error_response("missing_data", result["error"], symbol=ticker)

    payload = result.to_dict()
    payload["ticker"] = ticker
    payload["meta"] = build_meta(tool, (perf_counter() - start_time) * 1000)
    return payload


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def get_technicals(symbol: str) -> str:
    """
    Technical signal from the last three months of daily prices.

    Combines trend following (EMA 8/21/55 + ADX), mean reversion (z-score,
    Bollinger Bands, RSI), momentum (1/3/6 month returns + volume) and
    volatility regime sub-signals.

    Args:
        symbol: Stock ticker symbol (e.g., AAPL, GOOGL, MSFT)

    Returns:
        JSON with signal, confidence and per-strategy metrics
    """
    result = await _run_single("get_technicals", symbol, run_technicals)
    return _dumps(result)


@mcp.tool
async def get_fundamentals(symbol: str) -> str:
    """
    Fundamental signal from the latest TTM financial metrics.

    Scores profitability, growth, financial health and price ratios.

    Args:
        symbol: Stock ticker symbol

    Returns:
        JSON with signal, confidence and per-area reasoning
    """
    result = await _run_single("get_fundamentals", symbol, run_fundamentals)
    return _dumps(result)


@mcp.tool
async def get_sentiment(symbol: str) -> str:
    """
    Sentiment signal from insider trades and news.

    Args:
        symbol: Stock ticker symbol

    Returns:
        JSON with signal, confidence and weighted vote totals
    """
    result = await _run_single("get_sentiment", symbol, run_sentiment)
    return _dumps(result)


@mcp.tool
async def get_valuation(symbol: str) -> str:
    """
    Valuation signal comparing DCF and owner-earnings values to market cap.

    Args:
        symbol: Stock ticker symbol

    Returns:
        JSON with signal, confidence and both valuation gaps
    """
    result = await _run_single("get_valuation", symbol, run_valuation)
    return _dumps(result)


@mcp.tool
async def get_company_metrics(symbol: str) -> str:
    """
    Screener metrics from the two most recent annual statements.

    Revenue and earnings growth, FCF/earnings, ROIC, net debt/FCF and
    debt/equity.

    Args:
        symbol: Stock ticker symbol

    Returns:
        JSON with the six metrics (null where inputs are missing)
    """
    try:
        result = await company_metrics(get_source(), symbol)
    except ValueError as e:
        result = build_error_response("invalid_symbol", str(e), symbol=symbol)
    except StockSignalsError as e:
        result = build_error_response("data_unavailable", str(e), symbol=symbol)
    return _dumps(result)


@mcp.tool
async def analyze(symbol: str) -> str:
    """
    Run all four analyses for one stock in parallel.

    An analysis that fails is null and listed under "failures"; the others
    are still returned.

    Args:
        symbol: Stock ticker symbol

    Returns:
        JSON bundle with technicals, fundamentals, sentiment and valuation
    """
    try:
        result = await analyze_ticker(get_source(), symbol)
    except ValueError as e:
        result = build_error_response("invalid_symbol", str(e), symbol=symbol)
    return _dumps(result)


@mcp.tool
async def compare(tickers: str) -> str:
    """
    Analyze 2-5 stocks side by side.

    Args:
        tickers: Ticker symbols separated by ';' (e.g., "AAPL;MSFT;GOOGL")

    Returns:
        JSON with one analysis bundle per ticker
    """
    start_time = perf_counter()
    try:
        bundles = await compare_tickers(get_source(), tickers)
    except ValueError as e:
        return _dumps(build_error_response("invalid_request", str(e)))
    return _dumps({"bundles": bundles, "meta": build_meta("compare", (perf_counter() - start_time) * 1000)})


# ============================================================================
# PROMPTS
# ============================================================================


@mcp.prompt
async def compare_stocks(tickers: str) -> str:
    """Compare 2-5 stocks (';'-separated) from their four analyses."""
    try:
        bundles = await compare_tickers(get_source(), tickers)
    except ValueError:
        result = get_prompt("compare_stocks", {"tickers": tickers})
        if result:
            return render_messages(result["messages"])
        return f"Compare {tickers} using the compare tool."
    return render_messages(build_comparison_messages(bundles))


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Stock Signals MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    logger.info("Prompts: %s", ", ".join(prompt["name"] for prompt in list_prompts()))
    try:
        mcp.run()
    finally:
        asyncio.run(shutdown_executor())
        if isinstance(_source, FinancialDatasetsClient):
            _source.close()


if __name__ == "__main__":
    main()
