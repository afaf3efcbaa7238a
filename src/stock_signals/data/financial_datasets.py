"""Async Financial Datasets client with bounded concurrency and retry logic."""

import asyncio
import logging
import os
import random
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, TypeVar

import requests

from stock_signals.data.cache import ResponseCache, compose_cache_key
from stock_signals.data.source import Period
from stock_signals.exceptions import FinancialDataError, RetryExhaustedError, ServerShuttingDownError
from stock_signals.models import FinancialMetrics, InsiderTrade, LineItem, NewsItem, PriceBar

logger = logging.getLogger(__name__)

BASE_URL = os.environ.get("FD_BASE_URL", "https://api.financialdatasets.ai")
_request_timeout = float(os.environ.get("FD_TIMEOUT", "30.0"))  # seconds

# Bounded concurrency for HTTP calls
_max_workers = int(os.environ.get("FD_MAX_WORKERS", "4"))
_executor = ThreadPoolExecutor(max_workers=_max_workers)
_fetch_semaphore = asyncio.Semaphore(_max_workers)

# Retry configuration
_max_retries = int(os.environ.get("FD_MAX_RETRIES", "3"))
_base_delay = float(os.environ.get("FD_BASE_DELAY", "1.0"))  # seconds
_max_delay = float(os.environ.get("FD_MAX_DELAY", "30.0"))  # seconds

# Shutdown coordination
shutdown_event = asyncio.Event()

T = TypeVar("T")


def _is_retryable_error(error: Exception) -> bool:
    """Rate limits, server errors and transport failures are transient."""
    if isinstance(error, FinancialDataError):
        return error.status == 429 or (error.status is not None and 500 <= error.status < 600)
    return isinstance(error, (requests.ConnectionError, requests.Timeout))


def _calculate_backoff(attempt: int) -> float:
    """Calculate delay with exponential backoff and jitter."""
    delay = _base_delay * (2**attempt)
    # Jitter (+/-25%)
    jitter = delay * 0.25 * (2 * random.random() - 1)
    return min(delay + jitter, _max_delay)


async def _retry_with_backoff(
    operation_name: str,
    sync_func: Callable[[], T],
    max_retries: int | None = None,
) -> T:
    """
    Execute a synchronous function in the thread pool with retry logic.

    Args:
        operation_name: Name for logging (e.g., "get_prices(AAPL)")
        sync_func: Synchronous function to execute
        max_retries: Maximum number of retry attempts (default: FD_MAX_RETRIES)

    Returns:
        The function's result

    Raises:
        RetryExhaustedError: If all retries exhausted
        ServerShuttingDownError: If server is shutting down
        FinancialDataError: For non-retryable API errors
    """
    if max_retries is None:
        max_retries = _max_retries

    for attempt in range(max_retries + 1):
        if shutdown_event.is_set():
            raise ServerShuttingDownError("Server is shutting down")

        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(_executor, sync_func)
        except Exception as e:
            if not _is_retryable_error(e):
                raise

            if attempt >= max_retries:
                logger.warning(
                    f"{operation_name}: Failed after {attempt + 1} attempts. Last error: {e}"
                )
                raise RetryExhaustedError(
                    f"Failed after {attempt + 1} attempts: {e}",
                    last_error=e,
                ) from e

            delay = _calculate_backoff(attempt)
            logger.warning(
                f"{operation_name}: Attempt {attempt + 1} failed ({e}). "
                f"Retrying in {delay:.1f}s..."
            )
            await asyncio.sleep(delay)

    raise RetryExhaustedError(f"Failed after {max_retries + 1} attempts")


def _format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


class FinancialDatasetsClient:
    """
    Client for the Financial Datasets REST API.

    Implements FinancialDataSource. Every successful response is cached by
    request; errors are raised and never cached.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        cache: ResponseCache | None = None,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key if api_key is not None else os.environ.get("FINANCIAL_DATASETS_API_KEY", "")
        self.base_url = (base_url or BASE_URL).rstrip("/")
        self.cache = cache if cache is not None else ResponseCache()
        self.session = session if session is not None else requests.Session()

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform one HTTP request, raising FinancialDataError on non-2xx."""
        response = self.session.request(
            method,
            f"{self.base_url}{endpoint}",
            params=params,
            json=body,
            headers={
                "X-API-KEY": self.api_key,
                "Content-Type": "application/json",
            },
            timeout=_request_timeout,
        )
        if not response.ok:
            try:
                error_body = response.json()
            except ValueError:
                error_body = None
            raise FinancialDataError(
                f"API request failed: {response.status_code} {response.reason}",
                status=response.status_code,
                body=error_body,
            )
        return response.json()

    async def _fetch(
        self,
        operation: str,
        ticker: str,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Serve from cache or fetch with bounded concurrency and retries."""
        if shutdown_event.is_set():
            raise ServerShuttingDownError("Server is shutting down")

        key = compose_cache_key(operation, {"params": params or {}, "body": body or {}})
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("%s(%s): cache hit", operation, ticker)
            return cached

        def _call() -> dict[str, Any]:
            return self._request(method, endpoint, params=params, body=body)

        async with _fetch_semaphore:
            payload = await _retry_with_backoff(f"{operation}({ticker})", _call)

        self.cache.store(key, payload)
        return payload

    async def get_prices(self, ticker: str, start_date: date, end_date: date) -> list[PriceBar]:
        """Daily bars between the dates, chronologically ascending."""
        payload = await self._fetch(
            "getPrices",
            ticker,
            "GET",
            "/prices",
            params={
                "ticker": ticker,
                "interval": "day",
                "interval_multiplier": 1,
                "start_date": _format_date(start_date),
                "end_date": _format_date(end_date),
            },
        )
        return [PriceBar.from_dict(row) for row in payload.get("prices") or []]

    async def get_financial_metrics(
        self, ticker: str, period: Period, limit: int = 1
    ) -> list[FinancialMetrics]:
        payload = await self._fetch(
            "getFinancialMetrics",
            ticker,
            "GET",
            "/financial-metrics",
            params={"ticker": ticker, "period": period, "limit": limit},
        )
        return [FinancialMetrics.from_dict(row) for row in payload.get("financial_metrics") or []]

    async def get_insider_trades(self, ticker: str, limit: int = 1000) -> list[InsiderTrade]:
        payload = await self._fetch(
            "getInsiderTrades",
            ticker,
            "GET",
            "/insider-trades",
            params={"ticker": ticker, "limit": limit},
        )
        return [InsiderTrade.from_dict(row) for row in payload.get("insider_trades") or []]

    async def get_company_news(self, ticker: str, limit: int = 100) -> list[NewsItem]:
        payload = await self._fetch(
            "getCompanyNews",
            ticker,
            "GET",
            "/news",
            params={"ticker": ticker, "limit": limit},
        )
        return [NewsItem.from_dict(row) for row in payload.get("news") or []]

    async def search_line_items(
        self,
        ticker: str,
        line_items: list[str],
        period: Period,
        limit: int = 2,
    ) -> list[LineItem]:
        """Statement line items for one ticker, most recent report period first."""
        payload = await self._fetch(
            "searchByLineItems",
            ticker,
            "POST",
            "/financials/search/line-items",
            body={
                "line_items": list(line_items),
                "tickers": [ticker],
                "limit": limit,
                "period": period,
            },
        )
        items = [
            LineItem.from_dict(row)
            for row in payload.get("search_results") or []
            if row.get("ticker") in (None, ticker)
        ]
        return sorted(items, key=lambda item: item.report_period or "", reverse=True)

    def close(self) -> None:
        self.session.close()
        self.cache.close()


async def shutdown_executor() -> None:
    """Cleanup on server shutdown."""
    shutdown_event.set()
    _executor.shutdown(wait=False, cancel_futures=True)
