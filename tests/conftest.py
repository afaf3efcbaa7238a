"""Pytest configuration and fixtures."""

from datetime import date
from typing import Any

import pandas as pd
import pytest

from stock_signals.models import FinancialMetrics, InsiderTrade, LineItem, NewsItem, PriceBar


@pytest.fixture
def sample_price_series() -> pd.Series:
    """Sample price series for indicator testing."""
    return pd.Series(
        [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5,
         107.0, 108.0, 107.5, 109.0, 110.0, 109.5, 111.0, 112.0, 111.5, 113.0,
         114.0, 113.5, 115.0, 116.0, 115.5, 117.0, 118.0, 117.5, 119.0, 120.0]
    )


@pytest.fixture
def flat_bars() -> list[PriceBar]:
    """130 identical daily bars."""
    return [
        PriceBar(open=100.0, high=100.0, low=100.0, close=100.0, volume=1_000_000.0)
        for _ in range(130)
    ]


@pytest.fixture
def bullish_metrics() -> FinancialMetrics:
    """Strong profitability, growth and health at cheap multiples."""
    return FinancialMetrics(
        ticker="AAPL",
        return_on_equity=0.20,
        net_margin=0.25,
        operating_margin=0.20,
        revenue_growth=0.15,
        earnings_growth=0.15,
        book_value_growth=0.15,
        current_ratio=2.0,
        debt_to_equity=0.3,
        free_cash_flow_per_share=5.0,
        earnings_per_share=5.0,
        price_to_earnings_ratio=10.0,
        price_to_book_ratio=1.0,
        price_to_sales_ratio=1.0,
    )


@pytest.fixture
def valuation_line_items() -> list[LineItem]:
    """Two TTM periods, most recent first."""
    return [
        LineItem(
            ticker="AAPL",
            report_period="2024-09-30",
            free_cash_flow=100.0,
            net_income=100.0,
            depreciation_and_amortization=20.0,
            capital_expenditure=10.0,
            working_capital=50.0,
        ),
        LineItem(
            ticker="AAPL",
            report_period="2024-06-30",
            free_cash_flow=90.0,
            net_income=90.0,
            depreciation_and_amortization=18.0,
            capital_expenditure=9.0,
            working_capital=40.0,
        ),
    ]


class FakeSource:
    """In-memory FinancialDataSource recording every call."""

    def __init__(
        self,
        prices: list[PriceBar] | None = None,
        metrics: list[FinancialMetrics] | None = None,
        trades: list[InsiderTrade] | None = None,
        news: list[NewsItem] | None = None,
        line_items: list[LineItem] | None = None,
        fail: dict[str, Exception] | None = None,
    ):
        self.prices = prices or []
        self.metrics = metrics or []
        self.trades = trades or []
        self.news = news or []
        self.line_items = line_items or []
        self.fail = fail or {}
        self.calls: list[tuple[str, Any]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.fail:
            raise self.fail[name]

    async def get_prices(self, ticker: str, start_date: date, end_date: date) -> list[PriceBar]:
        self._record("get_prices", ticker, start_date, end_date)
        return self.prices

    async def get_financial_metrics(self, ticker: str, period: str, limit: int = 1) -> list[FinancialMetrics]:
        self._record("get_financial_metrics", ticker, period, limit)
        return self.metrics[:limit]

    async def get_insider_trades(self, ticker: str, limit: int = 1000) -> list[InsiderTrade]:
        self._record("get_insider_trades", ticker, limit)
        return self.trades

    async def get_company_news(self, ticker: str, limit: int = 100) -> list[NewsItem]:
        self._record("get_company_news", ticker, limit)
        return self.news

    async def search_line_items(
        self, ticker: str, line_items: list[str], period: str, limit: int = 2
    ) -> list[LineItem]:
        self._record("search_line_items", ticker, tuple(line_items), period, limit)
        return self.line_items[:limit]


@pytest.fixture
def fake_source_factory():
    """Build a FakeSource with the given data."""
    return FakeSource
