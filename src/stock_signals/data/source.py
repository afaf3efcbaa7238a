"""Data-fetch boundary consumed by the orchestrator."""

from datetime import date
from typing import Literal, Protocol

from stock_signals.models import FinancialMetrics, InsiderTrade, LineItem, NewsItem, PriceBar

Period = Literal["annual", "quarterly", "ttm"]


class FinancialDataSource(Protocol):
    """
    Per-ticker financial data provider.

    Implementations return already-parsed records. Analyzers never see this
    interface; only the orchestrator in tools.analyze does.
    """

    async def get_prices(self, ticker: str, start_date: date, end_date: date) -> list[PriceBar]:
        """Daily bars between the dates, chronologically ascending."""
        ...

    async def get_financial_metrics(
        self, ticker: str, period: Period, limit: int = 1
    ) -> list[FinancialMetrics]:
        """Metrics snapshots, most recent first."""
        ...

    async def get_insider_trades(self, ticker: str, limit: int = 1000) -> list[InsiderTrade]:
        ...

    async def get_company_news(self, ticker: str, limit: int = 100) -> list[NewsItem]:
        ...

    async def search_line_items(
        self,
        ticker: str,
        line_items: list[str],
        period: Period,
        limit: int = 2,
    ) -> list[LineItem]:
        """Statement line items, sorted by report period descending."""
        ...
