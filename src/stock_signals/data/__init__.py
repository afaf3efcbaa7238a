"""Data layer for fetching and caching financial data."""

from stock_signals.data.cache import ResponseCache, compose_cache_key
from stock_signals.data.financial_datasets import FinancialDatasetsClient, shutdown_executor
from stock_signals.data.source import FinancialDataSource, Period

__all__ = [
    # Cache
    "ResponseCache",
    "compose_cache_key",
    # Client
    "FinancialDataSource",
    "FinancialDatasetsClient",
    "Period",
    "shutdown_executor",
]
