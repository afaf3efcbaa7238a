"""Exception types raised by analyzers and the data adapter."""

from typing import Any


class StockSignalsError(Exception):
    """Base class for all package errors."""

    pass


class MissingDataError(StockSignalsError):
    """Raised when an analyzer cannot run on the data it was given."""

    def __init__(self, message: str, ticker: str | None = None):
        super().__init__(message)
        self.ticker = ticker


class FinancialDataError(StockSignalsError):
    """Raised when the financial data API answers with a non-2xx status."""

    def __init__(self, message: str, status: int | None = None, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body


class RetryExhaustedError(StockSignalsError):
    """Raised when a data request fails after all retries."""

    def __init__(self, message: str, last_error: Exception | None = None):
        super().__init__(message)
        self.last_error = last_error


class ServerShuttingDownError(StockSignalsError):
    """Raised when server is shutting down."""

    pass
