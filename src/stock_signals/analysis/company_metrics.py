"""Screener metrics derived from two consecutive annual statement periods."""

from stock_signals.models import CompanyMetrics, LineItem
from stock_signals.utils.validators import is_present

COMPANY_METRIC_LINE_ITEMS = (
    "revenue",
    "net_income",
    "net_cash_flow_from_operations",
    "capital_expenditure",
    "ebit",
    "income_tax_expense",
    "total_debt",
    "cash_and_equivalents",
    "shareholders_equity",
)


def _div(numerator: float | None, denominator: float | None) -> float | None:
    """Guarded division: None when either side is absent or the denominator is 0."""
    if numerator is None or not is_present(denominator):
        return None
    return numerator / denominator


def _sub(a: float | None, b: float | None) -> float | None:
    if a is None or b is None:
        return None
    return a - b


def _pct(value: float | None) -> float | None:
    return value * 100 if value is not None else None


def _growth(current: float | None, previous: float | None) -> float | None:
    ratio = _div(current, previous)
    return (ratio - 1) * 100 if ratio is not None else None


def calculate_company_metrics(current: LineItem, previous: LineItem) -> CompanyMetrics:
    """
    Compute growth, cash conversion, return and leverage metrics.

    Free cash flow is operating cash flow minus capex and stands in for FCFF
    in the net debt ratio.

    Args:
        current: Most recent annual period
        previous: The annual period before it

    Returns:
        CompanyMetrics with None for any metric whose inputs are missing
    """
    fcf = _sub(current.net_cash_flow_from_operations, current.capital_expenditure)
    nopat = _sub(current.ebit, current.income_tax_expense)
    invested_capital = (
        current.total_debt + current.shareholders_equity
        if current.total_debt is not None and current.shareholders_equity is not None
        else None
    )
    net_debt = _sub(current.total_debt, current.cash_and_equivalents)

    return CompanyMetrics(
        ticker=current.ticker,
        revenue_growth_percentage=_growth(current.revenue, previous.revenue),
        earnings_growth_percentage=_growth(current.net_income, previous.net_income),
        fcf_earnings_ratio=_pct(_div(fcf, current.net_income)),
        roic=_pct(_div(nopat, invested_capital)),
        net_debt_to_fcff=_div(net_debt, fcf),
        debt_to_equity=_pct(_div(current.total_debt, current.shareholders_equity)),
    )
