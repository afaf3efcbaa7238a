"""Valuation analysis: discounted cash flow and owner earnings versus market cap."""

import logging
from collections.abc import Sequence

from stock_signals.analysis.combine import classify_gap
from stock_signals.exceptions import MissingDataError
from stock_signals.models import AnalysisResult, FinancialMetrics, LineItem, SubAnalysis
from stock_signals.utils.formatting import format_currency, to_confidence

logger = logging.getLogger(__name__)

DEFAULT_GROWTH_RATE = 0.05
DCF_DISCOUNT_RATE = 0.10
DCF_TERMINAL_GROWTH_RATE = 0.03
OWNER_EARNINGS_REQUIRED_RETURN = 0.15
OWNER_EARNINGS_MAX_TERMINAL_GROWTH = 0.03
MARGIN_OF_SAFETY = 0.25
PROJECTION_YEARS = 5

VALUATION_LINE_ITEMS = (
    "free_cash_flow",
    "net_income",
    "depreciation_and_amortization",
    "capital_expenditure",
    "working_capital",
)


def calculate_owner_earnings_value(
    net_income: float,
    depreciation: float,
    capex: float,
    working_capital_change: float,
    growth_rate: float = DEFAULT_GROWTH_RATE,
    required_return: float = OWNER_EARNINGS_REQUIRED_RETURN,
    margin_of_safety: float = MARGIN_OF_SAFETY,
    num_years: int = PROJECTION_YEARS,
) -> float:
    """
    Intrinsic value from Buffett-style owner earnings.

    Owner earnings = net income + D&A - capex - change in working capital.
    Projected years are discounted at the required return. The terminal value
    grows the last discounted year at min(growth, 3%) and is discounted again
    over the full horizon. The sum is cut by the margin of safety.

    Returns:
        Intrinsic value, 0.0 when owner earnings are not positive
    """
    owner_earnings = net_income + depreciation - capex - working_capital_change
    if owner_earnings <= 0:
        return 0.0

    future_values = [
        owner_earnings * (1 + growth_rate) ** year / (1 + required_return) ** year
        for year in range(1, num_years + 1)
    ]

    terminal_growth = min(growth_rate, OWNER_EARNINGS_MAX_TERMINAL_GROWTH)
    terminal_value = future_values[-1] * (1 + terminal_growth) / (required_return - terminal_growth)
    terminal_discounted = terminal_value / (1 + required_return) ** num_years

    return (sum(future_values) + terminal_discounted) * (1 - margin_of_safety)


def calculate_intrinsic_value(
    free_cash_flow: float,
    growth_rate: float = DEFAULT_GROWTH_RATE,
    discount_rate: float = DCF_DISCOUNT_RATE,
    terminal_growth_rate: float = DCF_TERMINAL_GROWTH_RATE,
    num_years: int = PROJECTION_YEARS,
) -> float:
    """
    Discounted cash flow value of the current free cash flow.

    Year i (0-based) projects fcf * (1 + g)^i and is discounted by
    (1 + r)^(i + 1). The Gordon terminal value is taken off the last
    undiscounted cash flow and discounted by (1 + r)^num_years.
    """
    cash_flows = [free_cash_flow * (1 + growth_rate) ** i for i in range(num_years)]
    present_values = [cf / (1 + discount_rate) ** (i + 1) for i, cf in enumerate(cash_flows)]

    terminal_value = cash_flows[-1] * (1 + terminal_growth_rate) / (discount_rate - terminal_growth_rate)
    terminal_present_value = terminal_value / (1 + discount_rate) ** num_years

    return sum(present_values) + terminal_present_value


def _gap(value: float, market_cap: float | None) -> float:
    """Relative gap of an intrinsic value over market cap, 0 without a market cap."""
    if not market_cap:
        return 0.0
    return (value - market_cap) / market_cap


def _field(item: LineItem, name: str) -> float:
    value = getattr(item, name)
    return value if value is not None else 0.0


def analyze_valuation(
    metrics: FinancialMetrics | None,
    line_items: Sequence[LineItem],
) -> AnalysisResult:
    """
    Compare DCF and owner-earnings valuations against market cap.

    Args:
        metrics: Most recent TTM metrics snapshot (market cap, earnings growth)
        line_items: Statement periods, most recent first; the first two are used

    Returns:
        AnalysisResult with dcf_analysis and owner_earnings_analysis reasoning

    Raises:
        MissingDataError: If metrics are missing or fewer than two periods exist
    """
    if metrics is None:
        raise MissingDataError("No financial metrics found")
    if len(line_items) < 2:
        raise MissingDataError("Not enough financial data", ticker=metrics.ticker)

    current, previous = line_items[0], line_items[1]
    growth_rate = metrics.earnings_growth if metrics.earnings_growth is not None else DEFAULT_GROWTH_RATE

    working_capital_change = _field(current, "working_capital") - _field(previous, "working_capital")

    owner_earnings_value = calculate_owner_earnings_value(
        net_income=_field(current, "net_income"),
        depreciation=_field(current, "depreciation_and_amortization"),
        capex=_field(current, "capital_expenditure"),
        working_capital_change=working_capital_change,
        growth_rate=growth_rate,
    )
    dcf_value = calculate_intrinsic_value(
        free_cash_flow=_field(current, "free_cash_flow"),
        growth_rate=growth_rate,
    )

    market_cap = metrics.market_cap
    dcf_gap = _gap(dcf_value, market_cap)
    owner_earnings_gap = _gap(owner_earnings_value, market_cap)
    valuation_gap = (dcf_gap + owner_earnings_gap) / 2

    logger.debug(
        "Valuation for %s: dcf_gap=%.4f owner_earnings_gap=%.4f",
        metrics.ticker,
        dcf_gap,
        owner_earnings_gap,
    )

    market_cap_text = format_currency(market_cap or 0.0)
    return AnalysisResult(
        signal=classify_gap(valuation_gap),
        confidence=to_confidence(abs(valuation_gap)),
        reasoning={
            "dcf_analysis": SubAnalysis(
                signal=classify_gap(dcf_gap),
                details=(
                    f"Intrinsic Value: {format_currency(dcf_value)}, "
                    f"Market Cap: {market_cap_text}, Gap: {dcf_gap * 100:.1f}%"
                ),
            ),
            "owner_earnings_analysis": SubAnalysis(
                signal=classify_gap(owner_earnings_gap),
                details=(
                    f"Owner Earnings Value: {format_currency(owner_earnings_value)}, "
                    f"Market Cap: {market_cap_text}, Gap: {owner_earnings_gap * 100:.1f}%"
                ),
            ),
        },
    )
