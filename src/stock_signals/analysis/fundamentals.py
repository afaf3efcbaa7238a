"""Fundamental analysis over a single trailing-twelve-month metrics snapshot.

Four scorers each count how many of three threshold criteria pass. An absent
metric never passes its criterion and is left out of the detail string.
"""

import logging
import operator
from collections.abc import Callable

from stock_signals.analysis.combine import majority_signal, signal_from_score
from stock_signals.exceptions import MissingDataError
from stock_signals.models import AnalysisResult, FinancialMetrics, Signal, SubAnalysis
from stock_signals.utils.formatting import format_percent, format_ratio, to_confidence
from stock_signals.utils.validators import check_rule, is_present

logger = logging.getLogger(__name__)


def _count(*checks: bool | None) -> int:
    """Count criteria that passed; None (metric absent) counts as not passed."""
    return sum(1 for check in checks if check is True)


def _details(*parts: tuple[str, float | None, Callable[[float], str]]) -> str:
    """Join 'label: value' parts, skipping metrics that are absent or zero."""
    return ", ".join(
        f"{label}: {fmt(value)}" for label, value, fmt in parts if is_present(value)
    )


def analyze_profitability(metrics: FinancialMetrics) -> SubAnalysis:
    """ROE > 15%, net margin > 20%, operating margin > 15%."""
    score = _count(
        check_rule(metrics.return_on_equity, 0.15, operator.gt),
        check_rule(metrics.net_margin, 0.20, operator.gt),
        check_rule(metrics.operating_margin, 0.15, operator.gt),
    )
    return SubAnalysis(
        signal=signal_from_score(score),
        details=_details(
            ("ROE", metrics.return_on_equity, format_percent),
            ("Net Margin", metrics.net_margin, format_percent),
            ("Op Margin", metrics.operating_margin, format_percent),
        ),
    )


def analyze_growth(metrics: FinancialMetrics) -> SubAnalysis:
    """Revenue, earnings and book value growth each > 10%."""
    score = _count(
        check_rule(metrics.revenue_growth, 0.10, operator.gt),
        check_rule(metrics.earnings_growth, 0.10, operator.gt),
        check_rule(metrics.book_value_growth, 0.10, operator.gt),
    )
    return SubAnalysis(
        signal=signal_from_score(score),
        details=_details(
            ("Revenue Growth", metrics.revenue_growth, format_percent),
            ("Earnings Growth", metrics.earnings_growth, format_percent),
        ),
    )


def analyze_financial_health(metrics: FinancialMetrics) -> SubAnalysis:
    """Current ratio > 1.5, D/E < 0.5, FCF per share > 80% of EPS."""
    fcf_ps = metrics.free_cash_flow_per_share
    eps = metrics.earnings_per_share
    # Both must be non-zero for the cash conversion check to count
    fcf_covers_eps = fcf_ps > eps * 0.8 if is_present(fcf_ps) and is_present(eps) else None

    score = _count(
        check_rule(metrics.current_ratio, 1.5, operator.gt),
        check_rule(metrics.debt_to_equity, 0.5, operator.lt),
        fcf_covers_eps,
    )
    return SubAnalysis(
        signal=signal_from_score(score),
        details=_details(
            ("Current Ratio", metrics.current_ratio, format_ratio),
            ("D/E", metrics.debt_to_equity, format_ratio),
        ),
    )


def analyze_price_ratios(metrics: FinancialMetrics) -> SubAnalysis:
    """Counts rich multiples: P/E > 25, P/B > 3, P/S > 5."""
    score = _count(
        check_rule(metrics.price_to_earnings_ratio, 25, operator.gt),
        check_rule(metrics.price_to_book_ratio, 3, operator.gt),
        check_rule(metrics.price_to_sales_ratio, 5, operator.gt),
    )
    return SubAnalysis(
        signal=signal_from_score(score),
        details=_details(
            ("P/E", metrics.price_to_earnings_ratio, format_ratio),
            ("P/B", metrics.price_to_book_ratio, format_ratio),
            ("P/S", metrics.price_to_sales_ratio, format_ratio),
        ),
    )


def analyze_fundamentals(metrics: FinancialMetrics | None) -> AnalysisResult:
    """
    Score profitability, growth, financial health and price ratios.

    The overall signal is the bullish/bearish majority across the four
    scorers; confidence is the winning side's share of the four votes.

    Args:
        metrics: Most recent TTM metrics snapshot

    Returns:
        AnalysisResult with per-scorer reasoning

    Raises:
        MissingDataError: If no metrics snapshot is available
    """
    if metrics is None:
        raise MissingDataError("No financial metrics found")

    analyses = {
        "profitability_signal": analyze_profitability(metrics),
        "growth_signal": analyze_growth(metrics),
        "financial_health_signal": analyze_financial_health(metrics),
        "price_ratios_signal": analyze_price_ratios(metrics),
    }

    signal, counts = majority_signal(sub.signal for sub in analyses.values())
    winning_votes = max(counts[Signal.BULLISH], counts[Signal.BEARISH])
    logger.debug("Fundamentals for %s: %s %s", metrics.ticker, signal.value, dict(counts))

    return AnalysisResult(
        signal=signal,
        confidence=to_confidence(winning_votes / len(analyses)),
        reasoning=analyses,
    )
