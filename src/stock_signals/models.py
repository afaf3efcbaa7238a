"""Typed records consumed and produced by the analyzers."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any

from stock_signals.utils.formatting import to_confidence
from stock_signals.utils.normalize import sanitize_nan_inf


class Signal(str, Enum):
    """Categorical investment signal."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"

    @property
    def numeric(self) -> int:
        """Numeric encoding used during signal combination."""
        return SIGNAL_VALUES[self]


SIGNAL_VALUES: dict[Signal, int] = {
    Signal.BULLISH: 1,
    Signal.NEUTRAL: 0,
    Signal.BEARISH: -1,
}


def _to_float(value: Any) -> float | None:
    """Coerce an upstream numeric field, None for missing or non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(num):
        return None
    return num


def _pick(cls: type, payload: Mapping[str, Any], numeric: set[str]) -> dict[str, Any]:
    """Select the dataclass fields present in payload, coercing numeric ones."""
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in payload:
            continue
        value = payload[f.name]
        kwargs[f.name] = _to_float(value) if f.name in numeric else value
    return kwargs


# ============================================================================
# INPUTS
# ============================================================================


@dataclass(frozen=True)
class PriceBar:
    """One daily OHLCV bar."""

    open: float
    high: float
    low: float
    close: float
    volume: float
    time: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> PriceBar:
        return cls(
            open=float(payload["open"]),
            high=float(payload["high"]),
            low=float(payload["low"]),
            close=float(payload["close"]),
            volume=float(payload.get("volume") or 0.0),
            time=payload.get("time"),
        )


@dataclass(frozen=True)
class PriceFrame:
    """Parallel OHLCV sequences, chronologically ascending."""

    open: tuple[float, ...]
    high: tuple[float, ...]
    low: tuple[float, ...]
    close: tuple[float, ...]
    volume: tuple[float, ...]

    def __post_init__(self) -> None:
        lengths = {len(self.open), len(self.high), len(self.low), len(self.close), len(self.volume)}
        if len(lengths) != 1:
            raise ValueError(f"OHLCV sequences must have equal length, got {sorted(lengths)}")

    def __len__(self) -> int:
        return len(self.close)

    @classmethod
    def from_bars(cls, bars: Iterable[PriceBar]) -> PriceFrame:
        bars = list(bars)
        return cls(
            open=tuple(float(b.open) for b in bars),
            high=tuple(float(b.high) for b in bars),
            low=tuple(float(b.low) for b in bars),
            close=tuple(float(b.close) for b in bars),
            volume=tuple(float(b.volume) for b in bars),
        )


_METRIC_FIELDS = {
    "market_cap",
    "enterprise_value",
    "price_to_earnings_ratio",
    "price_to_book_ratio",
    "price_to_sales_ratio",
    "enterprise_value_to_ebitda_ratio",
    "enterprise_value_to_revenue_ratio",
    "free_cash_flow_yield",
    "peg_ratio",
    "gross_margin",
    "operating_margin",
    "net_margin",
    "return_on_equity",
    "return_on_assets",
    "return_on_invested_capital",
    "asset_turnover",
    "inventory_turnover",
    "receivables_turnover",
    "days_sales_outstanding",
    "operating_cycle",
    "working_capital_turnover",
    "current_ratio",
    "quick_ratio",
    "cash_ratio",
    "operating_cash_flow_ratio",
    "debt_to_equity",
    "debt_to_assets",
    "interest_coverage",
    "revenue_growth",
    "earnings_growth",
    "book_value_growth",
    "earnings_per_share_growth",
    "free_cash_flow_growth",
    "operating_income_growth",
    "ebitda_growth",
    "payout_ratio",
    "earnings_per_share",
    "book_value_per_share",
    "free_cash_flow_per_share",
}


@dataclass(frozen=True)
class FinancialMetrics:
    """Financial ratios for one reporting period. None means not reported."""

    ticker: str | None = None
    report_period: str | None = None
    period: str | None = None
    market_cap: float | None = None
    enterprise_value: float | None = None
    price_to_earnings_ratio: float | None = None
    price_to_book_ratio: float | None = None
    price_to_sales_ratio: float | None = None
    enterprise_value_to_ebitda_ratio: float | None = None
    enterprise_value_to_revenue_ratio: float | None = None
    free_cash_flow_yield: float | None = None
    peg_ratio: float | None = None
    gross_margin: float | None = None
    operating_margin: float | None = None
    net_margin: float | None = None
    return_on_equity: float | None = None
    return_on_assets: float | None = None
    return_on_invested_capital: float | None = None
    asset_turnover: float | None = None
    inventory_turnover: float | None = None
    receivables_turnover: float | None = None
    days_sales_outstanding: float | None = None
    operating_cycle: float | None = None
    working_capital_turnover: float | None = None
    current_ratio: float | None = None
    quick_ratio: float | None = None
    cash_ratio: float | None = None
    operating_cash_flow_ratio: float | None = None
    debt_to_equity: float | None = None
    debt_to_assets: float | None = None
    interest_coverage: float | None = None
    revenue_growth: float | None = None
    earnings_growth: float | None = None
    book_value_growth: float | None = None
    earnings_per_share_growth: float | None = None
    free_cash_flow_growth: float | None = None
    operating_income_growth: float | None = None
    ebitda_growth: float | None = None
    payout_ratio: float | None = None
    earnings_per_share: float | None = None
    book_value_per_share: float | None = None
    free_cash_flow_per_share: float | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> FinancialMetrics:
        return cls(**_pick(cls, payload, _METRIC_FIELDS))


_LINE_ITEM_FIELDS = {
    "free_cash_flow",
    "net_income",
    "depreciation_and_amortization",
    "capital_expenditure",
    "working_capital",
    "revenue",
    "net_cash_flow_from_operations",
    "ebit",
    "income_tax_expense",
    "total_debt",
    "cash_and_equivalents",
    "shareholders_equity",
}


@dataclass(frozen=True)
class LineItem:
    """Financial statement fields for one ticker and report period."""

    ticker: str | None = None
    report_period: str | None = None
    period: str | None = None
    currency: str | None = None
    free_cash_flow: float | None = None
    net_income: float | None = None
    depreciation_and_amortization: float | None = None
    capital_expenditure: float | None = None
    working_capital: float | None = None
    revenue: float | None = None
    net_cash_flow_from_operations: float | None = None
    ebit: float | None = None
    income_tax_expense: float | None = None
    total_debt: float | None = None
    cash_and_equivalents: float | None = None
    shareholders_equity: float | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> LineItem:
        return cls(**_pick(cls, payload, _LINE_ITEM_FIELDS))


@dataclass(frozen=True)
class InsiderTrade:
    """Insider transaction. Negative share counts are sales."""

    transaction_shares: float | None = None
    ticker: str | None = None
    name: str | None = None
    title: str | None = None
    transaction_date: str | None = None
    transaction_value: float | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> InsiderTrade:
        return cls(**_pick(cls, payload, {"transaction_shares", "transaction_value"}))


@dataclass(frozen=True)
class NewsItem:
    """News article with upstream-classified sentiment."""

    sentiment: str
    ticker: str | None = None
    title: str | None = None
    source: str | None = None
    date: str | None = None
    url: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> NewsItem:
        kwargs = _pick(cls, payload, set())
        kwargs.setdefault("sentiment", "neutral")
        return cls(**kwargs)


# ============================================================================
# RESULTS
# ============================================================================


@dataclass(frozen=True)
class StrategySignal:
    """One technical sub-strategy outcome. Confidence is a 0-1 ratio."""

    signal: Signal
    confidence: float
    metrics: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class TechnicalResult:
    """Combined technical verdict plus the four sub-strategies."""

    signal: Signal
    confidence: int
    strategy_signals: dict[str, StrategySignal]

    def to_dict(self) -> dict[str, Any]:
        return sanitize_nan_inf(
            {
                "signal": self.signal,
                "confidence": self.confidence,
                "strategy_signals": {
                    name: {
                        "signal": sub.signal,
                        "confidence": to_confidence(sub.confidence),
                        "metrics": dict(sub.metrics),
                    }
                    for name, sub in self.strategy_signals.items()
                },
            }
        )


@dataclass(frozen=True)
class SubAnalysis:
    """Signal with a human-readable detail string."""

    signal: Signal
    details: str


@dataclass(frozen=True)
class AnalysisResult:
    """Signal, integer confidence 0-100 and structured or plain reasoning."""

    signal: Signal
    confidence: int
    reasoning: dict[str, SubAnalysis] | str

    def to_dict(self) -> dict[str, Any]:
        reasoning: Any
        if isinstance(self.reasoning, str):
            reasoning = self.reasoning
        else:
            reasoning = {key: asdict(sub) for key, sub in self.reasoning.items()}
        return sanitize_nan_inf(
            {
                "signal": self.signal,
                "confidence": self.confidence,
                "reasoning": reasoning,
            }
        )


@dataclass(frozen=True)
class CompanyMetrics:
    """Screener metrics derived from two annual statement periods."""

    ticker: str | None
    revenue_growth_percentage: float | None
    earnings_growth_percentage: float | None
    fcf_earnings_ratio: float | None
    roic: float | None
    net_debt_to_fcff: float | None
    debt_to_equity: float | None

    def to_dict(self) -> dict[str, Any]:
        return sanitize_nan_inf(asdict(self))
