"""Pure analyzers: typed records in, signal records out."""

from stock_signals.analysis.company_metrics import calculate_company_metrics
from stock_signals.analysis.fundamentals import analyze_fundamentals
from stock_signals.analysis.sentiment import analyze_sentiment
from stock_signals.analysis.technicals import analyze_technicals
from stock_signals.analysis.valuation import analyze_valuation

__all__ = [
    "analyze_technicals",
    "analyze_fundamentals",
    "analyze_sentiment",
    "analyze_valuation",
    "calculate_company_metrics",
]
