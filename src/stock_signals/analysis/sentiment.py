"""Sentiment analysis from insider trading activity and news tone."""

import logging
import math
from collections.abc import Iterable, Sequence

from stock_signals.models import AnalysisResult, InsiderTrade, NewsItem, Signal
from stock_signals.utils.formatting import to_confidence

logger = logging.getLogger(__name__)

INSIDER_WEIGHT = 0.3
NEWS_WEIGHT = 0.7

NEWS_SIGNALS = {
    "positive": Signal.BULLISH,
    "negative": Signal.BEARISH,
}


def insider_signals(trades: Iterable[InsiderTrade]) -> list[Signal]:
    """One vote per trade with a share count: sales bearish, everything else bullish."""
    signals = []
    for trade in trades:
        shares = trade.transaction_shares
        if shares is None or math.isnan(shares):
            continue
        signals.append(Signal.BEARISH if shares < 0 else Signal.BULLISH)
    return signals


def news_signals(news: Iterable[NewsItem]) -> list[Signal]:
    """One vote per article; anything not positive or negative is neutral."""
    return [NEWS_SIGNALS.get(item.sentiment, Signal.NEUTRAL) for item in news]


def analyze_sentiment(
    insider_trades: Sequence[InsiderTrade],
    news: Sequence[NewsItem],
) -> AnalysisResult:
    """
    Weighted tally of insider and news votes.

    Insider votes weigh 0.3 and news votes 0.7. Neutral news counts toward
    the total but toward neither side.

    Args:
        insider_trades: Recent insider transactions
        news: Recent articles with upstream-classified sentiment

    Returns:
        AnalysisResult with a plain-text reasoning string
    """
    insider = insider_signals(insider_trades)
    articles = news_signals(news)

    bullish = INSIDER_WEIGHT * insider.count(Signal.BULLISH) + NEWS_WEIGHT * articles.count(
        Signal.BULLISH
    )
    bearish = INSIDER_WEIGHT * insider.count(Signal.BEARISH) + NEWS_WEIGHT * articles.count(
        Signal.BEARISH
    )
    total = INSIDER_WEIGHT * len(insider) + NEWS_WEIGHT * len(articles)

    if bullish > bearish:
        signal = Signal.BULLISH
    elif bearish > bullish:
        signal = Signal.BEARISH
    else:
        signal = Signal.NEUTRAL

    confidence = to_confidence(max(bullish, bearish) / total) if total > 0 else 0
    logger.debug(
        "Sentiment: %d insider votes, %d news votes -> %s", len(insider), len(articles), signal.value
    )

    return AnalysisResult(
        signal=signal,
        confidence=confidence,
        reasoning=f"Weighted Bullish signals: {bullish:.1f}, Weighted Bearish signals: {bearish:.1f}",
    )
