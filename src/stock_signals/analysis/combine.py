"""Signal combination rules shared by the analyzers."""

import logging
from collections import Counter
from collections.abc import Iterable, Mapping

from stock_signals.models import Signal, StrategySignal

logger = logging.getLogger(__name__)

# Final score must clear this band to leave neutral
COMBINED_SCORE_THRESHOLD = 0.2
GAP_THRESHOLD = 0.15


def weighted_signal_combination(
    signals: Mapping[str, StrategySignal],
    weights: Mapping[str, float],
) -> tuple[Signal, float]:
    """
    Combine sub-strategy signals into a single weighted signal.

    Each strategy contributes numeric(signal) * weight * confidence to the
    weighted sum and weight * confidence to the denominator. Weights are
    used as given, never renormalized.

    Args:
        signals: Sub-strategy outcomes keyed by strategy name
        weights: Weight per strategy name

    Returns:
        Tuple of (signal, |final_score|) where final_score is in [-1, 1]
    """
    weighted_sum = 0.0
    total_confidence = 0.0

    for name, sub in signals.items():
        weight = weights[name]
        weighted_sum += sub.signal.numeric * weight * sub.confidence
        total_confidence += weight * sub.confidence

    final_score = weighted_sum / total_confidence if total_confidence > 0 else 0.0
    logger.debug(
        "Weighted combination: sum=%.6f total_confidence=%.6f score=%.6f",
        weighted_sum,
        total_confidence,
        final_score,
    )

    if final_score > COMBINED_SCORE_THRESHOLD:
        signal = Signal.BULLISH
    elif final_score < -COMBINED_SCORE_THRESHOLD:
        signal = Signal.BEARISH
    else:
        signal = Signal.NEUTRAL

    return signal, abs(final_score)


def majority_signal(signals: Iterable[Signal]) -> tuple[Signal, Counter]:
    """
    Pick the majority between bullish and bearish votes.

    Neutral votes are counted but never win; a bullish/bearish tie is neutral.

    Returns:
        Tuple of (signal, vote counts)
    """
    counts: Counter = Counter({Signal.BULLISH: 0, Signal.BEARISH: 0, Signal.NEUTRAL: 0})
    counts.update(signals)

    if counts[Signal.BULLISH] > counts[Signal.BEARISH]:
        return Signal.BULLISH, counts
    if counts[Signal.BEARISH] > counts[Signal.BULLISH]:
        return Signal.BEARISH, counts
    return Signal.NEUTRAL, counts


def signal_from_score(score: int) -> Signal:
    """Map a 0-3 criteria count: 2+ bullish, 0 bearish, 1 neutral."""
    if score >= 2:
        return Signal.BULLISH
    if score == 0:
        return Signal.BEARISH
    return Signal.NEUTRAL


def classify_gap(gap: float, threshold: float = GAP_THRESHOLD) -> Signal:
    """Classify a relative valuation gap against a symmetric threshold."""
    if gap > threshold:
        return Signal.BULLISH
    if gap < -threshold:
        return Signal.BEARISH
    return Signal.NEUTRAL
