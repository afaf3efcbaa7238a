"""Tests for the technical analyzer."""

import math

from stock_signals.analysis.technicals import (
    NO_PRICE_DATA_ERROR,
    STRATEGY_WEIGHTS,
    analyze_technicals,
    calculate_mean_reversion_signals,
    calculate_momentum_signals,
    calculate_volatility_signals,
)
from stock_signals.models import PriceBar, PriceFrame, Signal, TechnicalResult


def _trend_bars(step: float, count: int = 130) -> list[PriceBar]:
    """Geometric trend with rising volume."""
    bars = []
    for i in range(count):
        close = 100.0 * step**i
        bars.append(
            PriceBar(
                open=close,
                high=close * 1.01,
                low=close * 0.99,
                close=close,
                volume=1_000_000.0 + 10_000.0 * i,
            )
        )
    return bars


class TestAnalyzeTechnicals:
    """End-to-end technical analysis."""

    def test_empty_prices_soft_error(self) -> None:
        """Empty input returns a sentinel dict rather than raising."""
        assert analyze_technicals([]) == {"error": NO_PRICE_DATA_ERROR}

    def test_flat_prices_all_neutral(self, flat_bars: list[PriceBar]) -> None:
        result = analyze_technicals(flat_bars)

        assert isinstance(result, TechnicalResult)
        assert result.signal == Signal.NEUTRAL
        assert result.confidence == 0
        for name, sub in result.strategy_signals.items():
            assert sub.signal == Signal.NEUTRAL, name
            assert sub.confidence == 0.5

    def test_flat_prices_serialization(self, flat_bars: list[PriceBar]) -> None:
        data = analyze_technicals(flat_bars).to_dict()

        assert data["signal"] == "neutral"
        assert set(data["strategy_signals"]) == set(STRATEGY_WEIGHTS)
        assert data["strategy_signals"]["momentum"]["confidence"] == 50
        assert set(data["strategy_signals"]["volatility"]["metrics"]) == {
            "historical_volatility",
            "volatility_regime",
            "volatility_z_score",
            "atr_ratio",
        }

    def test_accepts_price_frame(self, flat_bars: list[PriceBar]) -> None:
        result = analyze_technicals(PriceFrame.from_bars(flat_bars))

        assert result.signal == Signal.NEUTRAL

    def test_uptrend_bullish(self) -> None:
        result = analyze_technicals(_trend_bars(1.01))

        assert result.strategy_signals["trend_following"].signal == Signal.BULLISH
        assert result.strategy_signals["momentum"].signal == Signal.BULLISH
        assert result.signal == Signal.BULLISH
        assert 0 < result.confidence <= 100

    def test_downtrend_bearish(self) -> None:
        result = analyze_technicals(_trend_bars(0.99))

        assert result.strategy_signals["trend_following"].signal == Signal.BEARISH
        assert result.strategy_signals["momentum"].signal == Signal.BEARISH
        assert result.signal == Signal.BEARISH

    def test_idempotent(self) -> None:
        bars = _trend_bars(1.005)

        assert analyze_technicals(bars).to_dict() == analyze_technicals(bars).to_dict()

    def test_short_history_does_not_raise(self) -> None:
        """Windows longer than the history leave metrics as null."""
        result = analyze_technicals(_trend_bars(1.01, count=10))
        data = result.to_dict()

        assert data["strategy_signals"]["mean_reversion"]["metrics"]["z_score"] is None
        assert data["strategy_signals"]["momentum"]["metrics"]["momentum_6m"] is None


class TestMeanReversion:
    """Mean reversion sub-signal."""

    def test_sharp_drop_is_bullish(self) -> None:
        closes = [100.0 + (i % 2) for i in range(60)] + [90.0]
        frame = PriceFrame(
            open=tuple(closes),
            high=tuple(closes),
            low=tuple(closes),
            close=tuple(closes),
            volume=tuple([1_000_000.0] * len(closes)),
        )

        result = calculate_mean_reversion_signals(frame)

        assert result.signal == Signal.BULLISH
        assert result.metrics["z_score"] < -2
        assert result.metrics["price_vs_bb"] < 0.2
        assert result.confidence == 1.0


def _alternating(count: int, step: float) -> list[float]:
    """Closes bouncing between 100 and 100 + step."""
    return [100.0 + step * (i % 2) for i in range(count)]


def _close_frame(closes: list[float]) -> PriceFrame:
    return PriceFrame(
        open=tuple(closes),
        high=tuple(closes),
        low=tuple(closes),
        close=tuple(closes),
        volume=tuple([1_000_000.0] * len(closes)),
    )


class TestMomentum:
    """Momentum sub-signal."""

    def test_volume_momentum_null_before_window(self, flat_bars: list[PriceBar]) -> None:
        result = calculate_momentum_signals(PriceFrame.from_bars(flat_bars[:10]))

        assert result.signal == Signal.NEUTRAL
        assert math.isnan(result.metrics["volume_momentum"])

    def test_volume_momentum_after_window(self, flat_bars: list[PriceBar]) -> None:
        result = calculate_momentum_signals(PriceFrame.from_bars(flat_bars))

        assert result.metrics["volume_momentum"] == 1.0


class TestVolatility:
    """Volatility regime sub-signal."""

    def test_regime_null_before_63_day_window(self) -> None:
        """Three months of bars is not enough history for the 63-day statistics."""
        frame = PriceFrame.from_bars(_trend_bars(1.01, count=63))

        result = calculate_volatility_signals(frame)

        assert result.signal == Signal.NEUTRAL
        assert result.confidence == 0.5
        assert not math.isnan(result.metrics["historical_volatility"])
        assert math.isnan(result.metrics["volatility_regime"])
        assert math.isnan(result.metrics["volatility_z_score"])

    def test_short_history_serializes_null(self) -> None:
        data = analyze_technicals(_trend_bars(1.01, count=63)).to_dict()

        metrics = data["strategy_signals"]["volatility"]["metrics"]
        assert metrics["volatility_regime"] is None
        assert metrics["volatility_z_score"] is None

    def test_zero_volatility_uses_fallbacks(self, flat_bars: list[PriceBar]) -> None:
        result = calculate_volatility_signals(PriceFrame.from_bars(flat_bars))

        assert result.metrics["volatility_regime"] == 0.0
        assert result.metrics["volatility_z_score"] == 0.0

    def test_calm_then_volatile_is_bearish(self) -> None:
        frame = _close_frame(_alternating(120, 0.1) + _alternating(15, 4.0))

        result = calculate_volatility_signals(frame)

        assert result.signal == Signal.BEARISH
        assert result.metrics["volatility_regime"] > 1.2
        assert result.metrics["volatility_z_score"] > 1
        assert 0 < result.confidence <= 1.0

    def test_volatile_then_calm_is_bullish(self) -> None:
        frame = _close_frame(_alternating(100, 4.0) + _alternating(30, 0.1))

        result = calculate_volatility_signals(frame)

        assert result.signal == Signal.BULLISH
        assert result.metrics["volatility_regime"] < 0.8
        assert result.metrics["volatility_z_score"] < -1
        assert 0 < result.confidence <= 1.0
