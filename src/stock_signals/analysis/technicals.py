"""Technical analysis: trend, mean reversion, momentum and volatility.

Each sub-strategy reads the most recent bar of a set of indicator series and
emits a signal with a 0-1 confidence. Decisive signals scale confidence with
how far the driving metric crossed its threshold; indecisive ones report 0.5.
"""

import logging
import math
from collections.abc import Sequence

import pandas as pd

from stock_signals.analysis.combine import weighted_signal_combination
from stock_signals.models import PriceBar, PriceFrame, Signal, StrategySignal, TechnicalResult
from stock_signals.utils.formatting import to_confidence
from stock_signals.utils.indicators import (
    calculate_adx,
    calculate_atr,
    calculate_bollinger_bands,
    calculate_ema,
    calculate_rsi,
    pct_change,
    rolling_mean,
    rolling_std,
    rolling_sum,
)

logger = logging.getLogger(__name__)

NO_PRICE_DATA_ERROR = "No price data found"

# Weights sum to 0.85 and are applied as-is
STRATEGY_WEIGHTS = {
    "trend_following": 0.25,
    "mean_reversion": 0.20,
    "momentum": 0.25,
    "volatility": 0.15,
}

DEFAULT_CONFIDENCE = 0.5
TRADING_DAYS_PER_YEAR = 252


def analyze_technicals(prices: PriceFrame | Sequence[PriceBar]) -> TechnicalResult | dict[str, str]:
    """
    Run the four technical sub-strategies and combine them.

    Args:
        prices: Daily bars, chronologically ascending

    Returns:
        TechnicalResult, or {"error": "No price data found"} for an empty series
    """
    frame = prices if isinstance(prices, PriceFrame) else PriceFrame.from_bars(prices)
    if len(frame) == 0:
        return {"error": NO_PRICE_DATA_ERROR}

    strategy_signals = {
        "trend_following": calculate_trend_signals(frame),
        "mean_reversion": calculate_mean_reversion_signals(frame),
        "momentum": calculate_momentum_signals(frame),
        "volatility": calculate_volatility_signals(frame),
    }

    signal, score = weighted_signal_combination(strategy_signals, STRATEGY_WEIGHTS)
    logger.debug(
        "Technicals over %d bars: %s (%s)",
        len(frame),
        signal.value,
        ", ".join(f"{name}={sub.signal.value}" for name, sub in strategy_signals.items()),
    )

    return TechnicalResult(
        signal=signal,
        confidence=to_confidence(score),
        strategy_signals=strategy_signals,
    )


def _last(series: pd.Series, default: float = 0.0) -> float:
    """Most recent value of a series, default when the series is empty."""
    if len(series) == 0:
        return default
    return float(series.iloc[-1])


def _zero(series: pd.Series) -> pd.Series:
    """Mask of positions that are exactly 0; warm-up NaN is left to propagate."""
    return series == 0


def calculate_trend_signals(frame: PriceFrame) -> StrategySignal:
    """Trend following from EMA 8/21/55 alignment, strength from ADX(14)."""
    close = pd.Series(frame.close, dtype=float)

    ema_8 = _last(calculate_ema(close, 8))
    ema_21 = _last(calculate_ema(close, 21))
    ema_55 = _last(calculate_ema(close, 55))
    adx = _last(calculate_adx(frame.high, frame.low, frame.close, 14)["adx"])

    trend_strength = adx / 100

    if ema_8 > ema_21 and ema_21 > ema_55:
        signal, confidence = Signal.BULLISH, trend_strength
    elif ema_8 < ema_21 and ema_21 < ema_55:
        signal, confidence = Signal.BEARISH, trend_strength
    else:
        signal, confidence = Signal.NEUTRAL, DEFAULT_CONFIDENCE

    return StrategySignal(
        signal=signal,
        confidence=confidence,
        metrics={
            "adx": adx,
            "trend_strength": trend_strength,
        },
    )


def calculate_mean_reversion_signals(frame: PriceFrame) -> StrategySignal:
    """Mean reversion from the 50-day z-score and Bollinger Band position."""
    close = pd.Series(frame.close, dtype=float)

    ma_50 = rolling_mean(close, 50)
    std_50 = rolling_std(close, 50)
    z_score = ((close - ma_50) / std_50).where(std_50 != 0, 0.0)

    bands = calculate_bollinger_bands(close, 20)
    rsi_14 = calculate_rsi(close, 14)
    rsi_28 = calculate_rsi(close, 28)

    last_close = _last(close)
    last_upper = _last(bands["upper_band"])
    last_lower = _last(bands["lower_band"])
    last_z = _last(z_score)

    price_vs_bb = 0.5
    band_width = last_upper - last_lower
    if band_width != 0:
        price_vs_bb = (last_close - last_lower) / band_width

    signal, confidence = Signal.NEUTRAL, DEFAULT_CONFIDENCE
    if last_z < -2 and price_vs_bb < 0.2:
        signal, confidence = Signal.BULLISH, min(abs(last_z) / 4, 1.0)
    elif last_z > 2 and price_vs_bb > 0.8:
        signal, confidence = Signal.BEARISH, min(abs(last_z) / 4, 1.0)

    return StrategySignal(
        signal=signal,
        confidence=confidence,
        metrics={
            "z_score": last_z,
            "price_vs_bb": price_vs_bb,
            "rsi_14": _last(rsi_14),
            "rsi_28": _last(rsi_28),
        },
    )


def calculate_momentum_signals(frame: PriceFrame) -> StrategySignal:
    """Multi-horizon price momentum confirmed by above-average volume."""
    close = pd.Series(frame.close, dtype=float)
    volume = pd.Series(frame.volume, dtype=float)
    returns = pct_change(close)

    # 1m ~ 21 days, 3m ~ 63 days, 6m ~ 126 days
    mom_1m = _last(rolling_sum(returns, 21))
    mom_3m = _last(rolling_sum(returns, 63))
    mom_6m = _last(rolling_sum(returns, 126))

    volume_ma = rolling_mean(volume, 21)
    volume_momentum = volume / volume_ma.mask(_zero(volume_ma), 1.0)

    momentum_score = 0.4 * mom_1m + 0.3 * mom_3m + 0.3 * mom_6m
    last_volume_momentum = _last(volume_momentum)
    volume_confirmation = last_volume_momentum > 1

    signal, confidence = Signal.NEUTRAL, DEFAULT_CONFIDENCE
    if momentum_score > 0.05 and volume_confirmation:
        signal, confidence = Signal.BULLISH, min(abs(momentum_score) * 5, 1.0)
    elif momentum_score < -0.05 and volume_confirmation:
        signal, confidence = Signal.BEARISH, min(abs(momentum_score) * 5, 1.0)

    return StrategySignal(
        signal=signal,
        confidence=confidence,
        metrics={
            "momentum_1m": mom_1m,
            "momentum_3m": mom_3m,
            "momentum_6m": mom_6m,
            "volume_momentum": last_volume_momentum,
        },
    )


def calculate_volatility_signals(frame: PriceFrame) -> StrategySignal:
    """Volatility regime from annualized 21-day volatility vs its 63-day average."""
    close = pd.Series(frame.close, dtype=float)
    returns = pct_change(close)

    hist_vol = rolling_std(returns, 21) * math.sqrt(TRADING_DAYS_PER_YEAR)

    vol_ma_63 = rolling_mean(hist_vol, 63)
    vol_std_63 = rolling_std(hist_vol, 63)
    vol_regime = hist_vol / vol_ma_63.mask(_zero(vol_ma_63), 1.0)
    vol_z_score = ((hist_vol - vol_ma_63) / vol_std_63).mask(_zero(vol_std_63), 0.0)

    atr = calculate_atr(frame.high, frame.low, frame.close, 14)
    atr_ratio = atr / close.mask(_zero(close), 1.0)

    last_regime = _last(vol_regime)
    last_z = _last(vol_z_score)

    signal, confidence = Signal.NEUTRAL, DEFAULT_CONFIDENCE
    if last_regime < 0.8 and last_z < -1:
        signal, confidence = Signal.BULLISH, min(abs(last_z) / 3, 1.0)
    elif last_regime > 1.2 and last_z > 1:
        signal, confidence = Signal.BEARISH, min(abs(last_z) / 3, 1.0)

    return StrategySignal(
        signal=signal,
        confidence=confidence,
        metrics={
            "historical_volatility": _last(hist_vol),
            "volatility_regime": last_regime,
            "volatility_z_score": last_z,
            "atr_ratio": _last(atr_ratio),
        },
    )
