"""Numeric primitives and technical indicator calculations.

Every function returns a series with one output per input position. Rolling
window statistics are NaN until a full window is available; the exponential
moving average has no warm-up gap.
"""

from collections.abc import Sequence

import numpy as np
import pandas as pd

Values = Sequence[float] | pd.Series | np.ndarray


def _as_series(values: Values) -> pd.Series:
    """Coerce an ordered numeric sequence into a positional float series."""
    if isinstance(values, pd.Series):
        return values.astype(float).reset_index(drop=True)
    return pd.Series(values, dtype=float)


def rolling_mean(values: Values, window: int) -> pd.Series:
    """
    Calculate rolling mean over a fixed window.

    Args:
        values: Ordered numeric values
        window: Number of positions in the window

    Returns:
        Series of means, NaN at positions < window - 1
    """
    return _as_series(values).rolling(window=window, min_periods=window).mean()


def rolling_std(values: Values, window: int) -> pd.Series:
    """
    Calculate rolling population standard deviation over a fixed window.

    Variance is clamped at 0 before the square root so float error in flat
    windows never yields NaN.

    Args:
        values: Ordered numeric values
        window: Number of positions in the window

    Returns:
        Series of standard deviations, NaN at positions < window - 1
    """
    variance = _as_series(values).rolling(window=window, min_periods=window).var(ddof=0)
    return np.sqrt(variance.clip(lower=0.0))


def rolling_sum(values: Values, window: int) -> pd.Series:
    """
    Calculate rolling sum over a fixed window.

    Args:
        values: Ordered numeric values
        window: Number of positions in the window

    Returns:
        Series of sums, NaN at positions < window - 1
    """
    return _as_series(values).rolling(window=window, min_periods=window).sum()


def pct_change(values: Values) -> pd.Series:
    """
    Calculate percent change between consecutive values.

    Position 0 is 0 (no prior value). A zero previous value yields 0
    instead of an infinite change.

    Args:
        values: Ordered numeric values

    Returns:
        Series of fractional changes (0.01 = 1%)
    """
    series = _as_series(values)
    previous = series.shift(1)
    change = (series - previous) / previous.where(previous != 0)
    change[previous == 0] = 0.0
    if len(change) > 0:
        change.iloc[0] = 0.0
    return change


def calculate_ema(values: Values, span: int) -> pd.Series:
    """
    Calculate Exponential Moving Average.

    Uses alpha = 2 / (span + 1), seeded with the first value, with no
    warm-up gap: result[0] == values[0].

    Args:
        values: Ordered numeric values
        span: EMA span

    Returns:
        EMA series of the same length as the input
    """
    series = _as_series(values)
    alpha = 2 / (span + 1)
    raw = series.to_numpy()
    out = np.empty(len(raw), dtype=float)
    previous = 0.0
    for i, value in enumerate(raw):
        # prev + alpha * (value - prev) keeps flat input exactly flat
        previous = value if i == 0 else previous + alpha * (value - previous)
        out[i] = previous
    return pd.Series(out, index=series.index)


def array_mean(values: Values) -> float:
    """Arithmetic mean, 0.0 for empty input."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(arr.sum() / arr.size)


def true_range(high: Values, low: Values, close: Values) -> pd.Series:
    """
    Calculate per-bar true range.

    TR = max(high - low, |high - prev_close|, |low - prev_close|); the first
    bar has no previous close and is defined as 0.
    """
    high_s = _as_series(high)
    low_s = _as_series(low)
    prev_close = _as_series(close).shift(1)

    tr1 = high_s - low_s
    tr2 = (high_s - prev_close).abs()
    tr3 = (low_s - prev_close).abs()

    tr = pd.concat([tr1, tr2, tr3], axis=1).max(axis=1)
    if len(tr) > 0:
        tr.iloc[0] = 0.0
    return tr


def directional_movement(high: Values, low: Values) -> tuple[pd.Series, pd.Series]:
    """
    Calculate +DM and -DM per bar.

    +DM is the up-move when it exceeds the down-move and is positive, else 0;
    -DM is symmetric. The first bar is 0 for both.
    """
    high_s = _as_series(high)
    low_s = _as_series(low)

    up_move = (high_s - high_s.shift(1)).fillna(0.0)
    down_move = (low_s.shift(1) - low_s).fillna(0.0)

    plus_dm = up_move.where((up_move > down_move) & (up_move > 0), 0.0)
    minus_dm = down_move.where((down_move > up_move) & (down_move > 0), 0.0)
    return plus_dm, minus_dm


def calculate_adx(
    high: Values,
    low: Values,
    close: Values,
    period: int = 14,
) -> dict[str, pd.Series]:
    """
    Calculate Average Directional Index with directional indicators.

    TR, +DM and -DM are smoothed with an EMA of the given period;
    DX = 100 * |+DI - -DI| / (+DI + -DI) and ADX = EMA(DX, period).
    Zero denominators produce 0.

    Args:
        high: High price series
        low: Low price series
        close: Close price series
        period: Smoothing period (default: 14)

    Returns:
        Dict with 'adx', 'plus_di', 'minus_di' series
    """
    tr_ema = calculate_ema(true_range(high, low, close), period)
    plus_dm, minus_dm = directional_movement(high, low)
    plus_dm_ema = calculate_ema(plus_dm, period)
    minus_dm_ema = calculate_ema(minus_dm, period)

    safe_tr = tr_ema.where(tr_ema != 0)
    plus_di = (100 * plus_dm_ema / safe_tr).fillna(0.0)
    minus_di = (100 * minus_dm_ema / safe_tr).fillna(0.0)

    di_sum = plus_di + minus_di
    dx = (100 * (plus_di - minus_di).abs() / di_sum.where(di_sum != 0)).fillna(0.0)

    return {
        "adx": calculate_ema(dx, period),
        "plus_di": plus_di,
        "minus_di": minus_di,
    }


def calculate_atr(
    high: Values,
    low: Values,
    close: Values,
    period: int = 14,
) -> pd.Series:
    """
    Calculate Average True Range.

    Smoothed with a simple rolling mean (not Wilder's EMA), so the first
    period - 1 positions are NaN.

    Args:
        high: High price series
        low: Low price series
        close: Close price series
        period: ATR period (default: 14)

    Returns:
        ATR series
    """
    return rolling_mean(true_range(high, low, close), period)


def calculate_bollinger_bands(
    values: Values,
    window: int = 20,
    num_std: float = 2.0,
) -> dict[str, pd.Series]:
    """
    Calculate Bollinger Bands.

    Args:
        values: Price series (typically close prices)
        window: Rolling window (default: 20)
        num_std: Band width in standard deviations (default: 2)

    Returns:
        Dict with 'upper_band' and 'lower_band'; NaN where the window is
        not yet full
    """
    sma = rolling_mean(values, window)
    std = rolling_std(values, window)
    return {
        "upper_band": sma + num_std * std,
        "lower_band": sma - num_std * std,
    }


def calculate_rsi(close: Values, period: int = 14) -> pd.Series:
    """
    Calculate Relative Strength Index.

    Average gain and loss are plain means over at most the last `period`
    changes, so values exist from position 1 on. RSI is exactly 100 when
    the average loss is 0.

    Args:
        close: Close price series
        period: RSI period (default: 14)

    Returns:
        RSI series (0-100 scale), NaN at position 0
    """
    series = _as_series(close)
    delta = series.diff().iloc[1:]

    gain = delta.where(delta > 0, 0.0)
    loss = (-delta).where(delta < 0, 0.0)

    # Recompute each window mean from scratch so an all-zero loss window is exactly 0
    avg_gain = gain.rolling(window=period, min_periods=1).apply(array_mean, raw=True)
    avg_loss = loss.rolling(window=period, min_periods=1).apply(array_mean, raw=True)

    rsi = 100 - 100 / (1 + avg_gain / avg_loss.where(avg_loss != 0))
    rsi = rsi.where(avg_loss != 0, 100.0)

    return pd.concat([pd.Series([np.nan]), rsi]).reset_index(drop=True) if len(series) else rsi
