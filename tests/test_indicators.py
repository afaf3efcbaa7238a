"""Tests for technical indicators."""

import math

import pandas as pd
import pytest

from stock_signals.utils.indicators import (
    array_mean,
    calculate_adx,
    calculate_atr,
    calculate_bollinger_bands,
    calculate_ema,
    calculate_rsi,
    directional_movement,
    pct_change,
    rolling_mean,
    rolling_std,
    rolling_sum,
    true_range,
)


class TestRollingWindows:
    """Tests for rolling mean, std and sum."""

    def test_rolling_mean_warmup(self) -> None:
        """First window - 1 positions are NaN."""
        result = rolling_mean([1.0, 2.0, 3.0, 4.0], 2)

        assert math.isnan(result.iloc[0])
        assert result.iloc[1:].tolist() == [1.5, 2.5, 3.5]

    def test_rolling_mean_insufficient_data(self) -> None:
        """All NaN when the series is shorter than the window."""
        assert rolling_mean([100.0, 101.0, 102.0], 5).isna().all()

    def test_rolling_std_is_population(self) -> None:
        """Divides by N, not N - 1."""
        result = rolling_std([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0], 8)

        assert result.iloc[:7].isna().all()
        assert result.iloc[7] == pytest.approx(2.0)

    def test_rolling_std_flat_is_zero(self) -> None:
        """Flat windows never produce NaN from negative float variance."""
        result = rolling_std([100.0] * 30, 20)

        assert result.iloc[19:].notna().all()
        assert (result.iloc[19:] >= 0).all()
        assert result.iloc[-1] == pytest.approx(0.0, abs=1e-12)

    def test_rolling_sum(self) -> None:
        result = rolling_sum([1.0, 2.0, 3.0], 2)

        assert math.isnan(result.iloc[0])
        assert result.iloc[1:].tolist() == [3.0, 5.0]

    def test_output_length_matches_input(self, sample_price_series: pd.Series) -> None:
        for fn in (rolling_mean, rolling_std, rolling_sum):
            assert len(fn(sample_price_series, 50)) == len(sample_price_series)


class TestPctChange:
    """Tests for percent change."""

    def test_first_position_is_zero(self) -> None:
        assert pct_change([100.0, 110.0]).tolist() == pytest.approx([0.0, 0.1])

    def test_zero_previous_value(self) -> None:
        """A zero previous value yields 0 rather than inf."""
        result = pct_change([100.0, 110.0, 0.0, 50.0])

        assert result.tolist() == pytest.approx([0.0, 0.1, -1.0, 0.0])

    def test_empty(self) -> None:
        assert len(pct_change([])) == 0


class TestEMA:
    """Tests for EMA calculation."""

    def test_ema_seeded_with_first_value(self) -> None:
        """alpha = 2 / (span + 1), no warm-up gap."""
        ema = calculate_ema([1.0, 2.0, 3.0], 3)

        assert ema.tolist() == pytest.approx([1.0, 1.5, 2.25])

    def test_ema_flat_input_stays_flat(self) -> None:
        ema = calculate_ema([100.0] * 60, 21)

        assert (ema == 100.0).all()

    def test_ema_lags_uptrend(self, sample_price_series: pd.Series) -> None:
        ema = calculate_ema(sample_price_series, 5)

        assert not ema.isna().any()
        assert ema.iloc[-1] < sample_price_series.iloc[-1]


def test_array_mean() -> None:
    assert array_mean([]) == 0.0
    assert array_mean([1.0, 2.0, 3.0]) == 2.0


class TestTrueRange:
    """Tests for true range and directional movement."""

    def test_true_range(self) -> None:
        tr = true_range([10.0, 12.0, 11.0], [8.0, 9.0, 7.0], [9.0, 11.0, 8.0])

        assert tr.tolist() == [0.0, 3.0, 4.0]

    def test_directional_movement(self) -> None:
        plus_dm, minus_dm = directional_movement([10.0, 12.0, 11.0], [8.0, 9.0, 7.0])

        assert plus_dm.tolist() == [0.0, 2.0, 0.0]
        assert minus_dm.tolist() == [0.0, 0.0, 2.0]


class TestADX:
    """Tests for ADX calculation."""

    def test_flat_market_is_zero(self) -> None:
        """Zero true range divides to 0, not NaN."""
        flat = [100.0] * 40
        result = calculate_adx(flat, flat, flat, 14)

        for key in ("adx", "plus_di", "minus_di"):
            assert (result[key] == 0.0).all()

    def test_uptrend_has_positive_directional_bias(self, sample_price_series: pd.Series) -> None:
        high = sample_price_series + 1
        low = sample_price_series - 1
        result = calculate_adx(high, low, sample_price_series, 14)

        assert result["plus_di"].iloc[-1] > result["minus_di"].iloc[-1]
        assert 0 <= result["adx"].iloc[-1] <= 100


class TestATR:
    """Tests for ATR calculation."""

    def test_atr_simple_mean(self) -> None:
        atr = calculate_atr([10.0, 12.0, 11.0], [8.0, 9.0, 7.0], [9.0, 11.0, 8.0], 2)

        assert math.isnan(atr.iloc[0])
        assert atr.iloc[1:].tolist() == [1.5, 3.5]

    def test_atr_positive(self, sample_price_series: pd.Series) -> None:
        atr = calculate_atr(sample_price_series + 1, sample_price_series - 1, sample_price_series, 14)

        assert (atr.dropna() > 0).all()


class TestBollingerBands:
    """Tests for Bollinger Bands."""

    def test_bands_bracket_mean(self, sample_price_series: pd.Series) -> None:
        bands = calculate_bollinger_bands(sample_price_series, 20)
        sma = rolling_mean(sample_price_series, 20)

        assert bands["upper_band"].iloc[:19].isna().all()
        assert (bands["upper_band"].dropna() >= sma.dropna()).all()
        assert (bands["lower_band"].dropna() <= sma.dropna()).all()

    def test_flat_bands_collapse(self) -> None:
        bands = calculate_bollinger_bands([100.0] * 25, 20)

        assert bands["upper_band"].iloc[-1] == pytest.approx(100.0)
        assert bands["lower_band"].iloc[-1] == pytest.approx(100.0)


class TestRSI:
    """Tests for RSI calculation."""

    def test_rsi_range(self, sample_price_series: pd.Series) -> None:
        """Test RSI stays in 0-100 range."""
        rsi = calculate_rsi(sample_price_series, 14)

        valid_rsi = rsi.dropna()
        assert (valid_rsi >= 0).all()
        assert (valid_rsi <= 100).all()

    def test_rsi_first_position_nan(self, sample_price_series: pd.Series) -> None:
        rsi = calculate_rsi(sample_price_series, 14)

        assert len(rsi) == len(sample_price_series)
        assert math.isnan(rsi.iloc[0])
        assert rsi.iloc[1:].notna().all()

    def test_rsi_no_losses_is_100(self) -> None:
        """Consistently rising prices have zero average loss."""
        rsi = calculate_rsi([100.0 + i for i in range(30)], 14)

        assert (rsi.iloc[1:] == 100.0).all()

    def test_rsi_no_gains_is_0(self) -> None:
        rsi = calculate_rsi([100.0 - i for i in range(30)], 14)

        assert rsi.iloc[-1] == pytest.approx(0.0)

    def test_rsi_flat_is_100(self) -> None:
        """Flat prices also have zero average loss."""
        rsi = calculate_rsi([100.0] * 20, 14)

        assert rsi.iloc[-1] == 100.0
