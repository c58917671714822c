"""Shared builders and a fake market-data client for engine tests."""

import threading
from datetime import date, timedelta

import numpy as np
import pytest

from stock_signal_engine.config import EngineConfig
from stock_signal_engine.factors import FactorInput
from stock_signal_engine.models import (
    AnalysisResult,
    DailySeries,
    Decision,
    FactorScores,
    IndicatorSet,
    PriceBar,
)


def make_series(closes, volumes=None, spread=0.0, start=date(2024, 1, 1)):
    """Daily series with open == close and a symmetric high/low spread."""
    if volumes is None:
        volumes = [1000.0] * len(closes)
    return DailySeries.from_bars(
        PriceBar(
            date=start + timedelta(days=i),
            open=float(c),
            high=float(c) + spread,
            low=float(c) - spread,
            close=float(c),
            volume=float(v),
        )
        for i, (c, v) in enumerate(zip(closes, volumes))
    )


# prices whose repeated sums are not exact in binary floating point (10.0 is)
FLAT_PRICES = [10.0, 3.3, 12.34, 2.71, 10.37, 7.77, 0.1, 99.99, 1.23]


def flat_series(n=130, price=10.0, volume=1000.0):
    return make_series([price] * n, [volume] * n)


def rising_closes(n=130, start=10.0, step=0.1):
    return [start + step * i for i in range(n)]


def falling_closes(n=130, start=30.0, step=0.1):
    return [start - step * i for i in range(n)]


def make_indicators(n, **overrides):
    """IndicatorSet of length n, all NaN except the given arrays."""
    fields = [
        "sma_fast", "sma_mid", "sma_slow", "volume_sma", "rsi", "atr",
        "macd", "macd_signal", "stoch_k", "stoch_d",
    ]
    values = {f: np.full(n, np.nan) for f in fields}
    for key, arr in overrides.items():
        values[key] = np.asarray(arr, dtype=float)
    return IndicatorSet(**values)


def make_input(closes, volumes=None, beta=1.0, sharpe=0.5, weekly_closes=None, **ind):
    closes = np.asarray(closes, dtype=float)
    volumes = np.full(len(closes), 1000.0) if volumes is None else np.asarray(volumes, dtype=float)
    return FactorInput(
        closes=closes,
        volumes=volumes,
        ind=make_indicators(len(closes), **ind),
        beta=beta,
        sharpe=sharpe,
        weekly_closes=None if weekly_closes is None else np.asarray(weekly_closes, dtype=float),
    )


def tail(n, *last_values):
    """Length-n array of NaN ending in the given values."""
    arr = np.full(n, np.nan)
    arr[n - len(last_values):] = last_values
    return arr


def make_result(symbol="600519", name="贵州茅台", decision=Decision.HOLD, total=0.0):
    return AnalysisResult(
        symbol=symbol,
        resolved_name=name,
        full_market_id=f"sh{symbol}",
        as_of_date=date(2024, 5, 10),
        price=1700.0,
        decision=decision,
        buy_probability=0.5,
        sell_probability=0.5,
        total_score=total,
        factors=FactorScores(0, 0, 0, 0, 0, 0, 0),
        beta=0.9,
        sharpe=0.1,
        rsi=55.0,
        atr_ratio=0.02,
        daily_change_pct=0.001,
    )


class FakeMarketDataClient:
    """In-memory stand-in for TencentMarketDataClient.

    With a barrier, every fetch blocks until all four fetches have started.
    """

    def __init__(self, daily=None, index=None, weekly=None, name="测试股份", barrier=None, error=None):
        self.daily = daily
        self.index = None if index is None else np.asarray(index, dtype=float)
        self.weekly = None if weekly is None else np.asarray(weekly, dtype=float)
        self.name = name
        self.barrier = barrier
        self.error = error
        self.calls = []
        self._lock = threading.Lock()

    def _hit(self, what, arg):
        with self._lock:
            self.calls.append((what, arg))
        if self.barrier is not None:
            self.barrier.wait(timeout=5)

    def fetch_daily_candles(self, full_id):
        self._hit("daily", full_id)
        return self.daily

    def fetch_index_closes(self, benchmark_id=None):
        self._hit("index", benchmark_id)
        return self.index

    def fetch_weekly_closes(self, full_id):
        self._hit("weekly", full_id)
        return self.weekly

    def fetch_display_name(self, full_id):
        self._hit("name", full_id)
        if self.error is not None:
            raise self.error
        return self.name


@pytest.fixture
def cfg(tmp_path):
    return EngineConfig(db_path=str(tmp_path / "signal_engine.db"))
