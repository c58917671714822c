from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

def rolling_sma(values: Sequence[float], period: int) -> np.ndarray:
    """Simple moving average aligned to each index (NaN until enough bars).

    A window containing NaN yields NaN, so warm-up gaps of an upstream
    indicator (e.g. %K) carry through instead of poisoning the whole series.
    """
    arr = np.asarray(values, dtype=float)
    n = len(arr)
    out = np.full(n, np.nan)
    if n < period or period <= 0:
        return out
    win = sliding_window_view(arr, period)
    # a constant window averages to exactly its value (no summation drift)
    out[period - 1 :] = np.where(win.max(axis=1) == win.min(axis=1), win[:, 0], win.mean(axis=1))
    return out

def ema(values: Sequence[float], period: int) -> np.ndarray:
    """Exponential moving average seeded with the SMA of the first `period` values.

    Leading NaNs are skipped: the seed is taken from the first finite run, which
    lets the MACD signal line be computed directly over the MACD line.
    """
    arr = np.asarray(values, dtype=float)
    n = len(arr)
    out = np.full(n, np.nan)
    if period <= 0:
        return out
    finite = np.flatnonzero(~np.isnan(arr))
    if len(finite) == 0:
        return out
    start = int(finite[0])
    if n - start < period:
        return out

    k = 2.0 / (period + 1.0)
    seed_idx = start + period - 1
    seed = arr[start : seed_idx + 1]
    prev = float(seed[0]) if seed.max() == seed.min() else float(seed.mean())
    out[seed_idx] = prev
    for i in range(seed_idx + 1, n):
        prev = (float(arr[i]) - prev) * k + prev
        out[i] = prev
    return out

def rsi_wilder(values: Sequence[float], period: int = 14) -> np.ndarray:
    """RSI with Wilder smoothing of average gain/loss.

    Returns array with NaN for the first `period` bars where RSI is undefined.

    Note:
      - No movement at all (avg gain == avg loss == 0) is reported as 50 (neutral).
      - avg loss == 0 with gains is 100.
    """
    c = np.asarray(values, dtype=float)
    n = len(c)
    out = np.full(n, np.nan)
    if n < period + 1 or period <= 0:
        return out

    d = np.diff(c)
    gains = np.clip(d, 0, None)
    losses = np.clip(-d, 0, None)

    g_avg = float(gains[:period].mean())
    l_avg = float(losses[:period].mean())
    out[period] = _rsi_value(g_avg, l_avg)
    for i in range(period + 1, n):
        g_avg = (g_avg * (period - 1) + float(gains[i - 1])) / period
        l_avg = (l_avg * (period - 1) + float(losses[i - 1])) / period
        out[i] = _rsi_value(g_avg, l_avg)
    return out

def _rsi_value(g_avg: float, l_avg: float) -> float:
    if l_avg == 0.0 and g_avg == 0.0:
        return 50.0
    if l_avg == 0.0:
        return 100.0
    rs = g_avg / l_avg
    return 100.0 - (100.0 / (1.0 + rs))

def atr_wilder(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float], period: int = 14) -> np.ndarray:
    """ATR using Wilder smoothing of True Range over `period` bars.
    NaN until index >= period.

    True Range:
      TR = max(high-low, abs(high-prev_close), abs(low-prev_close))

    Note:
      - TR[0] has no previous close and is skipped; the first ATR is the mean of TR[1..period].
    """
    h = np.asarray(highs, dtype=float)
    l = np.asarray(lows, dtype=float)
    c = np.asarray(closes, dtype=float)
    n = len(c)
    out = np.full(n, np.nan)
    if n < period + 1 or period <= 0:
        return out

    prev_close = np.concatenate(([c[0]], c[:-1]))
    tr = np.maximum(h - l, np.maximum(np.abs(h - prev_close), np.abs(l - prev_close)))

    prev = float(tr[1 : period + 1].mean())
    out[period] = prev
    for i in range(period + 1, n):
        prev = (prev * (period - 1) + float(tr[i])) / period
        out[i] = prev
    return out

def macd(values: Sequence[float], fast: int = 12, slow: int = 26, signal: int = 9) -> Tuple[np.ndarray, np.ndarray]:
    """MACD line (EMA fast - EMA slow) and its EMA signal line, both index-aligned."""
    line = ema(values, fast) - ema(values, slow)
    return line, ema(line, signal)

def stochastic(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 9,
    signal: int = 3,
) -> Tuple[np.ndarray, np.ndarray]:
    """Stochastic oscillator %K over `period` bars and %D = SMA(%K, signal).

    A window with zero high-low range has no defined %K (NaN).
    """
    h = np.asarray(highs, dtype=float)
    l = np.asarray(lows, dtype=float)
    c = np.asarray(closes, dtype=float)
    n = len(c)
    k = np.full(n, np.nan)
    if n < period or period <= 0:
        return k, np.full(n, np.nan)

    hh = sliding_window_view(h, period).max(axis=1)
    ll = sliding_window_view(l, period).min(axis=1)
    rng = hh - ll
    with np.errstate(divide="ignore", invalid="ignore"):
        k[period - 1 :] = np.where(rng > 0, (c[period - 1 :] - ll) / rng * 100.0, np.nan)
    return k, rolling_sma(k, signal)
