"""Seven factor scores over the most recent bar of a daily series.

Every rule reads the last (and sometimes the second-to-last) indicator value.
A value that does not exist yet (warm-up NaN, too-short array, zero
denominator) makes the rule not fire; it never raises.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import EngineConfig
from .errors import InsufficientHistoryError
from .indicators import atr_wilder, macd, rolling_sma, rsi_wilder, stochastic
from .models import DailySeries, FactorScores, IndicatorSet

VOLUME_SURGE_MULT = 1.3
ACCUM_RANGE_BARS = 15
ACCUM_MAX_RANGE = 0.08
ACCUM_VOLUME_BARS = 10
ACCUM_VOLUME_DRY_MULT = 0.8
ACCUM_ATR_BACK = 5
RSI_BULL_LOW = 50.0
RSI_BULL_HIGH = 70.0
LOW_BETA = 0.8
HIGH_SHARPE = 0.8
LOW_SHARPE = 0.2
SHARP_DROP = -0.05
HIGH_ATR_RATIO = 0.06

def _at(arr: np.ndarray, back: int = 1) -> Optional[float]:
    """Value `back` positions from the end, or None when it does not exist yet."""
    if back > len(arr):
        return None
    v = float(arr[-back])
    return None if math.isnan(v) else v

def _gt(a: Optional[float], b: Optional[float]) -> bool:
    return a is not None and b is not None and a > b

def _lt(a: Optional[float], b: Optional[float]) -> bool:
    return a is not None and b is not None and a < b

@dataclass(frozen=True)
class FactorInput:
    closes: np.ndarray
    volumes: np.ndarray
    ind: IndicatorSet
    beta: float
    sharpe: float
    weekly_closes: Optional[np.ndarray] = None
    weekly_sma_fast: int = 5
    weekly_sma_slow: int = 20
    min_weekly_points: int = 20

    @property
    def close(self) -> float:
        return float(self.closes[-1])

    @property
    def daily_change(self) -> Optional[float]:
        """Fractional change of the last close versus the previous close."""
        if len(self.closes) < 2:
            return None
        prev = float(self.closes[-2])
        if prev == 0.0:
            return None
        return (self.close - prev) / prev

    @property
    def rsi(self) -> Optional[float]:
        return _at(self.ind.rsi)

    @property
    def atr_ratio(self) -> Optional[float]:
        atr = _at(self.ind.atr)
        if atr is None or self.close == 0.0:
            return None
        return atr / self.close

def check_history(series: Optional[DailySeries], cfg: EngineConfig) -> None:
    n = len(series) if series is not None else 0
    if n < cfg.min_daily_bars:
        raise InsufficientHistoryError(n, cfg.min_daily_bars)

def compute_indicators(series: DailySeries, cfg: EngineConfig) -> IndicatorSet:
    c = series.closes
    h = series.highs
    l = series.lows
    macd_line, macd_sig = macd(c, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal)
    k, d = stochastic(h, l, c, cfg.stoch_period, cfg.stoch_signal)
    return IndicatorSet(
        sma_fast=rolling_sma(c, cfg.sma_fast),
        sma_mid=rolling_sma(c, cfg.sma_mid),
        sma_slow=rolling_sma(c, cfg.sma_slow),
        volume_sma=rolling_sma(series.volumes, cfg.volume_sma),
        rsi=rsi_wilder(c, cfg.rsi_period),
        atr=atr_wilder(h, l, c, cfg.atr_period),
        macd=macd_line,
        macd_signal=macd_sig,
        stoch_k=k,
        stoch_d=d,
    )

def build_factor_input(
    series: DailySeries,
    cfg: EngineConfig,
    *,
    beta: float,
    sharpe: float,
    weekly_closes: Optional[np.ndarray] = None,
) -> FactorInput:
    check_history(series, cfg)
    return FactorInput(
        closes=series.closes,
        volumes=series.volumes,
        ind=compute_indicators(series, cfg),
        beta=beta,
        sharpe=sharpe,
        weekly_closes=None if weekly_closes is None else np.asarray(weekly_closes, dtype=float),
        weekly_sma_fast=cfg.weekly_sma_fast,
        weekly_sma_slow=cfg.weekly_sma_slow,
        min_weekly_points=cfg.min_weekly_points,
    )

def trend_score(x: FactorInput) -> int:
    sma_f = _at(x.ind.sma_fast)
    sma_f_prev = _at(x.ind.sma_fast, 2)
    sma_m = _at(x.ind.sma_mid)
    sma_s = _at(x.ind.sma_slow)

    score = 0
    if _gt(x.close, sma_f):
        score += 1
    if _gt(sma_f, sma_m):
        score += 1
    if _gt(sma_m, sma_s):
        score += 1
    if _gt(sma_f, sma_f_prev):
        score += 1
    return score

def momentum_score(x: FactorInput) -> int:
    m, m_prev = _at(x.ind.macd), _at(x.ind.macd, 2)
    s, s_prev = _at(x.ind.macd_signal), _at(x.ind.macd_signal, 2)
    rsi = x.rsi

    score = 0
    # golden cross on this bar
    if _lt(m_prev, s_prev) and _gt(m, s):
        score += 2
    if _gt(_at(x.ind.stoch_k), _at(x.ind.stoch_d)):
        score += 1
    if rsi is not None and RSI_BULL_LOW < rsi < RSI_BULL_HIGH:
        score += 1
    return score

def volume_score(x: FactorInput) -> int:
    vol_ma = _at(x.ind.volume_sma)
    pct = x.daily_change
    if not vol_ma or pct is None:
        return 0
    if float(x.volumes[-1]) <= vol_ma * VOLUME_SURGE_MULT:
        return 0
    if pct > 0:
        return 2
    if pct < 0:
        return -2
    return 0

def accumulation_score(x: FactorInput) -> int:
    """Tight range on drying volume and contracting ATR."""
    if len(x.closes) < ACCUM_RANGE_BARS or len(x.volumes) < 2 * ACCUM_VOLUME_BARS:
        return 0

    recent = x.closes[-ACCUM_RANGE_BARS:]
    lo = float(recent.min())
    if lo <= 0.0:
        return 0
    range_ratio = (float(recent.max()) - lo) / lo

    recent_vol = float(x.volumes[-ACCUM_VOLUME_BARS:].mean())
    prev_vol = float(x.volumes[-2 * ACCUM_VOLUME_BARS : -ACCUM_VOLUME_BARS].mean())

    atr = _at(x.ind.atr)
    atr_before = _at(x.ind.atr, ACCUM_ATR_BACK)

    if (
        range_ratio < ACCUM_MAX_RANGE
        and recent_vol < prev_vol * ACCUM_VOLUME_DRY_MULT
        and atr_before
        and _lt(atr, atr_before)
    ):
        return 3
    return 0

def multi_timeframe_score(x: FactorInput) -> int:
    w = x.weekly_closes
    if w is None or len(w) < x.min_weekly_points:
        return 0
    fast = _at(rolling_sma(w, x.weekly_sma_fast))
    slow = _at(rolling_sma(w, x.weekly_sma_slow))
    return 2 if _gt(fast, slow) else 0

def relative_score(x: FactorInput) -> int:
    score = 0
    if x.beta < LOW_BETA:
        score += 1
    if x.sharpe > HIGH_SHARPE:
        score += 2
    if x.sharpe < LOW_SHARPE:
        score -= 2
    return score

def risk_penalty(x: FactorInput) -> int:
    pct = x.daily_change
    ratio = x.atr_ratio

    penalty = 0
    if _lt(x.close, _at(x.ind.sma_slow)):
        penalty += 2
    if pct is not None and pct < SHARP_DROP:
        penalty += 1
    if ratio is not None and ratio > HIGH_ATR_RATIO:
        penalty += 2
    return penalty

def score_factors(x: FactorInput) -> FactorScores:
    return FactorScores(
        trend=trend_score(x),
        momentum=momentum_score(x),
        volume=volume_score(x),
        accumulation=accumulation_score(x),
        multi_timeframe=multi_timeframe_score(x),
        relative=relative_score(x),
        risk_penalty=risk_penalty(x),
    )
