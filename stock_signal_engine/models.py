from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

import numpy as np

class Decision(str, Enum):
    STRONG_BUY = "STRONG BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG SELL"

@dataclass(frozen=True)
class PriceBar:
    date: date
    open: float
    high: float
    low: float
    close: float
    volume: float

@dataclass(frozen=True)
class DailySeries:
    """Daily bars in strictly increasing date order."""
    bars: Tuple[PriceBar, ...]

    def __post_init__(self) -> None:
        for prev, cur in zip(self.bars, self.bars[1:]):
            if cur.date <= prev.date:
                raise ValueError(f"daily bars out of order: {prev.date} -> {cur.date}")

    @classmethod
    def from_bars(cls, bars: Iterable[PriceBar]) -> "DailySeries":
        return cls(tuple(bars))

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def last(self) -> PriceBar:
        return self.bars[-1]

    @property
    def closes(self) -> np.ndarray:
        return np.array([b.close for b in self.bars], dtype=float)

    @property
    def highs(self) -> np.ndarray:
        return np.array([b.high for b in self.bars], dtype=float)

    @property
    def lows(self) -> np.ndarray:
        return np.array([b.low for b in self.bars], dtype=float)

    @property
    def volumes(self) -> np.ndarray:
        return np.array([b.volume for b in self.bars], dtype=float)

@dataclass(frozen=True)
class IndicatorSet:
    """Indicator outputs aligned index-for-index with the daily series (NaN during warm-up)."""
    sma_fast: np.ndarray
    sma_mid: np.ndarray
    sma_slow: np.ndarray
    volume_sma: np.ndarray
    rsi: np.ndarray
    atr: np.ndarray
    macd: np.ndarray
    macd_signal: np.ndarray
    stoch_k: np.ndarray
    stoch_d: np.ndarray

@dataclass(frozen=True)
class FactorScores:
    trend: float
    momentum: float
    volume: float
    accumulation: float
    multi_timeframe: float
    relative: float
    risk_penalty: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "trend": self.trend,
            "momentum": self.momentum,
            "volume": self.volume,
            "accumulation": self.accumulation,
            "multiTimeframe": self.multi_timeframe,
            "relative": self.relative,
            "riskPenalty": self.risk_penalty,
        }

@dataclass(frozen=True)
class AnalysisResult:
    """One analysis of one symbol. Numeric fields are already rounded for output."""
    symbol: str
    resolved_name: str
    full_market_id: str
    as_of_date: date
    price: float
    decision: Decision
    buy_probability: float
    sell_probability: float
    total_score: float
    factors: FactorScores
    beta: Optional[float]
    sharpe: Optional[float]
    rsi: Optional[float]
    atr_ratio: Optional[float]
    daily_change_pct: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.symbol,
            "name": self.resolved_name,
            "fullId": self.full_market_id,
            "date": self.as_of_date.isoformat(),
            "price": self.price,
            "decision": self.decision.value,
            "probability": {
                "buy": self.buy_probability,
                "sell": self.sell_probability,
            },
            "score": {
                "total": self.total_score,
                "factors": self.factors.to_dict(),
            },
            "advancedFactors": {
                "beta": self.beta,
                "sharpe": self.sharpe,
            },
            "indicators": {
                "rsi": self.rsi,
                "atrRatio": self.atr_ratio,
                "dailyChange": self.daily_change_pct,
            },
        }
