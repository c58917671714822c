from __future__ import annotations

import math
from typing import Optional

from .decision import DecisionOutcome
from .factors import FactorInput
from .models import AnalysisResult, DailySeries, FactorScores

def _round(value: Optional[float], ndigits: int) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return round(float(value), ndigits)

def assemble_result(
    *,
    symbol: str,
    name: str,
    full_id: str,
    series: DailySeries,
    x: FactorInput,
    factors: FactorScores,
    outcome: DecisionOutcome,
) -> AnalysisResult:
    """Package one analysis; this is the only place values get rounded."""
    last = series.last
    return AnalysisResult(
        symbol=symbol,
        resolved_name=name,
        full_market_id=full_id,
        as_of_date=last.date,
        price=float(last.close),
        decision=outcome.decision,
        buy_probability=round(outcome.buy_probability, 4),
        sell_probability=round(outcome.sell_probability, 4),
        total_score=round(outcome.total_score, 2),
        factors=factors,
        beta=_round(x.beta, 4),
        sharpe=_round(x.sharpe, 4),
        rsi=_round(x.rsi, 2),
        atr_ratio=_round(x.atr_ratio, 4),
        daily_change_pct=_round(x.daily_change, 4),
    )
