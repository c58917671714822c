"""Weighted aggregation of factor scores into a score, a probability and a label.

Weights, thresholds and the logistic slope are fixed policy constants.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .models import Decision, FactorScores

WEIGHTS = {
    "trend": 0.25,
    "momentum": 0.20,
    "volume": 0.15,
    "accumulation": 0.15,
    "multi_timeframe": 0.15,
    "relative": 0.10,
}
LOGISTIC_SLOPE = 0.8
# smallest step below 1.0; keeps both probabilities strictly inside (0, 1)
PROB_EPS = 1.0 - math.nextafter(1.0, 0.0)

STRONG_BUY_AT = 3.0
BUY_AT = 1.5
STRONG_SELL_AT = -3.0
SELL_AT = -1.5

@dataclass(frozen=True)
class DecisionOutcome:
    total_score: float
    buy_probability: float
    sell_probability: float
    decision: Decision

def total_score(f: FactorScores) -> float:
    """Weighted sum of the six factors minus the (unweighted) risk penalty."""
    return (
        WEIGHTS["trend"] * f.trend
        + WEIGHTS["momentum"] * f.momentum
        + WEIGHTS["volume"] * f.volume
        + WEIGHTS["accumulation"] * f.accumulation
        + WEIGHTS["multi_timeframe"] * f.multi_timeframe
        + WEIGHTS["relative"] * f.relative
        - f.risk_penalty
    )

def buy_probability(score: float) -> float:
    """Logistic squash 1 / (1 + e^(-slope * score)), evaluated without overflow."""
    z = LOGISTIC_SLOPE * score
    if z >= 0:
        p = 1.0 / (1.0 + math.exp(-z))
    else:
        e = math.exp(z)
        p = e / (1.0 + e)
    return min(max(p, PROB_EPS), 1.0 - PROB_EPS)

def classify(score: float) -> Decision:
    # first match wins; boundaries are inclusive
    if score >= STRONG_BUY_AT:
        return Decision.STRONG_BUY
    if score >= BUY_AT:
        return Decision.BUY
    if score <= STRONG_SELL_AT:
        return Decision.STRONG_SELL
    if score <= SELL_AT:
        return Decision.SELL
    return Decision.HOLD

def decide(f: FactorScores) -> DecisionOutcome:
    score = total_score(f)
    p = buy_probability(score)
    return DecisionOutcome(
        total_score=score,
        buy_probability=p,
        sell_probability=1.0 - p,
        decision=classify(score),
    )
