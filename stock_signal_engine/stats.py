from __future__ import annotations

from typing import Sequence

import numpy as np

def simple_returns(closes: Sequence[float]) -> np.ndarray:
    """One-period returns r[i] = (c[i+1] - c[i]) / c[i]."""
    c = np.asarray(closes, dtype=float)
    return np.diff(c) / c[:-1]

FLAT_RTOL = 1e-12

def _is_flat(r: np.ndarray) -> bool:
    """Returns that do not vary beyond rounding noise relative to their level."""
    return float(r.std()) <= FLAT_RTOL * max(1.0, abs(float(r.mean())))

def compute_beta(asset_closes: Sequence[float], index_closes: Sequence[float]) -> float:
    """Regression slope of asset returns on index returns (cov / var of the index).

    Both series must have the same length (>= 2). A flat index has no defined
    beta and yields NaN.
    """
    a = np.asarray(asset_closes, dtype=float)
    b = np.asarray(index_closes, dtype=float)
    if len(a) != len(b):
        raise ValueError(f"beta needs aligned series, got {len(a)} and {len(b)} closes")
    if len(a) < 2:
        raise ValueError("beta needs at least 2 closes")

    ra = simple_returns(a)
    ri = simple_returns(b)
    da = ra - ra.mean()
    di = ri - ri.mean()
    if _is_flat(ri):
        return float("nan")
    return float(np.sum(da * di)) / float(np.sum(di * di))

def compute_sharpe(closes: Sequence[float]) -> float:
    """Mean one-period return over its population standard deviation (no annualisation).

    Returns 0.0 when the returns do not vary (constant growth included).
    """
    c = np.asarray(closes, dtype=float)
    if len(c) < 2:
        raise ValueError("sharpe needs at least 2 closes")
    r = simple_returns(c)
    if _is_flat(r):
        return 0.0
    return float(r.mean()) / float(r.std())
