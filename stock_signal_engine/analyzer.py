from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np

from .assembler import assemble_result
from .config import EngineConfig
from .db import SignalStore
from .decision import decide
from .errors import DataUnavailableError, MissingInputError
from .factors import build_factor_input, check_history, score_factors
from .market_data import TencentMarketDataClient, format_full_id
from .models import AnalysisResult, DailySeries
from .stats import compute_beta, compute_sharpe

@dataclass(frozen=True)
class MarketInputs:
    daily: Optional[DailySeries]
    index_closes: Optional[np.ndarray]
    weekly_closes: Optional[np.ndarray]
    name: str

async def fetch_inputs(client: Any, full_id: str, cfg: EngineConfig) -> MarketInputs:
    """Issue the four independent fetches at once and wait for all of them."""
    daily, index_closes, weekly_closes, name = await asyncio.gather(
        asyncio.to_thread(client.fetch_daily_candles, full_id),
        asyncio.to_thread(client.fetch_index_closes, cfg.benchmark_id),
        asyncio.to_thread(client.fetch_weekly_closes, full_id),
        asyncio.to_thread(client.fetch_display_name, full_id),
    )
    return MarketInputs(daily=daily, index_closes=index_closes, weekly_closes=weekly_closes, name=name or full_id)

def relative_stats(
    series: DailySeries,
    index_closes: Optional[np.ndarray],
    cfg: EngineConfig,
) -> Tuple[float, float]:
    """(beta, sharpe) over the trailing stats window.

    Without a benchmark of at least one full window, beta stays 0.
    """
    window = cfg.stats_window
    closes = series.closes[-window:]
    beta = 0.0
    if index_closes is not None and len(index_closes) >= window:
        beta = compute_beta(closes, np.asarray(index_closes, dtype=float)[-window:])
    return beta, compute_sharpe(closes)

def evaluate(code: str, full_id: str, inputs: MarketInputs, cfg: EngineConfig) -> AnalysisResult:
    """Pure scoring over already fetched inputs."""
    if inputs.daily is None:
        raise DataUnavailableError(f"no daily klines for {full_id}")
    check_history(inputs.daily, cfg)

    beta, sharpe = relative_stats(inputs.daily, inputs.index_closes, cfg)
    x = build_factor_input(
        inputs.daily,
        cfg,
        beta=beta,
        sharpe=sharpe,
        weekly_closes=inputs.weekly_closes,
    )
    factors = score_factors(x)
    outcome = decide(factors)
    return assemble_result(
        symbol=code,
        name=inputs.name,
        full_id=full_id,
        series=inputs.daily,
        x=x,
        factors=factors,
        outcome=outcome,
    )

def save_result(store: SignalStore, result: AnalysisResult, market_type: str) -> bool:
    """Persist after the fact; a failed write never changes the computed result."""
    try:
        store.upsert_analysis(result, market_type)
        return True
    except Exception:
        logging.exception("analysis save failed for %s", result.symbol)
        return False

async def analyze_symbol(
    code: Optional[str],
    market_type: Optional[str],
    cfg: Optional[EngineConfig] = None,
    *,
    client: Any = None,
    store: Optional[SignalStore] = None,
) -> AnalysisResult:
    code = str(code or "").strip()
    market_type = str(market_type or "").strip().lower()
    if not code:
        raise MissingInputError("code is required")
    if not market_type:
        raise MissingInputError("type is required (sh, sz or etf)")

    cfg = cfg or EngineConfig()
    client = client or TencentMarketDataClient(cfg)
    full_id = format_full_id(code, market_type)

    inputs = await fetch_inputs(client, full_id, cfg)
    result = evaluate(code, full_id, inputs, cfg)
    logging.info("analysis %s", json.dumps(result.to_dict(), ensure_ascii=False))

    if store is not None:
        save_result(store, result, market_type)
    return result

def run_analysis(
    code: Optional[str],
    market_type: Optional[str],
    cfg: Optional[EngineConfig] = None,
    *,
    client: Any = None,
    store: Optional[SignalStore] = None,
) -> AnalysisResult:
    """Blocking wrapper for the CLI and the Flask handlers."""
    return asyncio.run(analyze_symbol(code, market_type, cfg, client=client, store=store))
