from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
import requests

from .config import EngineConfig
from .models import DailySeries, PriceBar

MARKET_TYPES = ("sh", "sz", "etf")
PRICE_COLUMNS = ("open", "high", "low", "close", "volume")

def format_full_id(code: str, market_type: str) -> str:
    """Market-qualified id used by the quote service, e.g. sh600519 / sz159915."""
    if market_type in ("sh", "sz"):
        return f"{market_type}{code}"
    if market_type == "etf":
        return f"{'sh' if code.startswith('5') else 'sz'}{code}"
    return f"sh{code}"

def _parse_klines(rows: List[List[Any]]) -> pd.DataFrame:
    """Kline rows are [date, open, close, high, low, volume, ...] (note close before high)."""
    recs = []
    for r in rows:
        if len(r) < 6:
            continue
        recs.append(
            {
                "date": r[0],
                "open": r[1],
                "close": r[2],
                "high": r[3],
                "low": r[4],
                "volume": r[5],
            }
        )
    df = pd.DataFrame(recs)
    if df.empty:
        return df
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    for col in PRICE_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    # blank or malformed fields drop the whole bar
    df = df.dropna(subset=["date", *PRICE_COLUMNS])
    if df.empty:
        return df
    df = df.sort_values("date", kind="mergesort").drop_duplicates(subset=["date"], keep="last")
    return df[["date", "open", "high", "low", "close", "volume"]]

def series_from_frame(df: pd.DataFrame) -> DailySeries:
    return DailySeries.from_bars(
        PriceBar(
            date=row.date.date(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for row in df.itertuples(index=False)
    )

class TencentMarketDataClient:
    """Tencent (gtimg) kline/quote client.

    - Every fetch is best-effort: failures are logged and reported as None
      (display name falls back to the id itself).
    - Blocking I/O; callers fan out with asyncio.to_thread.
    """

    def __init__(self, cfg: Optional[EngineConfig] = None, session: Optional[requests.Session] = None):
        self.cfg = cfg or EngineConfig()
        self.session = session or requests.Session()

    def _klines(self, full_id: str, period: str, count: int) -> Dict[str, Any]:
        params = {"param": f"{full_id},{period},,,{int(count)},qfq"}
        resp = self.session.get(self.cfg.kline_url, params=params, timeout=self.cfg.http_timeout_sec)
        resp.raise_for_status()
        payload = resp.json() or {}
        data = (payload.get("data") or {}).get(full_id)
        if not isinstance(data, dict):
            raise ValueError(f"no kline payload for {full_id}")
        return data

    def fetch_daily_candles(self, full_id: str) -> Optional[DailySeries]:
        try:
            data = self._klines(full_id, "day", self.cfg.daily_bars)
            rows = data.get("day") or data.get("qfqday")
            if not rows:
                return None
            df = _parse_klines(rows)
            if df.empty:
                return None
            return series_from_frame(df)
        except Exception as exc:
            logging.warning("daily kline fetch failed %s: %s", full_id, exc)
            return None

    def _closes(self, full_id: str, period: str, count: int) -> Optional[np.ndarray]:
        data = self._klines(full_id, period, count)
        rows = data.get(period) or data.get(f"qfq{period}")
        if not rows:
            return None
        df = _parse_klines(rows)
        if df.empty:
            return None
        return df["close"].to_numpy(dtype=float)

    def fetch_weekly_closes(self, full_id: str) -> Optional[np.ndarray]:
        try:
            return self._closes(full_id, "week", self.cfg.weekly_bars)
        except Exception as exc:
            logging.warning("weekly kline fetch failed %s: %s", full_id, exc)
            return None

    def fetch_index_closes(self, benchmark_id: Optional[str] = None) -> Optional[np.ndarray]:
        index_id = benchmark_id or self.cfg.benchmark_id
        try:
            return self._closes(index_id, "day", self.cfg.daily_bars)
        except Exception as exc:
            logging.warning("index kline fetch failed %s: %s", index_id, exc)
            return None

    def fetch_display_name(self, full_id: str) -> str:
        try:
            resp = self.session.get(f"{self.cfg.quote_url}{full_id}", timeout=self.cfg.http_timeout_sec)
            resp.raise_for_status()
            # quote lines are GBK encoded: v_sh600519="1~贵州茅台~600519~..."
            parts = resp.content.decode("gbk", errors="replace").split("~")
            name = parts[1].strip() if len(parts) > 1 else ""
            return name or full_id
        except Exception as exc:
            logging.warning("name lookup failed %s: %s", full_id, exc)
            return full_id
