from __future__ import annotations

import os
from dataclasses import dataclass

def _env_float(key: str, default: float) -> float:
    v = os.getenv(key)
    if v is None or v == "":
        return default
    try:
        return float(v)
    except ValueError:
        return default

def _env_int(key: str, default: int) -> int:
    v = os.getenv(key)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default

def _env_str(key: str, default: str) -> str:
    v = os.getenv(key)
    return v if v not in (None, "") else default

@dataclass(frozen=True)
class EngineConfig:
    # Storage (latest analysis per symbol)
    db_path: str = _env_str("SIGNAL_DB_PATH", "data/signal_engine.db")
    table: str = _env_str("SIGNAL_DB_TABLE", "analysis_result")

    # Tencent quote service
    kline_url: str = _env_str("SIGNAL_KLINE_URL", "https://web.ifzq.gtimg.cn/appstock/app/fqkline/get")
    quote_url: str = _env_str("SIGNAL_QUOTE_URL", "https://qt.gtimg.cn/q=")
    benchmark_id: str = _env_str("SIGNAL_BENCHMARK_ID", "sh000001")  # SSE Composite
    daily_bars: int = _env_int("SIGNAL_DAILY_BARS", 250)
    weekly_bars: int = _env_int("SIGNAL_WEEKLY_BARS", 120)
    http_timeout_sec: float = _env_float("SIGNAL_HTTP_TIMEOUT_SEC", 10.0)

    # History requirements (bars)
    min_daily_bars: int = _env_int("SIGNAL_MIN_DAILY_BARS", 120)
    stats_window: int = _env_int("SIGNAL_STATS_WINDOW", 120)
    min_weekly_points: int = _env_int("SIGNAL_MIN_WEEKLY_POINTS", 20)

    # Indicator periods
    sma_fast: int = _env_int("SIGNAL_SMA_FAST", 5)
    sma_mid: int = _env_int("SIGNAL_SMA_MID", 20)
    sma_slow: int = _env_int("SIGNAL_SMA_SLOW", 60)
    volume_sma: int = _env_int("SIGNAL_VOLUME_SMA", 5)
    rsi_period: int = _env_int("SIGNAL_RSI_PERIOD", 7)
    atr_period: int = _env_int("SIGNAL_ATR_PERIOD", 14)
    macd_fast: int = _env_int("SIGNAL_MACD_FAST", 12)
    macd_slow: int = _env_int("SIGNAL_MACD_SLOW", 26)
    macd_signal: int = _env_int("SIGNAL_MACD_SIGNAL", 9)
    stoch_period: int = _env_int("SIGNAL_STOCH_PERIOD", 9)
    stoch_signal: int = _env_int("SIGNAL_STOCH_SIGNAL", 3)

    # Weekly confirmation
    weekly_sma_fast: int = _env_int("SIGNAL_WEEKLY_SMA_FAST", 5)
    weekly_sma_slow: int = _env_int("SIGNAL_WEEKLY_SMA_SLOW", 20)
