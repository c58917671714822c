"""Technical-analysis decision engine for exchange-listed equities (daily bars).

Per symbol:
- fetch daily candles, benchmark index closes, weekly closes and the display name concurrently
- score seven factors (trend, momentum, volume, accumulation, weekly trend, relative, risk)
- weighted total -> logistic buy probability -> STRONG BUY / BUY / HOLD / SELL / STRONG SELL
"""

__all__ = [
    "config",
    "models",
    "errors",
    "indicators",
    "stats",
    "factors",
    "decision",
    "assembler",
    "market_data",
    "db",
    "analyzer",
]
