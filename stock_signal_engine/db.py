from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from .models import AnalysisResult

def connect(db_path: str) -> sqlite3.Connection:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn

class SignalStore:
    """Latest analysis per symbol (upsert keyed by symbol)."""

    def __init__(self, db_path: str, table: str = "analysis_result"):
        self.db_path = db_path
        self.table = table

    def _connect(self) -> sqlite3.Connection:
        conn = connect(self.db_path)
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                symbol TEXT PRIMARY KEY,
                name TEXT,
                market_type TEXT,
                payload TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        return conn

    def upsert_analysis(self, result: AnalysisResult, market_type: str) -> None:
        payload = json.dumps(result.to_dict(), ensure_ascii=False)
        now = datetime.now(timezone.utc).isoformat()
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    f"""
                    INSERT INTO {self.table} (symbol, name, market_type, payload, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(symbol) DO UPDATE SET
                        name=excluded.name,
                        market_type=excluded.market_type,
                        payload=excluded.payload,
                        updated_at=excluded.updated_at
                    """,
                    (result.symbol, result.resolved_name, market_type, payload, now),
                )
        finally:
            conn.close()

    def fetch_frame(self) -> pd.DataFrame:
        conn = self._connect()
        conn.row_factory = None  # pandas wants plain tuples
        try:
            return pd.read_sql_query(
                f"SELECT symbol, name, market_type, payload, updated_at FROM {self.table} ORDER BY updated_at DESC",
                conn,
            )
        finally:
            conn.close()

    def list_analyses(self) -> List[Dict[str, Any]]:
        """Newest first; a payload that cannot be parsed is reported, not raised."""
        df = self.fetch_frame()
        return [format_record(r) for r in df.to_dict(orient="records")]

def format_record(row: Dict[str, Any]) -> Dict[str, Any]:
    try:
        detail = json.loads(row.get("payload") or "")
    except (TypeError, ValueError):
        detail = {"error": "parse_failed"}
    return {
        "symbol": row.get("symbol"),
        "name": row.get("name"),
        "type": row.get("market_type"),
        "updatedAt": row.get("updated_at"),
        "data": detail,
    }
