"""Tests for stock_signal_engine/db.py"""

import sqlite3
import time

from stock_signal_engine.db import SignalStore, format_record
from stock_signal_engine.models import Decision
from tests.conftest import make_result


class TestSignalStore:

    def test_empty_store_lists_nothing(self, cfg):
        assert SignalStore(cfg.db_path).list_analyses() == []

    def test_upsert_keeps_one_row_per_symbol(self, cfg):
        store = SignalStore(cfg.db_path)
        store.upsert_analysis(make_result(decision=Decision.HOLD), "sh")
        store.upsert_analysis(make_result(decision=Decision.BUY, total=1.7), "sh")

        rows = store.list_analyses()
        assert len(rows) == 1
        assert rows[0]["data"]["decision"] == "BUY"
        assert rows[0]["data"]["score"]["total"] == 1.7

    def test_newest_first(self, cfg):
        store = SignalStore(cfg.db_path)
        store.upsert_analysis(make_result(symbol="600519"), "sh")
        time.sleep(0.01)
        store.upsert_analysis(make_result(symbol="000001", name="平安银行"), "sz")

        rows = store.list_analyses()
        assert [r["symbol"] for r in rows] == ["000001", "600519"]
        assert rows[0]["type"] == "sz"
        assert rows[0]["name"] == "平安银行"

    def test_unparsable_payload_reported(self, cfg):
        store = SignalStore(cfg.db_path)
        store.upsert_analysis(make_result(), "sh")
        conn = sqlite3.connect(cfg.db_path)
        with conn:
            conn.execute(f"UPDATE {store.table} SET payload='{{broken' WHERE symbol='600519'")
        conn.close()

        rows = store.list_analyses()
        assert rows[0]["data"] == {"error": "parse_failed"}
        assert rows[0]["symbol"] == "600519"

    def test_creates_parent_directory(self, tmp_path):
        store = SignalStore(str(tmp_path / "nested" / "dir" / "signals.db"))
        store.upsert_analysis(make_result(), "sh")
        assert (tmp_path / "nested" / "dir" / "signals.db").exists()


class TestFormatRecord:

    def test_shape(self):
        rec = format_record(
            {"symbol": "600519", "name": "n", "market_type": "sh", "payload": '{"a": 1}', "updated_at": "t"}
        )
        assert rec == {"symbol": "600519", "name": "n", "type": "sh", "updatedAt": "t", "data": {"a": 1}}

    def test_missing_payload(self):
        assert format_record({"symbol": "x"})["data"] == {"error": "parse_failed"}
