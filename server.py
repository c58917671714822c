from __future__ import annotations

import logging
import os
from typing import Any, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from stock_signal_engine.analyzer import run_analysis
from stock_signal_engine.config import EngineConfig
from stock_signal_engine.db import SignalStore
from stock_signal_engine.errors import AnalysisError

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")


def create_app(
    cfg: Optional[EngineConfig] = None,
    client: Any = None,
    store: Optional[SignalStore] = None,
) -> Flask:
    cfg = cfg or EngineConfig()
    store = store or SignalStore(cfg.db_path, table=cfg.table)

    app = Flask(__name__)
    CORS(app, resources={r"/*": {"origins": "*"}})

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.get("/api/market/analysis/<code>")
    def market_analysis(code: str):
        market_type = request.args.get("type")
        try:
            result = run_analysis(code, market_type, cfg, client=client, store=store)
        except AnalysisError as exc:
            return jsonify(exc.to_dict()), exc.status
        except Exception as exc:
            logging.exception("analysis failed code=%s type=%s", code, market_type)
            return jsonify({"ok": False, "error": "analysis_failed", "message": str(exc)}), 500
        return jsonify(result.to_dict())

    @app.get("/api/market/analyses")
    def market_analyses():
        try:
            rows = store.list_analyses()
        except Exception as exc:
            logging.exception("listing stored analyses failed")
            return jsonify({"success": False, "error": str(exc)}), 500
        return jsonify({"success": True, "count": len(rows), "list": rows})

    return app


app = create_app()


if __name__ == "__main__":
    host = os.getenv("SIGNAL_HOST", "0.0.0.0")
    port = int(os.getenv("SIGNAL_PORT", "5001"))
    app.run(host=host, port=port)
