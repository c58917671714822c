from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from .analyzer import run_analysis
from .config import EngineConfig
from .db import SignalStore
from .errors import AnalysisError
from .market_data import MARKET_TYPES

def _p(obj: Any) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2, default=str))

def _config(args: argparse.Namespace) -> EngineConfig:
    return EngineConfig(db_path=args.db, table=args.table)

def cmd_analyze(args: argparse.Namespace) -> int:
    cfg = _config(args)
    store = None if args.no_save else SignalStore(cfg.db_path, table=cfg.table)
    try:
        result = run_analysis(args.code, args.type, cfg, store=store)
    except AnalysisError as exc:
        _p(exc.to_dict())
        return 1
    _p(result.to_dict())
    return 0

def cmd_list(args: argparse.Namespace) -> int:
    cfg = _config(args)
    rows = SignalStore(cfg.db_path, table=cfg.table).list_analyses()
    _p({"success": True, "count": len(rows), "list": rows})
    return 0

def build_parser() -> argparse.ArgumentParser:
    defaults = EngineConfig()
    p = argparse.ArgumentParser(prog="stock_signal_engine", description="Technical-analysis buy/sell decision engine (daily bars, A-shares).")
    p.add_argument("--db", default=defaults.db_path, help=f"SQLite DB path (default: {defaults.db_path})")
    p.add_argument("--table", default=defaults.table, help=f"Result table (default: {defaults.table})")

    sub = p.add_subparsers(dest="cmd", required=True)

    p_an = sub.add_parser("analyze", help="Analyze one symbol and print the decision")
    p_an.add_argument("--code", required=True, help="Exchange code, e.g. 600519")
    p_an.add_argument("--type", required=True, choices=MARKET_TYPES)
    p_an.add_argument("--no-save", action="store_true", help="Do not store the result")
    p_an.set_defaults(func=cmd_analyze)

    p_ls = sub.add_parser("list", help="List stored analyses, newest first")
    p_ls.set_defaults(func=cmd_list)

    return p

def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    p = build_parser()
    args = p.parse_args()
    sys.exit(args.func(args))

if __name__ == "__main__":
    main()
