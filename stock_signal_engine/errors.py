from __future__ import annotations

from typing import Any, Dict

class AnalysisError(Exception):
    """Base for failures that abort an analysis with a single structured error."""
    code = "analysis_failed"
    status = 500

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": False, "error": self.code, "message": str(self)}

class MissingInputError(AnalysisError):
    code = "missing_input"
    status = 400

class DataUnavailableError(AnalysisError):
    code = "data_unavailable"
    status = 404

class InsufficientHistoryError(AnalysisError):
    code = "not_enough_data"
    status = 404

    def __init__(self, n: int, min_required: int):
        super().__init__(f"need at least {min_required} daily bars, got {n}")
        self.n = n
        self.min_required = min_required

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out.update({"min_required": self.min_required, "n": self.n})
        return out
