"""
Ties one submission to the history: evaluate, render, record.
"""
import logging
from typing import Tuple

from webrepl.webrepl_evaluator import Evaluator
from webrepl.webrepl_history import HistoryLog, HistoryRecord

logger = logging.getLogger(__name__)


class ReplSession:
    """The evaluation path behind POST /repl."""

    def __init__(self, evaluator: Evaluator, history: HistoryLog):
        self.evaluator = evaluator
        self.history = history

    def submit(self, expr: str) -> Tuple[HistoryRecord, ...]:
        """Evaluate `expr`, append its record and return the new history."""
        res = self.evaluator.evaluate(expr)
        record = HistoryRecord(expr=expr, result=res.result, out=res.out, err=res.err,
                               result_html=res.html)
        snapshot = self.history.append(record)
        logger.info("submission #%d: %s (%d chars)", len(snapshot), res.status, len(expr))
        return snapshot

    def current(self) -> Tuple[HistoryRecord, ...]:
        return self.history.current()


__all__ = [
    "ReplSession",
]
