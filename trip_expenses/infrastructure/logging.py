"""Structured audit log: JSON lines with provider keys scrubbed."""

from __future__ import annotations

import json
import sys
import time
import uuid
from typing import Any, Optional


def _get_scrubber():
    # Lazy import keeps this module free of the security package at import time.
    from trip_expenses.security.key_manager import get_key_manager

    return get_key_manager()


class StructuredLogger:
    def __init__(self, trace_id: Optional[str] = None, output=None):
        self.trace_id = trace_id or str(uuid.uuid4())[:8]
        self._output = output

    @property
    def output(self):
        return self._output if self._output is not None else sys.stderr

    def _emit(self, data: dict[str, Any]) -> None:
        data["trace_id"] = self.trace_id
        data["timestamp"] = time.time()
        line = json.dumps(data, ensure_ascii=False, default=str)
        line = _get_scrubber().scrub_text(line)
        self.output.write(line + "\n")
        self.output.flush()

    def event(self, name: str, **extra: Any) -> None:
        self._emit({"event": name, **extra})

    def record_confirmed(self, record_id: str, *, updated: bool, total: int) -> None:
        self.event("record_confirmed", record_id=record_id, updated=updated, total=total)

    def record_deleted(self, record_id: str) -> None:
        self.event("record_deleted", record_id=record_id)

    def records_cleared(self, count: int) -> None:
        self.event("records_cleared", count=count)

    def error(self, component: str, error: str, **extra: Any) -> None:
        self.event("error", component=component, error=error, **extra)


_logger: Optional[StructuredLogger] = None


def get_logger(trace_id: Optional[str] = None) -> StructuredLogger:
    global _logger
    if _logger is None or (trace_id and _logger.trace_id != trace_id):
        _logger = StructuredLogger(trace_id=trace_id)
    return _logger
