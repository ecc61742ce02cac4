from __future__ import annotations
from typing import Any, Callable, Dict, Optional

ProgressCallback = Callable[[Dict[str, Any]], None]


class Progress:
    """
    Thin wrapper around an optional on_progress callback.
    Events are plain dicts: {"phase": str, "pct": int, "msg": str}.
    """
    def __init__(self, callback: Optional[ProgressCallback] = None) -> None:
        self._cb = callback
        self._last: Dict[str, int] = {}

    def emit(self, phase: str, pct: int = 0, msg: str = "") -> None:
        if self._cb is None:
            return
        pct = max(0, min(100, int(pct)))
        self._last[phase] = pct
        self._cb({"phase": phase, "pct": pct, "msg": msg})

    def step(self, phase: str, done: int, total: int, msg: str = "") -> None:
        """Emit only when the integer percentage moved since the last event of this phase."""
        if self._cb is None:
            return
        pct = 100 if total <= 0 else (done * 100) // total
        if self._last.get(phase) == pct:
            return
        self.emit(phase, pct, msg)
