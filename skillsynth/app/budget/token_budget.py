"""
Token Budget Tracker.

A session-scoped accumulator that UI-facing contributors (selected source
rows, existing content, instruction text) register against so that the
caller can decide whether a synthesis request is safe to issue.

IMPORTANT:
- Advisory only. The tracker NEVER blocks a synthesis call.
- Registration is idempotent per id: re-registering replaces the cost.
- A single lock guards the entry map; every operation is a small
  constant-time mutation or a snapshot.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from skillsynth.app.utils.tokens import estimate_tokens


HIGH_USAGE_PERCENT = 70.0
CRITICAL_USAGE_PERCENT = 90.0


class BudgetLevel(str, Enum):
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"
    OVER = "over"


class BudgetEntry(BaseModel):
    id: str
    label: str
    token_cost: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True, extra="forbid")


class BudgetSummary(BaseModel):
    total: int
    entries: List[BudgetEntry]

    model_config = ConfigDict(frozen=True, extra="forbid")


class BudgetStatus(BaseModel):
    ceiling: int
    total: int
    used_percent: float
    remaining: int
    over_budget: bool
    level: BudgetLevel

    model_config = ConfigDict(frozen=True, extra="forbid")


def classify_usage(used_percent: float) -> BudgetLevel:
    if used_percent > 100.0:
        return BudgetLevel.OVER
    if used_percent >= CRITICAL_USAGE_PERCENT:
        return BudgetLevel.CRITICAL
    if used_percent >= HIGH_USAGE_PERCENT:
        return BudgetLevel.HIGH
    return BudgetLevel.NORMAL


class TokenBudgetTracker:
    def __init__(self, *, ceiling: Optional[int] = None) -> None:
        if ceiling is not None and ceiling <= 0:
            raise ValueError("ceiling must be positive")

        self._ceiling = ceiling
        self._entries: Dict[str, BudgetEntry] = {}
        self._lock = threading.Lock()

    @property
    def ceiling(self) -> Optional[int]:
        return self._ceiling

    def register(self, id: str, label: str, token_cost: int) -> None:
        if token_cost < 0:
            raise ValueError("token_cost must not be negative")

        entry = BudgetEntry(id=id, label=label, token_cost=token_cost)
        with self._lock:
            self._entries[id] = entry

    def register_text(self, id: str, label: str, text: str) -> int:
        """Register ``text`` at its estimated token cost and return the cost."""
        cost = estimate_tokens(text)
        self.register(id, label, cost)
        return cost

    def deregister(self, id: str) -> bool:
        with self._lock:
            return self._entries.pop(id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def summary(self) -> BudgetSummary:
        with self._lock:
            entries = list(self._entries.values())

        return BudgetSummary(
            total=sum(e.token_cost for e in entries),
            entries=entries,
        )

    def budget_status(self, ceiling: Optional[int] = None) -> BudgetStatus:
        ceiling = ceiling if ceiling is not None else self._ceiling
        if ceiling is None:
            raise ValueError("No budget ceiling configured")
        if ceiling <= 0:
            raise ValueError("ceiling must be positive")

        total = self.summary().total
        used_percent = total / ceiling * 100.0

        return BudgetStatus(
            ceiling=ceiling,
            total=total,
            used_percent=used_percent,
            remaining=max(ceiling - total, 0),
            over_budget=total > ceiling,
            level=classify_usage(used_percent),
        )
