"""
AlgorithmState — running statistics for one stochastic search.

Tracks attempt counters, the best assignment seen so far and the
append-only attempt history.  Each strategy instance owns exactly one
AlgorithmState; it is discarded together with the strategy.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any

from colorlab.core.conflicts import Evaluation
from colorlab.core.graph import Assignment, Edge


# ── Records ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AttemptRecord:
    """One trial in the history."""

    attempt_number: int
    conflicts: int
    success: bool
    timestamp: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "attemptNumber": self.attempt_number,
            "conflicts": self.conflicts,
            "success": self.success,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class RecolorRecord:
    """One local-search recolor, kept for audit."""

    node_id: int
    old_color: str | None
    new_color: str | None
    pass_number: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "oldColor": self.old_color,
            "newColor": self.new_color,
            "passNumber": self.pass_number,
        }


# ── Statistics ─────────────────────────────────────────────────────

@dataclass
class SearchStats:
    attempts: int
    conflicts: int
    mean_conflicts: float
    success_rate: float
    progress: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempts": self.attempts,
            "conflicts": self.conflicts,
            "meanConflicts": self.mean_conflicts,
            "successRate": self.success_rate,
            "progress": self.progress,
        }


@dataclass
class LocalSearchStats:
    attempts: int
    conflicts: int
    progress: float
    initial_conflicts: int
    conflicts_reduced: int
    improvement: int
    pass_number: int
    recolored_nodes: list[RecolorRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempts": self.attempts,
            "conflicts": self.conflicts,
            "progress": self.progress,
            "initialConflicts": self.initial_conflicts,
            "conflictsReduced": self.conflicts_reduced,
            "improvement": self.improvement,
            "passNumber": self.pass_number,
            "recoloredNodes": [r.to_dict() for r in self.recolored_nodes],
        }


def percent(part: float, whole: float) -> int:
    """
    ``part / whole`` as a whole percentage, halves rounded up.

    Returns 0 when *whole* is 0.
    """
    if not whole:
        return 0
    return math.floor(part / whole * 100 + 0.5)


Stats = SearchStats | LocalSearchStats


@dataclass
class StepResult:
    """What every ``step()`` returns: the best result known so far."""

    done: bool
    assignment: Assignment
    conflict_edges: list[Edge]
    stats: Stats

    def to_dict(self) -> dict[str, Any]:
        return {
            "done": self.done,
            "colors": dict(self.assignment),
            "conflictEdges": [e.to_dict() for e in self.conflict_edges],
            "stats": self.stats.to_dict(),
        }


# ── AlgorithmState ─────────────────────────────────────────────────

class AlgorithmState:
    """
    Mutable counters for a stochastic search.

    ``best_conflicts`` starts at +inf and only ever decreases; the best
    assignment is replaced only by a strictly better trial.
    """

    def __init__(self) -> None:
        self.attempts = 0
        self.success_count = 0
        self.total_conflicts = 0
        self.best_assignment: Assignment = {}
        self.best_conflicts: float = math.inf
        self.best_conflict_edges: list[Edge] = []
        self.history: list[AttemptRecord] = []
        self.finished = False

    # ── Updates ────────────────────────────────────────────────────

    def record_trial(
        self, assignment: Assignment, evaluation: Evaluation
    ) -> AttemptRecord:
        """Fold one evaluated trial into the statistics and history."""
        self.attempts += 1
        self.total_conflicts += evaluation.conflicts
        if evaluation.success:
            self.success_count += 1

        record = AttemptRecord(
            attempt_number=self.attempts,
            conflicts=evaluation.conflicts,
            success=evaluation.success,
            timestamp=time.time(),
        )
        self.history.append(record)

        if evaluation.conflicts < self.best_conflicts:
            self.best_conflicts = evaluation.conflicts
            self.best_assignment = dict(assignment)
            self.best_conflict_edges = list(evaluation.conflict_edges)
        return record

    def improves(self, conflicts: int) -> bool:
        """Would a trial with *conflicts* replace the current best?"""
        return conflicts < self.best_conflicts

    # ── Read-outs ──────────────────────────────────────────────────

    @property
    def best_conflict_count(self) -> int:
        """Best conflict count, reported as 0 before the first trial."""
        return 0 if math.isinf(self.best_conflicts) else int(self.best_conflicts)

    def stats(self, progress: float) -> SearchStats:
        mean = self.total_conflicts / self.attempts if self.attempts else 0.0
        rate = self.success_count / self.attempts if self.attempts else 0.0
        return SearchStats(
            attempts=self.attempts,
            conflicts=self.best_conflict_count,
            mean_conflicts=mean,
            success_rate=rate,
            progress=progress,
        )

    # ── Dunder helpers ─────────────────────────────────────────────

    def __repr__(self) -> str:
        return (
            f"AlgorithmState(attempts={self.attempts}, "
            f"best={self.best_conflicts}, successes={self.success_count})"
        )

    def __len__(self) -> int:
        return len(self.history)
