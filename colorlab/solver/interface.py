"""
ColoringStrategy — the step/run contract shared by every search.

Design: Strategy pattern.  The ExecutionSession only talks to this
interface, so Las Vegas, Monte Carlo and local search are interchangeable
behind a single boundary.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from colorlab.core.constants import DEFAULT_BATCH_SIZE
from colorlab.core.graph import Assignment, Edge
from colorlab.core.state import AttemptRecord, RecolorRecord, StepResult

logger = logging.getLogger(__name__)

HistoryRecord = AttemptRecord | RecolorRecord


@dataclass
class ProgressUpdate:
    """
    Snapshot handed to a ``run()`` progress callback.

    ``new_history`` holds only the records appended since the previous
    callback, never the full history.
    """

    progress: float
    attempts: int
    conflicts: int
    assignment: Assignment
    conflict_edges: list[Edge]
    mean_conflicts: float | None
    success_rate: float | None
    done: bool
    new_history: list[HistoryRecord] = field(default_factory=list)

    @classmethod
    def from_step(
        cls,
        result: StepResult,
        progress: float,
        new_history: Sequence[HistoryRecord],
    ) -> ProgressUpdate:
        stats = result.stats
        return cls(
            progress=progress,
            attempts=stats.attempts,
            conflicts=stats.conflicts,
            assignment=dict(result.assignment),
            conflict_edges=list(result.conflict_edges),
            mean_conflicts=getattr(stats, "mean_conflicts", None),
            success_rate=getattr(stats, "success_rate", None),
            done=result.done,
            new_history=list(new_history),
        )


ProgressCallback = Callable[[ProgressUpdate], Any]


class ColoringStrategy(ABC):
    """
    Abstract incremental coloring search.

    Subclasses implement one unit of work in :meth:`step`; :meth:`run`
    drives it to completion.
    """

    #: Wire name of the algorithm ("lasvegas", "montecarlo", ...).
    name: str = ""

    @abstractmethod
    def step(self) -> StepResult:
        """
        Advance exactly one unit of work and return the best result so far.

        Once the strategy is done, further calls return the final result
        without doing more work.
        """
        ...

    @abstractmethod
    def calculate_progress(self) -> float:
        """Completion estimate in [0, 1]."""
        ...

    @abstractmethod
    def max_attempts(self) -> int | None:
        """Attempt cap, or None when unbounded."""
        ...

    @property
    @abstractmethod
    def history(self) -> Sequence[HistoryRecord]:
        """Append-only record of the work done so far."""
        ...

    # ── Driver loop ────────────────────────────────────────────────

    def run(
        self,
        progress_callback: ProgressCallback | None = None,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        should_stop: Callable[[], bool] | None = None,
    ) -> StepResult | None:
        """
        Call :meth:`step` until done.

        Parameters
        ----------
        progress_callback : callable, optional
            Invoked every *batch_size* steps and once on completion with a
            :class:`ProgressUpdate`.
        batch_size : int
            Steps between two progress callbacks.
        should_stop : callable, optional
            Polled between steps.  When it returns True the loop stops and
            returns None; nothing further is reported.

        Returns
        -------
        The final StepResult, or None when stopped early.
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}.")

        steps = 0
        last_sent = 0

        while True:
            if should_stop is not None and should_stop():
                logger.info("%s stopped after %d steps", self.name, steps)
                return None

            result = self.step()
            steps += 1

            if progress_callback is not None and (steps % batch_size == 0 or result.done):
                history = self.history
                new_history = history[last_sent:]
                last_sent = len(history)
                progress_callback(
                    ProgressUpdate.from_step(result, self.calculate_progress(), new_history)
                )

            if result.done:
                logger.info(
                    "%s finished: steps=%d conflicts=%d",
                    self.name,
                    steps,
                    result.stats.conflicts,
                )
                return result
