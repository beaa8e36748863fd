"""
LasVegasSearch — random colorings until one has zero conflicts.

Any answer it reports as a success is guaranteed valid; with a finite
attempt cap it may instead give up and return the best trial it saw.
"""

from __future__ import annotations

import enum
import logging

from colorlab.core.graph import Graph
from colorlab.core.state import AlgorithmState, AttemptRecord, StepResult
from colorlab.solver.interface import ColoringStrategy
from colorlab.solver.sampling import RandomSource, TrialSampler

logger = logging.getLogger(__name__)


class SearchOutcome(str, enum.Enum):
    RUNNING = "running"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


class LasVegasSearch(ColoringStrategy):
    """
    Parameters
    ----------
    graph : Graph
        Graph to color.  Only a snapshot is kept.
    number_of_colors : int
        Palette size.
    max_attempts : int, optional
        Attempt cap; None means unbounded, in which case the caller must
        provide a way to cancel the run.
    rng : numpy Generator or seed, optional
    """

    name = "lasvegas"

    def __init__(
        self,
        graph: Graph,
        number_of_colors: int = 3,
        max_attempts: int | None = None,
        rng: RandomSource = None,
    ) -> None:
        self._sampler = TrialSampler(graph, number_of_colors, rng)
        self._max_attempts = max_attempts
        self.state = AlgorithmState()
        self.outcome = SearchOutcome.RUNNING

    @property
    def palette(self) -> list[str]:
        return self._sampler.palette

    @property
    def history(self) -> list[AttemptRecord]:
        return self.state.history

    def max_attempts(self) -> int | None:
        return self._max_attempts

    def calculate_progress(self) -> float:
        if self._max_attempts is None:
            return 0.0
        return min(self.state.attempts / self._max_attempts, 1.0)

    def _cap_reached(self) -> bool:
        return self._max_attempts is not None and self.state.attempts >= self._max_attempts

    def step(self) -> StepResult:
        state = self.state
        if not state.finished and self._cap_reached():
            self._finish(SearchOutcome.EXHAUSTED)

        if not state.finished:
            record = self._sampler.sample_into(state)
            if record.success:
                self._finish(SearchOutcome.SUCCESS)
            elif self._cap_reached():
                self._finish(SearchOutcome.EXHAUSTED)

        return StepResult(
            done=state.finished,
            assignment=dict(state.best_assignment),
            conflict_edges=list(state.best_conflict_edges),
            stats=state.stats(self.calculate_progress()),
        )

    def _finish(self, outcome: SearchOutcome) -> None:
        self.state.finished = True
        self.outcome = outcome
        logger.info(
            "Las Vegas %s after %d attempts (best=%d)",
            outcome.value,
            self.state.attempts,
            self.state.best_conflict_count,
        )
