"""
MonteCarloSearch — a fixed budget of random colorings, best one wins.

Unlike Las Vegas it never stops early: a zero-conflict trial mid-run is
kept as the best result but sampling continues until all iterations ran.
"""

from __future__ import annotations

import logging

from colorlab.core.constants import DEFAULT_MONTE_CARLO_ITERATIONS
from colorlab.core.graph import Graph
from colorlab.core.state import AlgorithmState, AttemptRecord, StepResult
from colorlab.solver.interface import ColoringStrategy
from colorlab.solver.sampling import RandomSource, TrialSampler

logger = logging.getLogger(__name__)


class MonteCarloSearch(ColoringStrategy):
    """Run exactly *iterations* uniform random trials."""

    name = "montecarlo"

    def __init__(
        self,
        graph: Graph,
        number_of_colors: int = 3,
        iterations: int = DEFAULT_MONTE_CARLO_ITERATIONS,
        rng: RandomSource = None,
    ) -> None:
        if iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {iterations}.")
        self._sampler = TrialSampler(graph, number_of_colors, rng)
        self.iterations = iterations
        self.state = AlgorithmState()

    @property
    def palette(self) -> list[str]:
        return self._sampler.palette

    @property
    def history(self) -> list[AttemptRecord]:
        return self.state.history

    def max_attempts(self) -> int:
        return self.iterations

    def calculate_progress(self) -> float:
        return self.state.attempts / self.iterations

    def step(self) -> StepResult:
        state = self.state
        if not state.finished:
            self._sampler.sample_into(state)
            if state.attempts >= self.iterations:
                state.finished = True
                logger.info(
                    "Monte Carlo done: %d iterations, best=%d, successes=%d",
                    state.attempts,
                    state.best_conflict_count,
                    state.success_count,
                )

        return StepResult(
            done=state.finished,
            assignment=dict(state.best_assignment),
            conflict_edges=list(state.best_conflict_edges),
            stats=state.stats(self.calculate_progress()),
        )
