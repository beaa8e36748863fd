"""
Uniform random trial generation shared by the stochastic searches.
"""

from __future__ import annotations

import numpy as np

from colorlab.core.conflicts import EdgeIndex, Evaluation
from colorlab.core.graph import Graph
from colorlab.core.palette import generate_palette
from colorlab.core.state import AlgorithmState, AttemptRecord

RandomSource = np.random.Generator | int | None


class TrialSampler:
    """
    Draws a uniformly random color per node and scores it.

    The graph is snapshotted on construction; later edits to the caller's
    graph are not seen by a running search.
    """

    def __init__(
        self,
        graph: Graph,
        number_of_colors: int,
        rng: RandomSource = None,
    ) -> None:
        snapshot = graph.copy()
        self.palette = generate_palette(number_of_colors)
        self.index = EdgeIndex(snapshot.node_ids, snapshot.edges)
        self.rng = np.random.default_rng(rng)

    def draw(self) -> np.ndarray:
        """One trial as a vector of palette indices."""
        return self.rng.integers(0, len(self.palette), size=len(self.index.node_ids))

    def sample_into(self, state: AlgorithmState) -> AttemptRecord:
        """
        Draw, evaluate and record one trial.

        Conflict edges and the assignment dict are only materialised when
        the trial beats the current best.
        """
        trial = self.draw()
        conflicts = self.index.count(trial)
        if state.improves(conflicts):
            evaluation = self.index.evaluate_indices(trial)
            assignment = self.index.to_assignment(trial, self.palette)
        else:
            evaluation, assignment = Evaluation(conflicts), {}
        return state.record_trial(assignment, evaluation)
