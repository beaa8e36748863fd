"""
ForceDirectedLayout — Fruchterman–Reingold node placement.

All pairs repel with ``k² / d``, edge endpoints attract with ``d² / k``,
and each iteration moves a node by at most the current temperature, which
cools geometrically.  Positions stay inside a margin of the unit square.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from colorlab.core.constants import (
    COOLING_RATE,
    JITTER,
    K_MULTIPLIER,
    LARGE_GRAPH_ITERATIONS,
    MEDIUM_GRAPH_ITERATIONS,
    MEDIUM_GRAPH_THRESHOLD,
    POSITION_MAX,
    POSITION_MIN,
    SMALL_GRAPH_ITERATIONS,
    SMALL_GRAPH_THRESHOLD,
    TEMPERATURE_FACTOR,
)
from colorlab.core.graph import Graph
from colorlab.solver.sampling import RandomSource

logger = logging.getLogger(__name__)

Positions = dict[int, tuple[float, float]]


def iterations_for(node_count: int) -> int:
    """More nodes need more relaxation steps to settle."""
    if node_count < SMALL_GRAPH_THRESHOLD:
        return SMALL_GRAPH_ITERATIONS
    if node_count < MEDIUM_GRAPH_THRESHOLD:
        return MEDIUM_GRAPH_ITERATIONS
    return LARGE_GRAPH_ITERATIONS


class ForceDirectedLayout:
    """
    Usage
    -----
    >>> layout = ForceDirectedLayout(rng=0)
    >>> positions = layout.compute(graph)
    >>> graph.apply_positions(positions)
    """

    def __init__(
        self,
        width: float = 1.0,
        height: float = 1.0,
        cooling_rate: float = COOLING_RATE,
        rng: RandomSource = None,
    ) -> None:
        self.width = width
        self.height = height
        self.area = width * height
        self.cooling_rate = cooling_rate
        self.rng = np.random.default_rng(rng)

    # ── Public API ─────────────────────────────────────────────────

    def compute(self, graph: Graph, iterations: int | None = None) -> Positions:
        """
        Run the simulation and return new positions by node id.

        The graph is not modified; use :meth:`Graph.apply_positions`.
        """
        n = len(graph.nodes)
        if n == 0:
            return {}
        if iterations is None:
            iterations = iterations_for(n)

        ids = graph.node_ids
        index = {node_id: i for i, node_id in enumerate(ids)}
        pos = np.array([[node.x, node.y] for node in graph.nodes], dtype=np.float64)
        edges = np.array(
            [
                (index[e.source_id], index[e.target_id])
                for e in graph.edges
                if e.source_id in index and e.target_id in index
            ],
            dtype=np.intp,
        ).reshape(-1, 2)

        k = math.sqrt(self.area / n) * K_MULTIPLIER
        temperature = self.width * TEMPERATURE_FACTOR

        for _ in range(iterations):
            force = self._repulsive_forces(pos, k) + self._attractive_forces(pos, edges, k)
            pos = self._apply_forces(pos, force, temperature)
            temperature *= self.cooling_rate

        logger.debug("Layout: %d nodes, %d iterations, k=%.4f", n, iterations, k)
        return {node_id: (float(x), float(y)) for node_id, (x, y) in zip(ids, pos)}

    def apply(self, graph: Graph, iterations: int | None = None) -> Positions:
        """Compute and commit positions in one go."""
        positions = self.compute(graph, iterations)
        graph.apply_positions(positions)
        return positions

    # ── Forces ─────────────────────────────────────────────────────

    def _safe_deltas(self, delta: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Distances for an (..., 2) delta array.

        Coincident points get a small random offset and a fixed distance so
        the force formulas never divide by zero.
        """
        delta = delta.copy()
        dist = np.hypot(delta[..., 0], delta[..., 1])
        zero = dist == 0
        if np.any(zero):
            delta[zero] = (self.rng.random((int(zero.sum()), 2)) - 0.5) * JITTER
            dist[zero] = JITTER
        return delta, dist

    def _repulsive_forces(self, pos: np.ndarray, k: float) -> np.ndarray:
        diagonal = np.arange(len(pos))
        delta = pos[:, None, :] - pos[None, :, :]
        # Self pairs carry no force; keep them out of the jitter.
        delta[diagonal, diagonal] = 1.0
        delta, dist = self._safe_deltas(delta)
        magnitude = (k * k) / dist
        magnitude[diagonal, diagonal] = 0.0
        return np.sum(delta / dist[..., None] * magnitude[..., None], axis=1)

    def _attractive_forces(self, pos: np.ndarray, edges: np.ndarray, k: float) -> np.ndarray:
        force = np.zeros_like(pos)
        if len(edges) == 0:
            return force
        src, dst = edges[:, 0], edges[:, 1]
        delta, dist = self._safe_deltas(pos[dst] - pos[src])
        pull = delta / dist[:, None] * ((dist * dist) / k)[:, None]
        np.add.at(force, src, pull)
        np.add.at(force, dst, -pull)
        return force

    @staticmethod
    def _apply_forces(pos: np.ndarray, force: np.ndarray, temperature: float) -> np.ndarray:
        magnitude = np.hypot(force[:, 0], force[:, 1])
        magnitude = np.where(magnitude == 0, 0.001, magnitude)
        step = np.minimum(magnitude, temperature)
        moved = pos + force / magnitude[:, None] * step[:, None]
        return np.clip(moved, POSITION_MIN, POSITION_MAX)
