"""
ConflictEvaluator — counts edges whose endpoints share a color.

``evaluate`` is the reference definition and works on plain mappings.
``EdgeIndex`` compiles the edge list into NumPy index arrays so the
stochastic searches can score millions of trials without building a dict
per trial.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

import numpy as np

from colorlab.core.graph import Edge


@dataclass
class Evaluation:
    """Result of scoring one assignment."""

    conflicts: int
    conflict_edges: list[Edge] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.conflicts == 0


def evaluate(
    edges: Iterable[Edge], assignment: Mapping[int, str | None]
) -> Evaluation:
    """
    Count conflicting edges.

    An edge conflicts iff both endpoints have a non-null color and the
    colors are equal.  Missing or None colors never conflict.
    """
    conflict_edges: list[Edge] = []
    for edge in edges:
        first = assignment.get(edge.source_id)
        second = assignment.get(edge.target_id)
        if first is not None and second is not None and first == second:
            conflict_edges.append(edge)
    return Evaluation(len(conflict_edges), conflict_edges)


def count_conflicts_with_color(
    node_id: int,
    color: str | None,
    neighbors: Mapping[int, Sequence[int]],
    assignment: Mapping[int, str | None],
) -> int:
    """How many neighbors of *node_id* would clash if it took *color*."""
    if color is None:
        return 0
    return sum(1 for n in neighbors.get(node_id, ()) if assignment.get(n) == color)


def conflicting_nodes(conflict_edges: Iterable[Edge]) -> list[int]:
    """Node ids touching a conflict edge, in first-appearance order."""
    seen: dict[int, None] = {}
    for edge in conflict_edges:
        seen.setdefault(edge.source_id)
        seen.setdefault(edge.target_id)
    return list(seen)


class EdgeIndex:
    """
    Edge list compiled against a fixed node ordering.

    Trials are expressed as an integer vector ``color_indices`` where
    ``color_indices[i]`` is the palette index of ``node_ids[i]``.
    """

    def __init__(self, node_ids: Sequence[int], edges: Sequence[Edge]) -> None:
        self.node_ids = list(node_ids)
        position = {node_id: i for i, node_id in enumerate(self.node_ids)}
        # Edges pointing at unknown nodes can never conflict; drop them.
        self.edges = [
            e for e in edges if e.source_id in position and e.target_id in position
        ]
        self._src = np.fromiter(
            (position[e.source_id] for e in self.edges), dtype=np.intp, count=len(self.edges)
        )
        self._dst = np.fromiter(
            (position[e.target_id] for e in self.edges), dtype=np.intp, count=len(self.edges)
        )

    def count(self, color_indices: np.ndarray) -> int:
        """Number of conflicting edges for a palette-index vector."""
        return int(np.count_nonzero(color_indices[self._src] == color_indices[self._dst]))

    def evaluate_indices(self, color_indices: np.ndarray) -> Evaluation:
        mask = color_indices[self._src] == color_indices[self._dst]
        conflict_edges = [self.edges[i] for i in np.flatnonzero(mask)]
        return Evaluation(len(conflict_edges), conflict_edges)

    def to_assignment(
        self, color_indices: np.ndarray, palette: Sequence[str]
    ) -> dict[int, str | None]:
        return {
            node_id: palette[int(idx)]
            for node_id, idx in zip(self.node_ids, color_indices)
        }

    def __len__(self) -> int:
        return len(self.edges)
