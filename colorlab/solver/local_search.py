"""
LocalSearchOptimizer — greedy, pass-based repair of an existing coloring.

Each step visits one conflicted node and moves it to the palette color
with the fewest clashes against its neighbors' *current* colors.  Updates
are sequential: later nodes in a pass see earlier recolors.
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from typing import Mapping

from colorlab.core.conflicts import (
    conflicting_nodes,
    count_conflicts_with_color,
    evaluate,
)
from colorlab.core.graph import Assignment, Graph
from colorlab.core.palette import generate_palette
from colorlab.core.state import (
    LocalSearchStats,
    RecolorRecord,
    StepResult,
    percent,
)
from colorlab.solver.interface import ColoringStrategy

logger = logging.getLogger(__name__)


class LocalSearchOptimizer(ColoringStrategy):
    """
    Parameters
    ----------
    graph : Graph
        Graph whose coloring is improved.  It is never mutated.
    number_of_colors : int
        Palette size to choose replacement colors from.
    assignment : mapping, optional
        Starting coloring; defaults to the graph's committed colors.
    """

    name = "localsearch"

    def __init__(
        self,
        graph: Graph,
        number_of_colors: int = 3,
        assignment: Mapping[int, str | None] | None = None,
    ) -> None:
        snapshot = graph.copy()
        self.palette = generate_palette(number_of_colors)
        self.edges = snapshot.edges
        self.neighbors = snapshot.adjacency()

        start = assignment if assignment is not None else snapshot.colors()
        self.colors: Assignment = {node_id: start.get(node_id) for node_id in snapshot.node_ids}

        self.conflict_edges = evaluate(self.edges, self.colors).conflict_edges
        self.initial_conflicts = len(self.conflict_edges)

        self.pass_number = 1
        self.recolored_in_pass = 0
        self.recolored_nodes: list[RecolorRecord] = []
        self.done = False
        self._queue: deque[int] = self._build_queue()

        logger.debug(
            "Local search start: %d conflicts, %d queued nodes",
            self.initial_conflicts,
            len(self._queue),
        )

    # ── Contract ───────────────────────────────────────────────────

    @property
    def history(self) -> list[RecolorRecord]:
        return self.recolored_nodes

    def max_attempts(self) -> None:
        return None

    def calculate_progress(self) -> float:
        if self.initial_conflicts == 0:
            return 1.0
        reduced = self.initial_conflicts - len(self.conflict_edges)
        return min(max(reduced / self.initial_conflicts, 0.0), 1.0)

    def step(self) -> StepResult:
        if not self.done:
            if self._queue:
                self._visit(self._queue.popleft())
            if not self._queue:
                self._end_pass()
        return self._result()

    # ── Greedy choice ──────────────────────────────────────────────

    def find_best_color(self, node_id: int) -> tuple[str | None, int]:
        """
        Palette color with the strictly fewest conflicts for *node_id*.

        The current color wins ties, so a no-op is never an improvement.
        """
        current = self.colors.get(node_id)
        best_color = current
        best_count = count_conflicts_with_color(node_id, current, self.neighbors, self.colors)
        for color in self.palette:
            if color == current:
                continue
            count = count_conflicts_with_color(node_id, color, self.neighbors, self.colors)
            if count < best_count:
                best_color, best_count = color, count
        return best_color, best_count

    def _visit(self, node_id: int) -> None:
        old_color = self.colors.get(node_id)
        new_color, _ = self.find_best_color(node_id)
        if new_color == old_color:
            return

        self.colors[node_id] = new_color
        self.recolored_in_pass += 1
        self.recolored_nodes.append(
            RecolorRecord(node_id, old_color, new_color, self.pass_number)
        )
        self.conflict_edges = evaluate(self.edges, self.colors).conflict_edges

    def _end_pass(self) -> None:
        if not self.conflict_edges or self.recolored_in_pass == 0:
            self.done = True
            logger.info(
                "Local search done after pass %d: %d -> %d conflicts, %d recolors",
                self.pass_number,
                self.initial_conflicts,
                len(self.conflict_edges),
                len(self.recolored_nodes),
            )
            return

        self.pass_number += 1
        self.recolored_in_pass = 0
        self._queue = self._build_queue()
        logger.debug(
            "Local search pass %d: %d conflicts, %d queued nodes",
            self.pass_number,
            len(self.conflict_edges),
            len(self._queue),
        )

    def _build_queue(self) -> deque[int]:
        """Conflicted nodes, most conflicting edges first."""
        degree = Counter()
        for edge in self.conflict_edges:
            degree[edge.source_id] += 1
            degree[edge.target_id] += 1
        ordered = sorted(conflicting_nodes(self.conflict_edges), key=lambda n: -degree[n])
        return deque(ordered)

    # ── Result ─────────────────────────────────────────────────────

    def _result(self) -> StepResult:
        current = len(self.conflict_edges)
        reduced = self.initial_conflicts - current
        improvement = percent(reduced, self.initial_conflicts)
        stats = LocalSearchStats(
            attempts=len(self.recolored_nodes),
            conflicts=current,
            progress=self.calculate_progress(),
            initial_conflicts=self.initial_conflicts,
            conflicts_reduced=reduced,
            improvement=improvement,
            pass_number=self.pass_number,
            recolored_nodes=list(self.recolored_nodes),
        )
        return StepResult(
            done=self.done,
            assignment=dict(self.colors),
            conflict_edges=list(self.conflict_edges),
            stats=stats,
        )
