"""
Wire messages exchanged between an ExecutionSession and its host.

Four kinds: ``start`` (host → session), then ``progress`` zero or more
times, followed by exactly one of ``complete`` or ``error``.  Field names
are camelCase on the wire.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from colorlab.core.constants import DEFAULT_COLORS, DEFAULT_MONTE_CARLO_ITERATIONS
from colorlab.core.graph import Edge, Graph
from colorlab.core.state import StepResult
from colorlab.solver.interface import ProgressUpdate
from colorlab.solver.registry import Algorithm


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# ── Graph snapshot ─────────────────────────────────────────────────

class NodeModel(WireModel):
    id: int
    x: float = 0.5
    y: float = 0.5
    color: str | None = None


class EdgeModel(WireModel):
    source_id: int
    target_id: int

    @classmethod
    def from_edge(cls, edge: Edge) -> EdgeModel:
        return cls(source_id=edge.source_id, target_id=edge.target_id)


class GraphSnapshot(WireModel):
    nodes: list[NodeModel] = Field(default_factory=list)
    edges: list[EdgeModel] = Field(default_factory=list)

    def to_graph(self) -> Graph:
        return Graph.from_dict(self.to_wire())

    @classmethod
    def from_graph(cls, graph: Graph) -> GraphSnapshot:
        return cls(
            nodes=[NodeModel(id=n.id, x=n.x, y=n.y, color=n.color) for n in graph.nodes],
            edges=[EdgeModel.from_edge(e) for e in graph.edges],
        )


# ── Host → session ─────────────────────────────────────────────────

class RunOptions(WireModel):
    """
    Range checks are deliberately left to ``validate_options`` so that
    problems surface as InvalidConfiguration, not as pydantic errors.
    """

    number_of_colors: int = DEFAULT_COLORS
    max_attempts: int | None = Field(
        default=None, description="Las Vegas attempt cap; null means unbounded"
    )
    iterations: int = Field(
        default=DEFAULT_MONTE_CARLO_ITERATIONS, description="Monte Carlo sample count"
    )
    seed: int | None = Field(default=None, description="Seed for reproducible runs")


class StartMessage(WireModel):
    type: Literal["start"] = "start"
    algorithm: Algorithm
    graph: GraphSnapshot
    options: RunOptions = Field(default_factory=RunOptions)


# ── Session → host ─────────────────────────────────────────────────

class ProgressMessage(WireModel):
    type: Literal["progress"] = "progress"
    run_id: int
    progress: float
    attempts: int
    conflicts: int
    colors: dict[int, str | None]
    conflict_edges: list[EdgeModel]
    mean_conflicts: float | None = None
    success_rate: float | None = None
    time_ms: float = 0.0
    new_attempts: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_update(
        cls, run_id: int, update: ProgressUpdate, time_ms: float
    ) -> ProgressMessage:
        return cls(
            run_id=run_id,
            progress=update.progress,
            attempts=update.attempts,
            conflicts=update.conflicts,
            colors=update.assignment,
            conflict_edges=[EdgeModel.from_edge(e) for e in update.conflict_edges],
            mean_conflicts=update.mean_conflicts,
            success_rate=update.success_rate,
            time_ms=time_ms,
            new_attempts=[r.to_dict() for r in update.new_history],
        )


class CompleteStats(WireModel):
    attempts: int
    conflicts: int
    mean_conflicts: float | None = None
    success_rate: float | None = None
    time_ms: float = 0.0


class CompleteMessage(WireModel):
    type: Literal["complete"] = "complete"
    run_id: int
    algorithm: Algorithm
    colors: dict[int, str | None]
    conflict_edges: list[EdgeModel]
    stats: CompleteStats
    details: dict[str, Any] = Field(
        default_factory=dict, description="Algorithm-specific final statistics"
    )

    @classmethod
    def from_result(
        cls, run_id: int, algorithm: Algorithm, result: StepResult, time_ms: float
    ) -> CompleteMessage:
        stats = result.stats
        return cls(
            run_id=run_id,
            algorithm=algorithm,
            colors=result.assignment,
            conflict_edges=[EdgeModel.from_edge(e) for e in result.conflict_edges],
            stats=CompleteStats(
                attempts=stats.attempts,
                conflicts=stats.conflicts,
                mean_conflicts=getattr(stats, "mean_conflicts", None),
                success_rate=getattr(stats, "success_rate", None),
                time_ms=time_ms,
            ),
            details=stats.to_dict(),
        )


class ErrorMessage(WireModel):
    type: Literal["error"] = "error"
    run_id: int
    message: str


SessionMessage = Union[ProgressMessage, CompleteMessage, ErrorMessage]
