"""
Pydantic schemas for the FastAPI endpoints.

Run requests reuse the wire protocol models from
``colorlab.engine.messages``; the models here cover the one-shot helpers.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from colorlab.core.constants import DEFAULT_COLORS, MAX_NODES
from colorlab.engine.messages import EdgeModel, GraphSnapshot, WireModel


# ── Local search ───────────────────────────────────────────────────

class LocalSearchInput(WireModel):
    """Graph with its committed colors; those are the starting point."""

    graph: GraphSnapshot
    number_of_colors: int = DEFAULT_COLORS


class LocalSearchResult(WireModel):
    colors: dict[int, str | None]
    conflict_edges: list[EdgeModel]
    initial_conflicts: int
    conflicts: int
    conflicts_reduced: int
    improvement: int
    passes: int
    recolored_nodes: list[dict[str, Any]]
    time_ms: float


# ── Conflicts ──────────────────────────────────────────────────────

class ConflictsResult(WireModel):
    conflicts: int
    success: bool
    conflict_edges: list[EdgeModel]
    conflicting_nodes: list[int]


# ── Recolor what-if ────────────────────────────────────────────────

class RecolorImpactInput(WireModel):
    graph: GraphSnapshot
    node_id: int
    new_color: str
    number_of_colors: int = DEFAULT_COLORS


# ── Layout / generation ────────────────────────────────────────────

class LayoutInput(WireModel):
    graph: GraphSnapshot
    iterations: int | None = Field(
        default=None, ge=1, description="Defaults to a count chosen by graph size"
    )
    seed: int | None = None


class RandomGraphInput(WireModel):
    node_count: int = Field(..., ge=1, le=MAX_NODES)
    seed: int | None = None
