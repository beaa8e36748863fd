"""
RecolorImpactAnalyzer — what-if analysis for one manual recolor.

Answers: which neighbors would clash with the new color, can those
neighbors move somewhere else, and how likely is it that the clash can be
repaired.  The graph is never modified; the analysis runs on a copy of its
coloring.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import networkx as nx

from colorlab.core.conflicts import evaluate
from colorlab.core.graph import Graph
from colorlab.core.palette import generate_palette
from colorlab.core.state import percent

logger = logging.getLogger(__name__)

BASE_COLOR_FACTOR = 0.7
PALETTE_COLOR_FACTOR = 0.3


@dataclass
class RecolorSuggestion:
    node_id: int
    current_color: str | None
    suggested_colors: list[str]
    conflict_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "currentColor": self.current_color,
            "suggestedColors": list(self.suggested_colors),
            "conflictCount": self.conflict_count,
        }


@dataclass
class ImpactSummary:
    improved: bool
    worsened: bool
    neutral: bool
    change_percent: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "improved": self.improved,
            "worsened": self.worsened,
            "neutral": self.neutral,
            "changePercent": self.change_percent,
        }


@dataclass
class RecolorImpact:
    node_id: int
    old_color: str | None
    new_color: str
    neighbors: list[int]
    conflicting_neighbors: list[int]
    recolorable_count: int
    success_probability: float
    conflicts_before: int
    conflicts_after: int
    number_of_colors: int
    summary: ImpactSummary
    suggestions: list[RecolorSuggestion] = field(default_factory=list)

    @property
    def conflict_delta(self) -> int:
        return self.conflicts_after - self.conflicts_before

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "oldColor": self.old_color,
            "newColor": self.new_color,
            "conflictsBefore": self.conflicts_before,
            "conflictsAfter": self.conflicts_after,
            "conflictDelta": self.conflict_delta,
            "neighbors": list(self.neighbors),
            "totalNeighbors": len(self.neighbors),
            "conflictingNeighbors": list(self.conflicting_neighbors),
            "conflictingNeighborsCount": len(self.conflicting_neighbors),
            "canRecolorCount": self.recolorable_count,
            "successProbability": self.success_probability,
            "kColors": self.number_of_colors,
            "recolorSuggestions": [s.to_dict() for s in self.suggestions],
            "impactAnalysis": self.summary.to_dict(),
        }


# ── Scoring helpers ────────────────────────────────────────────────

def success_probability(
    recolorable_count: int, conflicting_count: int, number_of_colors: int
) -> float:
    """
    Heuristic chance that every conflicting neighbor can be repaired.

    ``min(1, recolorable / max(1, conflicting) * (0.7 + 0.3 * k / 10))``,
    and 1.0 when nothing conflicts.
    """
    if conflicting_count == 0:
        return 1.0
    base = recolorable_count / max(conflicting_count, 1)
    factor = BASE_COLOR_FACTOR + PALETTE_COLOR_FACTOR * (number_of_colors / 10)
    return min(base * factor, 1.0)


def summarize_impact(conflicts_before: int, conflicts_after: int) -> ImpactSummary:
    """Compare conflict counts before and after a change."""
    delta = conflicts_after - conflicts_before
    if conflicts_before > 0:
        change = percent(delta, conflicts_before)
    else:
        change = 100 if delta > 0 else 0
    return ImpactSummary(
        improved=delta < 0,
        worsened=delta > 0,
        neutral=delta == 0,
        change_percent=change,
    )


# ── Analysis ───────────────────────────────────────────────────────

def analyze_recolor(
    graph: Graph,
    node_id: int,
    new_color: str,
    number_of_colors: int,
) -> RecolorImpact:
    """
    Evaluate recoloring *node_id* to *new_color* without committing it.

    Raises KeyError if *node_id* is not in the graph.
    """
    old_color = graph.get_node(node_id).color
    palette = generate_palette(number_of_colors)
    g = graph.to_networkx()

    before = graph.colors()
    after = dict(before)
    after[node_id] = new_color

    neighbors = list(g.neighbors(node_id))
    conflicting = [n for n in neighbors if before.get(n) == new_color]

    recolorable = 0
    suggestions: list[RecolorSuggestion] = []
    for neighbor in conflicting:
        alternatives = _free_colors(g, neighbor, palette, after)
        if not alternatives:
            continue
        recolorable += 1
        own_color = after.get(neighbor)
        suggestions.append(
            RecolorSuggestion(
                node_id=neighbor,
                current_color=own_color,
                suggested_colors=alternatives,
                conflict_count=sum(1 for m in g.neighbors(neighbor) if after.get(m) == own_color),
            )
        )

    conflicts_before = evaluate(graph.edges, before).conflicts
    conflicts_after = evaluate(graph.edges, after).conflicts

    impact = RecolorImpact(
        node_id=node_id,
        old_color=old_color,
        new_color=new_color,
        neighbors=neighbors,
        conflicting_neighbors=conflicting,
        recolorable_count=recolorable,
        success_probability=success_probability(recolorable, len(conflicting), number_of_colors),
        conflicts_before=conflicts_before,
        conflicts_after=conflicts_after,
        number_of_colors=number_of_colors,
        summary=summarize_impact(conflicts_before, conflicts_after),
        suggestions=suggestions,
    )
    logger.debug(
        "Recolor %s -> %s: %d conflicting neighbors, p=%.2f",
        node_id,
        new_color,
        len(conflicting),
        impact.success_probability,
    )
    return impact


def _free_colors(
    g: nx.Graph, node_id: int, palette: list[str], colors: dict[int, str | None]
) -> list[str]:
    """Palette colors not used by any neighbor of *node_id*."""
    used = {colors.get(n) for n in g.neighbors(node_id)}
    return [c for c in palette if c not in used]
