"""
FastAPI routes for the colorlab backend.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Iterator

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse

from colorlab.analysis.recolor import analyze_recolor
from colorlab.api.schemas import (
    ConflictsResult,
    LayoutInput,
    LocalSearchInput,
    LocalSearchResult,
    RandomGraphInput,
    RecolorImpactInput,
)
from colorlab.config import get_settings
from colorlab.core.conflicts import conflicting_nodes, evaluate
from colorlab.core.errors import ColoringError, ExecutionFault
from colorlab.core.validation import validate_color_count
from colorlab.engine.messages import (
    EdgeModel,
    ErrorMessage,
    GraphSnapshot,
    RunOptions,
    StartMessage,
)
from colorlab.engine.session import ExecutionSession
from colorlab.layout.force_directed import ForceDirectedLayout
from colorlab.layout.generator import generate_random_connected_graph
from colorlab.solver.registry import Algorithm, list_algorithms

logger = logging.getLogger(__name__)

router = APIRouter()


def _start_session(message: StartMessage) -> ExecutionSession:
    """Start a background run, mapping validation failures to 400."""
    try:
        return ExecutionSession.from_start_message(
            message, background=True, settings=get_settings()
        )
    except ColoringError as exc:
        logger.warning("Rejected %s run: %s", message.algorithm.value, exc)
        raise HTTPException(status_code=400, detail=str(exc))


# ── Algorithms ─────────────────────────────────────────────────────

@router.get("/algorithms")
async def get_algorithms() -> list[dict[str, Any]]:
    """List the registered coloring algorithms."""
    return [
        {"name": name, "label": Algorithm(name).label, "stochastic": Algorithm(name).stochastic}
        for name in list_algorithms()
    ]


# ── Coloring runs ──────────────────────────────────────────────────

@router.post("/color")
def color_graph(
    message: StartMessage,
    timeout: float | None = Query(default=None, gt=0, description="Seconds before giving up"),
) -> dict[str, Any]:
    """
    Run a start message to completion and return the complete message.
    """
    session = _start_session(message)
    try:
        final = session.wait(timeout)
    finally:
        session.close()

    if final is None:
        raise HTTPException(status_code=504, detail=f"Run did not finish within {timeout}s.")
    if isinstance(final, ErrorMessage):
        raise HTTPException(status_code=500, detail=final.message)
    return final.to_wire()


@router.post("/color/stream")
def stream_coloring(message: StartMessage) -> StreamingResponse:
    """
    Stream progress messages as NDJSON, ending with complete or error.

    Closing the stream cancels the run.
    """
    session = _start_session(message)

    def lines() -> Iterator[str]:
        try:
            for msg in session.messages():
                yield msg.model_dump_json(by_alias=True) + "\n"
        finally:
            session.close()

    return StreamingResponse(lines(), media_type="application/x-ndjson")


@router.post("/local-search", response_model=LocalSearchResult, response_model_by_alias=True)
def local_search(payload: LocalSearchInput) -> LocalSearchResult:
    """
    Repair the graph's committed coloring and return the recolor audit.
    """
    graph = payload.graph.to_graph()
    session = ExecutionSession(graph, settings=get_settings())
    try:
        session.start(
            Algorithm.LOCAL_SEARCH,
            RunOptions(number_of_colors=payload.number_of_colors),
            background=False,
        )
        session.drive(itertools.count())
    except ColoringError as exc:
        if isinstance(exc, ExecutionFault):
            logger.exception("Local search failed")
            raise HTTPException(status_code=500, detail=str(exc))
        logger.warning("Rejected local search: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    finally:
        session.close()

    result = session.result
    details = result.details
    return LocalSearchResult(
        colors=result.colors,
        conflict_edges=result.conflict_edges,
        initial_conflicts=details["initialConflicts"],
        conflicts=result.stats.conflicts,
        conflicts_reduced=details["conflictsReduced"],
        improvement=details["improvement"],
        passes=details["passNumber"],
        recolored_nodes=details["recoloredNodes"],
        time_ms=result.stats.time_ms,
    )


# ── Analysis ───────────────────────────────────────────────────────

@router.post("/conflicts", response_model=ConflictsResult, response_model_by_alias=True)
async def get_conflicts(payload: GraphSnapshot) -> ConflictsResult:
    """Evaluate the graph's committed colors."""
    graph = payload.to_graph()
    evaluation = evaluate(graph.edges, graph.colors())
    return ConflictsResult(
        conflicts=evaluation.conflicts,
        success=evaluation.success,
        conflict_edges=[EdgeModel.from_edge(e) for e in evaluation.conflict_edges],
        conflicting_nodes=conflicting_nodes(evaluation.conflict_edges),
    )


@router.post("/recolor-impact")
async def recolor_impact(payload: RecolorImpactInput) -> dict[str, Any]:
    """What-if analysis for recoloring one node; nothing is committed."""
    try:
        validate_color_count(payload.number_of_colors)
        impact = analyze_recolor(
            payload.graph.to_graph(),
            payload.node_id,
            payload.new_color,
            payload.number_of_colors,
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Node {exc} not found.")
    except ColoringError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return impact.to_dict()


# ── Layout / generation ────────────────────────────────────────────

@router.post("/layout")
async def compute_layout(payload: LayoutInput) -> dict[str, Any]:
    """Return the graph with force-directed positions applied."""
    graph = payload.graph.to_graph()
    ForceDirectedLayout(rng=payload.seed).apply(graph, payload.iterations)
    return GraphSnapshot.from_graph(graph).to_wire()


@router.post("/graphs/random")
async def random_graph(payload: RandomGraphInput) -> dict[str, Any]:
    """Generate a random connected graph laid out in the unit square."""
    try:
        graph = generate_random_connected_graph(payload.node_count, rng=payload.seed)
    except ValueError as exc:
        logger.exception("Graph generation failed")
        raise HTTPException(status_code=400, detail=str(exc))
    return GraphSnapshot.from_graph(graph).to_wire()
