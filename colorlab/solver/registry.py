"""
Strategy Registry — maps algorithm names to ColoringStrategy classes.

This is the single place where a run request is turned into a fresh
strategy instance.
"""

from __future__ import annotations

import enum
from typing import Any, Type

from colorlab.core.graph import Graph
from colorlab.solver.interface import ColoringStrategy
from colorlab.solver.las_vegas import LasVegasSearch
from colorlab.solver.local_search import LocalSearchOptimizer
from colorlab.solver.monte_carlo import MonteCarloSearch
from colorlab.solver.sampling import RandomSource


class Algorithm(str, enum.Enum):
    LAS_VEGAS = "lasvegas"
    MONTE_CARLO = "montecarlo"
    LOCAL_SEARCH = "localsearch"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def stochastic(self) -> bool:
        return self is not Algorithm.LOCAL_SEARCH


_LABELS = {
    Algorithm.LAS_VEGAS: "Las Vegas",
    Algorithm.MONTE_CARLO: "Monte Carlo",
    Algorithm.LOCAL_SEARCH: "Local Search",
}

# ── Default registry ───────────────────────────────────────────────

_REGISTRY: dict[Algorithm, Type[ColoringStrategy]] = {
    Algorithm.LAS_VEGAS: LasVegasSearch,
    Algorithm.MONTE_CARLO: MonteCarloSearch,
    Algorithm.LOCAL_SEARCH: LocalSearchOptimizer,
}


def get_strategy_class(algorithm: Algorithm | str) -> Type[ColoringStrategy]:
    """
    Look up the strategy class for an algorithm name.

    Raises KeyError if the name is not registered.
    """
    try:
        key = Algorithm(algorithm)
    except ValueError:
        raise KeyError(
            f"Unknown algorithm {algorithm!r}. "
            f"Registered algorithms: {list_algorithms()}"
        ) from None
    return _REGISTRY[key]


def list_algorithms() -> list[str]:
    """Return all registered algorithm names."""
    return [a.value for a in _REGISTRY]


def create_strategy(
    algorithm: Algorithm | str,
    graph: Graph,
    number_of_colors: int,
    *,
    max_attempts: int | None = None,
    iterations: int | None = None,
    assignment: dict[int, Any] | None = None,
    rng: RandomSource = None,
) -> ColoringStrategy:
    """
    Factory: build a fresh strategy for one run.

    Options that do not apply to the chosen algorithm are ignored.
    """
    cls = get_strategy_class(algorithm)
    if cls is LasVegasSearch:
        return LasVegasSearch(graph, number_of_colors, max_attempts=max_attempts, rng=rng)
    if cls is MonteCarloSearch:
        kwargs: dict[str, Any] = {"rng": rng}
        if iterations is not None:
            kwargs["iterations"] = iterations
        return MonteCarloSearch(graph, number_of_colors, **kwargs)
    return cls(graph, number_of_colors, assignment=assignment)
