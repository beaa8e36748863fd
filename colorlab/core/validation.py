"""
Pre-run validation.

Everything here runs synchronously before a strategy is built, so a bad
request never reaches ``step()``.
"""

from __future__ import annotations

import logging

from colorlab.core.constants import MAX_COLORS, MIN_COLORS
from colorlab.core.errors import InvalidConfiguration, IsolatedGraphPrecondition
from colorlab.core.graph import Graph

logger = logging.getLogger(__name__)


def validate_color_count(number_of_colors: int | None) -> None:
    """Raise InvalidConfiguration unless the palette size is in range."""
    errors = _color_count_errors(number_of_colors)
    if errors:
        raise InvalidConfiguration(errors)


def validate_options(
    algorithm: str,
    number_of_colors: int | None,
    *,
    iterations: int | None = None,
    max_attempts: int | None = None,
) -> None:
    """
    Check run options, collecting every problem before raising.

    Raises
    ------
    InvalidConfiguration
        Color count outside [MIN_COLORS, MAX_COLORS], Monte Carlo
        iterations below 1, or a Las Vegas attempt cap below 1.
    """
    errors = _color_count_errors(number_of_colors)

    if algorithm == "montecarlo" and (iterations is None or iterations < 1):
        errors.append(f"Iterations must be a positive integer, got {iterations}.")

    if algorithm == "lasvegas" and max_attempts is not None and max_attempts < 1:
        errors.append(
            f"Max attempts must be a positive integer or unbounded, got {max_attempts}."
        )

    if errors:
        logger.info("Rejected %s options: %s", algorithm, errors)
        raise InvalidConfiguration(errors)


def _color_count_errors(number_of_colors: int | None) -> list[str]:
    if number_of_colors is None or not MIN_COLORS <= number_of_colors <= MAX_COLORS:
        return [
            f"Number of colors must be between {MIN_COLORS} and {MAX_COLORS}, "
            f"got {number_of_colors}."
        ]
    return []


def validate_graph(graph: Graph, *, require_edges: bool = True) -> None:
    """
    Check the graph itself.

    An empty graph is an InvalidConfiguration.  With *require_edges*
    (stochastic strategies) isolated nodes raise IsolatedGraphPrecondition.
    """
    if not graph.nodes:
        raise InvalidConfiguration(["Graph has no nodes to color."])

    if require_edges:
        isolated = graph.isolated_nodes()
        if isolated:
            raise IsolatedGraphPrecondition(isolated)
