"""
Exception hierarchy for the coloring engine.

Validation problems are raised before a run starts; faults raised while a
strategy is stepping are wrapped in ExecutionFault at the session boundary.
"""

from __future__ import annotations


class ColoringError(Exception):
    """Base class for all coloring engine errors."""


class InvalidConfiguration(ColoringError, ValueError):
    """Run options are outside the accepted ranges."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class IsolatedGraphPrecondition(ColoringError, ValueError):
    """
    The graph contains nodes without edges.

    Isolated nodes are trivially colorable and skew the success-rate
    statistics of the stochastic searches, so they are rejected up front.
    """

    def __init__(self, isolated_ids: list[int]) -> None:
        self.isolated_ids = list(isolated_ids)
        count = len(self.isolated_ids)
        plural = "s" if count != 1 else ""
        super().__init__(
            f"Graph has {count} isolated node{plural} (no edges): "
            f"{self.isolated_ids}. Every node must be connected."
        )


class ExecutionFault(ColoringError):
    """An unexpected error escaped a strategy step."""

    def __init__(self, message: str, run_id: int | None = None) -> None:
        self.run_id = run_id
        super().__init__(message)
