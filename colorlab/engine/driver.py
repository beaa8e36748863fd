"""
PacedDriver — cooperative, tick-driven stepping on the caller's thread.

Used for runs the user watches step by step (local search by default).
The tick source is any iterable: ``interval_ticks`` sleeps between ticks,
tests just pass ``range(n)``.
"""

from __future__ import annotations

import itertools
import logging
import time
from typing import Callable, Iterable, Iterator

from colorlab.core.state import StepResult
from colorlab.solver.interface import ColoringStrategy

logger = logging.getLogger(__name__)


def interval_ticks(delay: float, sleep: Callable[[float], None] = time.sleep) -> Iterator[int]:
    """Endless ticks, sleeping *delay* seconds before every tick but the first."""
    for tick in itertools.count():
        if tick:
            sleep(delay)
        yield tick


class PacedDriver:
    """
    Steps a strategy once per tick.

    ``on_step`` receives every StepResult; stepping stops when the strategy
    is done or :meth:`stop` was called.
    """

    def __init__(
        self,
        strategy: ColoringStrategy,
        on_step: Callable[[StepResult], None],
    ) -> None:
        self.strategy = strategy
        self._on_step = on_step
        self.running = True
        self.done = False
        self.ticks = 0
        self.last_result: StepResult | None = None

    def tick(self) -> StepResult | None:
        """Run one step.  Returns None once stopped or finished."""
        if not self.running or self.done:
            return None
        result = self.strategy.step()
        self.ticks += 1
        self.last_result = result
        if result.done:
            self.done = True
            self.running = False
        self._on_step(result)
        return result

    def drive(self, ticks: Iterable[object]) -> StepResult | None:
        """
        Consume *ticks* until the strategy finishes or the driver stops.

        Returns the final result, or None if the ticks ran out first or the
        run was stopped.
        """
        for _ in ticks:
            if not self.running:
                break
            self.tick()
            if self.done:
                logger.debug("Paced run finished after %d ticks", self.ticks)
                return self.last_result
        return None

    def stop(self) -> None:
        self.running = False
