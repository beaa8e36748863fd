"""
ExecutionSession — owns one coloring run at a time for a graph.

Accepts a run request, validates it, builds a fresh strategy and drives
it either in a background thread (BackgroundExecutor) or tick by tick on
the caller's thread (PacedDriver).  Results are folded into a session
snapshot and pushed to observers through a rate-limited Publisher.

Usage
-----
>>> session = ExecutionSession(graph)
>>> unsubscribe = session.subscribe(print)
>>> session.start("montecarlo", RunOptions(iterations=500))
>>> final = session.wait()
>>> session.commit_result()
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator

import numpy as np

from colorlab.config import Settings, get_settings
from colorlab.core.errors import ExecutionFault
from colorlab.core.graph import Assignment, Edge, Graph
from colorlab.core.state import StepResult
from colorlab.core.validation import validate_graph, validate_options
from colorlab.engine.driver import PacedDriver, interval_ticks
from colorlab.engine.executor import BackgroundExecutor
from colorlab.engine.messages import (
    CompleteMessage,
    ErrorMessage,
    ProgressMessage,
    RunOptions,
    SessionMessage,
    StartMessage,
)
from colorlab.engine.publisher import Publisher, Scheduler, thread_scheduler
from colorlab.solver.interface import ColoringStrategy
from colorlab.solver.registry import Algorithm, create_strategy
from colorlab.solver.sampling import RandomSource

logger = logging.getLogger(__name__)


class HistoryView(Sequence):
    """
    Read-only window onto an append-only list as it was when taken.

    Snapshots share the session's history list instead of copying it;
    records appended later stay invisible to views taken earlier.
    """

    __slots__ = ("_records", "_size")

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self._records = records if records is not None else []
        self._size = len(self._records)

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self._records[i] for i in range(self._size)[index]]
        if index < 0:
            index += self._size
        if not 0 <= index < self._size:
            raise IndexError("history index out of range")
        return self._records[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Sequence):
            return len(self) == len(other) and all(a == b for a, b in zip(self, other))
        return NotImplemented

    def __repr__(self) -> str:
        return f"HistoryView(size={self._size})"


class SessionStatus(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class SessionSnapshot:
    """What observers receive."""

    run_id: int
    algorithm: Algorithm | None
    status: SessionStatus
    assignment: Assignment = field(default_factory=dict)
    conflict_edges: list[Edge] = field(default_factory=list)
    stats: dict[str, Any] | None = None
    history: HistoryView = field(default_factory=HistoryView)
    error: str | None = None

    @property
    def running(self) -> bool:
        return self.status is SessionStatus.RUNNING

    def to_dict(self) -> dict[str, Any]:
        return {
            "runId": self.run_id,
            "algorithm": self.algorithm.value if self.algorithm else None,
            "status": self.status.value,
            "colors": dict(self.assignment),
            "conflictEdges": [e.to_dict() for e in self.conflict_edges],
            "stats": dict(self.stats) if self.stats is not None else None,
            "history": list(self.history),
            "error": self.error,
        }


class ExecutionSession:
    """
    Parameters
    ----------
    graph : Graph
        The live graph.  Runs work on a snapshot of it; its colors change
        only through :meth:`commit_result`.
    settings : Settings, optional
        Batch size, publish interval, pacing delay, channel size.
    clock, scheduler :
        Passed to the Publisher; injectable for tests.
    rng : numpy Generator or seed, optional
        Used when a run does not bring its own seed.
    """

    def __init__(
        self,
        graph: Graph,
        *,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
        scheduler: Scheduler = thread_scheduler,
        rng: RandomSource = None,
    ) -> None:
        self.graph = graph
        self.settings = settings or get_settings()
        self.publisher = Publisher(
            self.snapshot,
            min_interval=self.settings.publish_interval,
            clock=clock,
            scheduler=scheduler,
        )
        self._rng = np.random.default_rng(rng)
        self._lock = threading.RLock()

        self._run_id = 0
        self._algorithm: Algorithm | None = None
        self._executor: BackgroundExecutor | None = None
        self._driver: PacedDriver | None = None
        self._started_at = 0.0

        self.status = SessionStatus.IDLE
        self._assignment: Assignment = {}
        self._conflict_edges: list[Edge] = []
        self._stats: dict[str, Any] | None = None
        self._history: list[dict[str, Any]] = []
        self.result: CompleteMessage | None = None
        self.error: ExecutionFault | None = None

    @classmethod
    def from_start_message(
        cls, message: StartMessage, *, background: bool | None = None, **kwargs: Any
    ) -> ExecutionSession:
        """Build a session around the message's graph and start the run."""
        session = cls(message.graph.to_graph(), **kwargs)
        session.start(message.algorithm, message.options, background=background)
        return session

    # ── Observers ──────────────────────────────────────────────────

    def subscribe(
        self, listener: Callable[[SessionSnapshot], Any], *, replay: bool = True
    ) -> Callable[[], None]:
        """Register an observer; returns its unsubscribe callable."""
        return self.publisher.subscribe(listener, replay=replay)

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                run_id=self._run_id,
                algorithm=self._algorithm,
                status=self.status,
                assignment=dict(self._assignment),
                conflict_edges=list(self._conflict_edges),
                stats=dict(self._stats) if self._stats is not None else None,
                history=HistoryView(self._history),
                error=str(self.error) if self.error else None,
            )

    @property
    def run_id(self) -> int:
        return self._run_id

    @property
    def running(self) -> bool:
        return self.status is SessionStatus.RUNNING

    # ── Starting and stopping ──────────────────────────────────────

    def start(
        self,
        algorithm: Algorithm | str,
        options: RunOptions | None = None,
        *,
        background: bool | None = None,
        assignment: Assignment | None = None,
    ) -> int:
        """
        Validate the request, tear down any current run and start a new one.

        Parameters
        ----------
        algorithm : Algorithm or str
        options : RunOptions, optional
        background : bool, optional
            Thread execution (default for the stochastic searches) or paced
            stepping via :meth:`tick` / :meth:`drive` (default for local
            search).
        assignment : mapping, optional
            Starting coloring for local search; defaults to the graph's.

        Returns
        -------
        The new run id.

        Raises
        ------
        InvalidConfiguration, IsolatedGraphPrecondition
            Before anything is started or torn down.
        """
        algorithm = Algorithm(algorithm)
        options = options or RunOptions()
        validate_options(
            algorithm.value,
            options.number_of_colors,
            iterations=options.iterations,
            max_attempts=options.max_attempts,
        )
        validate_graph(self.graph, require_edges=algorithm.stochastic)

        if background is None:
            background = algorithm.stochastic

        with self._lock:
            self._teardown()
            self._run_id += 1
            run_id = self._run_id
            self._algorithm = algorithm
            self._reset_results()
            strategy = create_strategy(
                algorithm,
                self.graph,
                options.number_of_colors,
                max_attempts=options.max_attempts,
                iterations=options.iterations,
                assignment=assignment,
                rng=options.seed if options.seed is not None else self._rng,
            )
            self.status = SessionStatus.RUNNING
            self._started_at = time.perf_counter()
            if background:
                self._executor = BackgroundExecutor(
                    strategy,
                    algorithm,
                    run_id,
                    batch_size=self.settings.BATCH_SIZE,
                    channel_size=self.settings.CHANNEL_SIZE,
                )
            else:
                self._driver = PacedDriver(
                    strategy, lambda result: self._on_paced_step(run_id, strategy, result)
                )

        logger.info(
            "Run %d: %s (%s) on %d nodes, k=%d",
            run_id,
            algorithm.label,
            "background" if background else "paced",
            len(self.graph.nodes),
            options.number_of_colors,
        )
        self.publisher.reset()
        self.publisher.notify(force=True)
        if self._executor is not None:
            self._executor.start()
        return run_id

    def stop(self, clear_stats: bool = True) -> None:
        """
        Cancel the current run.

        Anything the run produces after this point is discarded.  With
        *clear_stats* the partial results are wiped as well.
        """
        with self._lock:
            was_running = self.running
            self._teardown()
            if was_running:
                self.status = SessionStatus.CANCELLED
                logger.info("Run %d stopped", self._run_id)
            if clear_stats:
                self._reset_results()
        self.publisher.cancel_pending()
        self.publisher.notify(force=True)

    def close(self) -> None:
        """Stop without publishing and drop the throttle state."""
        with self._lock:
            self._teardown()
            if self.running:
                self.status = SessionStatus.CANCELLED
        self.publisher.reset()

    def commit_result(self) -> bool:
        """
        Write the last completed run's colors onto the live graph.

        Returns False if there is no completed result to apply.
        """
        with self._lock:
            if self.result is None:
                return False
            self.graph.apply_coloring(self.result.colors)
        logger.info("Run %d: committed coloring", self.result.run_id)
        return True

    # ── Background runs: host side ─────────────────────────────────

    def poll(self, timeout: float | None = 0.0) -> SessionMessage | None:
        """
        Fetch and apply the next message from the background run.

        Returns None when nothing arrived in time, when there is no
        background run, or when the message belonged to a stale run.
        """
        executor = self._executor
        if executor is None:
            return None
        message = executor.get(timeout)
        if message is None:
            return None
        return message if self._apply(message) else None

    def messages(self, poll_interval: float = 0.05) -> Iterator[SessionMessage]:
        """
        Yield applied messages until the run completes, fails or is stopped.
        """
        run_id = self._run_id
        while self._run_id == run_id and self._executor is not None:
            message = self.poll(poll_interval)
            if message is None:
                continue
            yield message
            if isinstance(message, (CompleteMessage, ErrorMessage)):
                return

    def wait(self, timeout: float | None = None) -> CompleteMessage | ErrorMessage | None:
        """
        Block until the background run ends.

        Returns the final message, or None on timeout or cancellation.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        run_id = self._run_id
        while self._run_id == run_id and self._executor is not None:
            remaining = 0.05 if deadline is None else min(0.05, deadline - time.monotonic())
            if remaining <= 0:
                return None
            message = self.poll(remaining)
            if isinstance(message, (CompleteMessage, ErrorMessage)):
                return message
        return None

    # ── Paced runs ─────────────────────────────────────────────────

    def tick(self) -> StepResult | None:
        """
        Advance a paced run by one step.

        Raises ExecutionFault if the step fails; the session is torn down
        and the failure published before the exception propagates.
        """
        driver = self._driver
        if driver is None:
            return None
        try:
            return driver.tick()
        except Exception as exc:
            logger.exception("Run %d: paced step failed", self._run_id)
            message = ErrorMessage(run_id=self._run_id, message=f"{type(exc).__name__}: {exc}")
            self._apply(message)
            raise ExecutionFault(message.message, self._run_id) from exc

    def drive(self, ticks: Iterable[object] | None = None) -> StepResult | None:
        """
        Tick until the paced run finishes or is stopped.

        *ticks* defaults to a real-time pacing source using the configured
        local search delay.
        """
        if ticks is None:
            ticks = interval_ticks(self.settings.local_search_delay)
        result = None
        for _ in ticks:
            if self._driver is None:
                break
            result = self.tick()
        return result

    def _on_paced_step(
        self, run_id: int, strategy: ColoringStrategy, result: StepResult
    ) -> None:
        with self._lock:
            if run_id != self._run_id or self._driver is None:
                return
            self._assignment = dict(result.assignment)
            self._conflict_edges = list(result.conflict_edges)
            self._stats = {**result.stats.to_dict(), "timeMs": self._elapsed_ms()}
            self._history.extend(r.to_dict() for r in strategy.history[len(self._history):])

            if result.done:
                self.result = CompleteMessage.from_result(
                    run_id, self._algorithm, result, self._elapsed_ms()
                )
                self.status = SessionStatus.COMPLETED
                self._driver = None
                logger.info(
                    "Run %d complete: conflicts=%d", run_id, result.stats.conflicts
                )

        self.publisher.notify(force=result.done)

    # ── Internals ──────────────────────────────────────────────────

    def _apply(self, message: SessionMessage) -> bool:
        """Fold a message into the session state.  False if it was stale."""
        with self._lock:
            if message.run_id != self._run_id or not self.running:
                logger.debug("Dropping stale %s for run %d", message.type, message.run_id)
                return False

            if isinstance(message, ProgressMessage):
                self._assignment = dict(message.colors)
                self._conflict_edges = [
                    Edge(e.source_id, e.target_id) for e in message.conflict_edges
                ]
                self._stats = {
                    "progress": message.progress,
                    "attempts": message.attempts,
                    "conflicts": message.conflicts,
                    "meanConflicts": message.mean_conflicts,
                    "successRate": message.success_rate,
                    "timeMs": message.time_ms,
                }
                self._history.extend(message.new_attempts)
                force = False

            elif isinstance(message, CompleteMessage):
                self._assignment = dict(message.colors)
                self._conflict_edges = [
                    Edge(e.source_id, e.target_id) for e in message.conflict_edges
                ]
                self._stats = {**message.details, **message.stats.to_wire(), "progress": 1.0}
                self.result = message
                self.status = SessionStatus.COMPLETED
                self._release()
                logger.info(
                    "Run %d complete: attempts=%d conflicts=%d (%.1f ms)",
                    message.run_id,
                    message.stats.attempts,
                    message.stats.conflicts,
                    message.stats.time_ms,
                )
                force = True

            else:
                self._reset_results()
                self.error = ExecutionFault(message.message, message.run_id)
                self.status = SessionStatus.FAILED
                self._release()
                logger.error("Run %d failed: %s", message.run_id, message.message)
                force = True

        self.publisher.notify(force=force)
        return True

    def _teardown(self) -> None:
        if self._executor is not None:
            executor, self._executor = self._executor, None
            if executor.alive:
                executor.cancel()
        if self._driver is not None:
            self._driver.stop()
            self._driver = None

    def _release(self) -> None:
        # The worker has sent its last message and is exiting on its own.
        self._executor = None
        if self._driver is not None:
            self._driver.stop()
            self._driver = None

    def _reset_results(self) -> None:
        self._assignment = {}
        self._conflict_edges = []
        self._stats = None
        self._history = []
        self.result = None
        self.error = None

    def _elapsed_ms(self) -> float:
        return (time.perf_counter() - self._started_at) * 1000
