"""
BackgroundExecutor — runs one strategy in a dedicated thread.

Progress, completion and failure travel to the host over a bounded queue.
The producer blocks when the queue is full, but keeps re-checking the
cancellation event so that a host which stopped listening can always
tear the thread down.
"""

from __future__ import annotations

import logging
import queue
import threading
import time

from colorlab.core.constants import DEFAULT_BATCH_SIZE
from colorlab.engine.messages import (
    CompleteMessage,
    ErrorMessage,
    ProgressMessage,
    SessionMessage,
)
from colorlab.solver.interface import ColoringStrategy, ProgressUpdate
from colorlab.solver.registry import Algorithm

logger = logging.getLogger(__name__)

PUT_POLL_SECONDS = 0.05
DEFAULT_CHANNEL_SIZE = 64


class BackgroundExecutor:
    """
    Parameters
    ----------
    strategy : ColoringStrategy
        Fresh strategy instance; the executor owns it until it finishes.
    algorithm : Algorithm
        Reported back in the complete message.
    run_id : int
        Stamped on every message so stale ones can be told apart.
    """

    def __init__(
        self,
        strategy: ColoringStrategy,
        algorithm: Algorithm,
        run_id: int,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        channel_size: int = DEFAULT_CHANNEL_SIZE,
    ) -> None:
        self.strategy = strategy
        self.algorithm = algorithm
        self.run_id = run_id
        self.batch_size = batch_size
        self._channel: queue.Queue[SessionMessage] = queue.Queue(maxsize=channel_size)
        self._cancelled = threading.Event()
        self._started_at = 0.0
        self._thread = threading.Thread(
            target=self._execute, name=f"coloring-run-{run_id}", daemon=True
        )

    # ── Lifecycle ──────────────────────────────────────────────────

    def start(self) -> None:
        self._started_at = time.perf_counter()
        self._thread.start()
        logger.info("Run %d: %s started in background", self.run_id, self.algorithm.label)

    def cancel(self, timeout: float | None = 5.0) -> None:
        """Signal the worker to stop, discard queued messages and join."""
        self._cancelled.set()
        self._drain()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._drain()
        logger.info("Run %d cancelled", self.run_id)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._started_at) * 1000

    # ── Host side ──────────────────────────────────────────────────

    def get(self, timeout: float | None = None) -> SessionMessage | None:
        """Next message, or None if nothing arrived within *timeout*."""
        try:
            if timeout is not None and timeout <= 0:
                return self._channel.get_nowait()
            return self._channel.get(timeout=timeout)
        except queue.Empty:
            return None

    # ── Worker side ────────────────────────────────────────────────

    def _execute(self) -> None:
        try:
            result = self.strategy.run(
                self._on_progress,
                batch_size=self.batch_size,
                should_stop=self._cancelled.is_set,
            )
        except Exception as exc:
            logger.exception("Run %d failed", self.run_id)
            self._post(
                ErrorMessage(run_id=self.run_id, message=f"{type(exc).__name__}: {exc}")
            )
            return

        if result is None or self.cancelled:
            return

        self._post(
            CompleteMessage.from_result(self.run_id, self.algorithm, result, self.elapsed_ms())
        )

    def _on_progress(self, update: ProgressUpdate) -> None:
        self._post(ProgressMessage.from_update(self.run_id, update, self.elapsed_ms()))

    def _post(self, message: SessionMessage) -> None:
        while not self.cancelled:
            try:
                self._channel.put(message, timeout=PUT_POLL_SECONDS)
                return
            except queue.Full:
                continue

    def _drain(self) -> None:
        while True:
            try:
                self._channel.get_nowait()
            except queue.Empty:
                return
