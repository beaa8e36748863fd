"""
Publisher — rate-limited publish/subscribe for session snapshots.

At most one delivery happens per ``min_interval``.  A notify that lands
inside the window is not dropped: it schedules a single deferred flush at
the end of the window, and any further notifies before then coalesce onto
that flush.  The flush reads the snapshot when it fires, so observers
always receive the latest state rather than a queue of stale ones.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


def thread_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Default scheduler: a daemon ``threading.Timer``."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class Publisher:
    """
    Parameters
    ----------
    snapshot : callable
        Returns the state to deliver.  Called at delivery time.
    min_interval : float
        Seconds between two deliveries.
    clock : callable
        Monotonic time source, injectable for tests.
    scheduler : callable
        ``scheduler(delay, callback) -> handle`` with ``handle.cancel()``.
    """

    def __init__(
        self,
        snapshot: Callable[[], Any],
        *,
        min_interval: float = 0.05,
        clock: Callable[[], float] = time.monotonic,
        scheduler: Scheduler = thread_scheduler,
    ) -> None:
        self._snapshot = snapshot
        self.min_interval = min_interval
        self._clock = clock
        self._scheduler = scheduler
        self._listeners: list[Listener] = []
        self._last_delivery: float | None = None
        self._pending: TimerHandle | None = None
        self._pending_seq = 0
        self._lock = threading.RLock()
        # Held across snapshot and listener calls so deliveries never interleave.
        self._delivery_lock = threading.RLock()
        self._generation = 0
        self._delivered_generation = 0
        self.deliveries = 0

    # ── Subscription ───────────────────────────────────────────────

    def subscribe(self, listener: Listener, *, replay: bool = True) -> Callable[[], None]:
        """
        Register *listener*; returns a callable that unsubscribes it.

        With *replay* the listener immediately receives the current state.
        """
        with self._lock:
            self._listeners.append(listener)
        if replay:
            listener(self._snapshot())

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # ── Notification ───────────────────────────────────────────────

    def notify(self, force: bool = False) -> bool:
        """
        Request a delivery.

        Returns True if the snapshot was delivered now, False if it was
        deferred to (or coalesced into) the trailing flush.
        """
        with self._lock:
            now = self._clock()
            in_window = (
                self._last_delivery is not None
                and now - self._last_delivery < self.min_interval
            )
            if in_window and not force:
                if self._pending is None:
                    delay = self.min_interval - (now - self._last_delivery)
                    self._pending_seq += 1
                    seq = self._pending_seq
                    self._pending = self._scheduler(delay, lambda: self._flush(seq))
                    logger.debug("Publish deferred by %.3fs", delay)
                return False

            self._cancel_pending()
            self._last_delivery = now
            generation = self._next_generation()

        self._deliver(generation)
        return True

    def cancel_pending(self) -> None:
        """Drop a scheduled trailing flush, if any."""
        with self._lock:
            self._cancel_pending()

    def reset(self) -> None:
        """Forget the throttle window and any pending flush."""
        with self._lock:
            self._cancel_pending()
            self._last_delivery = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    # ── Internals ──────────────────────────────────────────────────

    def _flush(self, seq: int) -> None:
        with self._lock:
            # A cancelled timer may still fire; only the current one counts.
            if self._pending is None or seq != self._pending_seq:
                return
            self._pending = None
            self._last_delivery = self._clock()
            generation = self._next_generation()
        self._deliver(generation)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _deliver(self, generation: int) -> None:
        with self._delivery_lock:
            # A newer delivery already went out; this one would be stale.
            if generation < self._delivered_generation:
                logger.debug("Skipping stale delivery %d", generation)
                return
            self._delivered_generation = generation
            with self._lock:
                listeners = list(self._listeners)
            snapshot = self._snapshot()
            self.deliveries += 1
            for listener in listeners:
                listener(snapshot)
