"""Shared graph fixtures."""

import pytest

from colorlab.core.graph import Graph


def build_graph(node_count: int, edges, colors=None) -> Graph:
    graph = Graph()
    for _ in range(node_count):
        graph.add_node()
    for a, b in edges:
        graph.add_edge(a, b)
    if colors:
        graph.apply_coloring(colors)
    return graph


@pytest.fixture
def triangle() -> Graph:
    return build_graph(3, [(1, 2), (2, 3), (1, 3)])


@pytest.fixture
def path4() -> Graph:
    return build_graph(4, [(1, 2), (2, 3), (3, 4)])


@pytest.fixture
def square() -> Graph:
    """4-cycle: 2-colorable."""
    return build_graph(4, [(1, 2), (2, 3), (3, 4), (4, 1)])


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTimer:
    def __init__(self, delay, callback) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Collects timers; tests fire them explicitly."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, delay, callback) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def fire_all(self) -> None:
        timers, self.timers = self.active, []
        for timer in timers:
            timer.callback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
