"""Tests for MonteCarloSearch and the run() driver loop."""

import numpy as np
import pytest

from colorlab.core.conflicts import EdgeIndex
from colorlab.solver.monte_carlo import MonteCarloSearch


def test_runs_exactly_the_iteration_budget(square):
    search = MonteCarloSearch(square, number_of_colors=3, iterations=100, rng=5)
    result = search.run()
    assert result.done
    assert result.stats.attempts == 100
    assert result.stats.progress == 1.0
    assert len(search.history) == 100


def test_does_not_stop_at_first_success(square):
    # 4-cycle with 4 colors succeeds often; the budget still runs out fully.
    search = MonteCarloSearch(square, number_of_colors=4, iterations=200, rng=0)
    result = search.run()
    assert result.stats.conflicts == 0
    assert result.stats.attempts == 200
    assert 0 < result.stats.success_rate < 1


def test_best_equals_brute_force_minimum(square):
    seed = 11
    search = MonteCarloSearch(square, number_of_colors=3, iterations=100, rng=seed)
    result = search.run()

    rng = np.random.default_rng(seed)
    index = EdgeIndex(square.node_ids, square.edges)
    counts = [index.count(rng.integers(0, 3, size=4)) for _ in range(100)]

    assert result.stats.conflicts == min(counts)
    assert [r.conflicts for r in search.history] == counts


def test_mean_conflicts(path4):
    search = MonteCarloSearch(path4, number_of_colors=3, iterations=30, rng=4)
    result = search.run()
    mean = sum(r.conflicts for r in search.history) / 30
    assert result.stats.mean_conflicts == pytest.approx(mean)


def test_invalid_iterations(path4):
    with pytest.raises(ValueError):
        MonteCarloSearch(path4, iterations=0)


def test_run_reports_batches_with_incremental_history(path4):
    search = MonteCarloSearch(path4, number_of_colors=3, iterations=120, rng=1)
    updates = []
    search.run(updates.append, batch_size=50)

    assert [u.attempts for u in updates] == [50, 100, 120]
    assert [len(u.new_history) for u in updates] == [50, 50, 20]
    assert [u.done for u in updates] == [False, False, True]
    numbers = [r.attempt_number for u in updates for r in u.new_history]
    assert numbers == list(range(1, 121))


def test_run_stops_when_asked(path4):
    search = MonteCarloSearch(path4, number_of_colors=3, iterations=1000, rng=1)
    calls = []

    def should_stop():
        calls.append(1)
        return len(calls) > 10

    assert search.run(should_stop=should_stop) is None
    assert search.state.attempts == 10


def test_run_rejects_bad_batch_size(path4):
    with pytest.raises(ValueError):
        MonteCarloSearch(path4, iterations=5).run(batch_size=0)
