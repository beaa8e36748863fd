"""Tests for LasVegasSearch."""

from colorlab.core.conflicts import evaluate
from colorlab.solver.las_vegas import LasVegasSearch, SearchOutcome
from conftest import build_graph


def test_odd_cycle_with_two_colors_exhausts(triangle):
    search = LasVegasSearch(triangle, number_of_colors=2, max_attempts=1000, rng=1)
    result = search.run()
    assert result.done
    assert search.outcome is SearchOutcome.EXHAUSTED
    assert result.stats.attempts == 1000
    assert result.stats.conflicts >= 1
    assert result.stats.success_rate == 0.0
    assert not any(r.success for r in search.history)


def test_path_with_two_colors_succeeds(path4):
    for seed in range(20):
        search = LasVegasSearch(path4, number_of_colors=2, rng=seed)
        result = search.run()
        assert search.outcome is SearchOutcome.SUCCESS
        assert result.stats.conflicts == 0
        assert result.stats.attempts <= 500
        assert evaluate(path4.edges, result.assignment).success


def test_success_is_the_last_attempt(square):
    search = LasVegasSearch(square, number_of_colors=3, rng=3)
    search.run()
    assert search.history[-1].success
    assert not any(r.success for r in search.history[:-1])


def test_step_after_finish_does_no_work(triangle):
    search = LasVegasSearch(triangle, number_of_colors=2, max_attempts=5, rng=0)
    search.run()
    again = search.step()
    assert again.done
    assert again.stats.attempts == 5


def test_progress():
    g = build_graph(2, [(1, 2)])
    bounded = LasVegasSearch(g, number_of_colors=1, max_attempts=4, rng=0)
    bounded.step()
    assert bounded.calculate_progress() == 0.25
    assert bounded.max_attempts() == 4

    unbounded = LasVegasSearch(g, number_of_colors=1, rng=0)
    unbounded.step()
    assert unbounded.calculate_progress() == 0.0
    assert unbounded.max_attempts() is None


def test_search_does_not_touch_graph(triangle):
    LasVegasSearch(triangle, number_of_colors=3, rng=2).run()
    assert all(c is None for c in triangle.colors().values())


def test_best_assignment_matches_reported_conflicts(triangle):
    search = LasVegasSearch(triangle, number_of_colors=2, max_attempts=50, rng=9)
    result = search.run()
    assert evaluate(triangle.edges, result.assignment).conflicts == result.stats.conflicts
    assert len(result.conflict_edges) == result.stats.conflicts


def test_best_conflicts_never_increase_while_stepping(triangle):
    search = LasVegasSearch(triangle, number_of_colors=2, max_attempts=200, rng=4)
    previous_conflicts = None
    previous_attempts = 0
    result = search.step()
    while True:
        assert result.stats.attempts == previous_attempts + 1
        assert len(search.history) == result.stats.attempts
        if previous_conflicts is not None:
            assert result.stats.conflicts <= previous_conflicts
        previous_conflicts = result.stats.conflicts
        previous_attempts = result.stats.attempts
        if result.done:
            break
        result = search.step()
    assert result.stats.attempts == 200
