"""Tests for LocalSearchOptimizer."""

from colorlab.core.state import RecolorRecord
from colorlab.solver.local_search import LocalSearchOptimizer
from conftest import build_graph


def test_conflict_free_start_finishes_immediately(path4):
    path4.apply_coloring({1: "blue", 2: "red", 3: "blue", 4: "red"})
    optimizer = LocalSearchOptimizer(path4, number_of_colors=3)
    result = optimizer.step()
    assert result.done
    assert result.stats.attempts == 0
    assert result.stats.progress == 1.0
    assert result.stats.improvement == 0


def test_shared_node_is_recolored_in_one_pass():
    g = build_graph(3, [(1, 2), (2, 3)], {1: "red", 2: "red", 3: "red"})
    optimizer = LocalSearchOptimizer(g, number_of_colors=3)

    result = optimizer.step()
    steps = 1
    while not result.done:
        result = optimizer.step()
        steps += 1

    assert steps == 3
    assert result.stats.initial_conflicts == 2
    assert result.stats.conflicts_reduced == 2
    assert result.stats.conflicts == 0
    assert result.stats.pass_number == 1
    assert result.stats.improvement == 100
    assert result.assignment == {1: "red", 2: "blue", 3: "red"}
    assert optimizer.history == [RecolorRecord(2, "red", "blue", 1)]


def test_unresolvable_conflicts_stop_after_an_idle_pass(triangle):
    triangle.apply_coloring({1: "red", 2: "red", 3: "red"})
    optimizer = LocalSearchOptimizer(triangle, number_of_colors=2)
    result = optimizer.run()
    assert result.done
    assert result.stats.conflicts == 1
    assert result.stats.conflicts_reduced == 2
    assert result.stats.improvement == 67
    assert result.stats.pass_number == 2
    assert len(result.stats.recolored_nodes) == 1


def test_best_color_keeps_current_on_ties():
    g = build_graph(3, [(1, 2), (1, 3)], {1: "red", 2: "blue", 3: "green"})
    optimizer = LocalSearchOptimizer(g, number_of_colors=3)
    assert optimizer.find_best_color(1) == ("red", 0)

    g = build_graph(3, [(1, 2), (1, 3)], {1: "blue", 2: "blue", 3: "green"})
    optimizer = LocalSearchOptimizer(g, number_of_colors=3)
    assert optimizer.find_best_color(1) == ("red", 0)


def test_explicit_assignment_overrides_graph_colors(path4):
    optimizer = LocalSearchOptimizer(
        path4, number_of_colors=3, assignment={1: "red", 2: "red", 3: "blue", 4: "green"}
    )
    assert optimizer.initial_conflicts == 1
    result = optimizer.run()
    assert result.stats.conflicts == 0


def test_graph_is_never_mutated():
    g = build_graph(3, [(1, 2), (2, 3)], {1: "red", 2: "red", 3: "red"})
    LocalSearchOptimizer(g, number_of_colors=3).run()
    assert g.colors() == {1: "red", 2: "red", 3: "red"}


def test_conflicts_never_increase(square):
    square.apply_coloring({1: "red", 2: "red", 3: "red", 4: "red"})
    optimizer = LocalSearchOptimizer(square, number_of_colors=3)
    previous = optimizer.initial_conflicts
    result = optimizer.step()
    while True:
        assert result.stats.conflicts <= previous
        previous = result.stats.conflicts
        if result.done:
            break
        result = optimizer.step()
    assert result.stats.conflicts == 0
