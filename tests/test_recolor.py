"""Tests for the recolor what-if analysis."""

import pytest

from colorlab.analysis.recolor import analyze_recolor, success_probability, summarize_impact
from conftest import build_graph


@pytest.fixture
def star():
    # 1 is the hub; 2 also touches 5.
    return build_graph(
        5,
        [(1, 2), (1, 3), (1, 4), (2, 5)],
        {1: "blue", 2: "red", 3: "red", 4: "green", 5: "green"},
    )


def test_recolor_into_conflicts(star):
    impact = analyze_recolor(star, 1, "red", number_of_colors=3)

    assert impact.old_color == "blue"
    assert sorted(impact.neighbors) == [2, 3, 4]
    assert sorted(impact.conflicting_neighbors) == [2, 3]
    assert impact.recolorable_count == 2
    assert impact.success_probability == pytest.approx(0.79)
    assert impact.conflicts_before == 0
    assert impact.conflicts_after == 2
    assert impact.conflict_delta == 2
    assert impact.summary.worsened
    assert impact.summary.change_percent == 100

    suggestions = {s.node_id: s for s in impact.suggestions}
    assert suggestions[2].suggested_colors == ["blue"]
    assert suggestions[3].suggested_colors == ["blue", "green"]
    assert suggestions[2].conflict_count == 1


def test_analysis_does_not_commit(star):
    before = star.colors()
    analyze_recolor(star, 1, "red", number_of_colors=3)
    assert star.colors() == before


def test_recolor_that_fixes_a_conflict():
    g = build_graph(2, [(1, 2)], {1: "red", 2: "red"})
    impact = analyze_recolor(g, 1, "blue", number_of_colors=3)
    assert impact.conflicting_neighbors == []
    assert impact.success_probability == 1.0
    assert impact.summary.improved
    assert impact.summary.change_percent == -100


def test_unknown_node_raises_key_error(star):
    with pytest.raises(KeyError):
        analyze_recolor(star, 42, "red", number_of_colors=3)


def test_wire_format(star):
    d = analyze_recolor(star, 1, "red", number_of_colors=3).to_dict()
    assert d["kColors"] == 3
    assert d["canRecolorCount"] == 2
    assert d["conflictingNeighborsCount"] == 2
    assert d["impactAnalysis"]["worsened"] is True
    assert {s["nodeId"] for s in d["recolorSuggestions"]} == {2, 3}


def test_success_probability_caps_at_one():
    assert success_probability(5, 1, 10) == 1.0
    assert success_probability(0, 3, 3) == 0.0
    assert success_probability(0, 0, 3) == 1.0


def test_summarize_impact_neutral():
    s = summarize_impact(2, 2)
    assert s.neutral and not s.improved and not s.worsened
    assert s.change_percent == 0


def test_change_percent_rounds_halves_up():
    assert summarize_impact(8, 7).change_percent == -12
    assert summarize_impact(8, 9).change_percent == 13
