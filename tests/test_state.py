"""Tests for AlgorithmState and result records."""

from colorlab.core.conflicts import Evaluation
from colorlab.core.graph import Edge
from colorlab.core.state import AlgorithmState, LocalSearchStats, RecolorRecord, percent


def test_fresh_state_reports_zero_conflicts():
    s = AlgorithmState()
    stats = s.stats(progress=0.0)
    assert stats.attempts == 0
    assert stats.conflicts == 0
    assert stats.mean_conflicts == 0.0
    assert stats.success_rate == 0.0


def test_record_trial_updates_counters_and_history():
    s = AlgorithmState()
    s.record_trial({1: "red"}, Evaluation(2, [Edge(1, 2), Edge(2, 3)]))
    s.record_trial({1: "blue"}, Evaluation(0))
    assert s.attempts == 2
    assert s.success_count == 1
    assert s.total_conflicts == 2
    assert [r.attempt_number for r in s.history] == [1, 2]
    assert s.history[1].success
    stats = s.stats(progress=0.5)
    assert stats.mean_conflicts == 1.0
    assert stats.success_rate == 0.5


def test_best_is_replaced_only_by_strictly_better_trial():
    s = AlgorithmState()
    s.record_trial({1: "red"}, Evaluation(3))
    s.record_trial({1: "blue"}, Evaluation(1))
    s.record_trial({1: "green"}, Evaluation(1))
    s.record_trial({1: "pink"}, Evaluation(2))
    assert s.best_conflicts == 1
    assert s.best_assignment == {1: "blue"}
    assert s.improves(0)
    assert not s.improves(1)


def test_len_counts_history():
    s = AlgorithmState()
    for c in (3, 2, 1):
        s.record_trial({}, Evaluation(c))
    assert len(s) == 3


def test_record_dicts_are_camel_case():
    record = RecolorRecord(node_id=4, old_color="red", new_color="blue", pass_number=2)
    assert record.to_dict() == {
        "nodeId": 4,
        "oldColor": "red",
        "newColor": "blue",
        "passNumber": 2,
    }
    stats = LocalSearchStats(
        attempts=1,
        conflicts=0,
        progress=1.0,
        initial_conflicts=2,
        conflicts_reduced=2,
        improvement=100,
        pass_number=1,
        recolored_nodes=[record],
    )
    d = stats.to_dict()
    assert d["conflictsReduced"] == 2
    assert d["recoloredNodes"][0]["nodeId"] == 4


def test_percent_rounds_halves_up():
    assert percent(1, 8) == 13
    assert percent(3, 8) == 38
    assert percent(-1, 8) == -12
    assert percent(2, 3) == 67
    assert percent(5, 0) == 0
