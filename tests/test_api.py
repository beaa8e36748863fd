"""Tests for FastAPI endpoints."""

import json

from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def graph_payload(node_count, edges, colors=None):
    colors = colors or {}
    return {
        "nodes": [
            {"id": i, "x": i / (node_count + 1), "y": 0.5, "color": colors.get(i)}
            for i in range(1, node_count + 1)
        ],
        "edges": [{"sourceId": a, "targetId": b} for a, b in edges],
    }


SQUARE = graph_payload(4, [(1, 2), (2, 3), (3, 4), (4, 1)])
RED_PATH = graph_payload(3, [(1, 2), (2, 3)], {1: "red", 2: "red", 3: "red"})


def test_root():
    resp = client.get("/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "colorlab"
    assert data["status"] == "running"


def test_algorithms():
    resp = client.get("/api/algorithms")
    assert resp.status_code == 200
    names = [a["name"] for a in resp.json()]
    assert names == ["lasvegas", "montecarlo", "localsearch"]


# ── Coloring runs ──────────────────────────────────────────────────

def test_color_monte_carlo():
    resp = client.post(
        "/api/color",
        json={
            "type": "start",
            "algorithm": "montecarlo",
            "graph": SQUARE,
            "options": {"numberOfColors": 3, "iterations": 100, "seed": 1},
        },
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["type"] == "complete"
    assert data["algorithm"] == "montecarlo"
    assert data["stats"]["attempts"] == 100
    assert len(data["conflictEdges"]) == data["stats"]["conflicts"]
    assert set(data["colors"]) == {"1", "2", "3", "4"}


def test_color_las_vegas_finds_valid_coloring():
    resp = client.post(
        "/api/color",
        json={"algorithm": "lasvegas", "graph": SQUARE, "options": {"seed": 0}},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["stats"]["conflicts"] == 0
    assert data["stats"]["successRate"] > 0


def test_color_rejects_bad_color_count():
    resp = client.post(
        "/api/color",
        json={"algorithm": "lasvegas", "graph": SQUARE, "options": {"numberOfColors": 2}},
    )
    assert resp.status_code == 400
    assert "Number of colors" in resp.json()["detail"]


def test_color_rejects_isolated_nodes():
    graph = graph_payload(3, [(1, 2)])
    resp = client.post("/api/color", json={"algorithm": "montecarlo", "graph": graph})
    assert resp.status_code == 400
    assert "isolated" in resp.json()["detail"]


def test_color_rejects_unknown_algorithm():
    resp = client.post("/api/color", json={"algorithm": "annealing", "graph": SQUARE})
    assert resp.status_code == 422


def test_color_stream():
    resp = client.post(
        "/api/color/stream",
        json={
            "algorithm": "montecarlo",
            "graph": SQUARE,
            "options": {"iterations": 120, "seed": 3},
        },
    )
    assert resp.status_code == 200
    lines = [json.loads(line) for line in resp.text.splitlines() if line]
    assert [m["type"] for m in lines] == ["progress", "progress", "progress", "complete"]
    assert sum(len(m["newAttempts"]) for m in lines[:-1]) == 120
    assert len({m["runId"] for m in lines}) == 1


def test_local_search():
    resp = client.post("/api/local-search", json={"graph": RED_PATH, "numberOfColors": 3})
    assert resp.status_code == 200
    data = resp.json()
    assert data["initialConflicts"] == 2
    assert data["conflictsReduced"] == 2
    assert data["conflicts"] == 0
    assert data["passes"] == 1
    assert data["recoloredNodes"] == [
        {"nodeId": 2, "oldColor": "red", "newColor": "blue", "passNumber": 1}
    ]


def test_local_search_rejects_empty_graph():
    resp = client.post("/api/local-search", json={"graph": {"nodes": [], "edges": []}})
    assert resp.status_code == 400


# ── Analysis ───────────────────────────────────────────────────────

def test_conflicts():
    resp = client.post("/api/conflicts", json=RED_PATH)
    assert resp.status_code == 200
    data = resp.json()
    assert data["conflicts"] == 2
    assert data["success"] is False
    assert data["conflictingNodes"] == [1, 2, 3]


def test_recolor_impact():
    resp = client.post(
        "/api/recolor-impact",
        json={"graph": RED_PATH, "nodeId": 2, "newColor": "blue", "numberOfColors": 3},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["conflictsBefore"] == 2
    assert data["conflictsAfter"] == 0
    assert data["impactAnalysis"]["improved"] is True


def test_recolor_impact_unknown_node():
    resp = client.post(
        "/api/recolor-impact",
        json={"graph": RED_PATH, "nodeId": 99, "newColor": "blue"},
    )
    assert resp.status_code == 404


def test_recolor_impact_bad_palette():
    resp = client.post(
        "/api/recolor-impact",
        json={"graph": RED_PATH, "nodeId": 1, "newColor": "blue", "numberOfColors": 12},
    )
    assert resp.status_code == 400


# ── Layout / generation ────────────────────────────────────────────

def test_layout():
    resp = client.post("/api/layout", json={"graph": SQUARE, "iterations": 30, "seed": 0})
    assert resp.status_code == 200
    nodes = resp.json()["nodes"]
    assert len(nodes) == 4
    assert all(0.02 <= n["x"] <= 0.98 and 0.02 <= n["y"] <= 0.98 for n in nodes)


def test_random_graph():
    resp = client.post("/api/graphs/random", json={"nodeCount": 20, "seed": 5})
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["nodes"]) == 20
    assert len(data["edges"]) >= 19


def test_random_graph_size_validation():
    resp = client.post("/api/graphs/random", json={"nodeCount": 0})
    assert resp.status_code == 422
