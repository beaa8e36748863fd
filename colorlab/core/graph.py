"""
Graph model — nodes, undirected edges and the committed coloring.

The engine only ever reads a Graph.  Colors are written back exclusively
through :meth:`Graph.apply_coloring`, called by whoever consumes a
published result.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import networkx as nx

logger = logging.getLogger(__name__)

Assignment = dict[int, "str | None"]


# ── Nodes and edges ────────────────────────────────────────────────

@dataclass
class Node:
    """
    A graph vertex.

    Attributes
    ----------
    id : int
        Unique positive identifier.
    x, y : float
        Normalised position in [0, 1].  Only the layout cares about it.
    color : str | None
        Committed palette color, or None when uncolored.
    """

    id: int
    x: float = 0.5
    y: float = 0.5
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "x": self.x, "y": self.y, "color": self.color}


@dataclass(frozen=True)
class Edge:
    """Undirected edge between two node ids."""

    source_id: int
    target_id: int

    def same_as(self, source_id: int, target_id: int) -> bool:
        """True if this edge joins the same pair, in either orientation."""
        return {self.source_id, self.target_id} == {source_id, target_id}

    def to_dict(self) -> dict[str, int]:
        return {"sourceId": self.source_id, "targetId": self.target_id}


# ── Graph ──────────────────────────────────────────────────────────

class Graph:
    """
    Node list plus edge list.

    Usage
    -----
    >>> g = Graph()
    >>> a, b = g.add_node(0.2, 0.2), g.add_node(0.8, 0.8)
    >>> g.add_edge(a.id, b.id)
    Edge(source_id=1, target_id=2)
    """

    def __init__(
        self,
        nodes: Iterable[Node] | None = None,
        edges: Iterable[Edge] | None = None,
    ) -> None:
        self.nodes: list[Node] = list(nodes) if nodes else []
        self.edges: list[Edge] = list(edges) if edges else []

    # ── Construction ───────────────────────────────────────────────

    def add_node(self, x: float = 0.5, y: float = 0.5) -> Node:
        """Append a node with the next free id."""
        next_id = self.nodes[-1].id + 1 if self.nodes else 1
        node = Node(next_id, x, y)
        self.nodes.append(node)
        return node

    def add_edge(self, source_id: int, target_id: int) -> Edge | None:
        """
        Add an undirected edge.  Self loops and duplicates (in either
        orientation) are ignored and return None.
        """
        if source_id == target_id:
            return None
        if any(e.same_as(source_id, target_id) for e in self.edges):
            return None
        edge = Edge(source_id, target_id)
        self.edges.append(edge)
        return edge

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Graph:
        """
        Build a graph from the wire format::

            {"nodes": [{"id": 1, "x": 0.1, "y": 0.2, "color": "red"}, ...],
             "edges": [{"sourceId": 1, "targetId": 2}, ...]}
        """
        nodes = [
            Node(
                id=int(rn["id"]),
                x=float(rn.get("x", 0.5)),
                y=float(rn.get("y", 0.5)),
                color=rn.get("color"),
            )
            for rn in payload.get("nodes", [])
        ]
        edges = [
            Edge(int(re_["sourceId"]), int(re_["targetId"]))
            for re_ in payload.get("edges", [])
        ]
        return cls(nodes, edges)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    def copy(self) -> Graph:
        """Detached deep copy; strategies work on one of these."""
        return Graph(copy.deepcopy(self.nodes), list(self.edges))

    # ── Queries ────────────────────────────────────────────────────

    @property
    def node_ids(self) -> list[int]:
        return [n.id for n in self.nodes]

    def get_node(self, node_id: int) -> Node:
        """Return the node with *node_id*.  Raises KeyError if missing."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(f"Node {node_id!r} not in graph.")

    def colors(self) -> Assignment:
        """Current committed coloring as a nodeId → color mapping."""
        return {n.id: n.color for n in self.nodes}

    def to_networkx(self) -> nx.Graph:
        """Undirected NetworkX view used for adjacency queries."""
        g = nx.Graph()
        g.add_nodes_from(self.node_ids)
        g.add_edges_from((e.source_id, e.target_id) for e in self.edges)
        return g

    def adjacency(self) -> dict[int, list[int]]:
        """nodeId → neighbor ids, for every node (isolated ones map to [])."""
        g = self.to_networkx()
        return {node_id: list(g.neighbors(node_id)) for node_id in g.nodes}

    def neighbors(self, node_id: int) -> list[int]:
        return list(self.to_networkx().neighbors(node_id))

    def isolated_nodes(self) -> list[int]:
        """Ids of nodes with no incident edge."""
        return sorted(nx.isolates(self.to_networkx()))

    # ── Commit operations ──────────────────────────────────────────

    def apply_coloring(self, assignment: Mapping[int, str | None] | None) -> None:
        """
        Commit a published assignment onto the nodes.

        Nodes missing from *assignment* (or every node, when it is None)
        become uncolored.
        """
        for node in self.nodes:
            node.color = assignment.get(node.id) if assignment else None
        logger.debug("Applied coloring to %d nodes", len(self.nodes))

    def apply_positions(self, positions: Mapping[int, tuple[float, float]]) -> None:
        """Move nodes to the given (x, y) positions."""
        for node in self.nodes:
            if node.id in positions:
                node.x, node.y = positions[node.id]

    # ── Dunder helpers ─────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self.nodes)}, edges={len(self.edges)})"
