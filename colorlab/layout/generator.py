"""
Random connected graph generator.

Nodes are scattered on a jittered grid, joined by a random spanning tree
so the graph is connected, topped up with a few random extra edges, and
finally spread out with the force-directed layout.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from colorlab.core.constants import MAX_NODES
from colorlab.core.graph import Graph
from colorlab.layout.force_directed import ForceDirectedLayout, iterations_for
from colorlab.solver.sampling import RandomSource

logger = logging.getLogger(__name__)

GRID_MARGIN = 0.05
GRID_SPAN = 0.9
GRID_JITTER = 0.8


def generate_random_connected_graph(node_count: int, rng: RandomSource = None) -> Graph:
    """
    Build a connected graph with *node_count* nodes.

    Raises ValueError if *node_count* is outside [1, MAX_NODES].
    """
    if not 1 <= node_count <= MAX_NODES:
        raise ValueError(f"Node count must be between 1 and {MAX_NODES}, got {node_count}.")

    rng = np.random.default_rng(rng)
    graph = Graph()

    columns = math.ceil(math.sqrt(node_count))
    rows = math.ceil(node_count / columns)
    for i in range(node_count):
        col, row = i % columns, i // columns
        x_norm = (col + 0.5 + (rng.random() - 0.5) * GRID_JITTER) / columns
        y_norm = (row + 0.5 + (rng.random() - 0.5) * GRID_JITTER) / rows
        graph.add_node(GRID_MARGIN + x_norm * GRID_SPAN, GRID_MARGIN + y_norm * GRID_SPAN)

    # Spanning tree: each node links to a random earlier one.
    nodes = graph.nodes
    for i in range(1, node_count):
        previous = nodes[int(rng.integers(0, i))]
        graph.add_edge(nodes[i].id, previous.id)

    extras = node_count // 4
    added = tries = 0
    max_tries = node_count * node_count
    while added < extras and tries < max_tries:
        tries += 1
        a = nodes[int(rng.integers(0, node_count))]
        b = nodes[int(rng.integers(0, node_count))]
        if graph.add_edge(a.id, b.id) is not None:
            added += 1

    ForceDirectedLayout(rng=rng).apply(graph, iterations_for(node_count))

    logger.info(
        "Generated random graph: %d nodes, %d edges", len(graph.nodes), len(graph.edges)
    )
    return graph
