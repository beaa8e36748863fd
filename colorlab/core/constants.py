"""
Engine constants: palette, graph limits, batching and layout tuning.
"""

from __future__ import annotations

# ── Palette ────────────────────────────────────────────────────────

PALETTE_NAMES: tuple[str, ...] = (
    "blue",
    "red",
    "green",
    "yellow",
    "purple",
    "orange",
    "cyan",
    "magenta",
    "lime",
    "pink",
)

# ── Graph constraints ──────────────────────────────────────────────

MIN_COLORS = 3
MAX_COLORS = 10
DEFAULT_COLORS = 3
MAX_NODES = 150

# ── Algorithms ─────────────────────────────────────────────────────

DEFAULT_BATCH_SIZE = 50
DEFAULT_MONTE_CARLO_ITERATIONS = 1000
LOCAL_SEARCH_DELAY_MS = 150
PUBLISH_INTERVAL_MS = 50

# ── Force-directed layout ──────────────────────────────────────────

K_MULTIPLIER = 0.7
COOLING_RATE = 0.95
TEMPERATURE_FACTOR = 0.1
POSITION_MIN = 0.02
POSITION_MAX = 0.98
JITTER = 0.01

SMALL_GRAPH_THRESHOLD = 80
MEDIUM_GRAPH_THRESHOLD = 120
SMALL_GRAPH_ITERATIONS = 250
MEDIUM_GRAPH_ITERATIONS = 300
LARGE_GRAPH_ITERATIONS = 350
