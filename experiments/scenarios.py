"""
experiments/scenarios.py

Holds scenario definitions (overrides on top of config/baseline.yaml) to
sweep during experiments. `stations` overrides are keyed by station name and
merged into the matching station; every other key merges recursively.
"""

from __future__ import annotations

BASELINE = {
    "name": "baseline",
    "overrides": {},  # override config keys here per scenario
}

HORIZON = {
    "name": "horizon_10k",
    "overrides": {
        "termination": {"policy": "horizon", "horizon": 10000.0},
    },
}

DRAIN = {
    "name": "drain_5k",
    "overrides": {
        "sim": {"max_customers": 5000},
        "termination": {"policy": "drain"},
    },
}

# Bigger waiting room at the bottleneck node
NODE2_CAP10 = {
    "name": "node2_capacity_10",
    "overrides": {
        "stations": {
            "Node 2 (G/G/2/5)": {"capacity": 10},
        },
    },
}

# Node 1 releases half of its customers straight to exit
NODE1_HALF_EXIT = {
    "name": "node1_half_exit",
    "overrides": {
        "stations": {
            "Node 1 (G/G/1)": {"routing": [0.0, 0.4, 0.1, 0.5]},
        },
    },
}

SCENARIOS = [
    BASELINE,
    HORIZON,
    DRAIN,
    NODE2_CAP10,
    NODE1_HALF_EXIT,
]
