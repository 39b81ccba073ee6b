# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# config.py
# -----------------------------------------------------------------------------
# Purpose:
#   Load the network description from YAML and validate it before any run.
#
# Design notes:
#   - Out-of-range values are rejected, never clamped: a run on silently
#     altered parameters would report statistics for a different network.
#   - validate_config() collects every problem and raises one ConfigError.
#   - Returns a normalized deep copy (floats for times, ints for counts).
#
# Usage:
#   cfg = validate_config(load_config("config/baseline.yaml"))
# -----------------------------------------------------------------------------

from __future__ import annotations
import copy, math, numbers
from typing import Any, Dict, List

import yaml

MAX_QUEUE_SIZE = 100      # hard bound on any station's waiting room
MAX_SERVERS = 2
POLICIES = ("horizon", "draw_budget", "drain")


class ConfigError(ValueError):
    """Malformed or out-of-range configuration."""
    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("invalid configuration: " + "; ".join(self.problems))


def load_config(path: str) -> Dict:
    with open(path, "r") as f:
        cfg = yaml.safe_load(f)
    if not isinstance(cfg, dict):
        raise ConfigError([f"{path}: top level must be a mapping"])
    return cfg


def _is_int(v: Any) -> bool:
    return isinstance(v, numbers.Integral) and not isinstance(v, bool)


def _is_num(v: Any) -> bool:
    return isinstance(v, numbers.Real) and not isinstance(v, bool) and math.isfinite(v)


def _range(where: str, v: Any, problems: List[str]):
    if not isinstance(v, (list, tuple)) or len(v) != 2 or not all(_is_num(x) for x in v):
        problems.append(f"{where} must be [min, max] numbers, got {v!r}")
        return None
    lo, hi = float(v[0]), float(v[1])
    if lo < 0:
        problems.append(f"{where} min must be >= 0, got {lo}")
    if lo > hi:
        problems.append(f"{where} min {lo} exceeds max {hi}")
    return [lo, hi]


def _validate_station(i: int, sc: Any, n: int, problems: List[str]) -> Dict:
    where = f"stations[{i}]"
    if not isinstance(sc, dict):
        problems.append(f"{where} must be a mapping")
        return {}
    out = dict(sc)
    name = sc.get("name", f"Node {i + 1}")
    if not isinstance(name, str) or not name:
        problems.append(f"{where}.name must be a non-empty string")
    out["name"] = str(name)

    servers = sc.get("servers", 1)
    if not _is_int(servers) or not 1 <= servers <= MAX_SERVERS:
        problems.append(f"{where}.servers must be an integer in 1..{MAX_SERVERS}, got {servers!r}")
    out["servers"] = servers

    cap = sc.get("capacity")
    if not _is_int(cap) or not 0 <= cap <= MAX_QUEUE_SIZE:
        problems.append(f"{where}.capacity must be an integer in 0..{MAX_QUEUE_SIZE}, got {cap!r}")
    out["capacity"] = cap

    out["service"] = _range(f"{where}.service", sc.get("service"), problems)

    routing = sc.get("routing", [0.0] * n + [1.0])
    if not isinstance(routing, (list, tuple)) or len(routing) != n + 1:
        problems.append(f"{where}.routing needs {n + 1} weights ({n} stations + exit), got {routing!r}")
    elif not all(_is_num(w) and w >= 0 for w in routing):
        problems.append(f"{where}.routing weights must be non-negative numbers, got {routing!r}")
    else:
        out["routing"] = [float(w) for w in routing]
    return out


def validate_config(cfg: Dict) -> Dict:
    """
    Check a raw config dict and return a normalized copy.

    Raises
    ------
    ConfigError
        Listing every problem found.
    """
    problems: List[str] = []
    cfg = copy.deepcopy(cfg) if isinstance(cfg, dict) else {}
    sim = cfg.get("sim") or {}
    if not isinstance(sim, dict):
        problems.append("sim must be a mapping")
        sim = {}

    seed = sim.get("seed")
    if seed is not None and not _is_int(seed):
        problems.append(f"sim.seed must be an integer or null, got {seed!r}")
    first = sim.get("first_arrival", 0.0)
    if not _is_num(first) or first < 0:
        problems.append(f"sim.first_arrival must be a number >= 0, got {first!r}")
    else:
        sim["first_arrival"] = float(first)
    sim["interarrival"] = _range("sim.interarrival", sim.get("interarrival"), problems)
    max_customers = sim.get("max_customers")
    if max_customers is not None and (not _is_int(max_customers) or max_customers < 1):
        problems.append(f"sim.max_customers must be a positive integer, got {max_customers!r}")
    sim.setdefault("seed", None)
    sim.setdefault("max_customers", None)
    cfg["sim"] = sim

    term = cfg.get("termination")
    if not isinstance(term, dict) or term.get("policy") not in POLICIES:
        problems.append(f"termination.policy must be one of {', '.join(POLICIES)}")
    else:
        policy = term["policy"]
        if policy == "horizon":
            h = term.get("horizon")
            if not _is_num(h) or h <= 0:
                problems.append(f"termination.horizon must be a number > 0, got {h!r}")
        elif policy == "draw_budget":
            d = term.get("draws")
            if not _is_int(d) or d < 1:
                problems.append(f"termination.draws must be a positive integer, got {d!r}")
        elif sim.get("max_customers") is None:
            problems.append("termination.policy drain requires sim.max_customers")

    stations = cfg.get("stations")
    if not isinstance(stations, list) or not stations:
        problems.append("stations must be a non-empty list")
    else:
        cfg["stations"] = [_validate_station(i, sc, len(stations), problems)
                           for i, sc in enumerate(stations)]

    if problems:
        raise ConfigError(problems)
    return cfg
