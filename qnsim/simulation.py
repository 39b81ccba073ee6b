# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# simulation.py
# -----------------------------------------------------------------------------
# Purpose:
#   Simulate a single replication: validate the config, build stations,
#   router, arrivals and metrics, run the event loop, and return the summary.
#
# Design notes:
#   - Replications and scenario sweeps live outside, in experiments/.
#
# Usage:
#   from qnsim.simulation import run_one
#   results = run_one(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Any, Dict, Optional

from .arrivals import ArrivalProcess
from .config import validate_config
from .metrics import Metrics
from .network import Router
from .policies import make_termination
from .queues import Env
from .stations import make_stations
from .variates import VariateSource


def build_env(cfg: Dict, rng: Optional[Any] = None) -> Env:
    """Validate ``cfg`` and wire a ready-to-run Env (nothing scheduled yet)."""
    cfg = validate_config(cfg)
    sim = cfg["sim"]
    stations = make_stations(cfg)
    M = Metrics(stations)
    arrivals = ArrivalProcess(sim["first_arrival"], sim["interarrival"], sim["max_customers"])
    return Env(
        stations,
        router=Router(),
        arrivals=arrivals,
        termination=make_termination(cfg["termination"]),
        metrics=M,
        rv=VariateSource(seed=sim["seed"], rng=rng),
    )


def run_one(cfg: Dict) -> Dict:
    return build_env(cfg).run()
