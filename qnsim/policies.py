# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# policies.py
# -----------------------------------------------------------------------------
# Purpose:
#   Termination policies for the event loop. Exactly one governs a run:
#     horizon      stop at a simulated-time cutoff
#     draw_budget  stop once a number of variates has been consumed
#     drain        stop when the FEL is empty (arrivals must be capped)
#
# Design notes:
#   - The driver asks should_stop() before popping and admits(ev) after;
#     finish() runs once when the loop ends.
#
# Usage:
#   from qnsim.policies import make_termination
#   policy = make_termination(cfg["termination"])
# -----------------------------------------------------------------------------

from __future__ import annotations


class Termination:
    name = "drain"

    def should_stop(self, env) -> bool:
        return False

    def admits(self, ev) -> bool:
        return True

    def finish(self, env):
        pass

    def describe(self) -> dict:
        return {"policy": self.name}


class Drain(Termination):
    """Run until no events remain."""


class Horizon(Termination):
    """Discard events after ``horizon`` and close the clock at the horizon."""
    name = "horizon"

    def __init__(self, horizon: float):
        self.horizon = horizon

    def admits(self, ev) -> bool:
        return ev.t <= self.horizon

    def finish(self, env):
        # The idle tail up to the cutoff still counts towards the histograms.
        if env.t < self.horizon:
            env.advance(self.horizon)

    def describe(self) -> dict:
        return {"policy": self.name, "horizon": self.horizon}


class DrawBudget(Termination):
    """Stop before the next event once ``budget`` variates have been drawn."""
    name = "draw_budget"

    def __init__(self, budget: int):
        self.budget = budget

    def should_stop(self, env) -> bool:
        return env.rv.draws >= self.budget

    def describe(self) -> dict:
        return {"policy": self.name, "draws": self.budget}


def make_termination(spec: dict) -> Termination:
    """Build the policy named in a validated ``termination`` config block."""
    policy = spec["policy"]
    if policy == "horizon":
        return Horizon(float(spec["horizon"]))
    if policy == "draw_budget":
        return DrawBudget(int(spec["draws"]))
    if policy == "drain":
        return Drain()
    raise ValueError(f"unknown termination policy {policy!r}")
