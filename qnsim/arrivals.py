# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# arrivals.py
# -----------------------------------------------------------------------------
# Purpose:
#   Exogenous arrivals into the first station: uniform inter-arrival gaps
#   after a fixed first-arrival offset, optionally capped at max_customers.
#
# Design notes:
#   - Arrivals are generated one at a time: each arrival event schedules the
#     next, so the FEL holds at most one pending arrival.
#   - The service draw of the arriving customer happens before the next gap
#     is drawn.
#
# Usage:
#   arrivals = ArrivalProcess(first_arrival=2.0, interarrival=(2.0, 4.0))
#   arrivals.start(env)
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Optional, Sequence

from .entities import Customer
from .queues import ARRIVAL, SimulationError


class ArrivalProcess:
    def __init__(self, first_arrival: float, interarrival: Sequence[float],
                 max_customers: Optional[int] = None, entry: int = 0):
        self.first_arrival = first_arrival
        self.gap_min, self.gap_max = float(interarrival[0]), float(interarrival[1])
        self.max_customers = max_customers
        self.entry = entry

    def accepting(self, env) -> bool:
        """True while the network still takes new external customers."""
        return self.max_customers is None or len(env.customers) < self.max_customers

    def start(self, env):
        if self.accepting(env):
            env.schedule(self.first_arrival, ARRIVAL, len(env.customers))

    def on_arrival(self, env, ev):
        cid = len(env.customers)
        if ev.customer_id != cid:
            raise SimulationError(f"arrival for customer {ev.customer_id}, table expects {cid}")
        cust = Customer.new(cid, env.t, len(env.stations))
        env.customers.append(cust)
        env.stations[self.entry].admit(env, cust)
        if self.accepting(env):
            gap = env.rv.next_uniform(self.gap_min, self.gap_max)
            env.schedule(env.t + gap, ARRIVAL, len(env.customers))
