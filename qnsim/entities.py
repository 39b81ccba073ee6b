# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# entities.py
# -----------------------------------------------------------------------------
# Purpose:
#   The Customer entity: timing and visit bookkeeping carried through the
#   network, one slot per station.
#
# Design notes:
#   - Identity is the index into Env.customers; events and servers hold that
#     index, never the object.
#   - Once a customer is served or lost it is archived: further mutation
#     raises SimulationError.
#
# Usage:
#   from qnsim.entities import Customer
#   c = Customer.new(cid=0, arrival_time=2.0, n_stations=3)
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from .queues import SimulationError

WAITING = "waiting"
IN_SERVICE = "in_service"
SERVED = "served"
LOST = "lost"


@dataclass
class Customer:
    cid: int
    arrival_time: float
    waiting_times: List[float] = field(default_factory=list)   # per-station cumulative wait
    service_times: List[float] = field(default_factory=list)   # per-station cumulative service
    visits: List[int] = field(default_factory=list)            # service starts per station
    station: Optional[int] = None                              # current station index
    join_time: float = 0.0                                     # reference for the next wait
    status: str = WAITING
    total_system_time: Optional[float] = None                  # set once, on exit

    @classmethod
    def new(cls, cid: int, arrival_time: float, n_stations: int) -> "Customer":
        return cls(
            cid=cid,
            arrival_time=arrival_time,
            waiting_times=[0.0] * n_stations,
            service_times=[0.0] * n_stations,
            visits=[0] * n_stations,
            join_time=arrival_time,
        )

    @property
    def archived(self) -> bool:
        return self.status in (SERVED, LOST)

    def ensure_active(self):
        if self.archived:
            raise SimulationError(f"customer {self.cid} is archived ({self.status})")

    def exit(self, now: float) -> float:
        """Stamp the end-to-end time and archive as served."""
        self.ensure_active()
        self.total_system_time = now - self.arrival_time
        self.status = SERVED
        self.station = None
        return self.total_system_time

    def drop(self):
        """Archive as lost (rejected by a full station)."""
        self.ensure_active()
        self.status = LOST
