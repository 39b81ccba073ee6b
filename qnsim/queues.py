# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# queues.py
# -----------------------------------------------------------------------------
# Purpose:
#   Discrete-event primitives: the immutable Event, the Future Event List
#   (EventQueue) and Env, the run context that owns the clock, the stations,
#   the customer table and the statistics, and drives the event loop.
#
# Design notes:
#   - FEL is a min-heap keyed by (time, insertion sequence) so simultaneous
#     events come out in the order they were scheduled.
#   - Events carry customer identities (indices into env.customers), never
#     object references.
#   - Statistics for the elapsed interval are accrued from the pre-event
#     state before the event is dispatched.
#
# Usage:
#   from qnsim.queues import Env, Event, EventQueue
# -----------------------------------------------------------------------------

from __future__ import annotations
import heapq, itertools, logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

log = logging.getLogger(__name__)

ARRIVAL = "arrival"
COMPLETION = "completion"


class SimulationError(RuntimeError):
    """Internal inconsistency detected while the model is running."""


@dataclass(frozen=True, order=True)
class Event:
    """A scheduled occurrence. Ordered by time, then by insertion sequence."""
    t: float
    seq: int
    kind: str = field(compare=False)
    customer_id: int = field(compare=False)
    station: int = field(compare=False, default=-1)
    server_id: int = field(compare=False, default=-1)


class EventQueue:
    """Future Event List with stable FIFO ordering among equal timestamps."""
    def __init__(self):
        self._heap: List[Event] = []
        self._seq = itertools.count()

    def schedule(self, t: float, kind: str, customer_id: int,
                 station: int = -1, server_id: int = -1) -> Event:
        ev = Event(t, next(self._seq), kind, customer_id, station, server_id)
        heapq.heappush(self._heap, ev)
        return ev

    def pop_earliest(self) -> Optional[Event]:
        if not self._heap:
            return None
        return heapq.heappop(self._heap)

    def peek_time(self) -> Optional[float]:
        return self._heap[0].t if self._heap else None

    def __len__(self) -> int:
        return len(self._heap)


class Env:
    """Simulation context and driver for one replication.

    Attributes
    ----------
    t : float
        Simulation clock.
    FEL : EventQueue
        Pending events.
    rv : VariateSource
        Counted uniform generator shared by every component.
    stations : list[Station]
        Network nodes; index 0 receives external arrivals.
    customers : list[Customer]
        Customer table; a customer's identity is its index here.
    router, arrivals, termination, M
        Routing policy, external arrival process, stopping rule, metrics.
    """
    def __init__(self, stations: List[Any], router, arrivals, termination, metrics, rv):
        self.t: float = 0.0
        self.FEL = EventQueue()
        self.rv = rv
        self.stations = stations
        self.customers: List[Any] = []
        self.router = router
        self.arrivals = arrivals
        self.termination = termination
        self.M = metrics
        self.started = False
        self.stopped = False

    def schedule(self, t: float, kind: str, customer_id: int,
                 station: int = -1, server_id: int = -1) -> Event:
        return self.FEL.schedule(t, kind, customer_id, station, server_id)

    def advance(self, t: float):
        """Accrue the interval [self.t, t) with the current state, then move the clock."""
        if t < self.t:
            raise SimulationError(f"event at t={t} precedes clock t={self.t}")
        dt = t - self.t
        if dt > 0:
            self.M.accrue(self.stations, dt)
        self.t = t

    def start(self):
        if self.started:
            return
        self.started = True
        log.info("run start: %d stations, policy=%s, seed=%s",
                 len(self.stations), self.termination.name, self.rv.seed)
        self.arrivals.start(self)

    def step(self) -> Optional[Event]:
        """Process one event. Returns it, or None once the run has stopped."""
        if self.stopped:
            return None
        self.start()
        if self.termination.should_stop(self):
            return self._stop()
        ev = self.FEL.pop_earliest()
        if ev is None or not self.termination.admits(ev):
            # Events beyond the stopping point are discarded with the FEL.
            return self._stop()
        self.advance(ev.t)
        self.dispatch(ev)
        return ev

    def dispatch(self, ev: Event):
        log.debug("t=%.6f %s customer=%d station=%d server=%d",
                  ev.t, ev.kind, ev.customer_id, ev.station, ev.server_id)
        if ev.kind == ARRIVAL:
            self.arrivals.on_arrival(self, ev)
        elif ev.kind == COMPLETION:
            station = self.stations[ev.station]
            cust = station.complete(self, ev.server_id)
            if cust.cid != ev.customer_id:
                raise SimulationError(
                    f"{station.name}: server {ev.server_id} holds customer {cust.cid}, "
                    f"event expected {ev.customer_id}")
            self.router.route(self, cust, station)
        else:
            raise SimulationError(f"unknown event kind {ev.kind!r}")

    def _stop(self) -> None:
        self.termination.finish(self)
        self.stopped = True
        log.info("run stop at t=%.6f after %d draws (%d events pending)",
                 self.t, self.rv.draws, len(self.FEL))
        return None

    def run(self) -> dict:
        while self.step() is not None:
            pass
        return self.M.summary(self)

    def check_invariants(self):
        """Every active customer sits in exactly one place: a server or a line."""
        seen = {}
        for st in self.stations:
            if len(st.queue) > st.capacity:
                raise SimulationError(f"{st.name}: line {len(st.queue)} exceeds capacity {st.capacity}")
            places = [s.customer_id for s in st.servers if s.busy] + list(st.queue)
            for cid in places:
                if cid in seen:
                    raise SimulationError(f"customer {cid} present at {seen[cid]} and {st.name}")
                seen[cid] = st.name
        for cust in self.customers:
            active = cust.status in ("waiting", "in_service")
            if active != (cust.cid in seen):
                raise SimulationError(f"customer {cust.cid} status {cust.status} disagrees with placement")
