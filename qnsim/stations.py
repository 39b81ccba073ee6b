# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# stations.py
# -----------------------------------------------------------------------------
# Purpose:
#   Service nodes of the network: a Station owns c parallel servers, a FIFO
#   waiting line bounded by a capacity, and a uniform service-time range.
#   It decides admission, server assignment and service-time generation.
#
# Design notes:
#   - Capacity bounds the waiting line only; customers in service do not
#     count against it.
#   - The lowest-indexed idle server is always chosen, which keeps runs with
#     a fixed seed reproducible.
#   - A customer that finds every server busy and the line full is lost.
#
# Usage:
#   from qnsim.stations import make_stations
#   stations = make_stations(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from collections import deque
from typing import Deque, List, Optional, Sequence

from .entities import Customer, IN_SERVICE, WAITING
from .queues import COMPLETION, SimulationError

log = logging.getLogger(__name__)

STARTED = "started_service"
ENQUEUED = "enqueued"
REJECTED = "rejected"


class Server:
    """One server of a station; idle or busy with a single customer."""
    __slots__ = ("busy", "customer_id", "completes_at")

    def __init__(self):
        self.busy = False
        self.customer_id: Optional[int] = None
        self.completes_at = float("inf")

    def release(self) -> Optional[int]:
        cid = self.customer_id
        self.busy = False
        self.customer_id = None
        self.completes_at = float("inf")
        return cid


class Station:
    """FIFO station with c servers and a finite waiting line.

    Parameters
    ----------
    index : int
        Position in the network; also the completion-event station tag.
    name : str
        Display name for reports.
    c : int
        Number of parallel servers.
    capacity : int
        Waiting-room size (0 means no waiting room).
    service : (float, float)
        Uniform service-time bounds.
    routing : sequence of float
        Outgoing weights, one per station in network order, last one for exit.
    """
    def __init__(self, index: int, name: str, c: int, capacity: int,
                 service: Sequence[float], routing: Sequence[float]):
        self.index = index
        self.name = name
        self.c = c
        self.capacity = capacity
        self.service_min, self.service_max = float(service[0]), float(service[1])
        self.routing: List[float] = [float(w) for w in routing]
        self.servers: List[Server] = [Server() for _ in range(c)]
        self.queue: Deque[int] = deque()

    def busy_count(self) -> int:
        return sum(1 for s in self.servers if s.busy)

    def occupancy(self) -> int:
        return self.busy_count() + len(self.queue)

    def idle_server(self) -> Optional[int]:
        for sid, srv in enumerate(self.servers):
            if not srv.busy:
                return sid
        return None

    def admit(self, env, cust: Customer) -> str:
        cust.ensure_active()
        env.M.note_attempt(self.index)
        cust.station = self.index
        sid = self.idle_server()
        if sid is not None:
            self._start_service(env, sid, cust)
            return STARTED
        if len(self.queue) < self.capacity:
            cust.join_time = env.t
            cust.status = WAITING
            self.queue.append(cust.cid)
            return ENQUEUED
        env.M.note_loss(self.index)
        cust.drop()
        log.debug("t=%.6f %s full, customer %d lost", env.t, self.name, cust.cid)
        return REJECTED

    def complete(self, env, server_id: int) -> Customer:
        srv = self.servers[server_id]
        if not srv.busy:
            raise SimulationError(f"{self.name}: completion on idle server {server_id}")
        departing = env.customers[srv.release()]
        if self.queue:
            nxt = env.customers[self.queue.popleft()]
            wait = env.t - nxt.join_time
            nxt.waiting_times[self.index] += wait
            env.M.note_wait(self.index, wait)
            self._start_service(env, server_id, nxt)
        return departing

    def _start_service(self, env, sid: int, cust: Customer):
        srv = self.servers[sid]
        st = env.rv.next_uniform(self.service_min, self.service_max)
        cust.service_times[self.index] += st
        cust.visits[self.index] += 1
        cust.status = IN_SERVICE
        srv.busy = True
        srv.customer_id = cust.cid
        srv.completes_at = env.t + st
        env.schedule(srv.completes_at, COMPLETION, cust.cid, station=self.index, server_id=sid)


def make_stations(cfg: dict) -> List[Station]:
    """
    Build the stations of a validated config, in network order.

    Parameters
    ----------
    cfg : dict
        Output of qnsim.config.validate_config.

    Returns
    -------
    list[Station]
    """
    return [
        Station(i, sc["name"], c=sc["servers"], capacity=sc["capacity"],
                service=sc["service"], routing=sc["routing"])
        for i, sc in enumerate(cfg["stations"])
    ]
