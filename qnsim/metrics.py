# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# metrics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Collect and summarize per-station KPIs (throughput, waits, losses,
#   utilization, occupancy-time histogram) and end-to-end system time.
#
# Design notes:
#   - Side-effect methods (note_*) are called by stations and the router;
#     accrue() is called by the driver once per event with the elapsed dt.
#   - Occupancy = busy servers + line length, clamped to [0, capacity], so
#     each histogram has capacity + 1 buckets.
#   - summary() returns a JSON-serializable dict for easy tabulation.
#
# Usage:
#   M = Metrics(stations); ...; M.summary(env)
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Any, Dict, List


class Metrics:
    def __init__(self, stations: List[Any]):
        n = len(stations)
        self.attempts = [0] * n            # admission attempts per station
        self.processed = [0] * n           # departures routed out of each station
        self.losses = [0] * n
        self.wait_totals = [0.0] * n
        self.busy_time = [0.0] * n         # integrated busy server-time
        self.queue_area = [0.0] * n        # integrated waiting-line length
        self.state_time: List[List[float]] = [[0.0] * (st.capacity + 1) for st in stations]
        self.elapsed = 0.0
        self.served = 0
        self.system_time_total = 0.0

    def accrue(self, stations: List[Any], dt: float):
        """Charge dt to every station's current (pre-event) state."""
        self.elapsed += dt
        for i, st in enumerate(stations):
            busy = st.busy_count()
            waiting = len(st.queue)
            level = min(max(busy + waiting, 0), st.capacity)
            self.state_time[i][level] += dt
            self.busy_time[i] += busy * dt
            self.queue_area[i] += waiting * dt

    def note_attempt(self, station: int):
        self.attempts[station] += 1

    def note_loss(self, station: int):
        self.losses[station] += 1

    def note_wait(self, station: int, wait: float):
        self.wait_totals[station] += wait

    def note_processed(self, station: int):
        self.processed[station] += 1

    def note_exit(self, system_time: float):
        self.served += 1
        self.system_time_total += system_time

    def histogram(self, station: int) -> List[Dict[str, float]]:
        buckets = self.state_time[station]
        total = sum(buckets)
        return [
            {"level": level, "time": t, "fraction": (t / total) if total > 0 else 0.0}
            for level, t in enumerate(buckets)
        ]

    def summary(self, env) -> Dict:
        stations = []
        for i, st in enumerate(env.stations):
            processed = self.processed[i]
            denom = self.elapsed * st.c
            stations.append({
                "name": st.name,
                "servers": st.c,
                "capacity": st.capacity,
                "attempts": self.attempts[i],
                "processed": processed,
                "losses": self.losses[i],
                "total_wait": self.wait_totals[i],
                "avg_wait": (self.wait_totals[i] / processed) if processed > 0 else 0.0,
                "utilization": (self.busy_time[i] / denom) if denom > 0 else 0.0,
                "mean_queue_length": (self.queue_area[i] / self.elapsed) if self.elapsed > 0 else 0.0,
                "histogram": self.histogram(i),
            })
        lost = sum(self.losses)
        return {
            "served": self.served,
            "avg_system_time": (self.system_time_total / self.served) if self.served > 0 else 0.0,
            "arrivals": len(env.customers),
            "lost": lost,
            "in_system": len(env.customers) - self.served - lost,
            "sim_time": env.t,
            "draws": env.rv.draws,
            "seed": env.rv.seed,
            "termination": env.termination.describe(),
            "stations": stations,
        }
