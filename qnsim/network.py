# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# network.py
# -----------------------------------------------------------------------------
# Purpose:
#   Router: decides where a customer goes after a service completion, either
#   another station or out of the network.
#
# Design notes:
#   - Inverse-CDF sampling over each station's weight list. Weights need not
#     sum to 1; the draw is scaled by their sum, walked in the same order.
#   - A station whose weights are all zero sends everyone to exit without
#     consuming a draw.
#
# Usage:
#   router = Router()
#   router.route(env, customer, from_station)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from typing import Optional, Sequence

log = logging.getLogger(__name__)

EXIT = None


def pick_destination(weights: Sequence[float], u: float) -> Optional[int]:
    """
    Walk the cumulative weights and return the first index whose running
    total meets or exceeds ``u``. The last weight is the exit slot, mapped to
    EXIT. Zero-weight slots are never chosen.
    """
    n_stations = len(weights) - 1
    cum = 0.0
    last = EXIT
    for idx, w in enumerate(weights):
        if w <= 0:
            continue
        cum += w
        last = EXIT if idx == n_stations else idx
        if u <= cum:
            return last
    # u can only overshoot through rounding; fall back to the last live slot.
    return last


class Router:
    def choose(self, env, station) -> Optional[int]:
        total = sum(station.routing)
        if total <= 0:
            return EXIT
        u = env.rv.next_unit() * total
        return pick_destination(station.routing, u)

    def route(self, env, cust, from_station) -> Optional[int]:
        dest = self.choose(env, from_station)
        env.M.note_processed(from_station.index)
        cust.join_time = env.t
        if dest is EXIT:
            env.M.note_exit(cust.exit(env.t))
            log.debug("t=%.6f customer %d exits from %s", env.t, cust.cid, from_station.name)
        else:
            env.stations[dest].admit(env, cust)
        return dest
