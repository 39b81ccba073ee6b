"""Shared config builders and a scripted generator for the test suite."""

import copy
import os

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
BASELINE_PATH = os.path.join(ROOT, "config", "baseline.yaml")


class ScriptedRNG:
    """Stands in for random.Random: replays a fixed list of unit draws."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        v = self.values[self.calls % len(self.values)]
        self.calls += 1
        return v


def station(name="S1", servers=1, capacity=1, service=(1.0, 1.0), routing=None, n=1):
    return {
        "name": name,
        "servers": servers,
        "capacity": capacity,
        "service": list(service),
        "routing": list(routing) if routing is not None else [0.0] * n + [1.0],
    }


def single_station_cfg(servers=1, capacity=1, service=(1.0, 1.0), interarrival=(2.0, 2.0),
                       first_arrival=2.0, termination=None, seed=7, max_customers=None):
    return {
        "sim": {
            "seed": seed,
            "first_arrival": first_arrival,
            "interarrival": list(interarrival),
            "max_customers": max_customers,
        },
        "termination": copy.deepcopy(termination or {"policy": "horizon", "horizon": 10.0}),
        "stations": [station(servers=servers, capacity=capacity, service=service)],
    }


def three_station_cfg(routing_a=(0.0, 0.8, 0.2, 0.0), termination=None, seed=11, max_customers=None):
    return {
        "sim": {
            "seed": seed,
            "first_arrival": 2.0,
            "interarrival": [2.0, 4.0],
            "max_customers": max_customers,
        },
        "termination": copy.deepcopy(termination or {"policy": "horizon", "horizon": 2000.0}),
        "stations": [
            station("A", servers=1, capacity=100, service=(1.0, 2.0), routing=routing_a, n=3),
            station("B", servers=2, capacity=5, service=(4.0, 6.0), routing=(0.3, 0.0, 0.5, 0.2), n=3),
            station("C", servers=2, capacity=10, service=(5.0, 15.0), routing=(0.0, 0.7, 0.0, 0.3), n=3),
        ],
    }


def arrive(env):
    """Register a new customer at the current clock, without admitting it."""
    from qnsim.entities import Customer

    cust = Customer.new(len(env.customers), env.t, len(env.stations))
    env.customers.append(cust)
    return cust
