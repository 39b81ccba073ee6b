"""
qnsim package initializer.

This package contains the discrete-event engine, primitives (event list,
stations/servers), routing, termination policies, configuration and metric
collection for the open queueing-network simulator.
"""
__all__ = [
    "variates", "queues", "entities", "stations", "network",
    "arrivals", "policies", "metrics", "config", "simulation",
]
