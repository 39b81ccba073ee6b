# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# variates.py
# -----------------------------------------------------------------------------
# Purpose:
#   Uniform random variates for the network: service durations, inter-arrival
#   gaps and routing draws. Every draw is counted so a run can stop on a
#   draw budget.
#
# Design notes:
#   - Each run owns its own random.Random; nothing touches the module-level
#     generator, so replications never leak state into each other.
#   - Any object with a random() method can stand in for the generator
#     (tests script exact draw sequences this way).
#
# Usage:
#   rv = VariateSource(seed=42); rv.next_uniform(1.0, 2.0); rv.draws
# -----------------------------------------------------------------------------

from __future__ import annotations
import random
from typing import Any, Optional


class VariateSource:
    """Counted source of uniform variates.

    Parameters
    ----------
    seed : int | None
        Seed for the private generator. When None a seed is taken from system
        entropy and kept on ``self.seed`` so the run can be replayed.
    rng : object | None
        Replacement generator exposing ``random() -> float`` in [0, 1).
    """
    def __init__(self, seed: Optional[int] = None, rng: Any = None):
        if rng is None:
            if seed is None:
                seed = random.SystemRandom().randrange(2**32)
            rng = random.Random(seed)
        self.seed = seed
        self.rng = rng
        self.draws: int = 0

    def next_unit(self) -> float:
        self.draws += 1
        return self.rng.random()

    def next_uniform(self, lo: float, hi: float) -> float:
        """Draw from [lo, hi); lo == hi returns lo (still counted)."""
        return lo + self.next_unit() * (hi - lo)
