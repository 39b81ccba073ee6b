"""Event list ordering, variate counting and clock behaviour."""

import dataclasses
import unittest

from qnsim.queues import ARRIVAL, COMPLETION, Event, EventQueue, SimulationError
from qnsim.simulation import build_env
from qnsim.variates import VariateSource
from tests.support import ScriptedRNG, single_station_cfg


class TestEventQueue(unittest.TestCase):
    def test_pops_in_time_order(self):
        q = EventQueue()
        for t, cid in [(5.0, 1), (1.0, 2), (3.0, 3), (0.5, 4)]:
            q.schedule(t, ARRIVAL, cid)
        self.assertEqual(len(q), 4)
        self.assertEqual(q.peek_time(), 0.5)
        order = [q.pop_earliest().customer_id for _ in range(4)]
        self.assertEqual(order, [4, 2, 3, 1])

    def test_simultaneous_events_keep_insertion_order(self):
        q = EventQueue()
        q.schedule(2.0, COMPLETION, 10, station=0, server_id=1)
        q.schedule(1.0, ARRIVAL, 99)
        q.schedule(2.0, ARRIVAL, 11)
        q.schedule(2.0, COMPLETION, 12, station=1, server_id=0)
        q.pop_earliest()
        self.assertEqual([q.pop_earliest().customer_id for _ in range(3)], [10, 11, 12])

    def test_empty_queue_returns_none(self):
        q = EventQueue()
        self.assertIsNone(q.pop_earliest())
        self.assertIsNone(q.peek_time())
        q.schedule(1.0, ARRIVAL, 0)
        q.pop_earliest()
        self.assertIsNone(q.pop_earliest())

    def test_events_are_immutable(self):
        ev = EventQueue().schedule(1.0, ARRIVAL, 0)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            ev.t = 2.0

    def test_event_ordering_ignores_payload(self):
        a = Event(1.0, 0, COMPLETION, 5, station=2, server_id=1)
        b = Event(1.0, 1, ARRIVAL, 0)
        self.assertLess(a, b)


class TestVariateSource(unittest.TestCase):
    def test_every_draw_is_counted(self):
        rv = VariateSource(seed=3)
        rv.next_unit()
        rv.next_uniform(1.0, 2.0)
        rv.next_uniform(4.0, 4.0)
        self.assertEqual(rv.draws, 3)

    def test_range_and_degenerate_range(self):
        rv = VariateSource(seed=5)
        for _ in range(200):
            v = rv.next_uniform(2.0, 4.0)
            self.assertGreaterEqual(v, 2.0)
            self.assertLess(v, 4.0)
        self.assertEqual(rv.next_uniform(3.5, 3.5), 3.5)

    def test_same_seed_same_stream(self):
        a, b = VariateSource(seed=123), VariateSource(seed=123)
        self.assertEqual([a.next_unit() for _ in range(20)], [b.next_unit() for _ in range(20)])

    def test_unseeded_source_records_its_seed(self):
        rv = VariateSource()
        self.assertIsInstance(rv.seed, int)
        replay = VariateSource(seed=rv.seed)
        self.assertEqual([rv.next_unit() for _ in range(5)], [replay.next_unit() for _ in range(5)])

    def test_substitute_generator(self):
        rv = VariateSource(rng=ScriptedRNG([0.25, 0.5]))
        self.assertEqual(rv.next_uniform(0.0, 4.0), 1.0)
        self.assertEqual(rv.next_uniform(2.0, 4.0), 3.0)
        self.assertEqual(rv.draws, 2)


class TestClock(unittest.TestCase):
    def test_clock_never_moves_backwards(self):
        env = build_env(single_station_cfg())
        env.advance(3.0)
        with self.assertRaises(SimulationError):
            env.advance(2.0)

    def test_advance_accrues_current_state(self):
        env = build_env(single_station_cfg())
        env.advance(4.0)
        self.assertEqual(env.M.state_time[0], [4.0, 0.0])
        self.assertEqual(env.t, 4.0)


if __name__ == "__main__":
    unittest.main()
