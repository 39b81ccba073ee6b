"""Experiment harness: overrides, confidence intervals, replications, CLI."""

import contextlib
import io
import unittest

from experiments.run_experiments import (
    apply_overrides, average_histograms, main, mean_ci, run_replications,
)
from experiments.scenarios import SCENARIOS
from qnsim.config import ConfigError, load_config, validate_config
from tests.support import BASELINE_PATH, three_station_cfg


class TestOverrides(unittest.TestCase):
    def setUp(self):
        self.cfg = load_config(BASELINE_PATH)

    def test_nested_merge_keeps_siblings(self):
        new = apply_overrides(self.cfg, {"sim": {"seed": 7}})
        self.assertEqual(new["sim"]["seed"], 7)
        self.assertEqual(new["sim"]["interarrival"], self.cfg["sim"]["interarrival"])
        self.assertEqual(self.cfg["sim"]["seed"], 42)

    def test_station_override_by_name(self):
        new = apply_overrides(self.cfg, {"stations": {"Node 2 (G/G/2/5)": {"capacity": 10}}})
        self.assertEqual([st["capacity"] for st in new["stations"]], [100, 10, 10])
        self.assertEqual(self.cfg["stations"][1]["capacity"], 5)

    def test_unknown_station_name(self):
        with self.assertRaises(ConfigError):
            apply_overrides(self.cfg, {"stations": {"Node 9": {"capacity": 1}}})

    def test_station_list_replaces_network(self):
        stations = three_station_cfg()["stations"]
        new = apply_overrides(self.cfg, {"stations": stations})
        self.assertEqual([st["name"] for st in new["stations"]], ["A", "B", "C"])

    def test_every_scenario_validates(self):
        for sc in SCENARIOS:
            validate_config(apply_overrides(self.cfg, sc["overrides"]))


class TestStatistics(unittest.TestCase):
    def test_mean_ci(self):
        self.assertEqual(mean_ci([], 0.95), (0.0, 0.0))
        self.assertEqual(mean_ci([3.0], 0.95), (3.0, 0.0))
        self.assertEqual(mean_ci([2.0, 2.0, 2.0], 0.95), (2.0, 0.0))
        mu, half = mean_ci([1.0, 2.0, 3.0, 4.0], 0.95)
        self.assertAlmostEqual(mu, 2.5)
        # t(0.975, 3) = 3.182446, sd = 1.290994
        self.assertAlmostEqual(half, 3.182446 * 1.290994 / 2.0, places=4)

    def test_replications_use_consecutive_seeds(self):
        cfg = three_station_cfg(termination={"policy": "draw_budget", "draws": 2000})
        results = run_replications(cfg, 3, base_seed=10)
        self.assertEqual([r["seed"] for r in results], [10, 11, 12])
        self.assertEqual(run_replications(cfg, 1, base_seed=11)[0], results[1])

    def test_average_histograms_are_distributions(self):
        cfg = three_station_cfg(termination={"policy": "horizon", "horizon": 1000.0})
        hists = average_histograms(run_replications(cfg, 2, base_seed=1))
        self.assertEqual([len(h) for h in hists], [101, 6, 11])
        for h in hists:
            self.assertAlmostEqual(sum(b["fraction"] for b in h), 1.0, places=9)
            self.assertAlmostEqual(sum(b["time"] for b in h), 1000.0, places=6)


class TestCli(unittest.TestCase):
    def test_single_replication_report(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            rc = main([BASELINE_PATH, "--scenario", "horizon_10k", "--replications", "1"])
        self.assertEqual(rc, 0)
        text = out.getvalue()
        self.assertIn("Scenario: horizon_10k", text)
        self.assertIn("State;AccumulatedTime;Probability", text)
        self.assertIn("Total simulation time: 10000.000000", text)

    def test_replicated_report(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            rc = main([BASELINE_PATH, "--scenario", "drain_5k", "--replications", "2", "--seed", "3"])
        self.assertEqual(rc, 0)
        self.assertIn("replications=2", out.getvalue())
        self.assertIn("seeds 3-4", out.getvalue())

    def test_unknown_scenario(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            rc = main([BASELINE_PATH, "--scenario", "nope"])
        self.assertEqual(rc, 2)


if __name__ == "__main__":
    unittest.main()
