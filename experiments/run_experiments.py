"""
experiments/run_experiments.py

Experiment harness that loads the baseline config, applies scenario overrides,
runs seeded replications, and reports per-station KPIs with confidence
intervals plus the state (occupancy) distribution of each station.

    python -m experiments.run_experiments [config.yaml] [--scenario NAME ...]
        [--replications N] [--seed S] [--confidence C] [--plot] [--verbose]
"""

from __future__ import annotations
import argparse, copy, logging, math, os
from typing import Callable, Dict, List, Optional
from statistics import mean, stdev

from scipy.stats import t as student_t

from experiments.scenarios import SCENARIOS
from qnsim.config import ConfigError, load_config
from qnsim.simulation import run_one

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CFG = os.path.join(ROOT, "config", "baseline.yaml")

log = logging.getLogger(__name__)


def load_cfg(path: Optional[str] = None) -> Dict:
    return load_config(path or DEFAULT_CFG)


def apply_overrides(cfg: Dict, overrides: Dict) -> Dict:
    """Apply scenario overrides (recursive merge) on top of the base config.

    A ``stations`` override given as a mapping is matched against station
    names; a list replaces the stations wholesale.
    """
    new = copy.deepcopy(cfg)

    def _merge(dst: Dict, src: Dict):
        for key, val in src.items():
            if isinstance(val, dict) and isinstance(dst.get(key), dict):
                _merge(dst[key], val)
            else:
                dst[key] = copy.deepcopy(val)

    overrides = dict(overrides)
    by_name = overrides.pop("stations", None)
    _merge(new, overrides)
    if isinstance(by_name, dict):
        index = {st.get("name"): st for st in new.get("stations", [])}
        for name, patch in by_name.items():
            if name not in index:
                raise ConfigError([f"scenario override names unknown station {name!r}"])
            _merge(index[name], patch)
    elif by_name is not None:
        new["stations"] = copy.deepcopy(by_name)
    return new


def mean_ci(values: List[float], confidence_level: float) -> tuple[float, float]:
    """Return (mean, half-width) using a Student-t critical value with df = n-1."""
    if not values:
        return 0.0, 0.0
    mu = mean(values)
    n = len(values)
    if n < 2:
        return mu, 0.0
    level = min(max(confidence_level, 0.0), 0.999999)
    alpha = 1.0 - level
    tcrit = student_t.ppf(1 - alpha / 2.0, n - 1)
    half = tcrit * (stdev(values) / math.sqrt(n))
    return mu, half


def series(results: List[Dict], extractor: Callable[[Dict], float]) -> List[float]:
    """Collect a numeric series from each replication result."""
    return [float(extractor(res)) for res in results]


def run_replications(cfg: Dict, replications: int, base_seed: int) -> List[Dict]:
    """Run ``replications`` copies of ``cfg`` with seeds base_seed, base_seed+1, ..."""
    results = []
    for rep in range(replications):
        run_cfg = copy.deepcopy(cfg)
        run_cfg.setdefault("sim", {})["seed"] = base_seed + rep
        results.append(run_one(run_cfg))
    return results


def average_histograms(results: List[Dict]) -> List[List[Dict[str, float]]]:
    """Mean time and fraction per occupancy level, per station, across replications."""
    if not results:
        return []
    out = []
    for idx, st in enumerate(results[0]["stations"]):
        levels = []
        for lvl in range(len(st["histogram"])):
            levels.append({
                "level": lvl,
                "time": mean(r["stations"][idx]["histogram"][lvl]["time"] for r in results),
                "fraction": mean(r["stations"][idx]["histogram"][lvl]["fraction"] for r in results),
            })
        out.append(levels)
    return out


def print_run_report(res: Dict):
    """Single-run report: per-station counters, then the state distribution tables."""
    for idx, st in enumerate(res["stations"], start=1):
        print(f"Station {idx}: {st['name']} (servers={st['servers']}, capacity={st['capacity']})")
        print(f"  Customers processed: {st['processed']}")
        print(f"  Average waiting time: {st['avg_wait']:.6f}")
        print(f"  Losses: {st['losses']}")
        print(f"  Utilization: {st['utilization'] * 100.0:.1f}%")
        print(f"  Mean waiting-line length: {st['mean_queue_length']:.4f}")
    print(f"Customers served: {res['served']} (arrivals {res['arrivals']}, lost {res['lost']}, "
          f"still in system {res['in_system']})")
    print(f"Average system time: {res['avg_system_time']:.6f}")
    print(f"Total simulation time: {res['sim_time']:.6f} ({res['draws']} draws, seed {res['seed']})")
    for idx, st in enumerate(res["stations"], start=1):
        print(f"\nState distribution - Station {idx} ({st['name']}):")
        print("State;AccumulatedTime;Probability")
        for b in st["histogram"]:
            print(f"{b['level']};{b['time']:.6f};{b['fraction']:.6f}")


def print_scenario_report(name: str, results: List[Dict], confidence: float, seeds: tuple):
    level_pct = confidence * 100.0
    print(f"Scenario: {name} (replications={len(results)}, {level_pct:.1f}% CI, seeds {seeds[0]}-{seeds[1]})")
    served = mean_ci(series(results, lambda r: r["served"]), confidence)
    sys_time = mean_ci(series(results, lambda r: r["avg_system_time"]), confidence)
    sim_time = mean_ci(series(results, lambda r: r["sim_time"]), confidence)
    print(f"  Customers served: {served[0]:.1f} ± {served[1]:.1f}")
    print(f"  Avg system time: {sys_time[0]:.4f} ± {sys_time[1]:.4f}")
    print(f"  Simulated time: {sim_time[0]:.2f} ± {sim_time[1]:.2f}")
    for idx, st in enumerate(results[0]["stations"]):
        processed = mean_ci(series(results, lambda r: r["stations"][idx]["processed"]), confidence)
        wait = mean_ci(series(results, lambda r: r["stations"][idx]["avg_wait"]), confidence)
        losses = mean_ci(series(results, lambda r: r["stations"][idx]["losses"]), confidence)
        util = mean_ci(series(results, lambda r: r["stations"][idx]["utilization"] * 100.0), confidence)
        print(f"  {st['name']}:")
        print(f"    Processed: {processed[0]:.1f} ± {processed[1]:.1f}")
        print(f"    Avg wait: {wait[0]:.4f} ± {wait[1]:.4f}")
        print(f"    Losses: {losses[0]:.1f} ± {losses[1]:.1f}")
        print(f"    Utilization: {util[0]:.1f}% ± {util[1]:.1f}%")
    print("-")


def plot_histograms(results: List[Dict], scenario_name: str, out_dir: Optional[str] = None) -> Optional[str]:
    """Bar chart of the mean occupancy distribution of every station."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    hists = average_histograms(results)
    if not hists:
        return None
    names = [st["name"] for st in results[0]["stations"]]
    fig, axes = plt.subplots(len(hists), 1, figsize=(9, 3 * len(hists)), squeeze=False)
    for ax, name, levels in zip(axes[:, 0], names, hists):
        ax.bar([b["level"] for b in levels], [b["fraction"] for b in levels], color="#2563eb")
        ax.set_title(name)
        ax.set_xlabel("Occupancy (customers present)")
        ax.set_ylabel("Fraction of time")
        ax.grid(True, linestyle="--", alpha=0.4)
    fig.suptitle(f"{scenario_name}: occupancy distribution")
    out_dir = out_dir or os.path.join(ROOT, "experiments", "plots")
    os.makedirs(out_dir, exist_ok=True)
    out_path = os.path.join(out_dir, f"{scenario_name}_occupancy.png")
    fig.tight_layout()
    fig.savefig(out_path, dpi=160)
    plt.close(fig)
    return out_path


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run queueing-network scenarios.")
    p.add_argument("config", nargs="?", default=None, help="YAML config (default: config/baseline.yaml)")
    p.add_argument("--scenario", action="append", dest="scenarios",
                   help="scenario name to run (repeatable; default: all)")
    p.add_argument("--replications", type=int, default=None)
    p.add_argument("--seed", type=int, default=None, help="base seed for replication 1")
    p.add_argument("--confidence", type=float, default=None)
    p.add_argument("--plot", action="store_true", help="save occupancy bar charts")
    p.add_argument("--verbose", "-v", action="count", default=0)
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    cfg = load_cfg(args.config)
    exp_cfg = cfg.get("experiments", {})
    replications = args.replications or int(exp_cfg.get("replications", 1))
    confidence = args.confidence if args.confidence is not None else float(exp_cfg.get("confidence", 0.95))
    default_seed = args.seed if args.seed is not None else cfg.get("sim", {}).get("seed") or 0

    selected = SCENARIOS
    if args.scenarios:
        index = {s["name"]: s for s in SCENARIOS}
        missing = [n for n in args.scenarios if n not in index]
        if missing:
            print(f"[error] unknown scenario(s): {', '.join(missing)}")
            return 2
        selected = [index[n] for n in args.scenarios]

    for sc in selected:
        sc_cfg = apply_overrides(cfg, sc["overrides"])
        try:
            results = run_replications(sc_cfg, replications, default_seed)
        except ConfigError as exc:
            print(f"[error] scenario {sc['name']}: {exc}")
            return 2
        log.info("scenario %s: %d replications done", sc["name"], len(results))
        if replications == 1:
            print(f"Scenario: {sc['name']} (seed {default_seed})")
            print_run_report(results[0])
            print("-")
        else:
            print_scenario_report(sc["name"], results, confidence,
                                  (default_seed, default_seed + replications - 1))
        if args.plot:
            plot_path = plot_histograms(results, sc["name"])
            if plot_path:
                print(f"  Occupancy plot saved to: {plot_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
