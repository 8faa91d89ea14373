"""
src/construction/benchmark.py
──────────────────────────────────────────────────────────────────────────────
Benchmark: construction heuristics head-to-head.

Runs every selected strategy on the same random instances and compares the
starting solutions they produce.

Metrics per instance:
  • Type 1: stations used, and the gap to the station lower bound
  • Type 2: cycle time (max station load), and the gap to its lower bound
  • Hard score (0 for every feasible start)
  • Construction time (wall-clock, ms)

Usage:
    python -m src.construction.benchmark                     # 50 instances, type 1
    python -m src.construction.benchmark --type 2 --tasks 80
    python -m src.construction.benchmark --strategies breadth-first depth-first
"""

from __future__ import annotations

import argparse
import time

import numpy as np

from src.construction.heuristics import ConstructionStrategy, construct
from src.line.config import ScoringConfig
from src.line.generator import generate_problem
from src.scoring import features
from src.scoring.calculators import create_calculator

TYPE1_STRATEGIES = [
    ConstructionStrategy.RANDOM_FEASIBLE,
    ConstructionStrategy.BREADTH_FIRST,
    ConstructionStrategy.COMPACTING_BREADTH_FIRST,
    ConstructionStrategy.DEPTH_FIRST,
]
TYPE2_STRATEGIES = TYPE1_STRATEGIES + [
    ConstructionStrategy.TARGET_BREADTH_FIRST,
    ConstructionStrategy.CLOSEST_BREADTH_FIRST,
]


def run_benchmark(
    n_instances: int = 50,
    n_tasks: int = 40,
    problem_type: int = 1,
    seed: int = 42,
    strategy_names: list[str] | None = None,
    check: bool = False,
) -> dict[str, dict[str, list[float]]]:
    """Run all instances and print a comparison table.

    Returns:
        Strategy name -> metric name -> per-instance values.
    """
    default = TYPE1_STRATEGIES if problem_type == 1 else TYPE2_STRATEGIES
    active = [ConstructionStrategy.from_name(n) for n in strategy_names] if strategy_names else default
    calculator = create_calculator(ScoringConfig(check_against_reference=check))

    print("=" * 80)
    print("  Line Balancing Construction Benchmark")
    print("=" * 80)
    print(f"  Instances: {n_instances}  |  Tasks: {n_tasks}  |  Type: {problem_type}  |  Seed: {seed}")
    print(f"  Strategies: {', '.join(s.value for s in active)}")
    print()

    rng = np.random.default_rng(seed)
    results: dict[str, dict[str, list[float]]] = {
        s.value: {"objective": [], "gap": [], "hard": [], "time_ms": []} for s in active
    }

    for i in range(n_instances):
        problem = generate_problem(n_tasks, rng, problem_type=problem_type)
        base = problem.to_plan()
        if problem_type == 1:
            bound = features.lower_bound_stations(base)
        else:
            bound = features.lower_bound_cycle_time(base)

        for strategy in active:
            t0 = time.perf_counter()
            plan = construct(base, seed=seed + i, strategy=strategy)
            elapsed_ms = (time.perf_counter() - t0) * 1e3
            score = calculator.calculate(plan)

            objective = -score.medium
            results[strategy.value]["objective"].append(objective)
            results[strategy.value]["gap"].append(objective - bound)
            results[strategy.value]["hard"].append(score.hard)
            results[strategy.value]["time_ms"].append(elapsed_ms)

    # ── Print results ─────────────────────────────────────────────────────────
    col_w = 16
    names = [s.value for s in active]

    def hdr(label: str) -> str:
        short = label if len(label) < col_w else label[: col_w - 2] + "…"
        return f"{short:>{col_w}}"

    def val(v: float, fmt: str = ".1f") -> str:
        return f"{v:{col_w}{fmt}}"

    objective_label = "Avg stations used" if problem_type == 1 else "Avg cycle time"
    print(f"  {'Metric':<26}" + "".join(hdr(n) for n in names))
    print("  " + "─" * (26 + col_w * len(names)))

    rows = [
        (objective_label, lambda d: np.mean(d["objective"]), ".2f"),
        ("Avg gap to lower bound", lambda d: np.mean(d["gap"]), ".2f"),
        ("Infeasible starts", lambda d: float(np.count_nonzero(d["hard"])), ".0f"),
        ("Avg time (ms)", lambda d: np.mean(d["time_ms"]), ".2f"),
        ("Max time (ms)", lambda d: np.max(d["time_ms"]), ".2f"),
    ]
    for label, fn, fmt in rows:
        row = f"  {label:<26}"
        for name in names:
            row += val(fn(results[name]), fmt)
        print(row)

    print("\n" + "=" * 80)
    return results


# ── CLI entry point ───────────────────────────────────────────────────────────

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Benchmark line-balancing construction heuristics")
    parser.add_argument("--instances", type=int, default=50)
    parser.add_argument("--tasks", type=int, default=40)
    parser.add_argument("--type", type=int, choices=[1, 2], default=1, dest="problem_type")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument(
        "--strategies",
        nargs="+",
        choices=[s.value for s in ConstructionStrategy],
        default=None,
        help="Subset of strategies to benchmark (default: all for the problem type)",
    )
    parser.add_argument(
        "--check", action="store_true", help="Verify every score against the reference features"
    )
    args = parser.parse_args()
    run_benchmark(
        args.instances, args.tasks, args.problem_type, args.seed, args.strategies, args.check
    )
