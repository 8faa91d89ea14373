"""
run_construction.py
──────────────────────────────────────────────────────────────────────────────
Quick-run script for the line-balancing core.

Generates a random SALBP instance, builds a starting solution with one of
the construction heuristics, scores it, and prints the plan.

Usage:
    python scripts/run_construction.py                                # defaults: 30 tasks, type 1
    python scripts/run_construction.py --tasks 100 --type 2
    python scripts/run_construction.py --strategy depth-first --seed 7
    python scripts/run_construction.py --config config/default_line.yaml
    python scripts/run_construction.py --plot station_loads.png

Construction strategy options:
    random-feasible           random ready task, next station when full
    breadth-first             shuffled topological layers [default]
    compacting-breadth-first  breadth-first, retrying earlier stations
    depth-first               predecessors first, from the final tasks back
    target-breadth-first      type 2: stay under the target cycle time
    closest-breadth-first     type 2: keep loads closest to the target
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from src.construction import ConstructionStrategy, construct, strip_unused_stations
from src.line.config import LineConfig, load_config
from src.line.generator import generate_problem
from src.scoring import create_calculator, features
from src.search import StationBoundsFilter, TaskPriority


def main():
    """Main"""

    parser = argparse.ArgumentParser(description="Construct and score a line-balancing plan")
    parser.add_argument(
        "--config",
        type=str,
        default="config/default_line.yaml",
        help="Path to solver config YAML",
    )
    parser.add_argument("--tasks", type=int, default=30, help="Number of tasks to generate")
    parser.add_argument("--type", type=int, choices=[1, 2], default=1, dest="problem_type")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (overrides config)")
    parser.add_argument(
        "--strategy",
        type=str,
        default=None,
        choices=[s.value for s in ConstructionStrategy],
        help="Construction strategy (overrides config)",
    )
    parser.add_argument("--plot", type=str, default=None, help="Save a station-load chart here")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Load config
    config_path = Path(args.config)
    if config_path.exists():
        config = load_config(config_path)
        print(f"Loaded config from {config_path}")
    else:
        print(f"Config {config_path} not found, using defaults")
        config = LineConfig()

    # Apply CLI overrides
    construction = config.construction
    if args.seed is not None:
        construction = replace(construction, seed=args.seed)
    if args.strategy is not None:
        construction = replace(construction, strategy=args.strategy)

    # Run
    rng = np.random.default_rng(construction.seed)
    problem = generate_problem(args.tasks, rng, problem_type=args.problem_type)
    plan = construct(
        problem,
        seed=construction.seed,
        strategy=construction.strategy,
        sort_layers=construction.sort_layers,
    )
    calculator = create_calculator(config.scoring)
    score = calculator.calculate(plan)

    print(f"\n{'=' * 60}")
    print(f"Instance {problem.name}: {problem.n_tasks} tasks, total time {plan.total_task_time}")
    if plan.is_type1:
        print(f"Cycle time {plan.cycle_time}, station lower bound {features.lower_bound_stations(plan)}")
    else:
        print(f"{plan.n_stations} stations, cycle time lower bound {features.lower_bound_cycle_time(plan)}")
    print(f"Strategy {construction.strategy} (seed {construction.seed}) → score {score}")
    print(f"{'=' * 60}")

    if plan.is_type1:
        plan = strip_unused_stations(plan, leave=1)
    print(plan.pretty())

    # Search-support summary
    move_filter = StationBoundsFilter(config.bounds.margin_factor)
    priority = TaskPriority(config.ordering.variant)
    window = {
        t.id: sum(move_filter.accept_move(plan, t, s) for s in plan.stations) for t in plan.tasks
    }
    first = max(plan.tasks, key=lambda t: priority.priority(plan, t))
    print(f"\n{'Task':<6} {'Time':>5} {'Station':>8} {'Window':>7}")
    print(f"{'-' * 6} {'-' * 5} {'-' * 8} {'-' * 7}")
    for task in plan.tasks:
        print(f"{task.id:<6} {task.time:>5} {task.station_number:>8} {window[task.id]:>7}")
    print(f"\nHighest priority task: {first.id}")

    if args.plot:
        from src.analysis.visualizations import plot_station_loads

        fig = plot_station_loads(plan, used_only=plan.is_type1)
        fig.savefig(args.plot, dpi=150, bbox_inches="tight")
        print(f"Saved station-load chart to {args.plot}")


if __name__ == "__main__":
    main()
