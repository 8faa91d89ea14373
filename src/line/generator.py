"""
Random SALBP instance generator.

Produces acyclic precedence graphs by only letting a task depend on tasks
with a smaller id, so every generated instance is valid by construction.
Used by the benchmark and by the randomized consistency tests.
"""

from __future__ import annotations

import math
from typing import Literal

import numpy as np

from src.line.problem import Problem


def generate_problem(
    n_tasks: int,
    rng: np.random.Generator,
    problem_type: Literal[1, 2] = 1,
    max_predecessors: int = 3,
    dependency_prob: float = 0.4,
    time_range: tuple[int, int] = (1, 20),
    tasks_per_station: float = 4.0,
    name: str | None = None,
) -> Problem:
    """Generate a random line-balancing instance.

    Each task draws up to ``max_predecessors`` immediate predecessors among
    the tasks before it. The cycle time (type 1) or station count (type 2)
    is sized so that roughly ``tasks_per_station`` tasks share a station.

    Args:
        n_tasks: Number of tasks (ids 0..n_tasks-1).
        rng: Random generator; the same seed gives the same instance.
        problem_type: 1 for a fixed cycle time, 2 for a fixed station count.
        max_predecessors: Upper bound on immediate predecessors per task.
        dependency_prob: Chance that each of those predecessor slots is used.
        time_range: Inclusive range of task times.
        tasks_per_station: Target average number of tasks per station.
        name: Instance label; derived from the parameters if omitted.
    """
    if n_tasks <= 0:
        raise ValueError(f"n_tasks must be positive, got {n_tasks}")
    low, high = time_range
    times = [int(t) for t in rng.integers(low, high + 1, size=n_tasks)]

    dependencies: dict[int, list[int]] = {}
    for task_id in range(n_tasks):
        slots = min(max_predecessors, task_id)
        k = int(rng.binomial(slots, dependency_prob)) if slots else 0
        preds = rng.choice(task_id, size=k, replace=False) if k else []
        dependencies[task_id] = sorted(int(p) for p in preds)

    n_target = max(1, round(n_tasks / tasks_per_station))
    if problem_type == 1:
        cycle_time = max(max(times), math.ceil(sum(times) / n_target))
        return Problem.from_lists(
            times,
            dependencies,
            cycle_time=cycle_time,
            name=name or f"random-t1-{n_tasks}",
        )
    if problem_type == 2:
        return Problem.from_lists(
            times,
            dependencies,
            n_stations=n_target,
            name=name or f"random-t2-{n_tasks}",
        )
    raise ValueError(f"problem_type must be 1 or 2, got {problem_type}")
