"""Earliest and latest feasible station per task.

The earliest bound is exact: a task cannot start before all of its
transitive predecessors have been processed, and every station holds at
most one cycle time's worth of work.

The latest bound is a heuristic. It assumes everything that does not have
to come after the task could be scheduled before it, and then widens the
result by a margin factor. Larger margins keep more feasible moves, smaller
margins prune more aggressively.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from src.line.config import InvalidConfiguration
from src.line.model import AssemblyPlan, Task

logger = logging.getLogger(__name__)

DEFAULT_MARGIN_FACTOR = 1.5


def check_margin_factor(margin_factor: float) -> None:
    if margin_factor < 1.0:
        raise InvalidConfiguration(f"margin_factor must be >= 1.0, got {margin_factor}")


def earliest_station(task: Task, cycle_time: int) -> int:
    """floor((own time + time of all transitive predecessors) / cycle time)."""
    time = task.time + sum(dep.time for dep in task.deep_dependencies)
    return time // cycle_time


def latest_station(
    task: Task,
    cycle_time: int,
    tasks: Iterable[Task],
    margin_factor: float = DEFAULT_MARGIN_FACTOR,
    last_station: int | None = None,
) -> int:
    """Latest station the task can reasonably end up on.

    ceil(margin × (own time + time of every task that does not transitively
    depend on this one) / cycle time). The task itself is among those
    tasks, so its time is counted twice.

    Args:
        task: The task to bound.
        cycle_time: Fixed or estimated cycle time.
        tasks: All tasks of the plan.
        margin_factor: At least 1.0.
        last_station: If given, the result is clamped to it.

    Raises:
        InvalidConfiguration: If margin_factor < 1.0.
    """
    check_margin_factor(margin_factor)
    time = task.time + sum(t.time for t in tasks if task not in t.deep_dependencies)
    latest = math.ceil(margin_factor * time / cycle_time)
    if last_station is not None:
        latest = min(latest, last_station)
    return latest


def target_cycle_time(plan: AssemblyPlan) -> int:
    """The plan's cycle time, or an estimate for type 2 plans.

    The estimate is max(total time // stations, longest task): the average
    alone can be smaller than a single task.
    """
    if plan.cycle_time is not None:
        return plan.cycle_time
    if not plan.stations or not plan.tasks:
        raise ValueError("Cannot estimate a cycle time without tasks and stations")
    return max(plan.total_task_time // plan.n_stations, plan.max_task_time)


def station_bounds(
    plan: AssemblyPlan,
    margin_factor: float = DEFAULT_MARGIN_FACTOR,
) -> dict[int, tuple[int, int]]:
    """Task id -> (earliest, latest) station number, within the declared stations.

    Raises:
        InvalidConfiguration: If margin_factor < 1.0.
    """
    check_margin_factor(margin_factor)
    cycle_time = target_cycle_time(plan)
    last = plan.n_stations - 1
    bounds = {}
    for task in plan.tasks:
        low = min(earliest_station(task, cycle_time), last)
        high = latest_station(task, cycle_time, plan.tasks, margin_factor, last_station=last)
        bounds[task.id] = (low, high)
    logger.debug(
        "Computed station bounds for %d tasks (cycle time %d, margin %.2f)",
        len(bounds), cycle_time, margin_factor,
    )
    return bounds
