"""
Reference score features.

Each function computes exactly one quantity from an AssemblyPlan, as
plainly as possible. They are the ground truth that the single-pass
calculators are checked against, so readability wins over speed here.

Unassigned tasks contribute nothing: a task without a station is skipped,
and so is any predecessor without a station.
"""

from __future__ import annotations

import math

from src.line.model import AssemblyPlan


def _assigned_pairs(plan: AssemblyPlan, deep: bool = False):
    """Yield (task_station, predecessor_station) for assigned pairs."""
    for task in plan.tasks:
        if task.station is None:
            continue
        deps = task.deep_dependencies if deep else task.dependencies
        for dep in deps:
            if dep.station is not None:
                yield task.station.number, dep.station.number


def _loads(plan: AssemblyPlan) -> list[int]:
    return list(plan.station_loads().values())


# ── Precedence ───────────────────────────────────────────────────────


def count_dependency_inversions(plan: AssemblyPlan) -> int:
    """Immediate predecessors assigned to a later station than their task."""
    return sum(1 for here, there in _assigned_pairs(plan) if there > here)


def count_dependency_inversions_strict(plan: AssemblyPlan) -> int:
    """Like `count_dependency_inversions`, but sharing a station also counts."""
    return sum(1 for here, there in _assigned_pairs(plan) if there >= here)


def count_deep_dependency_inversions(plan: AssemblyPlan) -> int:
    """Transitive predecessors assigned to a later station than their task."""
    return sum(1 for here, there in _assigned_pairs(plan, deep=True) if there > here)


def total_dependency_distance(plan: AssemblyPlan) -> int:
    """Sum of station gaps over inverted immediate-predecessor pairs."""
    return sum(there - here for here, there in _assigned_pairs(plan) if there > here)


# ── Stations ─────────────────────────────────────────────────────────


def count_used_stations(plan: AssemblyPlan) -> int:
    """Distinct stations with at least one task."""
    return len({t.station for t in plan.tasks if t.station is not None})


def count_unused_stations(plan: AssemblyPlan) -> int:
    """Declared stations without any task."""
    return plan.n_stations - count_used_stations(plan)


def total_stations_used(plan: AssemblyPlan) -> int:
    """Span from the first declared station to the last used one.

    Unused stations in between are counted. 0 when nothing is assigned.
    """
    used = [t.station.number for t in plan.tasks if t.station is not None]
    if not used:
        return 0
    first = plan.stations[0].number if plan.stations else 0
    return max(used) - first + 1


def count_station_gaps(plan: AssemblyPlan) -> int:
    """Unused stations inside the used span."""
    return total_stations_used(plan) - count_used_stations(plan)


# ── Loads ────────────────────────────────────────────────────────────


def cycle_time(plan: AssemblyPlan) -> int:
    """Current cycle time: the maximum station load (0 when empty)."""
    return max(_loads(plan), default=0)


def sum_squared_station_loads(plan: AssemblyPlan) -> int:
    return sum(load * load for load in _loads(plan))


def count_cycle_time_violations(plan: AssemblyPlan, cycle_time: int | None = None) -> int:
    """Stations whose load exceeds the cycle time.

    Args:
        cycle_time: Overrides the plan's cycle time. With neither given
            (type 2), there is nothing to violate and 0 is returned.
    """
    limit = plan.cycle_time if cycle_time is None else cycle_time
    if limit is None:
        return 0
    return sum(1 for load in _loads(plan) if load > limit)


def total_excess_load(plan: AssemblyPlan, cycle_time: int | None = None) -> int:
    """Total load above the cycle time, summed over stations."""
    limit = plan.cycle_time if cycle_time is None else cycle_time
    if limit is None:
        return 0
    return sum(load - limit for load in _loads(plan) if load > limit)


# ── Lower bounds ─────────────────────────────────────────────────────


def lower_bound_cycle_time(plan: AssemblyPlan) -> int:
    """No assignment to the declared stations can beat this cycle time."""
    if not plan.tasks or not plan.stations:
        raise ValueError("Lower bound needs at least one task and one station")
    return max(math.ceil(plan.total_task_time / plan.n_stations), plan.max_task_time)


def lower_bound_stations(plan: AssemblyPlan) -> int:
    """No assignment under the plan's cycle time can use fewer stations."""
    if plan.cycle_time is None:
        raise ValueError("Station lower bound needs a fixed cycle time")
    return math.ceil(plan.total_task_time / plan.cycle_time)
