"""
Constructive heuristics for an initial feasible assignment.

Every heuristic takes a plan and a numpy random Generator and returns a
list of station task-lists (index i → station i). Precedence always holds
(a predecessor is never on a later station than its task) and every task
appears exactly once.

Strategy menu
─────────────
  random-feasible           pick a random ready task; open a station when it does not fit
  breadth-first             topological layers, shuffled; open a station when a task does not fit
  compacting-breadth-first  like breadth-first, but earlier stations are retried from a
                            per-layer floor before a new station is opened
  depth-first               from the tasks nothing depends on, place predecessors first (random
                            order), then the task itself, on the last station or a new one
  target-breadth-first      fixed station count: stay under a target cycle time while stations remain
  closest-breadth-first     fixed station count: close a station once adding a task moves its load
                            further from the target cycle time

The first four pack against a capacity: the plan's cycle time, or for type 2
plans the lower bound on the cycle time. A single task longer than the
capacity still gets a station of its own, so stations are never left empty.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from enum import Enum

import numpy as np

from src.line.config import InvalidConfiguration
from src.line.model import AssemblyPlan, Task
from src.line.problem import Problem
from src.precedence.graph import flip_edges, leaves, roots, topological_layers
from src.scoring.features import lower_bound_cycle_time

logger = logging.getLogger(__name__)


class ConstructionStrategy(Enum):
    """Available construction heuristics, by their config name."""

    RANDOM_FEASIBLE = "random-feasible"
    BREADTH_FIRST = "breadth-first"
    COMPACTING_BREADTH_FIRST = "compacting-breadth-first"
    DEPTH_FIRST = "depth-first"
    TARGET_BREADTH_FIRST = "target-breadth-first"
    CLOSEST_BREADTH_FIRST = "closest-breadth-first"

    @classmethod
    def from_name(cls, name: str | ConstructionStrategy) -> ConstructionStrategy:
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise InvalidConfiguration(
                f"Unknown construction strategy {name!r} (expected one of: {valid})"
            ) from None


# ── Helpers ──────────────────────────────────────────────────────────


class _StationPacker:
    """Station task-lists under construction, with their loads."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self.stations: list[list[Task]] = [[]]
        self.loads: list[int] = [0]
        self.placed: set[int] = set()

    @property
    def n_stations(self) -> int:
        return len(self.stations)

    def fits(self, task: Task, index: int = -1) -> bool:
        """True if the task fits station ``index``; an empty station always fits."""
        return not self.stations[index] or self.loads[index] + task.time <= self.capacity

    def open(self) -> None:
        self.stations.append([])
        self.loads.append(0)

    def add(self, task: Task, index: int = -1) -> None:
        if task.id in self.placed:
            raise RuntimeError(f"Task {task.id} was placed twice")
        self.stations[index].append(task)
        self.loads[index] += task.time
        self.placed.add(task.id)

    def add_to_last(self, task: Task) -> None:
        """Add to the last station, opening a new one if it does not fit."""
        if not self.fits(task):
            self.open()
        self.add(task)

    def result(self, plan: AssemblyPlan) -> list[list[Task]]:
        if len(self.placed) != plan.n_tasks:
            raise RuntimeError(f"Placed {len(self.placed)} of {plan.n_tasks} tasks")
        return self.stations


def _shuffled(items: Iterable, rng: np.random.Generator) -> list:
    """Random permutation of ``items`` sorted first, so only the rng decides the order."""
    items = sorted(items)
    return [items[i] for i in rng.permutation(len(items))]


def construction_capacity(plan: AssemblyPlan) -> int:
    """Capacity the station-packing heuristics fill stations up to."""
    if plan.cycle_time is not None:
        return plan.cycle_time
    return lower_bound_cycle_time(plan)


# ── Type 1 packing heuristics ────────────────────────────────────────


def random_feasible(plan: AssemblyPlan, rng: np.random.Generator) -> list[list[Task]]:
    """Place uniformly random ready tasks in order; never revisit a station."""
    graph = plan.precedence_graph()
    successors = flip_edges(graph)
    packer = _StationPacker(construction_capacity(plan))

    # Starting from all roots reaches every task, also in a forest.
    frontier = sorted(roots(graph))
    while frontier:
        index = int(rng.integers(len(frontier)))
        frontier[index], frontier[-1] = frontier[-1], frontier[index]
        task_id = frontier.pop()
        packer.add_to_last(plan.task(task_id))
        for succ in sorted(successors[task_id]):
            if all(dep in packer.placed for dep in graph[succ]):
                frontier.append(succ)
    return packer.result(plan)


def breadth_first(plan: AssemblyPlan, rng: np.random.Generator) -> list[list[Task]]:
    """Layer by layer, shuffled within each layer; never revisit a station."""
    packer = _StationPacker(construction_capacity(plan))
    for layer in topological_layers(plan.precedence_graph()):
        for task_id in _shuffled(layer, rng):
            packer.add_to_last(plan.task(task_id))
    return packer.result(plan)


def compacting_breadth_first(plan: AssemblyPlan, rng: np.random.Generator) -> list[list[Task]]:
    """Layer by layer, filling the first station (from a floor) with room.

    Tasks of a layer may go to any station from the floor onward. After a
    layer the floor becomes the last opened station, since the layer may
    have reached it and the next layer depends on it.
    """
    packer = _StationPacker(construction_capacity(plan))
    floor = 0
    for layer in topological_layers(plan.precedence_graph()):
        for task_id in _shuffled(layer, rng):
            task = plan.task(task_id)
            for index in range(floor, packer.n_stations):
                if packer.fits(task, index):
                    packer.add(task, index)
                    break
            else:
                packer.open()
                packer.add(task)
        floor = packer.n_stations - 1
    return packer.result(plan)


def depth_first(plan: AssemblyPlan, rng: np.random.Generator) -> list[list[Task]]:
    """Place every task right after its (recursively placed) predecessors.

    Starts from the tasks nothing depends on, in random order, and visits
    unplaced predecessors in random order. Iterative, so long chains do not
    hit the recursion limit.
    """
    graph = plan.precedence_graph()
    packer = _StationPacker(construction_capacity(plan))

    for start in _shuffled(leaves(graph), rng):
        stack = [(start, False)]
        while stack:
            task_id, expanded = stack.pop()
            if task_id in packer.placed:
                continue
            if expanded:
                packer.add_to_last(plan.task(task_id))
                continue
            stack.append((task_id, True))
            pending = [dep for dep in graph[task_id] if dep not in packer.placed]
            # Reversed so the first shuffled predecessor is visited first.
            stack.extend((dep, False) for dep in reversed(_shuffled(pending, rng)))
    return packer.result(plan)


# ── Type 2 target heuristics ─────────────────────────────────────────


def _layered_tasks(
    plan: AssemblyPlan, rng: np.random.Generator, sort_layers: bool
) -> Iterable[Task]:
    for layer in topological_layers(plan.precedence_graph()):
        if sort_layers:
            ordered = sorted(layer, key=lambda t: (-plan.task(t).time, t))
        else:
            ordered = _shuffled(layer, rng)
        for task_id in ordered:
            yield plan.task(task_id)


def _fill_to_target(
    plan: AssemblyPlan,
    tasks: Iterable[Task],
    close_station: Callable[[int, int, int], bool],
) -> list[list[Task]]:
    target = construction_capacity(plan)
    packer = _StationPacker(target)
    for task in tasks:
        load = packer.loads[-1]
        if (
            packer.stations[-1]
            and packer.n_stations < plan.n_stations
            and close_station(load, task.time, target)
        ):
            packer.open()
        packer.add(task)
    return packer.result(plan)


def target_breadth_first(
    plan: AssemblyPlan, rng: np.random.Generator, sort_layers: bool = False
) -> list[list[Task]]:
    """Open a new station whenever a task would push the load over the target.

    Once the declared stations run out, the last one takes everything left.
    """
    return _fill_to_target(
        plan,
        _layered_tasks(plan, rng, sort_layers),
        lambda load, time, target: load + time > target,
    )


def closest_breadth_first(
    plan: AssemblyPlan, rng: np.random.Generator, sort_layers: bool = False
) -> list[list[Task]]:
    """Open a new station when adding a task moves the load away from the target."""
    return _fill_to_target(
        plan,
        _layered_tasks(plan, rng, sort_layers),
        lambda load, time, target: abs(load + time - target) > abs(load - target),
    )


# ── Entry points ─────────────────────────────────────────────────────


def apply_assignments(plan: AssemblyPlan, station_lists: Sequence[Sequence[Task]]) -> AssemblyPlan:
    """Assign list i to the plan's i-th station (in station order)."""
    if len(station_lists) > plan.n_stations:
        raise ValueError(
            f"{len(station_lists)} station lists for a plan with {plan.n_stations} stations"
        )
    for station, tasks in zip(plan.stations, station_lists):
        for task in tasks:
            plan.task(task.id).station = station
    return plan


def _merge_overflow(station_lists: list[list[Task]], n_stations: int) -> list[list[Task]]:
    """Fold stations beyond the declared count into the last declared one (type 2)."""
    if len(station_lists) <= n_stations:
        return station_lists
    logger.warning(
        "Heuristic opened %d stations, plan declares %d; merging the overflow into the last",
        len(station_lists), n_stations,
    )
    merged = station_lists[: n_stations - 1]
    merged.append([task for tasks in station_lists[n_stations - 1 :] for task in tasks])
    return merged


_TYPE1_HEURISTICS = {
    ConstructionStrategy.RANDOM_FEASIBLE: random_feasible,
    ConstructionStrategy.BREADTH_FIRST: breadth_first,
    ConstructionStrategy.COMPACTING_BREADTH_FIRST: compacting_breadth_first,
    ConstructionStrategy.DEPTH_FIRST: depth_first,
}


def construct(
    problem: Problem | AssemblyPlan,
    seed: int | np.random.Generator = 123,
    strategy: str | ConstructionStrategy = ConstructionStrategy.BREADTH_FIRST,
    sort_layers: bool = False,
) -> AssemblyPlan:
    """Build a fully assigned plan.

    Args:
        problem: A Problem, or an AssemblyPlan (copied, never modified).
        seed: Integer seed or an existing numpy Generator. The same seed
            and input always give the same plan.
        strategy: ConstructionStrategy member or its name.
        sort_layers: Target strategies only: largest task first within a
            layer instead of a random order.

    Returns:
        A new AssemblyPlan with every task assigned.

    Raises:
        InvalidConfiguration: Unknown strategy, an invalid problem, or a type 1
            plan that declares fewer stations than the heuristic needs.
    """
    strategy = ConstructionStrategy.from_name(strategy)
    plan = problem.copy() if isinstance(problem, AssemblyPlan) else problem.to_plan()
    plan.clear_assignments()
    rng = seed if isinstance(seed, np.random.Generator) else np.random.default_rng(seed)

    if strategy is ConstructionStrategy.TARGET_BREADTH_FIRST:
        station_lists = target_breadth_first(plan, rng, sort_layers)
    elif strategy is ConstructionStrategy.CLOSEST_BREADTH_FIRST:
        station_lists = closest_breadth_first(plan, rng, sort_layers)
    else:
        station_lists = _TYPE1_HEURISTICS[strategy](plan, rng)

    if plan.is_type1 and len(station_lists) > plan.n_stations:
        raise InvalidConfiguration(
            f"{strategy.value} needs {len(station_lists)} stations at cycle time "
            f"{plan.cycle_time}, plan declares {plan.n_stations}"
        )
    station_lists = _merge_overflow(station_lists, plan.n_stations)
    apply_assignments(plan, station_lists)
    logger.debug(
        "Constructed %s plan with %s: %d stations used",
        "type 1" if plan.is_type1 else "type 2", strategy.value, len(station_lists),
    )
    return plan
