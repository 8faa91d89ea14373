"""Assembly line domain model.

An AssemblyPlan is the unit everything else operates on:
- Tasks carry a processing time, their immediate predecessors, and a
  mutable link to the station they are currently assigned to
- Stations are immutable, totally ordered by number (0..N-1, no gaps)
- An optional cycle time selects the problem type: with a cycle time the
  station count is minimized (type 1), without one the number of stations
  is fixed and the maximum station load is minimized (type 2)

A plan owns its tasks. Two plans never share Task objects, so a search
driver can evaluate independent copies side by side.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from src.line.config import InvalidConfiguration
from src.precedence.graph import build_graph, topological_order

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Station:
    """A workstation on the line, identified by its position."""

    number: int

    def __str__(self) -> str:
        return f"Station {self.number}"


@dataclass(eq=False)
class Task:
    """A unit of work to be placed on one station.

    Tasks compare and hash by identity: two plans holding a task with the
    same id hold two different Task objects.

    Attributes:
        id: Unique, zero-based task id.
        time: Positive processing time.
        dependencies: Immediate predecessors (tasks of the same plan).
        station: Currently assigned station, None while unassigned.
        dependents: Immediate successors, filled in by the owning plan.
    """

    id: int
    time: int
    dependencies: list[Task] = field(default_factory=list, repr=False)
    station: Station | None = None
    dependents: list[Task] = field(default_factory=list, repr=False)
    _deep_dependencies: frozenset[Task] | None = field(default=None, repr=False)
    _deep_dependents: frozenset[Task] | None = field(default=None, repr=False)

    @property
    def deep_dependencies(self) -> frozenset[Task]:
        """All transitive predecessors. Cached after the first call."""
        if self._deep_dependencies is None:
            self._deep_dependencies = _closure(self.dependencies, lambda t: t.dependencies)
        return self._deep_dependencies

    @property
    def deep_dependents(self) -> frozenset[Task]:
        """All transitive successors. Cached after the first call."""
        if self._deep_dependents is None:
            self._deep_dependents = _closure(self.dependents, lambda t: t.dependents)
        return self._deep_dependents

    @property
    def is_assigned(self) -> bool:
        return self.station is not None

    @property
    def station_number(self) -> int | None:
        return None if self.station is None else self.station.number



def _closure(start: Iterable[Task], step: Callable[[Task], Iterable[Task]]) -> frozenset[Task]:
    closure: set[Task] = set()
    stack = list(start)
    while stack:
        task = stack.pop()
        if task not in closure:
            closure.add(task)
            stack.extend(step(task))
    return frozenset(closure)


class AssemblyPlan:
    """Tasks, stations, and an optional fixed cycle time.

    Tasks are kept in topological order (ties by id). Passing them in
    another order is allowed but logged, since it usually means the caller
    built the plan by hand.

    Attributes:
        tasks: All tasks, topologically sorted.
        stations: Declared stations, sorted by number.
        cycle_time: Fixed cycle time (type 1) or None (type 2).
    """

    def __init__(
        self,
        tasks: Iterable[Task],
        stations: Iterable[Station],
        cycle_time: int | None = None,
    ) -> None:
        tasks = list(tasks)
        self._by_id: dict[int, Task] = {}
        for task in tasks:
            if task.id in self._by_id:
                raise InvalidConfiguration(f"Duplicate task id {task.id}")
            if task.time <= 0:
                raise InvalidConfiguration(f"Task {task.id} time must be positive, got {task.time}")
            self._by_id[task.id] = task

        graph = build_graph({t.id: [d.id for d in t.dependencies] for t in tasks})
        order = topological_order(graph)
        if [t.id for t in tasks] != order:
            logger.warning("Tasks were not topologically sorted; sorting %d tasks", len(tasks))
        self.tasks: list[Task] = [self._by_id[task_id] for task_id in order]
        for task in self.tasks:
            task.dependents = []
            task._deep_dependents = None
        for task in self.tasks:
            for dep in task.dependencies:
                dep.dependents.append(task)

        self.stations: list[Station] = sorted(stations)
        if [s.number for s in self.stations] != list(range(len(self.stations))):
            raise InvalidConfiguration(
                f"Stations must be numbered 0..N-1 without gaps, got "
                f"{[s.number for s in self.stations]}"
            )
        if cycle_time is not None and cycle_time <= 0:
            raise InvalidConfiguration(f"cycle_time must be positive, got {cycle_time}")
        self.cycle_time = cycle_time

    # ── Properties ───────────────────────────────────────────────────

    @property
    def is_type1(self) -> bool:
        """True when the cycle time is fixed and the station count is minimized."""
        return self.cycle_time is not None

    @property
    def n_tasks(self) -> int:
        return len(self.tasks)

    @property
    def n_stations(self) -> int:
        return len(self.stations)

    @property
    def total_task_time(self) -> int:
        return sum(t.time for t in self.tasks)

    @property
    def max_task_time(self) -> int:
        return max((t.time for t in self.tasks), default=0)

    # ── Lookup ───────────────────────────────────────────────────────

    def task(self, task_id: int) -> Task:
        """Get a task by id. Raises KeyError for unknown ids."""
        return self._by_id[task_id]

    def station(self, number: int) -> Station:
        """Get a declared station by number."""
        if not 0 <= number < len(self.stations):
            raise KeyError(f"No station {number} (plan has {len(self.stations)})")
        return self.stations[number]

    def precedence_graph(self) -> dict[int, frozenset[int]]:
        """Task id -> immediate predecessor ids."""
        return build_graph({t.id: [d.id for d in t.dependencies] for t in self.tasks})

    # ── Assignment ───────────────────────────────────────────────────

    def assign(self, task_id: int, station_number: int | None) -> None:
        """Assign a task to a declared station, or unassign it with None."""
        station = None if station_number is None else self.station(station_number)
        self.task(task_id).station = station

    def unassign(self, task_id: int) -> None:
        self.assign(task_id, None)

    def clear_assignments(self) -> None:
        for task in self.tasks:
            task.station = None

    def assignment(self) -> dict[int, int | None]:
        """Task id -> station number (None for unassigned tasks)."""
        return {t.id: t.station_number for t in self.tasks}

    def is_fully_assigned(self) -> bool:
        return all(t.station is not None for t in self.tasks)

    def station_assignments(self) -> dict[Station, list[Task]]:
        """Station -> tasks, ordered by station number.

        Only stations with at least one task appear; unassigned tasks are
        skipped.
        """
        by_station: dict[Station, list[Task]] = {}
        for task in self.tasks:
            if task.station is not None:
                by_station.setdefault(task.station, []).append(task)
        return dict(sorted(by_station.items()))

    def station_loads(self) -> dict[int, int]:
        """Station number -> total processing time, used stations only."""
        return {
            station.number: sum(t.time for t in tasks)
            for station, tasks in self.station_assignments().items()
        }

    def total_time(self, station: Station | int) -> int:
        """Total processing time of the tasks assigned to one station."""
        number = station if isinstance(station, int) else station.number
        return sum(t.time for t in self.tasks if t.station_number == number)

    # ── Copying ──────────────────────────────────────────────────────

    def copy(self, stations: Iterable[Station] | None = None) -> AssemblyPlan:
        """Independent copy with new Task objects and the same assignments.

        Args:
            stations: Replacement station set. Every assigned station must
                be part of it.
        """
        stations = self.stations if stations is None else list(stations)
        clones = {t.id: Task(t.id, t.time, station=t.station) for t in self.tasks}
        for task in self.tasks:
            clones[task.id].dependencies = [clones[d.id] for d in task.dependencies]
        return AssemblyPlan(clones.values(), stations, self.cycle_time)

    # ── Display ──────────────────────────────────────────────────────

    def pretty(self) -> str:
        """Human readable per-station listing."""
        kind = f"cycle time {self.cycle_time}" if self.is_type1 else f"{self.n_stations} stations"
        lines = [f"AssemblyPlan: {self.n_tasks} tasks, {kind}"]
        for station, tasks in self.station_assignments().items():
            load = sum(t.time for t in tasks)
            ids = ", ".join(str(t.id) for t in tasks)
            lines.append(f"  {station.number:>3}  load {load:>5}  tasks [{ids}]")
        unassigned = [t.id for t in self.tasks if t.station is None]
        if unassigned:
            lines.append(f"  unassigned: {unassigned}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"AssemblyPlan(n_tasks={self.n_tasks}, n_stations={self.n_stations}, "
            f"cycle_time={self.cycle_time})"
        )
