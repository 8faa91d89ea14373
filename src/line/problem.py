"""
In-memory SALBP problem instance.

A Problem is the already-parsed description of a line-balancing instance:
task times, immediate predecessors, and either a cycle time (type 1) or a
station count (type 2). `to_plan()` turns it into an unassigned
AssemblyPlan for the scoring, bounds, and construction code.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from src.line.config import InvalidConfiguration
from src.line.model import AssemblyPlan, Station, Task
from src.precedence.graph import CycleDetected, find_cycle, topological_order


@dataclass
class Problem:
    """A SALBP instance with zero-based, contiguous task ids.

    Attributes:
        task_times: Task id -> positive processing time.
        dependencies: Task id -> immediate predecessor ids. Tasks without an
            entry have no predecessors.
        cycle_time: Fixed cycle time; set for type 1 problems only.
        n_stations: Fixed station count; set for type 2 problems only.
        name: Label used in reports.
    """

    task_times: dict[int, int]
    dependencies: dict[int, list[int]] = field(default_factory=dict)
    cycle_time: int | None = None
    n_stations: int | None = None
    name: str = "problem"

    @classmethod
    def from_lists(
        cls,
        times: Sequence[int],
        dependencies: Mapping[int, Sequence[int]] | Sequence[Sequence[int]] = (),
        cycle_time: int | None = None,
        n_stations: int | None = None,
        name: str = "problem",
    ) -> Problem:
        """Build from a list of times indexed by task id.

        ``dependencies`` may be a mapping or a list indexed by task id.
        """
        if not isinstance(dependencies, Mapping):
            dependencies = dict(enumerate(dependencies))
        return cls(
            task_times=dict(enumerate(times)),
            dependencies={k: list(v) for k, v in dependencies.items()},
            cycle_time=cycle_time,
            n_stations=n_stations,
            name=name,
        )

    @property
    def is_type1(self) -> bool:
        return self.cycle_time is not None

    @property
    def n_tasks(self) -> int:
        return len(self.task_times)

    def precedence_graph(self) -> dict[int, list[int]]:
        """Task id -> immediate predecessor ids (deduplicated), for every task."""
        return {
            t: list(dict.fromkeys(self.dependencies.get(t, [])))
            for t in sorted(self.task_times)
        }

    def issues(self) -> list[str]:
        """Run sanity checks on the instance (cycles excluded).

        Returns:
            List of problems found (empty = all good).
        """
        issues = []

        if not self.task_times:
            issues.append("Problem has no tasks")
        ids = sorted(self.task_times)
        if ids != list(range(len(ids))):
            issues.append(f"Task ids must be zero-based and contiguous, got {ids}")

        bad_times = {t: time for t, time in self.task_times.items() if time <= 0}
        if bad_times:
            issues.append(f"Task times must be positive: {bad_times}")

        unknown = {
            t: [d for d in deps if d not in self.task_times]
            for t, deps in self.dependencies.items()
        }
        unknown = {t: deps for t, deps in unknown.items() if deps}
        if unknown:
            issues.append(f"Unknown predecessor ids: {unknown}")
        stray = [t for t in self.dependencies if t not in self.task_times]
        if stray:
            issues.append(f"Dependencies given for unknown tasks: {stray}")

        if (self.cycle_time is None) == (self.n_stations is None):
            issues.append(
                "Exactly one of cycle_time (type 1) or n_stations (type 2) must be given"
            )
        if self.cycle_time is not None and self.cycle_time <= 0:
            issues.append(f"cycle_time must be positive, got {self.cycle_time}")
        if self.n_stations is not None and self.n_stations <= 0:
            issues.append(f"n_stations must be positive, got {self.n_stations}")

        return issues

    def validate(self) -> None:
        """Raise if the instance cannot be solved.

        Raises:
            InvalidConfiguration: For any issue reported by `issues()`.
            CycleDetected: If the precedence graph is cyclic.
        """
        issues = self.issues()
        if issues:
            raise InvalidConfiguration(f"Invalid problem {self.name!r}: " + "; ".join(issues))
        cycle = find_cycle(self.precedence_graph())
        if cycle is not None:
            raise CycleDetected(cycle)

    def to_plan(self) -> AssemblyPlan:
        """Create an unassigned plan for this instance.

        Type 1 plans declare one station per task, which is always enough;
        type 2 plans declare exactly ``n_stations``.
        """
        self.validate()
        graph = self.precedence_graph()
        tasks: dict[int, Task] = {}
        for task_id in topological_order(graph):
            tasks[task_id] = Task(
                task_id,
                self.task_times[task_id],
                dependencies=[tasks[d] for d in graph[task_id]],
            )
        n_stations = self.n_tasks if self.is_type1 else self.n_stations
        stations = [Station(i) for i in range(n_stations)]
        return AssemblyPlan(tasks.values(), stations, self.cycle_time)
