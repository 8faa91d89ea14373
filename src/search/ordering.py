"""
Task priority for value ordering in a search driver.

Tasks are ranked by a sort key; the priority of a task is its negated rank,
so tasks that should be placed first get the highest priority. Every
ordering starts with the topological layer so tasks without predecessors
come first.

Orderings
─────────
  LAYER_TIME (default)                 layer ↑, time ↓, id ↑
  LAYER_ID                             layer ↑, id ↑
  LAYER_SUCCESSORS_TIME                layer ↑, successors ↓, time ↓, id ↑
  LAYER_SUCCESSORS_TIME_PREDECESSORS   layer ↑, successors ↓, time ↓, predecessors ↑, id ↑
  LAYER_SUCCESSORS_PREDECESSORS_TIME   layer ↑, successors ↓, predecessors ↑, time ↓, id ↑

"successors" and "predecessors" count immediate neighbours only; ranking
by transitive counts orders tasks worse.
"""

from __future__ import annotations

from enum import Enum

from src.line.config import InvalidConfiguration
from src.line.model import AssemblyPlan, Task
from src.precedence.graph import flip_edges, topological_layer_map


class PriorityOrdering(Enum):
    """Named sort keys for task priority."""

    LAYER_TIME = "layer-time"
    LAYER_ID = "layer-id"
    LAYER_SUCCESSORS_TIME = "layer-successors-time"
    LAYER_SUCCESSORS_TIME_PREDECESSORS = "layer-successors-time-predecessors"
    LAYER_SUCCESSORS_PREDECESSORS_TIME = "layer-successors-predecessors-time"

    @classmethod
    def from_name(cls, name: str | PriorityOrdering) -> PriorityOrdering:
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(o.value for o in cls)
            raise InvalidConfiguration(
                f"Unknown priority ordering {name!r} (expected one of: {valid})"
            ) from None

    def sort_key(self, task: Task, layer: int, successors: int) -> tuple[int, ...]:
        predecessors = len(task.dependencies)
        if self is PriorityOrdering.LAYER_TIME:
            return (layer, -task.time, task.id)
        if self is PriorityOrdering.LAYER_ID:
            return (layer, task.id)
        if self is PriorityOrdering.LAYER_SUCCESSORS_TIME:
            return (layer, -successors, -task.time, task.id)
        if self is PriorityOrdering.LAYER_SUCCESSORS_TIME_PREDECESSORS:
            return (layer, -successors, -task.time, predecessors, task.id)
        return (layer, -successors, predecessors, -task.time, task.id)


def sort_tasks(
    plan: AssemblyPlan,
    ordering: PriorityOrdering | str = PriorityOrdering.LAYER_TIME,
) -> list[Task]:
    """The plan's tasks, highest priority first."""
    ordering = PriorityOrdering.from_name(ordering)
    graph = plan.precedence_graph()
    layers = topological_layer_map(graph)
    successors = flip_edges(graph)
    return sorted(
        plan.tasks,
        key=lambda t: ordering.sort_key(t, layers[t.id], len(successors[t.id])),
    )


class TaskPriority:
    """Caches the priority of every task of one problem.

    The ranking depends only on problem facts, so it is computed on the
    first `priority()` call and reused.
    """

    def __init__(self, ordering: PriorityOrdering | str = PriorityOrdering.LAYER_TIME) -> None:
        self.ordering = PriorityOrdering.from_name(ordering)
        self._weights: dict[int, int] | None = None

    def reset(self) -> None:
        self._weights = None

    def priority(self, plan: AssemblyPlan, task: Task) -> int:
        if self._weights is None:
            ranked = sort_tasks(plan, self.ordering)
            self._weights = {t.id: -rank for rank, t in enumerate(ranked)}
        return self._weights[task.id]


def priority(
    plan: AssemblyPlan,
    task: Task,
    ordering: PriorityOrdering | str = PriorityOrdering.LAYER_TIME,
) -> int:
    """Priority of one task: higher means it should be placed earlier.

    Recomputes the ranking on every call; use `TaskPriority` in a loop.
    """
    return TaskPriority(ordering).priority(plan, task)
