"""
Incremental score tracking for local search.

A search driver that moves one task at a time does not need to rescore the
whole plan. The tracker keeps every score component as running state and
updates it in O(degree) per change:

    tracker = IncrementalScoreCalculator()
    tracker.reset(plan)
    tracker.before_change(task)     # task still on its old station
    task.station = new_station
    tracker.after_change(task)      # task on its new station
    tracker.score()

or simply ``tracker.assign(task.id, station_number)``. After any sequence
of changes, ``score()`` equals what the full calculators compute for the
plan (unless the optional lower-bound offset is enabled).
"""

from __future__ import annotations

import logging
import math

from src.line.model import AssemblyPlan, Task
from src.precedence.graph import flip_edges
from src.scoring.score import Score

logger = logging.getLogger(__name__)


class IncrementalScoreCalculator:
    """Running score state for one plan.

    Args:
        add_lower_bound: Type 1 only. Add a lower bound on the station count
            to the medium level so that a plan reaching the bound scores 0.
        lower_bound_margin: Multiplies the lower bound before rounding up.
    """

    def __init__(self, add_lower_bound: bool = False, lower_bound_margin: float = 1.0) -> None:
        self.add_lower_bound = add_lower_bound
        self.lower_bound_margin = lower_bound_margin
        self._plan: AssemblyPlan | None = None
        self._reset_state()

    def _reset_state(self) -> None:
        self.inversions = 0
        self.cycle_time_violations = 0
        self.stations_used = 0
        self.excess_load = 0
        self.squared_loads = 0
        self.max_load = 0
        self.stations_lower_bound = 0
        self.loads: dict[int, int] = {}
        self._station: dict[int, int | None] = {}
        self._successors: dict[int, set[int]] = {}
        self._cycle_time: int | None = None

    # ── Setup ────────────────────────────────────────────────────────

    def reset(self, plan: AssemblyPlan) -> None:
        """Recompute all state from scratch for ``plan``."""
        self._reset_state()
        self._plan = plan
        self._cycle_time = plan.cycle_time
        self._successors = flip_edges(plan.precedence_graph())
        self._station = {t.id: None for t in plan.tasks}
        if self.add_lower_bound and plan.cycle_time is not None:
            bound = plan.total_task_time / plan.cycle_time
            self.stations_lower_bound = math.ceil(bound * self.lower_bound_margin)

        for task in plan.tasks:
            self.after_change(task)
        logger.debug("Incremental score reset: %s", self.score())

    # ── Change notifications ─────────────────────────────────────────

    def before_change(self, task: Task) -> None:
        """Remove ``task``'s contribution at its current station."""
        number = self._station[task.id]
        if number is None:
            return
        self.inversions -= self._count_inversions(task.id, number)
        self._station[task.id] = None

        old = self.loads[number]
        new = old - task.time
        self._set_load(number, old, new)
        if old > 0 and new == 0:
            self.stations_used -= 1
        if old == self.max_load and new < old:
            self.max_load = max(self.loads.values(), default=0)

    def after_change(self, task: Task) -> None:
        """Add ``task``'s contribution at its (new) station."""
        if task.station is None:
            return
        number = task.station.number
        self._station[task.id] = number

        old = self.loads.get(number, 0)
        new = old + task.time
        self._set_load(number, old, new)
        if old == 0 and new > 0:
            self.stations_used += 1
        self.max_load = max(self.max_load, new)

        self.inversions += self._count_inversions(task.id, number)

    def assign(self, task_id: int, station_number: int | None) -> None:
        """Move a task of the tracked plan and update the score."""
        if self._plan is None:
            raise RuntimeError("reset() must be called before assign()")
        task = self._plan.task(task_id)
        self.before_change(task)
        self._plan.assign(task_id, station_number)
        self.after_change(task)

    # ── Score ────────────────────────────────────────────────────────

    def score(self) -> Score:
        if self._cycle_time is not None:
            return Score(
                hard=-(self.inversions + self.cycle_time_violations),
                medium=-self.stations_used + self.stations_lower_bound,
                soft=self.squared_loads,
            )
        return Score(
            hard=-self.inversions,
            medium=-self.max_load,
            soft=-self.squared_loads,
        )

    # ── Helpers ──────────────────────────────────────────────────────

    def _set_load(self, number: int, old: int, new: int) -> None:
        self.loads[number] = new
        self.squared_loads += new * new - old * old
        limit = self._cycle_time
        if limit is None:
            return
        if old > limit:
            self.cycle_time_violations -= 1
            self.excess_load -= old - limit
        if new > limit:
            self.cycle_time_violations += 1
            self.excess_load += new - limit

    def _count_inversions(self, task_id: int, number: int) -> int:
        """Inverted pairs involving ``task_id`` placed at station ``number``."""
        count = 0
        for dep in self._plan.task(task_id).dependencies:
            there = self._station[dep.id]
            if there is not None and there > number:
                count += 1
        for succ in self._successors[task_id]:
            there = self._station[succ]
            if there is not None and there < number:
                count += 1
        return count
