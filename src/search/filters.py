"""Move filter that keeps tasks within their feasible station window."""

from __future__ import annotations

from src.line.model import AssemblyPlan, Station, Task
from src.search.bounds import DEFAULT_MARGIN_FACTOR, check_margin_factor, station_bounds


class StationBoundsFilter:
    """Accepts a (task, station) move only inside the task's [earliest, latest] window.

    Bounds depend only on the problem, not on the current assignment, so
    they are computed once, on the first call, and reused for the rest of
    the solving run. Use a new filter (or `reset()`) for another problem.

    Args:
        margin_factor: Passed to `station_bounds`; at least 1.0.
    """

    def __init__(self, margin_factor: float = DEFAULT_MARGIN_FACTOR) -> None:
        check_margin_factor(margin_factor)
        self.margin_factor = margin_factor
        self._bounds: dict[int, tuple[int, int]] | None = None

    @property
    def bounds(self) -> dict[int, tuple[int, int]] | None:
        """Cached task id -> (earliest, latest), None before first use."""
        return self._bounds

    def reset(self) -> None:
        self._bounds = None

    def accept_move(self, plan: AssemblyPlan, task: Task, station: Station | int) -> bool:
        """True if moving ``task`` to ``station`` stays within its bounds."""
        if self._bounds is None:
            self._bounds = station_bounds(plan, self.margin_factor)
        number = station if isinstance(station, int) else station.number
        low, high = self._bounds[task.id]
        return low <= number <= high
