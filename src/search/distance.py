"""Move distances for nearby-selection in a search driver."""

from __future__ import annotations

from src.line.model import Station, Task


def _number(task: Task) -> int:
    if task.station is None:
        raise ValueError(f"Task {task.id} is not assigned to a station")
    return task.station.number


def task_station_distance(task: Task, station: Station | int) -> int:
    """|current station - candidate station| for a change move."""
    number = station if isinstance(station, int) else station.number
    return abs(_number(task) - number)


def task_task_distance(task: Task, other: Task) -> int:
    """Distance between the stations of two tasks, for a swap move."""
    return abs(_number(task) - _number(other))
