from src.search.bounds import earliest_station, latest_station, station_bounds, target_cycle_time
from src.search.distance import task_station_distance, task_task_distance
from src.search.filters import StationBoundsFilter
from src.search.ordering import PriorityOrdering, TaskPriority, priority, sort_tasks

__all__ = [
    "PriorityOrdering",
    "StationBoundsFilter",
    "TaskPriority",
    "earliest_station",
    "latest_station",
    "priority",
    "sort_tasks",
    "station_bounds",
    "target_cycle_time",
    "task_station_distance",
    "task_task_distance",
]
