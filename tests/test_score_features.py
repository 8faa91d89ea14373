"""Tests for the reference score features.

All tests use the same ten-task line (times 10..19):
    0,1 → 2 → {3,4,5}; 3,4 → 6; 5 → 7 → 8; 6,8 → 9
assigned as [0,1 | 2 | 3,4,5 | 6,7 | 8 | 9] (loads 21, 12, 42, 33, 18, 19).

Run with: pytest tests/test_score_features.py -v
"""

import pytest

from src.line.model import AssemblyPlan
from src.line.problem import Problem
from src.scoring import features

FEASIBLE = [[0, 1], [2], [3, 4, 5], [6, 7], [8], [9]]


def assigned(plan: AssemblyPlan, stations: list[list[int]]) -> AssemblyPlan:
    for station, tasks in enumerate(stations):
        for task_id in tasks:
            plan.assign(task_id, station)
    return plan


@pytest.fixture
def empty_plan() -> AssemblyPlan:
    return Problem.from_lists(
        [10, 11, 12, 13, 14, 15, 16, 17, 18, 19],
        [[], [], [0, 1], [2], [2], [2], [3, 4], [5], [7], [6, 8]],
        cycle_time=42,
    ).to_plan()


@pytest.fixture
def plan(empty_plan) -> AssemblyPlan:
    return assigned(empty_plan, FEASIBLE)


class TestFeasiblePlan:
    """Features of the feasible reference assignment."""

    def test_no_inversions(self, plan):
        assert features.count_dependency_inversions(plan) == 0
        assert features.count_dependency_inversions_strict(plan) == 0
        assert features.count_deep_dependency_inversions(plan) == 0
        assert features.total_dependency_distance(plan) == 0

    def test_loads(self, plan):
        assert features.cycle_time(plan) == 42
        assert features.sum_squared_station_loads(plan) == 4123

    def test_stations(self, plan):
        assert features.count_used_stations(plan) == 6
        assert features.count_unused_stations(plan) == 4
        assert features.total_stations_used(plan) == 6
        assert features.count_station_gaps(plan) == 0

    def test_no_violations_at_own_cycle_time(self, plan):
        assert features.count_cycle_time_violations(plan) == 0
        assert features.total_excess_load(plan) == 0

    @pytest.mark.parametrize(
        "cycle_time, violations, excess",
        [(11, 6, 79), (18, 4, 43), (42, 0, 0), (100, 0, 0)],
    )
    def test_violations(self, plan, cycle_time, violations, excess):
        assert features.count_cycle_time_violations(plan, cycle_time) == violations
        assert features.total_excess_load(plan, cycle_time) == excess


class TestInversions:
    """Features after moving tasks against precedence."""

    def test_move_last_task_to_first_station(self, plan):
        plan.assign(9, 0)
        assert features.count_dependency_inversions(plan) == 2
        assert features.count_deep_dependency_inversions(plan) == 7
        assert features.total_dependency_distance(plan) == 7

    def test_strict_counts_shared_station(self, plan):
        plan.assign(2, 0)
        assert features.count_dependency_inversions(plan) == 0
        assert features.count_dependency_inversions_strict(plan) == 2

    def test_swap_predecessor_past_task(self, plan):
        plan.assign(2, 0)
        plan.assign(0, 1)
        assert features.count_dependency_inversions(plan) == 1
        assert features.count_deep_dependency_inversions(plan) == 1
        assert features.total_dependency_distance(plan) == 1

    def test_unassigned_predecessor_ignored(self, plan):
        plan.assign(9, 0)
        plan.unassign(8)
        assert features.count_dependency_inversions(plan) == 1
        assert features.total_dependency_distance(plan) == 3


class TestStationSpan:
    """Used span vs used count."""

    def test_span_grows_with_gaps(self, plan):
        plan.assign(9, 6)
        assert features.total_stations_used(plan) == 7
        assert features.count_used_stations(plan) == 6
        assert features.count_station_gaps(plan) == 1
        plan.assign(8, 8)
        assert features.total_stations_used(plan) == 9
        assert features.count_station_gaps(plan) == 3

    def test_leading_empty_stations_count(self, empty_plan):
        assigned(empty_plan, [[]] + FEASIBLE)
        assert features.total_stations_used(empty_plan) == 7
        assert features.count_used_stations(empty_plan) == 6


class TestEmptyPlan:
    """Nothing assigned: every feature is zero."""

    @pytest.mark.parametrize(
        "feature",
        [
            features.count_dependency_inversions,
            features.count_dependency_inversions_strict,
            features.count_deep_dependency_inversions,
            features.total_dependency_distance,
            features.count_used_stations,
            features.total_stations_used,
            features.count_station_gaps,
            features.cycle_time,
            features.sum_squared_station_loads,
            features.count_cycle_time_violations,
            features.total_excess_load,
        ],
    )
    def test_zero(self, empty_plan, feature):
        assert feature(empty_plan) == 0


class TestLowerBounds:
    """Bounds used to judge construction quality."""

    def test_lower_bound_stations(self, empty_plan):
        # 145 / 42 = 3.45
        assert features.lower_bound_stations(empty_plan) == 4

    def test_lower_bound_cycle_time(self):
        plan = Problem.from_lists([10, 11, 12, 13, 30], n_stations=3).to_plan()
        # ceil(76 / 3) = 26, but one task alone takes 30
        assert features.lower_bound_cycle_time(plan) == 30
        plan = Problem.from_lists([10, 11, 12, 13, 14], n_stations=3).to_plan()
        assert features.lower_bound_cycle_time(plan) == 20

    def test_lower_bound_stations_needs_cycle_time(self):
        plan = Problem.from_lists([1, 2], n_stations=2).to_plan()
        with pytest.raises(ValueError):
            features.lower_bound_stations(plan)
