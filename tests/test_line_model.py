"""Tests for the line model: tasks, stations, plans, problems, and config.

Run with: pytest tests/test_line_model.py -v
"""

import logging

import numpy as np
import pytest

from src.line.config import (
    CONSTRUCTION_STRATEGIES,
    PRIORITY_ORDERINGS,
    BoundsConfig,
    ConstructionConfig,
    InvalidConfiguration,
    LineConfig,
    OrderingConfig,
    load_config,
)
from src.line.generator import generate_problem
from src.line.model import AssemblyPlan, Station, Task
from src.line.problem import Problem
from src.precedence.graph import CycleDetected, is_topologically_sorted


@pytest.fixture
def problem() -> Problem:
    """Ten tasks with times 10..19: 0,1 → 2 → {3,4,5}; 3,4 → 6; 5 → 7 → 8; 6,8 → 9."""
    return Problem.from_lists(
        [10, 11, 12, 13, 14, 15, 16, 17, 18, 19],
        [[], [], [0, 1], [2], [2], [2], [3, 4], [5], [7], [6, 8]],
        cycle_time=42,
    )


@pytest.fixture
def plan(problem) -> AssemblyPlan:
    """The reference plan assigned as [0,1 | 2 | 3,4,5 | 6,7 | 8 | 9]."""
    plan = problem.to_plan()
    for station, tasks in enumerate([[0, 1], [2], [3, 4, 5], [6, 7], [8], [9]]):
        for task_id in tasks:
            plan.assign(task_id, station)
    return plan


class TestStationAndTask:
    """Value semantics of stations and identity semantics of tasks."""

    def test_stations_are_ordered_values(self):
        assert Station(1) == Station(1)
        assert Station(0) < Station(3)
        assert sorted([Station(2), Station(0)]) == [Station(0), Station(2)]

    def test_tasks_compare_by_identity(self):
        assert Task(0, 5) != Task(0, 5)

    def test_deep_dependencies(self):
        a = Task(0, 1)
        b = Task(1, 1, [a])
        c = Task(2, 1, [b])
        assert c.deep_dependencies == frozenset({a, b})
        assert a.deep_dependencies == frozenset()

    def test_deep_dependents_filled_by_plan(self):
        a = Task(0, 1)
        b = Task(1, 1, [a])
        c = Task(2, 1, [b])
        AssemblyPlan([a, b, c], [Station(0)], cycle_time=5)
        assert a.dependents == [b]
        assert a.deep_dependents == frozenset({b, c})
        assert c.deep_dependents == frozenset()

    def test_deep_dependents_match_graph(self, plan):
        assert {t.id for t in plan.task(5).deep_dependents} == {7, 8, 9}
        assert {t.id for t in plan.task(2).deep_dependents} == set(range(3, 10))


class TestAssemblyPlan:
    """Plan construction, assignment queries, copying."""

    def test_type1_declares_one_station_per_task(self, problem):
        plan = problem.to_plan()
        assert plan.is_type1
        assert plan.n_stations == 10
        assert not plan.is_fully_assigned()

    def test_tasks_kept_topologically_sorted(self, plan):
        assert is_topologically_sorted([t.id for t in plan.tasks], plan.precedence_graph())

    def test_unsorted_input_is_sorted_with_warning(self, caplog):
        a = Task(0, 1)
        b = Task(1, 1, [a])
        with caplog.at_level(logging.WARNING):
            plan = AssemblyPlan([b, a], [Station(0)], cycle_time=5)
        assert [t.id for t in plan.tasks] == [0, 1]
        assert "not topologically sorted" in caplog.text

    def test_station_gaps_rejected(self):
        with pytest.raises(InvalidConfiguration):
            AssemblyPlan([Task(0, 1)], [Station(0), Station(2)], cycle_time=5)

    def test_duplicate_ids_rejected(self):
        with pytest.raises(InvalidConfiguration):
            AssemblyPlan([Task(0, 1), Task(0, 2)], [Station(0)], cycle_time=5)

    @pytest.mark.parametrize("time", [0, -3])
    def test_non_positive_time_rejected(self, time):
        a = Task(0, 5)
        b = Task(1, time, [a])
        with pytest.raises(InvalidConfiguration, match="time must be positive"):
            AssemblyPlan([a, b], [Station(0), Station(1)], cycle_time=10)

    def test_station_assignments(self, plan):
        assignments = plan.station_assignments()
        assert list(assignments) == [Station(i) for i in range(6)]
        assert [t.id for t in assignments[Station(2)]] == [3, 4, 5]

    def test_station_assignments_skip_unassigned(self, plan):
        plan.unassign(9)
        assert Station(5) not in plan.station_assignments()
        assert plan.assignment()[9] is None

    def test_station_loads(self, plan):
        assert plan.station_loads() == {0: 21, 1: 12, 2: 42, 3: 33, 4: 18, 5: 19}
        assert plan.total_time(Station(2)) == 42
        assert plan.total_time(7) == 0

    def test_assign_unknown_station_raises(self, plan):
        with pytest.raises(KeyError):
            plan.assign(0, 10)

    def test_copy_is_independent(self, plan):
        clone = plan.copy()
        assert clone.assignment() == plan.assignment()
        clone.assign(9, 0)
        assert plan.task(9).station == Station(5)
        assert clone.task(9).dependencies[0] is clone.task(6)
        assert clone.task(9) is not plan.task(9)
        assert clone.task(6).dependents == [clone.task(9)]

    def test_pretty(self, plan):
        text = plan.pretty()
        assert "cycle time 42" in text
        assert "tasks [3, 4, 5]" in text


class TestProblem:
    """Problem validation and plan creation."""

    def test_type2_plan(self):
        problem = Problem.from_lists([3, 4, 5], {2: [0, 1]}, n_stations=2)
        plan = problem.to_plan()
        assert not plan.is_type1
        assert plan.n_stations == 2
        assert plan.cycle_time is None

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"times": [], "cycle_time": 5}, "no tasks"),
            ({"times": [1, 0], "cycle_time": 5}, "positive"),
            ({"times": [1, 2], "dependencies": {1: [4]}, "cycle_time": 5}, "Unknown predecessor"),
            ({"times": [1, 2]}, "Exactly one"),
            ({"times": [1, 2], "cycle_time": 5, "n_stations": 2}, "Exactly one"),
            ({"times": [1, 2], "cycle_time": 0}, "cycle_time must be positive"),
            ({"times": [1, 2], "n_stations": -1}, "n_stations must be positive"),
        ],
    )
    def test_invalid_problems(self, kwargs, message):
        problem = Problem.from_lists(**kwargs)
        with pytest.raises(InvalidConfiguration, match=message):
            problem.validate()

    def test_non_contiguous_ids(self):
        problem = Problem(task_times={0: 1, 2: 1}, cycle_time=5)
        assert any("contiguous" in issue for issue in problem.issues())

    def test_cycle(self):
        problem = Problem.from_lists([1, 1, 1], {0: [2], 1: [0], 2: [1]}, cycle_time=5)
        with pytest.raises(CycleDetected):
            problem.to_plan()

    def test_duplicate_predecessors_collapsed(self):
        plan = Problem.from_lists([1, 1], {1: [0, 0]}, cycle_time=5).to_plan()
        assert len(plan.task(1).dependencies) == 1


class TestGenerator:
    """Random instance generation."""

    def test_generated_problem_is_valid(self):
        problem = generate_problem(50, np.random.default_rng(0))
        problem.validate()
        assert problem.n_tasks == 50
        assert problem.cycle_time >= max(problem.task_times.values())

    def test_same_seed_same_problem(self):
        a = generate_problem(30, np.random.default_rng(5), problem_type=2)
        b = generate_problem(30, np.random.default_rng(5), problem_type=2)
        assert a == b
        assert a.n_stations is not None

    def test_bad_problem_type(self):
        with pytest.raises(ValueError):
            generate_problem(5, np.random.default_rng(0), problem_type=3)


class TestConfig:
    """Typed settings and the YAML loader."""

    def test_defaults(self):
        config = LineConfig()
        assert config.bounds.margin_factor == 1.5
        assert config.construction.strategy == "breadth-first"
        assert config.construction.seed == 123
        assert not config.scoring.check_against_reference

    def test_margin_below_one_rejected(self):
        with pytest.raises(InvalidConfiguration):
            BoundsConfig(margin_factor=0.9)

    def test_negative_seed_rejected(self):
        with pytest.raises(InvalidConfiguration):
            ConstructionConfig(seed=-1)

    def test_unknown_strategy_rejected(self):
        with pytest.raises(InvalidConfiguration, match="construction strategy"):
            ConstructionConfig(strategy="greedy")

    def test_unknown_ordering_rejected(self):
        with pytest.raises(InvalidConfiguration, match="priority ordering"):
            OrderingConfig(variant="alphabetical")

    def test_unknown_names_in_file_rejected(self, tmp_path):
        path = tmp_path / "bad_names.yaml"
        path.write_text("construction:\n  strategy: greedy\n", encoding="utf-8")
        with pytest.raises(InvalidConfiguration):
            load_config(path)

    def test_name_lists_match_enums(self):
        from src.construction.heuristics import ConstructionStrategy
        from src.search.ordering import PriorityOrdering

        assert CONSTRUCTION_STRATEGIES == tuple(s.value for s in ConstructionStrategy)
        assert PRIORITY_ORDERINGS == tuple(o.value for o in PriorityOrdering)

    def test_load_config(self, tmp_path):
        path = tmp_path / "line.yaml"
        path.write_text(
            "bounds:\n  margin_factor: 2.0\n"
            "construction:\n  strategy: depth-first\n  seed: 7\n"
            "ordering:\n  variant: layer-id\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.bounds.margin_factor == 2.0
        assert config.construction.strategy == "depth-first"
        assert config.construction.seed == 7
        assert config.ordering.variant == "layer-id"
        assert config.scoring.check_against_reference is False

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == LineConfig()

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("bounds:\n  margin: 2.0\n", encoding="utf-8")
        with pytest.raises(InvalidConfiguration):
            load_config(path)

    def test_shipped_default_config(self):
        from pathlib import Path

        path = Path(__file__).resolve().parents[1] / "config" / "default_line.yaml"
        assert load_config(path) == LineConfig()
