"""
Score calculators for assembly plans.

Two full calculators produce the same (hard, medium, soft) score:

Calculator menu
───────────────
  ReferenceScoreCalculator  one pass per feature (src.scoring.features)  ground truth
  InlineScoreCalculator     single pass over tasks and predecessors     ← DEFAULT
  CheckedScoreCalculator    runs a primary and the reference, raises InconsistentScore
                            on any disagreement (debug / test runs)

Score layout
────────────
  Type 1 (fixed cycle time, minimize stations)
    hard   = -(precedence inversions + cycle-time violations)
    medium = -(used stations)
    soft   = +(sum of squared station loads)    rewards packing tasks tightly

  Type 2 (fixed stations, minimize cycle time)
    hard   = -(precedence inversions)
    medium = -(maximum station load)
    soft   = -(sum of squared station loads)    rewards an even spread

Unassigned tasks contribute nothing to any component, so a plan with no
assigned task scores 0hard/0medium/0soft.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np

from src.line.config import ScoringConfig
from src.line.model import AssemblyPlan
from src.scoring import features
from src.scoring.score import Score


class InconsistentScore(AssertionError):
    """Two score calculators disagree on the same plan."""


class ScoreCalculator(Protocol):
    """Anything that turns a plan into a Score without modifying it."""

    def calculate(self, plan: AssemblyPlan) -> Score: ...


# ─────────────────────────────────────────────────────────────────────────────
# Reference
# ─────────────────────────────────────────────────────────────────────────────


class ReferenceScoreCalculator:
    """Combines the independently computed reference features."""

    def calculate(self, plan: AssemblyPlan) -> Score:
        inversions = features.count_dependency_inversions(plan)
        squared = features.sum_squared_station_loads(plan)
        if plan.is_type1:
            return Score(
                hard=-(inversions + features.count_cycle_time_violations(plan)),
                medium=-features.count_used_stations(plan),
                soft=squared,
            )
        return Score(
            hard=-inversions,
            medium=-features.cycle_time(plan),
            soft=-squared,
        )


# ─────────────────────────────────────────────────────────────────────────────
# Inline (single pass)
# ─────────────────────────────────────────────────────────────────────────────


class InlineScoreCalculator:
    """Single pass over tasks and their immediate predecessors.

    Station loads are accumulated with numpy; inversions are counted on
    the same pass.
    """

    def calculate(self, plan: AssemblyPlan) -> Score:
        numbers: list[int] = []
        times: list[int] = []
        inversions = 0
        for task in plan.tasks:
            if task.station is None:
                continue
            here = task.station.number
            numbers.append(here)
            times.append(task.time)
            for dep in task.dependencies:
                if dep.station is not None and dep.station.number > here:
                    inversions += 1

        if not numbers:
            return Score()

        loads = np.bincount(numbers, weights=times).astype(np.int64)
        # A station is used when it holds a task, whatever its load.
        used = loads[np.bincount(numbers) > 0]
        squared = int(np.dot(used, used))

        if plan.is_type1:
            violations = int(np.count_nonzero(used > plan.cycle_time))
            return Score(
                hard=-(inversions + violations),
                medium=-int(used.size),
                soft=squared,
            )
        return Score(
            hard=-inversions,
            medium=-int(used.max()),
            soft=-squared,
        )


# ─────────────────────────────────────────────────────────────────────────────
# Checked
# ─────────────────────────────────────────────────────────────────────────────


class CheckedScoreCalculator:
    """Runs a primary calculator and verifies it against another.

    Args:
        primary: Calculator whose score is returned (inline by default).
        reference: Calculator it must agree with (reference by default).
    """

    def __init__(
        self,
        primary: ScoreCalculator | None = None,
        reference: ScoreCalculator | None = None,
    ) -> None:
        self.primary = primary or InlineScoreCalculator()
        self.reference = reference or ReferenceScoreCalculator()

    def calculate(self, plan: AssemblyPlan) -> Score:
        score = self.primary.calculate(plan)
        expected = self.reference.calculate(plan)
        if score != expected:
            raise InconsistentScore(
                f"{type(self.primary).__name__} computed {score}, "
                f"{type(self.reference).__name__} computed {expected} "
                f"for {plan!r}"
            )
        return score


# ─────────────────────────────────────────────────────────────────────────────
# Entry points
# ─────────────────────────────────────────────────────────────────────────────

_DEFAULT_CALCULATOR = InlineScoreCalculator()


def create_calculator(config: ScoringConfig | None = None) -> ScoreCalculator:
    """Instantiate the calculator selected by the scoring config.

    "check_against_reference" off → InlineScoreCalculator
    "check_against_reference" on  → CheckedScoreCalculator(inline vs reference)
    """
    config = config or ScoringConfig()
    if config.check_against_reference:
        return CheckedScoreCalculator()
    return InlineScoreCalculator()


def evaluate(plan: AssemblyPlan, calculator: ScoreCalculator | None = None) -> Score:
    """Score a plan. Side-effect free."""
    return (calculator or _DEFAULT_CALCULATOR).calculate(plan)
