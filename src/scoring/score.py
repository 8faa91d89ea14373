"""Layered (hard, medium, soft) score."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Score:
    """Lexicographically ordered score triple; larger is better.

    hard must be 0 for a feasible plan, medium is the objective being
    optimized, and soft only breaks ties between equal medium values.
    """

    hard: int = 0
    medium: int = 0
    soft: int = 0

    @property
    def is_feasible(self) -> bool:
        return self.hard >= 0

    def __str__(self) -> str:
        return f"{self.hard}hard/{self.medium}medium/{self.soft}soft"
