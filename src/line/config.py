"""
Line-balancing solver settings and YAML loader.

All tunable parameters live here as typed, validated dataclasses.
Load from YAML with `load_config()` or construct directly for tests.
Problem instances themselves are not part of the config; see
`src.line.problem.Problem`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


class InvalidConfiguration(ValueError):
    """A setting, strategy name, or problem instance is not usable."""


# Must match the values of ConstructionStrategy and PriorityOrdering.
CONSTRUCTION_STRATEGIES = (
    "random-feasible",
    "breadth-first",
    "compacting-breadth-first",
    "depth-first",
    "target-breadth-first",
    "closest-breadth-first",
)
PRIORITY_ORDERINGS = (
    "layer-time",
    "layer-id",
    "layer-successors-time",
    "layer-successors-time-predecessors",
    "layer-successors-predecessors-time",
)


def check_name(kind: str, name: str, valid: tuple[str, ...]) -> None:
    if name not in valid:
        raise InvalidConfiguration(
            f"Unknown {kind} {name!r} (expected one of: {', '.join(valid)})"
        )


@dataclass(frozen=True)
class BoundsConfig:
    """Per-task earliest/latest station estimation."""

    margin_factor: float = 1.5  # Widens the latest-station bound; must be >= 1.0

    def __post_init__(self) -> None:
        if self.margin_factor < 1.0:
            raise InvalidConfiguration(
                f"margin_factor must be >= 1.0, got {self.margin_factor}"
            )


@dataclass(frozen=True)
class ConstructionConfig:
    """Initial-solution heuristic."""

    strategy: str = "breadth-first"
    seed: int = 123
    sort_layers: bool = False  # Type-2 target strategies: largest task first instead of shuffling

    def __post_init__(self) -> None:
        if self.seed < 0:
            raise InvalidConfiguration(f"seed must be non-negative, got {self.seed}")
        check_name("construction strategy", self.strategy, CONSTRUCTION_STRATEGIES)


@dataclass(frozen=True)
class ScoringConfig:
    """Score calculation."""

    check_against_reference: bool = False  # Recompute every score with the reference features


@dataclass(frozen=True)
class OrderingConfig:
    """Task priority used to order the search driver's value selection."""

    variant: str = "layer-time"

    def __post_init__(self) -> None:
        check_name("priority ordering", self.variant, PRIORITY_ORDERINGS)


@dataclass(frozen=True)
class LineConfig:
    """Top-level configuration aggregating all sub-configs."""

    bounds: BoundsConfig = field(default_factory=BoundsConfig)
    construction: ConstructionConfig = field(default_factory=ConstructionConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    ordering: OrderingConfig = field(default_factory=OrderingConfig)


def load_config(path: str | Path) -> LineConfig:
    """Load a LineConfig from a YAML file.

    Args:
        path: Path to a YAML config file. Missing sections use defaults.

    Returns:
        Fully constructed LineConfig with all sub-configs.

    Raises:
        InvalidConfiguration: If a section contains unknown keys or bad values.
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    try:
        return LineConfig(
            bounds=BoundsConfig(**raw.get("bounds", {})),
            construction=ConstructionConfig(**raw.get("construction", {})),
            scoring=ScoringConfig(**raw.get("scoring", {})),
            ordering=OrderingConfig(**raw.get("ordering", {})),
        )
    except TypeError as e:
        raise InvalidConfiguration(f"Bad config file {path}: {e}") from e
