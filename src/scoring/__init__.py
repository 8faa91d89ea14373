from src.scoring.calculators import (
    CheckedScoreCalculator,
    InconsistentScore,
    InlineScoreCalculator,
    ReferenceScoreCalculator,
    create_calculator,
    evaluate,
)
from src.scoring.incremental import IncrementalScoreCalculator
from src.scoring.score import Score

__all__ = [
    "CheckedScoreCalculator",
    "IncrementalScoreCalculator",
    "InconsistentScore",
    "InlineScoreCalculator",
    "ReferenceScoreCalculator",
    "Score",
    "create_calculator",
    "evaluate",
]
