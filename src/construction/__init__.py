from src.construction.heuristics import ConstructionStrategy, apply_assignments, construct
from src.construction.stripping import strip_unused_stations

__all__ = ["ConstructionStrategy", "apply_assignments", "construct", "strip_unused_stations"]
