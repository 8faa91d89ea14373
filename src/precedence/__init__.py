from src.precedence.graph import (
    CycleDetected,
    build_graph,
    deep_dependencies,
    deep_dependents,
    find_cycle,
    flip_edges,
    is_topologically_sorted,
    leaves,
    roots,
    topological_layer_map,
    topological_layers,
    topological_order,
)

__all__ = [
    "CycleDetected",
    "build_graph",
    "deep_dependencies",
    "deep_dependents",
    "find_cycle",
    "flip_edges",
    "is_topologically_sorted",
    "leaves",
    "roots",
    "topological_layer_map",
    "topological_layers",
    "topological_order",
]
