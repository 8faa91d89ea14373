"""Precedence graph utilities.

A precedence graph maps every node (normally a task id) to the nodes it
directly depends on, its immediate predecessors:

    {0: [], 1: [], 2: [0, 1], 3: [2]}

Every other structure the line-balancing code needs is derived from this
one mapping:
- topological layers (a node's layer is one more than its deepest predecessor)
- a deterministic topological order (layer by layer, ties broken by id)
- the flipped successor ("dependee") map, roots and leaves
- transitive closures in both directions

Queries are answered by a NetworkX DiGraph whose edges point from a
predecessor to the node that depends on it.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Mapping
from typing import Any

import networkx as nx

PrecedenceGraph = Mapping[Hashable, Iterable[Hashable]]


class CycleDetected(ValueError):
    """Raised when a precedence graph is not acyclic.

    Attributes:
        cycle: Node path around the cycle, first node repeated at the end.
            Each node is an immediate predecessor of the one after it.
    """

    def __init__(self, cycle: list[Hashable] | None = None) -> None:
        self.cycle = cycle or []
        if self.cycle:
            path = " -> ".join(str(n) for n in self.cycle)
            super().__init__(f"Precedence graph contains a cycle: {path}")
        else:
            super().__init__("Precedence graph contains a cycle")


# ── Construction ─────────────────────────────────────────────────────


def build_graph(
    items: Mapping[Hashable, Iterable[Hashable]] | Iterable[Any],
    dependencies: Callable[[Any], Iterable[Hashable]] | None = None,
) -> dict[Hashable, frozenset]:
    """Build an explicit node -> immediate-predecessors map.

    Args:
        items: Either an existing mapping (copied and frozen) or an iterable
            of objects such as tasks.
        dependencies: Returns the predecessors of one item. Defaults to the
            item's ``dependencies`` attribute.

    Returns:
        Dict from node to a frozenset of its immediate predecessors.
    """
    if isinstance(items, Mapping):
        return {node: frozenset(deps) for node, deps in items.items()}
    if dependencies is None:
        dependencies = lambda item: item.dependencies  # noqa: E731
    return {item: frozenset(dependencies(item)) for item in items}


def missing_dependencies(graph: PrecedenceGraph) -> dict[Hashable, set]:
    """Predecessor references that are not nodes of the graph, per node."""
    missing: dict[Hashable, set] = {}
    for node, deps in graph.items():
        unknown = {d for d in deps if d not in graph}
        if unknown:
            missing[node] = unknown
    return missing


def to_digraph(graph: PrecedenceGraph) -> nx.DiGraph:
    """Convert to a NetworkX DiGraph with predecessor -> node edges.

    Raises:
        ValueError: If some node depends on a node that is not in the graph.
    """
    missing = missing_dependencies(graph)
    if missing:
        raise ValueError(f"Malformed precedence graph, unknown predecessors: {missing}")

    digraph = nx.DiGraph()
    digraph.add_nodes_from(graph)
    for node, deps in graph.items():
        digraph.add_edges_from((dep, node) for dep in deps)
    return digraph


# ── Topological structure ────────────────────────────────────────────


def topological_layers(graph: PrecedenceGraph) -> list[set]:
    """Partition the nodes into topological layers.

    Layer 0 holds the roots; every other node sits one layer below its
    deepest immediate predecessor.

    Raises:
        CycleDetected: If the graph is cyclic.
    """
    digraph = to_digraph(graph)
    try:
        return [set(layer) for layer in nx.topological_generations(digraph)]
    except nx.NetworkXUnfeasible:
        raise CycleDetected(find_cycle(graph)) from None


def topological_layer_map(graph: PrecedenceGraph) -> dict[Hashable, int]:
    """Map each node to the index of its topological layer."""
    return {
        node: index
        for index, layer in enumerate(topological_layers(graph))
        for node in layer
    }


def topological_order(
    graph: PrecedenceGraph,
    key: Callable[[Any], Any] | None = None,
) -> list:
    """Total order consistent with precedence.

    Nodes are emitted layer by layer; within a layer they are sorted by
    ``key`` (the node itself by default, i.e. by id), so the order is
    deterministic.
    """
    order: list = []
    for layer in topological_layers(graph):
        order.extend(sorted(layer, key=key))
    return order


def is_topologically_sorted(sequence: Iterable[Hashable], graph: PrecedenceGraph) -> bool:
    """True if every node in ``sequence`` comes after all its predecessors."""
    seen: set = set()
    for node in sequence:
        if any(dep not in seen for dep in graph.get(node, ())):
            return False
        seen.add(node)
    return True


# ── Derived maps ─────────────────────────────────────────────────────


def flip_edges(graph: PrecedenceGraph) -> dict[Hashable, set]:
    """Turn a predecessor map into a successor map.

    Every node of the input is a key of the result, including nodes
    that nothing depends on.
    """
    successors: dict[Hashable, set] = {node: set() for node in graph}
    for node, deps in graph.items():
        for dep in deps:
            successors.setdefault(dep, set()).add(node)
    return successors


def roots(graph: PrecedenceGraph) -> set:
    """Nodes without predecessors."""
    return {node for node, deps in graph.items() if not deps}


def leaves(graph: PrecedenceGraph) -> set:
    """Nodes that no other node depends on."""
    return roots(flip_edges(graph))


def deep_dependencies(graph: PrecedenceGraph) -> dict[Hashable, frozenset]:
    """Transitive closure of the predecessor relation.

    Computed in topological order so every predecessor's closure is
    already known when a node is reached.
    """
    closure: dict[Hashable, frozenset] = {}
    for node in topological_order(graph, key=_any_order):
        deps = set(graph[node])
        for dep in graph[node]:
            deps |= closure[dep]
        closure[node] = frozenset(deps)
    return closure


def deep_dependents(graph: PrecedenceGraph) -> dict[Hashable, frozenset]:
    """Transitive closure of the successor relation."""
    return deep_dependencies(flip_edges(graph))


def find_cycle(graph: PrecedenceGraph) -> list | None:
    """Return one cycle as a node path ``[n0, n1, ..., n0]``, or None."""
    try:
        edges = nx.find_cycle(to_digraph(graph), orientation="original")
    except nx.NetworkXNoCycle:
        return None
    path = [edge[0] for edge in edges]
    path.append(edges[0][0])
    return path


def _any_order(node: Hashable) -> int:
    # Closures do not depend on the order within a layer, and the nodes
    # need not be mutually comparable.
    return 0
