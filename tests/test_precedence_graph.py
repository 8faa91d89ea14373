"""Tests for precedence graph utilities.

Run with: pytest tests/test_precedence_graph.py -v
"""

import pytest

from src.precedence.graph import (
    CycleDetected,
    build_graph,
    deep_dependencies,
    deep_dependents,
    find_cycle,
    flip_edges,
    is_topologically_sorted,
    leaves,
    missing_dependencies,
    roots,
    topological_layer_map,
    topological_layers,
    topological_order,
)


@pytest.fixture
def line_graph() -> dict[int, list[int]]:
    """Ten tasks: 0,1 → 2 → {3,4,5}; 3,4 → 6; 5 → 7 → 8; 6,8 → 9."""
    return {
        0: [],
        1: [],
        2: [0, 1],
        3: [2],
        4: [2],
        5: [2],
        6: [3, 4],
        7: [5],
        8: [7],
        9: [6, 8],
    }


class TestBuildGraph:
    """Building the explicit predecessor map."""

    def test_from_mapping(self, line_graph):
        graph = build_graph(line_graph)
        assert graph[2] == frozenset({0, 1})
        assert graph[0] == frozenset()

    def test_from_objects(self):
        class Node:
            def __init__(self, deps):
                self.dependencies = deps

        a = Node([])
        b = Node([a])
        graph = build_graph([a, b])
        assert graph[b] == frozenset({a})

    def test_custom_dependency_function(self):
        graph = build_graph(["a", "ab"], dependencies=lambda s: [s[:-1]] if len(s) > 1 else [])
        assert graph["ab"] == frozenset({"a"})

    def test_missing_dependencies(self):
        assert missing_dependencies({0: [], 1: [0, 7]}) == {1: {7}}


class TestTopology:
    """Layers and orders."""

    def test_layers(self, line_graph):
        layers = topological_layers(line_graph)
        assert layers == [{0, 1}, {2}, {3, 4, 5}, {6, 7}, {8}, {9}]

    def test_layer_is_longest_path_depth(self, line_graph):
        layer = topological_layer_map(line_graph)
        # 9 depends on 6 (layer 3) and 8 (layer 4)
        assert layer[9] == 5
        assert layer[0] == 0

    def test_order_puts_predecessors_first(self, line_graph):
        order = topological_order(line_graph)
        position = {node: i for i, node in enumerate(order)}
        for node, deps in line_graph.items():
            for dep in deps:
                assert position[dep] < position[node]

    def test_order_breaks_ties_by_id(self, line_graph):
        assert topological_order(line_graph) == [0, 1, 2, 3, 4, 5, 6, 7, 8, 9]

    def test_order_with_key(self):
        graph = {0: [], 1: [], 2: []}
        assert topological_order(graph, key=lambda n: -n) == [2, 1, 0]

    def test_is_topologically_sorted(self, line_graph):
        assert is_topologically_sorted(range(10), line_graph)
        assert not is_topologically_sorted([2, 0, 1, 3, 4, 5, 6, 7, 8, 9], line_graph)

    def test_empty_graph(self):
        assert topological_layers({}) == []
        assert topological_order({}) == []

    def test_forest(self):
        graph = {0: [], 1: [0], 2: [], 3: [2]}
        assert topological_layers(graph) == [{0, 2}, {1, 3}]


class TestDerivedMaps:
    """Successor map, roots, leaves, closures."""

    def test_flip_edges(self, line_graph):
        successors = flip_edges(line_graph)
        assert successors[2] == {3, 4, 5}
        assert successors[9] == set()
        assert set(successors) == set(line_graph)

    def test_roots_and_leaves(self, line_graph):
        assert roots(line_graph) == {0, 1}
        assert leaves(line_graph) == {9}

    def test_deep_dependencies(self, line_graph):
        closure = deep_dependencies(line_graph)
        assert closure[9] == frozenset(range(9))
        assert closure[7] == frozenset({0, 1, 2, 5})
        assert closure[0] == frozenset()

    def test_deep_dependents(self, line_graph):
        closure = deep_dependents(line_graph)
        assert closure[5] == frozenset({7, 8, 9})
        assert closure[9] == frozenset()


class TestCycles:
    """Cycle detection."""

    def test_find_cycle_none_for_dag(self, line_graph):
        assert find_cycle(line_graph) is None

    def test_find_cycle(self):
        cycle = find_cycle({0: [2], 1: [0], 2: [1], 3: []})
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {0, 1, 2}

    def test_layers_raise_cycle_detected(self):
        with pytest.raises(CycleDetected) as info:
            topological_layers({0: [1], 1: [0]})
        assert set(info.value.cycle) == {0, 1}

    def test_cycle_detected_is_value_error(self):
        with pytest.raises(ValueError):
            topological_order({0: [0]})

    def test_missing_node_rejected(self):
        with pytest.raises(ValueError, match="unknown predecessors"):
            topological_layers({0: [], 1: [5]})
