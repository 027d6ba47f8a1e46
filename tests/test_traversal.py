"""Tests for specref.traversal -- the asynchronous DFS engine."""

from __future__ import annotations

import asyncio
from collections import Counter

import pytest

from specref.models import Adjacency, ReferenceDescriptor, SpecNode
from specref.traversal import DFS, TraversalResult


def _graph_expander(graph: dict[str, list[str]], missing: dict[str, list[str]] | None = None):
    """Build an expansion function over plain string nodes, counting calls."""
    calls: Counter[str] = Counter()
    missing = missing or {}

    async def expand(node: str):
        calls[node] += 1
        await asyncio.sleep(0)
        return graph.get(node, []), missing.get(node, [])

    return expand, calls


def _traverse(graph, root="A", missing=None) -> tuple[TraversalResult, Counter]:
    expand, calls = _graph_expander(graph, missing)
    result = asyncio.run(DFS(key=lambda node: node).traverse(root, expand))
    return result, calls


class TestTraversalOrder:
    def test_single_node(self) -> None:
        result, _ = _traverse({})
        assert result.traverse_order == ["A"]
        assert result.missing == []

    def test_cycle_terminates(self) -> None:
        result, calls = _traverse({"A": ["B", "C"], "B": ["A"]})
        assert result.traverse_order == ["A", "B", "C"]
        assert calls == Counter({"A": 1, "B": 1, "C": 1})

    def test_self_loop(self) -> None:
        result, calls = _traverse({"A": ["A"]})
        assert result.traverse_order == ["A"]
        assert calls["A"] == 1

    def test_diamond_expands_shared_node_once(self) -> None:
        result, calls = _traverse({"A": ["B", "C"], "B": ["D"], "C": ["D"]})
        assert result.traverse_order == ["A", "B", "D", "C"]
        assert calls["D"] == 1

    def test_subtree_completes_before_next_sibling(self) -> None:
        graph = {"A": ["B", "E"], "B": ["C"], "C": ["D"]}
        result, _ = _traverse(graph)
        assert result.traverse_order == ["A", "B", "C", "D", "E"]

    def test_node_queued_twice_is_visited_once(self) -> None:
        result, calls = _traverse({"A": ["B", "C"], "B": ["C"]})
        assert result.traverse_order == ["A", "B", "C"]
        assert calls["C"] == 1


class TestMissing:
    def test_missing_accumulates_in_report_order(self) -> None:
        graph = {"A": ["B"]}
        missing = {"A": ["x"], "B": ["y", "x"]}
        result, _ = _traverse(graph, missing=missing)
        assert result.missing == ["x", "y", "x"]


class TestExpansionShapes:
    def test_accepts_adjacency(self) -> None:
        nodes = {
            "root": Adjacency(
                graph_adj=[SpecNode(file_name="a"), SpecNode(file_name="b")],
                missing_nodes=[ReferenceDescriptor(path="gone")],
            ),
        }

        async def expand(node: SpecNode) -> Adjacency:
            return nodes.get(node.file_name, Adjacency())

        result = asyncio.run(DFS().traverse(SpecNode(file_name="root"), expand))
        assert [node.file_name for node in result.traverse_order] == ["root", "a", "b"]
        assert [ref.path for ref in result.missing] == ["gone"]

    def test_identity_is_file_name_not_object(self) -> None:
        async def expand(node: SpecNode) -> Adjacency:
            if node.file_name == "root":
                return Adjacency(graph_adj=[SpecNode(file_name="a"), SpecNode(file_name="a")])
            return Adjacency()

        result = asyncio.run(DFS().traverse(SpecNode(file_name="root"), expand))
        assert [node.file_name for node in result.traverse_order] == ["root", "a"]

    def test_expansion_error_propagates(self) -> None:
        async def expand(node: str):
            if node == "B":
                raise RuntimeError("boom")
            return ["B"], []

        with pytest.raises(RuntimeError, match="boom"):
            asyncio.run(DFS(key=lambda node: node).traverse("A", expand))
