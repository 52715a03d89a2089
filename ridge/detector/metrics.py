"""Architecture fitness metrics: coupling, instability and dependency depth."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ridge.model.graph import ArchGraph, Edge, EdgeType, Node, NodeType

_INFRA_TYPES = frozenset(
    {NodeType.DATABASE, NodeType.QUEUE, NodeType.CACHE, NodeType.EXTERNAL_API}
)


def _text(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


@dataclass
class Metrics:
    """Architecture fitness scores."""

    components: dict[str, int] = field(default_factory=dict)
    edge_counts: dict[str, int] = field(default_factory=dict)
    coupling: dict[str, float] = field(default_factory=dict)
    instability: dict[str, float] = field(default_factory=dict)
    max_depth: int = 0
    avg_coupling: float = 0.0
    avg_instability: float = 0.0


def is_infra_node(node_type: NodeType | str) -> bool:
    """Whether a node type is infrastructure (database, queue, cache, external API)."""
    return node_type in _INFRA_TYPES


def compute_metrics(graph: ArchGraph) -> Metrics:
    """Compute metrics over resolved edges, so import targets count as real packages."""
    metrics = Metrics()
    nodes = graph.nodes()

    for node in nodes:
        key = _text(node.type)
        metrics.components[key] = metrics.components.get(key, 0) + 1

    resolved = graph.resolved_edges()
    for edge in resolved:
        key = _text(edge.type)
        metrics.edge_counts[key] = metrics.edge_counts.get(key, 0) + 1

    fan_out: dict[str, int] = {}
    fan_in: dict[str, int] = {}
    for edge in resolved:
        if edge.type == EdgeType.DEPENDENCY:
            fan_out[edge.source] = fan_out.get(edge.source, 0) + 1
            fan_in[edge.target] = fan_in.get(edge.target, 0) + 1

    coupling_sum = 0.0
    instability_sum = 0.0
    count = 0
    for node in nodes:
        if is_infra_node(node.type):
            continue
        out_degree = fan_out.get(node.id, 0)
        total = fan_in.get(node.id, 0) + out_degree
        metrics.coupling[node.id] = float(out_degree)
        if total > 0:
            metrics.instability[node.id] = out_degree / total
        coupling_sum += out_degree
        instability_sum += metrics.instability.get(node.id, 0.0)
        count += 1

    if count:
        metrics.avg_coupling = coupling_sum / count
        metrics.avg_instability = instability_sum / count

    metrics.max_depth = _compute_max_depth(resolved, nodes)
    return metrics


def _compute_max_depth(edges: list[Edge], nodes: list[Node]) -> int:
    """Longest dependency chain, using memoized DFS that cuts cycles at back-edges."""
    adjacency: dict[str, list[str]] = {}
    for edge in edges:
        if edge.type == EdgeType.DEPENDENCY:
            adjacency.setdefault(edge.source, []).append(edge.target)

    memo: dict[str, int] = {}
    visiting: set[str] = set()

    def longest(start: str) -> int:
        if start in memo:
            return memo[start]
        if start in visiting:
            return 0
        visiting.add(start)
        stack: list[list[Any]] = [[start, iter(adjacency.get(start, ())), 0]]
        child_result: int | None = None
        while stack:
            frame = stack[-1]
            if child_result is not None:
                frame[2] = max(frame[2], 1 + child_result)
                child_result = None
            descended = False
            for nxt in frame[1]:
                if nxt in memo:
                    frame[2] = max(frame[2], 1 + memo[nxt])
                    continue
                if nxt in visiting:
                    frame[2] = max(frame[2], 1)
                    continue
                visiting.add(nxt)
                stack.append([nxt, iter(adjacency.get(nxt, ())), 0])
                descended = True
                break
            if descended:
                continue
            node_id, _, best = stack.pop()
            visiting.discard(node_id)
            memo[node_id] = best
            child_result = best
        return memo[start]

    return max((longest(n.id) for n in nodes if not is_infra_node(n.type)), default=0)