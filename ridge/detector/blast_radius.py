"""Blast radius: everything that transitively depends on a target node."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from ridge.model.graph import ArchGraph

_DEFAULT_MAX_DEPTH = 50


@dataclass
class BlastRadiusEntry:
    """One node that transitively depends on the target."""

    node_id: str
    node_name: str
    depth: int
    path_back: list[str] = field(default_factory=list)


@dataclass
class BlastRadiusResult:
    """Every dependent of a target, in breadth-first (depth) order."""

    target_id: str
    direct: int = 0
    total: int = 0
    max_depth_hit: bool = False
    dependents: list[BlastRadiusEntry] = field(default_factory=list)


def resolve_target_to_id(graph: ArchGraph, target: str) -> str | None:
    """Map a free-form target to a node ID, or None when nothing matches.

    An exact ID wins; otherwise the shortest node ID whose ID or path ends
    with the target is chosen.
    """
    if not target:
        return None

    node = graph.get_node(target)
    if node is not None:
        return node.id

    best = ""
    for node in graph.nodes():
        if not node.id.endswith(target) and not node.path.endswith(target):
            continue
        if not best or len(node.id) < len(best):
            best = node.id
    return best or None


def compute_blast_radius(
    graph: ArchGraph, target_id: str, max_depth: int = 0
) -> BlastRadiusResult:
    """Walk resolved edges backwards from the target, breadth first.

    A max_depth of zero or less means the default cap of 50. Each node is
    visited once, so cycles are safe.
    """
    if max_depth <= 0:
        max_depth = _DEFAULT_MAX_DEPTH

    reverse: dict[str, list[str]] = {}
    for edge in graph.resolved_edges():
        reverse.setdefault(edge.target, []).append(edge.source)

    visited = {target_id}
    parent: dict[str, str] = {}
    queue: deque[tuple[str, int]] = deque([(target_id, 0)])
    result = BlastRadiusResult(target_id=target_id)

    while queue:
        current, depth = queue.popleft()
        sources = reverse.get(current, [])
        if depth >= max_depth:
            if sources:
                result.max_depth_hit = True
            continue
        for source in sources:
            if source in visited:
                continue
            visited.add(source)
            parent[source] = current
            next_depth = depth + 1
            if next_depth == 1:
                result.direct += 1

            node = graph.get_node(source)
            name = node.name if node is not None and node.name else source

            result.dependents.append(
                BlastRadiusEntry(
                    node_id=source,
                    node_name=name,
                    depth=next_depth,
                    path_back=_trace_path_back(source, parent, target_id),
                )
            )
            queue.append((source, next_depth))

    result.total = len(result.dependents)
    return result


def _trace_path_back(start: str, parent: dict[str, str], target: str) -> list[str]:
    """Chain of node IDs from start back to target via the parent map."""
    chain = [start]
    current = start
    while current != target and current in parent:
        current = parent[current]
        chain.append(current)
    return chain