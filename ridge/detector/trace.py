"""Process traces from endpoints through the graph to terminal nodes."""

from __future__ import annotations

from ridge.model.graph import ArchGraph, Edge, NodeType, ProcessTrace

_MAX_TRACE_DEPTH = 20

_TERMINAL_TYPES = frozenset(
    {NodeType.DATABASE, NodeType.QUEUE, NodeType.CACHE, NodeType.EXTERNAL_API}
)


def compute_traces(graph: ArchGraph) -> list[ProcessTrace]:
    """Trace every path from an endpoint to infrastructure or a leaf node.

    Traces with identical chains are recorded once. A trace's confidence is
    the lowest positive edge confidence along it, starting from 1.0.
    """
    adjacency: dict[str, list[Edge]] = {}
    for edge in graph.resolved_edges():
        adjacency.setdefault(edge.source, []).append(edge)

    traces: list[ProcessTrace] = []
    seen: set[tuple[str, ...]] = set()

    def record(chain: list[str], edge_types: list[str], terminal: str, confidence: float) -> None:
        key = tuple(chain)
        if key in seen:
            return
        seen.add(key)
        traces.append(
            ProcessTrace(
                entry_point=chain[0],
                chain=list(chain),
                edge_types=list(edge_types),
                terminal=terminal,
                confidence=confidence,
            )
        )

    def walk(
        node_id: str,
        chain: list[str],
        edge_types: list[str],
        min_conf: float,
        visited: set[str],
    ) -> None:
        if len(chain) > _MAX_TRACE_DEPTH:
            return
        outgoing = adjacency.get(node_id, [])
        if not outgoing:
            if len(chain) >= 2:
                record(chain, edge_types, chain[-1], min_conf)
            return

        for edge in outgoing:
            if edge.target in visited:
                continue
            conf = min_conf
            if 0 < edge.confidence < conf:
                conf = edge.confidence

            next_chain = chain + [edge.target]
            next_types = edge_types + [str(edge.type)]

            target = graph.get_node(edge.target)
            if target is not None and target.type in _TERMINAL_TYPES:
                record(next_chain, next_types, edge.target, conf)
                continue

            visited.add(edge.target)
            walk(edge.target, next_chain, next_types, conf, visited)
            visited.discard(edge.target)

    for endpoint in graph.nodes_by_type(NodeType.ENDPOINT):
        walk(endpoint.id, [endpoint.id], [], 1.0, {endpoint.id})

    return traces