"""Structured, human-readable explanation of an architecture graph."""

from __future__ import annotations

from dataclasses import dataclass, field

from ridge.detector.boundary import BoundaryResult
from ridge.model.graph import ArchGraph, EdgeType, NodeType, TopologyType


@dataclass
class Explanation:
    """Summary, topology reasoning, patterns, key decisions and risks."""

    summary: str = ""
    topology_reason: str = ""
    patterns: list[str] = field(default_factory=list)
    key_decisions: list[str] = field(default_factory=list)
    risks: list[str] = field(default_factory=list)


def explain_architecture(graph: ArchGraph, boundaries: BoundaryResult | None = None) -> Explanation:
    """Analyse a graph (and optional boundary result) into an Explanation."""
    return Explanation(
        summary=graph.summary(),
        topology_reason=_explain_topology(boundaries),
        patterns=_detect_patterns(graph),
        key_decisions=_extract_decisions(graph),
        risks=_identify_risks(graph),
    )


def _explain_topology(boundaries: BoundaryResult | None) -> str:
    if boundaries is None:
        return "No boundary information available."
    topology = boundaries.topology
    if topology == TopologyType.MONOLITH:
        return "Classified as monolith: single service boundary detected with one module root."
    if topology == TopologyType.MONOREPO:
        markers = ", ".join(_collect_markers(boundaries))
        return f"Classified as monorepo: multiple module roots detected. Markers: {markers}."
    if topology == TopologyType.MICROSERVICE:
        return (
            f"Classified as microservices: {len(boundaries.boundaries)} service boundaries "
            "with container/orchestration markers."
        )
    return "Topology could not be determined from project structure."


def _collect_markers(boundaries: BoundaryResult) -> list[str]:
    seen: dict[str, None] = {}
    for boundary in boundaries.boundaries:
        for marker in boundary.markers:
            seen.setdefault(marker, None)
    return list(seen)


def _service_count(graph: ArchGraph) -> int:
    return len(graph.nodes_by_type(NodeType.SERVICE)) + len(graph.nodes_by_type(NodeType.MODULE))


def _detect_patterns(graph: ArchGraph) -> list[str]:
    patterns: list[str] = []
    service_count = _service_count(graph)
    databases = len(graph.nodes_by_type(NodeType.DATABASE))
    queues = len(graph.nodes_by_type(NodeType.QUEUE))
    caches = len(graph.nodes_by_type(NodeType.CACHE))
    endpoints = len(graph.nodes_by_type(NodeType.ENDPOINT))

    if databases == 1 and service_count > 1:
        patterns.append("Shared database: multiple services reference a single data store")
    elif databases > 1 and service_count > 1:
        patterns.append(
            "Database-per-service: multiple data stores detected alongside multiple services"
        )

    if queues:
        patterns.append("Event-driven communication: message queue infrastructure detected")

    api_calls = sum(
        1 for e in graph.edges() if e.type == EdgeType.API_CALL and e.label != "serves"
    )
    if api_calls:
        patterns.append(
            f"Synchronous inter-service communication: {api_calls} API call edges detected"
        )

    if caches:
        patterns.append("Caching layer detected")

    if endpoints:
        patterns.append(f"HTTP API surface: {endpoints} endpoints detected")

    if not patterns:
        patterns.append("No distinctive architectural patterns detected")
    return patterns


def _extract_decisions(graph: ArchGraph) -> list[str]:
    decisions: list[str] = []
    nodes = graph.nodes()

    for node in nodes:
        via = node.properties.get("detected_via")
        if via is None:
            continue
        if node.type == NodeType.DATABASE:
            decisions.append(
                f"Uses {node.name} for data persistence (detected via {via} import)"
            )
        elif node.type == NodeType.QUEUE:
            decisions.append(f"Uses {node.name} for messaging (detected via {via} import)")
        elif node.type == NodeType.CACHE:
            decisions.append(f"Uses {node.name} for caching (detected via {via} import)")
        elif node.type == NodeType.EXTERNAL_API:
            decisions.append(f"Calls external APIs (detected via {via} import)")

    languages: dict[str, int] = {}
    for node in nodes:
        if node.language:
            languages[node.language] = languages.get(node.language, 0) + 1
    if len(languages) > 1:
        parts = ", ".join(f"{lang} ({count} components)" for lang, count in languages.items())
        decisions.append(f"Multi-language codebase: {parts}")
    elif len(languages) == 1:
        decisions.append(f"Single-language codebase: {next(iter(languages))}")
    return decisions


def _identify_risks(graph: ArchGraph) -> list[str]:
    risks: list[str] = []
    service_count = _service_count(graph)
    databases = len(graph.nodes_by_type(NodeType.DATABASE))
    caches = len(graph.nodes_by_type(NodeType.CACHE))
    endpoints = len(graph.nodes_by_type(NodeType.ENDPOINT))

    if databases == 1 and service_count > 2:
        risks.append(
            "Single database shared by multiple services may create coupling "
            "and scaling bottlenecks"
        )

    if endpoints > 5 and caches == 0:
        risks.append(
            "No caching layer detected despite multiple endpoints; "
            "may impact performance under load"
        )

    if graph.has_cycle():
        risks.append(
            "Circular dependencies detected; may cause build issues and unclear ownership"
        )

    connected: set[str] = set()
    for edge in graph.edges():
        connected.add(edge.source)
        connected.add(edge.target)
    orphans = sum(
        1 for n in graph.nodes() if n.type != NodeType.ENDPOINT and n.id not in connected
    )
    if orphans:
        risks.append(
            f"{orphans} disconnected nodes detected; "
            "may indicate dead code or missing integrations"
        )
    return risks