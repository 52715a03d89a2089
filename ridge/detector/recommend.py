"""Prioritised architecture recommendations built from validation and metrics."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from ridge.detector.explain import Explanation
from ridge.detector.metrics import Metrics, is_infra_node
from ridge.detector.validate import Violation, tarjan_scc
from ridge.model.graph import ArchGraph, EdgeType, NodeType

_PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


@dataclass
class Recommendation:
    """A single architecture improvement suggestion."""

    category: str
    priority: str
    subject: list[str] = field(default_factory=list)
    title: str = ""
    rationale: str = ""
    action: str = ""


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _fan_in(graph: ArchGraph) -> dict[str, int]:
    counts: dict[str, int] = {}
    for edge in graph.resolved_edges():
        if edge.type == EdgeType.DEPENDENCY:
            counts[edge.target] = counts.get(edge.target, 0) + 1
    return counts


def recommend_architecture(
    graph: ArchGraph,
    violations: list[Violation],
    metrics: Metrics | None = None,
    explanation: Explanation | None = None,
) -> list[Recommendation]:
    """Turn findings into recommendations, boosted and sorted by priority.

    Medium items are raised to high when a subject has high fan-in or is
    flagged by more than one rule. The result is ordered high, medium, low,
    then by number of subjects, largest first.
    """
    recs = [
        *_break_cycles(graph, violations),
        *_reduce_coupling(graph, metrics),
        *_stabilize_core(graph, metrics),
        *_add_service_layer(violations),
        *_split_database(graph),
        *_add_caching(graph),
        *_split_module(graph, metrics),
        *_remove_orphans(violations),
    ]
    _boost_priorities(recs, graph)
    return sorted(
        recs,
        key=lambda r: (_PRIORITY_RANK.get(r.priority, 0), -len(r.subject)),
    )


def _break_cycles(graph: ArchGraph, violations: list[Violation]) -> list[Recommendation]:
    if not any(v.rule == "no_circular_dependencies" for v in violations):
        return []
    return [
        Recommendation(
            category="break_cycle",
            priority="high",
            subject=scc,
            title=f"Break circular dependency among {len(scc)} components",
            rationale=(
                f"Components {', '.join(scc)} form a cycle, preventing independent "
                "deployment and testing."
            ),
            action="Introduce an interface or event-based decoupling to break the dependency loop.",
        )
        for scc in tarjan_scc(graph)
        if len(scc) > 1
    ]


def _reduce_coupling(graph: ArchGraph, metrics: Metrics | None) -> list[Recommendation]:
    if metrics is None or metrics.avg_coupling <= 2:
        return []
    avg = metrics.avg_coupling
    threshold = avg * 2
    recs = []
    for node in graph.nodes():
        if is_infra_node(node.type):
            continue
        coupling = metrics.coupling.get(node.id, 0.0)
        if coupling <= threshold:
            continue
        recs.append(
            Recommendation(
                category="reduce_coupling",
                priority="high" if coupling > threshold * 1.5 else "medium",
                subject=[node.id],
                title=f"Reduce coupling of {node.name} (fan-out {coupling:.0f}, avg {avg:.1f})",
                rationale=(
                    f"Component {_quote(node.name)} has {coupling:.0f} outgoing dependencies, "
                    f"more than 2× the project average of {avg:.1f}."
                ),
                action=(
                    "Extract shared dependencies into a facade or split into smaller "
                    "focused modules."
                ),
            )
        )
    return recs


def _stabilize_core(graph: ArchGraph, metrics: Metrics | None) -> list[Recommendation]:
    if metrics is None:
        return []
    fan_in = _fan_in(graph)
    recs = []
    for node in graph.nodes():
        if is_infra_node(node.type):
            continue
        fi = fan_in.get(node.id, 0)
        inst = metrics.instability.get(node.id, 0.0)
        if fi > 3 and inst > 0.7:
            recs.append(
                Recommendation(
                    category="stabilize_core",
                    priority="high",
                    subject=[node.id],
                    title=f"Stabilize {node.name} (fan-in {fi}, instability {inst:.2f})",
                    rationale=(
                        f"Component {_quote(node.name)} is depended on by {fi} others but has "
                        f"instability {inst:.2f}. Changes here ripple widely."
                    ),
                    action=(
                        "Reduce outgoing dependencies or extract a stable interface that "
                        "dependents can rely on."
                    ),
                )
            )
    return recs


def _add_service_layer(violations: list[Violation]) -> list[Recommendation]:
    return [
        Recommendation(
            category="add_layer",
            priority="medium",
            subject=[v.subject],
            title=f"Add service layer between {v.subject}",
            rationale=(
                f"Direct endpoint-to-database access detected: {v.detail}. "
                "This bypasses business logic and makes changes harder."
            ),
            action=(
                "Introduce a service or repository layer to mediate between the endpoint "
                "and the database."
            ),
        )
        for v in violations
        if v.rule == "no_endpoint_to_database"
    ]


def _split_database(graph: ArchGraph) -> list[Recommendation]:
    databases = graph.nodes_by_type(NodeType.DATABASE)
    if len(databases) != 1:
        return []
    service_count = len(graph.nodes_by_type(NodeType.SERVICE)) + len(
        graph.nodes_by_type(NodeType.MODULE)
    )
    if service_count <= 2:
        return []
    db = databases[0]
    return [
        Recommendation(
            category="split_database",
            priority="medium",
            subject=[db.id],
            title=f"Consider splitting shared database {db.name}",
            rationale=(
                f"Single database {_quote(db.name)} is shared by {service_count} services. "
                "Schema changes affect all consumers and create deployment coupling."
            ),
            action=(
                "Evaluate database-per-service or schema separation to reduce "
                "cross-service coupling."
            ),
        )
    ]


def _add_caching(graph: ArchGraph) -> list[Recommendation]:
    endpoints = len(graph.nodes_by_type(NodeType.ENDPOINT))
    if endpoints <= 5 or graph.nodes_by_type(NodeType.CACHE):
        return []
    return [
        Recommendation(
            category="add_caching",
            priority="low",
            subject=["infrastructure"],
            title=f"Add caching layer ({endpoints} endpoints, no cache detected)",
            rationale=(
                f"Found {endpoints} HTTP endpoints but no caching infrastructure. "
                "Read-heavy endpoints may benefit from caching."
            ),
            action=(
                "Identify read-heavy endpoints and add a cache (Redis, in-memory) to "
                "reduce database load."
            ),
        )
    ]


def _split_module(graph: ArchGraph, metrics: Metrics | None) -> list[Recommendation]:
    if metrics is None:
        return []
    recs = []
    for node in graph.nodes():
        if is_infra_node(node.type):
            continue
        coupling = metrics.coupling.get(node.id, 0.0)
        if coupling > 8:
            recs.append(
                Recommendation(
                    category="split_module",
                    priority="medium",
                    subject=[node.id],
                    title=f"Split {node.name} (fan-out {coupling:.0f})",
                    rationale=(
                        f"Component {_quote(node.name)} depends on {coupling:.0f} other "
                        "components, suggesting it handles too many responsibilities."
                    ),
                    action=(
                        "Decompose into smaller modules, each with a focused responsibility "
                        "and fewer dependencies."
                    ),
                )
            )
    return recs


def _remove_orphans(violations: list[Violation]) -> list[Recommendation]:
    return [
        Recommendation(
            category="remove_orphan",
            priority="low",
            subject=[v.subject],
            title=f"Remove or connect orphan {v.subject}",
            rationale=v.detail,
            action=(
                "If this component is unused, remove it. If it should be connected, "
                "add the missing dependency."
            ),
        )
        for v in violations
        if v.rule == "no_orphan_nodes"
    ]


def _boost_priorities(recs: list[Recommendation], graph: ArchGraph) -> None:
    fan_in = _fan_in(graph)
    subject_count: dict[str, int] = {}
    for rec in recs:
        for subject in rec.subject:
            subject_count[subject] = subject_count.get(subject, 0) + 1

    for rec in recs:
        if rec.priority != "medium":
            continue
        if any(fan_in.get(s, 0) > 3 or subject_count.get(s, 0) > 1 for s in rec.subject):
            rec.priority = "high"