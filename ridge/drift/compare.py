"""Detection of architectural differences between two graphs."""

from __future__ import annotations

from enum import Enum
from typing import Any

from ridge.model.diff import DiffChangeType, DiffEntry, DiffReport, DiffSeverity
from ridge.model.graph import ArchGraph, Edge, Node, NodeType

_HIGH_TYPES = frozenset({NodeType.SERVICE, NodeType.DATABASE, NodeType.QUEUE, NodeType.CACHE})
_MEDIUM_TYPES = frozenset({NodeType.EXTERNAL_API, NodeType.MODULE, NodeType.PACKAGE})


def _text(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _node_severity(node: Node) -> DiffSeverity:
    if node.type in _HIGH_TYPES:
        return DiffSeverity.HIGH
    if node.type in _MEDIUM_TYPES:
        return DiffSeverity.MEDIUM
    return DiffSeverity.LOW


def _max_severity(a: DiffSeverity | str, b: DiffSeverity | str) -> DiffSeverity | str:
    return b if DiffSeverity(b).rank() > DiffSeverity(a).rank() else a


def _edge_key(edge: Edge) -> str:
    return f"{edge.source}-[{_text(edge.type)}]->{edge.target}"


def compare(baseline: ArchGraph, current: ArchGraph) -> DiffReport:
    """Report the node, edge and validation changes from baseline to current."""
    report = DiffReport(max_severity=DiffSeverity.NONE, changes=[])

    def add(change_type: DiffChangeType, severity: DiffSeverity, category: str,
            subject: str, detail: str) -> None:
        report.changes.append(
            DiffEntry(
                change_type=change_type,
                severity=severity,
                category=category,
                subject=subject,
                detail=detail,
            )
        )
        report.max_severity = _max_severity(report.max_severity, severity)

    base_nodes = {n.id: n for n in baseline.nodes()}
    curr_nodes = {n.id: n for n in current.nodes()}

    for node_id, node in sorted(curr_nodes.items()):
        if node_id not in base_nodes:
            add(DiffChangeType.ADDED, _node_severity(node), "node", node_id,
                f"Added {_text(node.type)}: {node.name} ({node_id})")

    for node_id, node in sorted(base_nodes.items()):
        if node_id not in curr_nodes:
            add(DiffChangeType.REMOVED, _node_severity(node), "node", node_id,
                f"Removed {_text(node.type)}: {node.name} ({node_id})")

    for node_id, node in sorted(curr_nodes.items()):
        base = base_nodes.get(node_id)
        if base is None:
            continue
        if node.name != base.name or node.type != base.type:
            add(DiffChangeType.MODIFIED, DiffSeverity.LOW, "node", node_id,
                f"Modified {_text(node.type)}: {node.name}")

    base_edges = {_edge_key(e) for e in baseline.edges()}
    curr_edges = {_edge_key(e) for e in current.edges()}

    for key in sorted(curr_edges - base_edges):
        add(DiffChangeType.ADDED, DiffSeverity.MEDIUM, "edge", key, f"Added edge: {key}")
    for key in sorted(base_edges - curr_edges):
        add(DiffChangeType.REMOVED, DiffSeverity.MEDIUM, "edge", key, f"Removed edge: {key}")

    if current.has_cycle():
        add(DiffChangeType.ADDED, DiffSeverity.CRITICAL, "validation", "circular_dependency",
            "Circular dependency detected in current architecture")
        report.max_severity = DiffSeverity.CRITICAL

    if not report.changes:
        report.summary = "No architectural changes detected."
    else:
        added = len(report.changes_by_type(DiffChangeType.ADDED))
        removed = len(report.changes_by_type(DiffChangeType.REMOVED))
        modified = len(report.changes_by_type(DiffChangeType.MODIFIED))
        report.summary = (
            f"{len(report.changes)} changes detected: {added} added, {removed} removed, "
            f"{modified} modified. Max severity: {_text(report.max_severity)}."
        )
    return report