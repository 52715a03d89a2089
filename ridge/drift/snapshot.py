"""Serializable baselines of an architecture graph."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ridge.model.graph import ArchGraph, Edge, Node, TopologyType

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
_FRACTION = re.compile(r"\.(\d+)")


def _parse_time(text: str) -> datetime:
    """Parse an RFC 3339 timestamp, tolerating 'Z' and sub-microsecond digits."""
    if not text:
        return _ZERO_TIME
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        return datetime.fromisoformat(text)
    except ValueError as err:
        raise ValueError(f"parsing snapshot: bad created_at {text!r}") from err


def _topology(value: str) -> TopologyType | str:
    try:
        return TopologyType(value)
    except ValueError:
        return value


@dataclass
class Snapshot:
    """A saved copy of a graph's nodes, edges and topology."""

    version: str = "1"
    label: str = ""
    created_at: datetime = _ZERO_TIME
    root_path: str = ""
    topology: str = ""
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"version": self.version}
        if self.label:
            data["label"] = self.label
        data["created_at"] = self.created_at.isoformat()
        data["root_path"] = self.root_path
        data["topology"] = self.topology
        data["nodes"] = [n.to_dict() for n in self.nodes]
        data["edges"] = [e.to_dict() for e in self.edges]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        return cls(
            version=data.get("version", ""),
            label=data.get("label", ""),
            created_at=_parse_time(data.get("created_at", "")),
            root_path=data.get("root_path", ""),
            topology=data.get("topology", ""),
            nodes=[Node.from_dict(n) for n in data.get("nodes") or []],
            edges=[Edge.from_dict(e) for e in data.get("edges") or []],
        )

    def to_graph(self) -> ArchGraph:
        """Rebuild an ArchGraph from this snapshot."""
        graph = ArchGraph(self.root_path)
        graph.topology = _topology(self.topology)
        for node in self.nodes:
            graph.add_node(node)
        for edge in self.edges:
            graph.add_edge(edge)
        return graph


def save(graph: ArchGraph, output_file: str, label: str = "") -> Snapshot:
    """Write a snapshot of the graph to a JSON file and return it."""
    snap = Snapshot(
        version="1",
        label=label,
        created_at=datetime.now(timezone.utc).astimezone(),
        root_path=graph.root_path,
        topology=str(graph.topology),
        nodes=graph.nodes(),
        edges=graph.edges(),
    )
    Path(output_file).write_text(
        json.dumps(snap.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
    )
    return snap


def load(file: str) -> Snapshot:
    """Read a snapshot from a JSON file.

    A missing file raises FileNotFoundError; malformed content raises ValueError.
    """
    text = Path(file).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as err:
        raise ValueError(f"parsing snapshot: {err}") from err
    if not isinstance(data, dict):
        raise ValueError("parsing snapshot: expected a JSON object")
    return Snapshot.from_dict(data)