"""Core architecture graph: nodes, edges and the graph that holds them."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class _StrEnum(str, Enum):
    """String-valued enum whose text form is its value."""

    def __str__(self) -> str:
        return self.value


def _coerce(enum_cls: type[_StrEnum], value: Any) -> Any:
    """Convert a raw value to an enum member, keeping unknown strings as-is."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _text(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _base_name(path: str) -> str:
    """Last element of a slash-separated path, matching the usual path semantics."""
    if path == "":
        return "."
    stripped = path.rstrip("/")
    if stripped == "":
        return "/"
    return stripped.rsplit("/", 1)[-1]


class NodeType(_StrEnum):
    """Kinds of architecture components."""

    SERVICE = "service"
    MODULE = "module"
    DATABASE = "database"
    QUEUE = "queue"
    CACHE = "cache"
    EXTERNAL_API = "external_api"
    PACKAGE = "package"
    ENDPOINT = "endpoint"
    NOTE = "note"


class EdgeType(_StrEnum):
    """Kinds of relationships between components."""

    DEPENDENCY = "dependency"
    API_CALL = "api_call"
    DATA_FLOW = "data_flow"
    PUBLISH = "publish"
    SUBSCRIBE = "subscribe"
    READ_WRITE = "read_write"


class TopologyType(_StrEnum):
    """Overall project structure."""

    MONOLITH = "monolith"
    MONOREPO = "monorepo"
    MICROSERVICE = "microservice"
    UNKNOWN = "unknown"


@dataclass
class Node:
    """An architecture component."""

    id: str
    name: str = ""
    type: NodeType | str = ""
    language: str = ""
    path: str = ""
    source: str = ""
    properties: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name, "type": _text(self.type)}
        if self.language:
            data["language"] = self.language
        if self.path:
            data["path"] = self.path
        if self.source:
            data["source"] = self.source
        if self.properties:
            data["properties"] = dict(self.properties)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Node:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            type=_coerce(NodeType, data.get("type", "")),
            language=data.get("language", ""),
            path=data.get("path", ""),
            source=data.get("source", ""),
            properties=dict(data.get("properties") or {}),
        )


@dataclass
class Edge:
    """A relationship between two nodes."""

    source: str
    target: str
    type: EdgeType | str = ""
    label: str = ""
    confidence: float = 0.0
    properties: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "source": self.source,
            "target": self.target,
            "type": _text(self.type),
        }
        if self.label:
            data["label"] = self.label
        data["confidence"] = self.confidence
        if self.properties:
            data["properties"] = dict(self.properties)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Edge:
        return cls(
            source=data.get("source", ""),
            target=data.get("target", ""),
            type=_coerce(EdgeType, data.get("type", "")),
            label=data.get("label", ""),
            confidence=float(data.get("confidence", 0.0) or 0.0),
            properties=dict(data.get("properties") or {}),
        )


@dataclass
class ProcessTrace:
    """A data-flow chain from an entry point to a terminal node."""

    entry_point: str
    chain: list[str]
    edge_types: list[str]
    terminal: str
    confidence: float


class ArchGraph:
    """The central architecture model that all analyzers write into."""

    def __init__(self, root_path: str) -> None:
        self._lock = threading.RLock()
        self._nodes: dict[str, Node] = {}
        self._edges: list[Edge] = []
        self.root_path = root_path
        self.topology: TopologyType | str = TopologyType.UNKNOWN
        self.meta: dict[str, str] = {}

    def add_node(self, node: Node) -> bool:
        """Add a node; return False if a node with the same ID exists."""
        with self._lock:
            if node.id in self._nodes:
                return False
            self._nodes[node.id] = node
            return True

    def get_node(self, node_id: str) -> Node | None:
        with self._lock:
            return self._nodes.get(node_id)

    def nodes(self) -> list[Node]:
        """All nodes, sorted by ID."""
        with self._lock:
            return sorted(self._nodes.values(), key=lambda n: n.id)

    def nodes_by_type(self, node_type: NodeType | str) -> list[Node]:
        with self._lock:
            return sorted(
                (n for n in self._nodes.values() if n.type == node_type),
                key=lambda n: n.id,
            )

    def add_edge(self, edge: Edge) -> bool:
        """Add an edge; return False if one with the same source, target and type exists."""
        with self._lock:
            for existing in self._edges:
                if (
                    existing.source == edge.source
                    and existing.target == edge.target
                    and existing.type == edge.type
                ):
                    return False
            self._edges.append(edge)
            return True

    def edges(self) -> list[Edge]:
        with self._lock:
            return list(self._edges)

    def edges_from(self, node_id: str) -> list[Edge]:
        with self._lock:
            return [e for e in self._edges if e.source == node_id]

    def edges_to(self, node_id: str) -> list[Edge]:
        with self._lock:
            return [e for e in self._edges if e.target == node_id]

    def node_count(self) -> int:
        with self._lock:
            return len(self._nodes)

    def edge_count(self) -> int:
        with self._lock:
            return len(self._edges)

    def merge(self, other: ArchGraph) -> None:
        """Bring in another graph's nodes and edges; existing node IDs win."""
        with other._lock:
            other_nodes = list(other._nodes.values())
            other_edges = list(other._edges)
        for node in other_nodes:
            self.add_node(node)
        with self._lock:
            self._edges.extend(other_edges)

    def has_cycle(self) -> bool:
        """Whether the dependency edges contain a cycle."""
        with self._lock:
            adjacency: dict[str, list[str]] = {}
            for e in self._edges:
                if e.type == EdgeType.DEPENDENCY:
                    adjacency.setdefault(e.source, []).append(e.target)
            starts = list(self._nodes)

        visited: set[str] = set()
        in_stack: set[str] = set()
        for start in starts:
            if start in visited:
                continue
            visited.add(start)
            in_stack.add(start)
            stack = [(start, iter(adjacency.get(start, ())))]
            while stack:
                node, neighbours = stack[-1]
                for neighbour in neighbours:
                    if neighbour in in_stack:
                        return True
                    if neighbour not in visited:
                        visited.add(neighbour)
                        in_stack.add(neighbour)
                        stack.append((neighbour, iter(adjacency.get(neighbour, ()))))
                        break
                else:
                    in_stack.discard(node)
                    stack.pop()
        return False

    def relative_paths(self) -> None:
        """Rewrite absolute node paths relative to the graph root."""
        with self._lock:
            prefix = self.root_path + "/"
            for node in self._nodes.values():
                if node.path.startswith(prefix):
                    node.path = node.path[len(prefix):]

    def resolved_edges(self) -> list[Edge]:
        """Edges with "import:" and "wikilink:" targets resolved to node IDs.

        Unresolvable edges, self-loops and duplicates are dropped; resolved
        imports lose 0.1 confidence, with a floor of 0.5.
        """
        with self._lock:
            refs: list[tuple[str, str]] = []
            for node in sorted(self._nodes.values(), key=lambda n: n.id):
                if not node.path:
                    continue
                rel_path = node.path
                if self.root_path and rel_path.startswith(self.root_path + "/"):
                    rel_path = rel_path[len(self.root_path) + 1:]
                refs.append((rel_path, node.id))

            import_cache: dict[str, str] = {}
            wikilink_cache: dict[str, str] = {}
            seen: set[tuple[str, str, str]] = set()
            result: list[Edge] = []

            for edge in self._edges:
                target = edge.target

                if target.startswith("import:"):
                    import_path = target[len("import:"):]
                    if import_path not in import_cache:
                        import_cache[import_path] = next(
                            (
                                node_id
                                for rel_path, node_id in refs
                                if import_path.endswith("/" + rel_path) or import_path == rel_path
                            ),
                            "",
                        )
                    target = import_cache[import_path]
                    if not target:
                        continue

                if target.startswith("wikilink:"):
                    link_name = target[len("wikilink:"):]
                    if link_name not in wikilink_cache:
                        wikilink_cache[link_name] = self._resolve_wikilink(link_name, refs)
                    target = wikilink_cache[link_name]
                    if not target:
                        continue

                if target not in self._nodes or edge.source == target:
                    continue

                key = (edge.source, target, _text(edge.type))
                if key in seen:
                    continue
                seen.add(key)

                confidence = edge.confidence
                if edge.target.startswith("import:") and confidence > 0:
                    confidence = max(confidence - 0.1, 0.5)

                result.append(
                    Edge(
                        source=edge.source,
                        target=target,
                        type=edge.type,
                        label=edge.label,
                        confidence=confidence,
                    )
                )
            return result

    @staticmethod
    def _resolve_wikilink(link_name: str, refs: list[tuple[str, str]]) -> str:
        for rel_path, node_id in refs:
            stem = rel_path.removesuffix(".md").removesuffix(".markdown")
            base = stem.rsplit("/", 1)[-1]
            if base == link_name or stem == link_name or stem.endswith("/" + link_name):
                return node_id
        return ""

    def summary(self) -> str:
        """A short human-readable description of the graph."""
        with self._lock:
            node_counts: dict[str, int] = {}
            for node in self._nodes.values():
                node_counts[_text(node.type)] = node_counts.get(_text(node.type), 0) + 1
            edge_counts: dict[str, int] = {}
            for edge in self._edges:
                edge_counts[_text(edge.type)] = edge_counts.get(_text(edge.type), 0) + 1

            lines = [
                f"Architecture Graph: {len(self._nodes)} nodes, {len(self._edges)} edges",
                f"Topology: {_text(self.topology)}",
                f"Root: {_base_name(self.root_path)}",
            ]
            if node_counts:
                parts = sorted(f"{count} {kind}" for kind, count in node_counts.items())
                lines.append("Nodes: " + ", ".join(parts))
            if edge_counts:
                parts = sorted(f"{count} {kind}" for kind, count in edge_counts.items())
                lines.append("Edges: " + ", ".join(parts))
            return "\n".join(lines) + "\n"