"""Links from markdown notes to the packages they mention in inline code."""

from __future__ import annotations

import os
import posixpath
import re

from ridge.model.graph import ArchGraph, Edge, EdgeType, Node, NodeType

_INLINE_CODE_SPAN = re.compile(r"`([^`\n]+?)`")
_PATH_LIKE = re.compile(r"[a-zA-Z_][\w./-]*", re.ASCII)
_LINE_RANGE = re.compile(r":\d+(-\d+)?\Z", re.ASCII)
_SOURCE_EXTENSIONS = frozenset({".go", ".ts", ".tsx", ".py", ".js"})

_CONFIDENCE = 0.6


def link_notes_to_packages(graph: ArchGraph) -> int:
    """Add "documents" edges from notes to packages named in their code spans.

    Returns the number of edges added to the graph.
    """
    notes, packages_by_suffix = _collect_notes_and_packages(graph)
    if not notes or not packages_by_suffix:
        return 0

    added = 0
    for note in notes:
        try:
            with open(note.path, encoding="utf-8", errors="replace") as handle:
                text = handle.read()
        except OSError:
            continue
        seen: set[str] = set()
        for match in _INLINE_CODE_SPAN.finditer(text):
            candidate = normalize_candidate(match.group(1))
            if not candidate:
                continue
            for package in packages_by_suffix.get(candidate, []):
                if package.id in seen:
                    continue
                seen.add(package.id)
                if graph.add_edge(
                    Edge(
                        source=note.id,
                        target=package.id,
                        type=EdgeType.DEPENDENCY,
                        label="documents",
                        confidence=_CONFIDENCE,
                    )
                ):
                    added += 1
    return added


def _extension(name: str) -> str:
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def normalize_candidate(text: str) -> str:
    """Reduce a code-span text to a comparable package path, or "" if not path-shaped."""
    candidate = _LINE_RANGE.sub("", text.strip(), count=1).rstrip("/")
    if "/" not in candidate:
        return ""
    if not _PATH_LIKE.fullmatch(candidate):
        return ""
    last = candidate.rsplit("/", 1)[-1]
    if _extension(last) in _SOURCE_EXTENSIONS:
        candidate = posixpath.normpath(posixpath.dirname(candidate) or ".")
    if "/" not in candidate:
        return ""
    return candidate


def _collect_notes_and_packages(graph: ArchGraph) -> tuple[list[Node], dict[str, list[Node]]]:
    notes: list[Node] = []
    by_suffix: dict[str, list[Node]] = {}
    for node in graph.nodes():
        if node.type == NodeType.NOTE:
            if node.path:
                notes.append(node)
        elif node.type == NodeType.PACKAGE and node.path:
            for suffix in path_suffixes(node.path):
                by_suffix.setdefault(suffix, []).append(node)
    return notes, by_suffix


def path_suffixes(path: str) -> list[str]:
    """Trailing path forms of two or more segments, shortest first.

    The bare last segment is never included, since leaf names collide often.
    """
    parts = os.path.normpath(path).split(os.sep)
    while parts and parts[0] == "":
        parts.pop(0)
    if len(parts) < 2:
        return []
    return ["/".join(parts[i:]) for i in range(len(parts) - 2, -1, -1)]