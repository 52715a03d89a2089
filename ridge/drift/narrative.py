"""Plain-language summaries of diff reports."""

from __future__ import annotations

from ridge.model.diff import DiffChangeType, DiffEntry, DiffReport, DiffSeverity

_TYPE_NOUNS = {
    "pkg": ("package", "packages"),
    "svc": ("service", "services"),
    "service": ("service", "services"),
    "module": ("module", "modules"),
    "db": ("database", "databases"),
    "database": ("database", "databases"),
    "queue": ("queue", "queues"),
    "cache": ("cache", "caches"),
    "infra": ("infrastructure component", "infrastructure components"),
    "api": ("external API", "external APIs"),
    "external_api": ("external API", "external APIs"),
    "endpoint": ("endpoint", "endpoints"),
    "note": ("note", "notes"),
}


def narrate(report: DiffReport | None) -> str:
    """Describe a diff in one sentence when empty, otherwise two to five."""
    base_ref = (report.base_ref if report is not None else "") or "baseline"
    head_ref = (report.compare_ref if report is not None else "") or "current"

    if report is None or not report.has_changes():
        return f"No structural change between {base_ref} and {head_ref}."

    added = report.changes_by_type(DiffChangeType.ADDED)
    removed = report.changes_by_type(DiffChangeType.REMOVED)
    modified = report.changes_by_type(DiffChangeType.MODIFIED)

    added_nodes = _filter(added, "node")
    removed_nodes = _filter(removed, "node")
    added_edges = _filter(added, "edge")
    removed_edges = _filter(removed, "edge")
    validations = _filter(report.changes, "validation")

    headline = _dominant_move(added_nodes, removed_nodes, added_edges, removed_edges, modified)
    sentences = [f"Between {base_ref} and {head_ref}, {headline}."]

    if added_nodes:
        sentences.append(_capitalize(_format_node_group("added", added_nodes)) + ".")
    if removed_nodes:
        sentences.append(_capitalize(_format_node_group("removed", removed_nodes)) + ".")
    if added_edges or removed_edges:
        sentences.append(
            _capitalize(_format_edge_change(len(added_edges), len(removed_edges))) + "."
        )

    if validations:
        sentences.append("Validation: " + "; ".join(v.detail for v in validations) + ".")
    elif report.max_severity == DiffSeverity.HIGH:
        sentences.append("Overall severity: high.")

    return " ".join(sentences)


def _filter(entries: list[DiffEntry], category: str) -> list[DiffEntry]:
    return [e for e in entries if e.category == category]


def _pluralize(word: str, n: int) -> str:
    return word if n == 1 else word + "s"


def _dominant_move(added_nodes, removed_nodes, added_edges, removed_edges, modified) -> str:
    total_nodes = len(added_nodes) + len(removed_nodes)
    total_edges = len(added_edges) + len(removed_edges)

    if total_nodes > 0:
        parts = []
        if added_nodes:
            n = len(added_nodes)
            parts.append(f"{n} {_pluralize('component', n)} added")
        if removed_nodes:
            parts.append(f"{len(removed_nodes)} removed")
        if modified:
            parts.append(f"{len(modified)} modified")
        if total_edges > 0:
            parts.append(f"{total_edges} dependency {_pluralize('edge', total_edges)} changed")
        return ", ".join(parts)
    if total_edges > 0:
        return f"{total_edges} dependency {_pluralize('edge', total_edges)} changed"
    if modified:
        n = len(modified)
        return f"{n} {_pluralize('component', n)} modified in place"
    return "structural changes detected"


def _node_type_and_name(subject: str) -> tuple[str, str]:
    i = subject.find(":")
    if i > 0:
        return subject[:i], subject[i + 1:]
    return "node", subject


def _type_noun(prefix: str, n: int) -> str:
    singular, plural = _TYPE_NOUNS.get(prefix, ("node", "nodes"))
    return singular if n == 1 else plural


def _join_trimmed(items: list[str], limit: int) -> str:
    if len(items) <= limit:
        return ", ".join(items)
    return ", ".join(items[:limit]) + f", and {len(items) - limit} more"


def _join_phrases(phrases: list[str]) -> str:
    if not phrases:
        return ""
    if len(phrases) == 1:
        return phrases[0]
    if len(phrases) == 2:
        return f"{phrases[0]} and {phrases[1]}"
    return ", ".join(phrases[:-1]) + ", and " + phrases[-1]


def _format_node_group(verb: str, entries: list[DiffEntry]) -> str:
    if not entries:
        return ""
    by_type: dict[str, list[str]] = {}
    for entry in entries:
        typ, name = _node_type_and_name(entry.subject)
        by_type.setdefault(typ, []).append(name)

    phrases = []
    for typ in sorted(by_type):
        names = sorted(by_type[typ])
        phrases.append(f"{len(names)} {_type_noun(typ, len(names))} ({_join_trimmed(names, 3)})")
    return f"{verb} {_join_phrases(phrases)}"


def _format_edge_change(added: int, removed: int) -> str:
    if added > 0 and removed > 0:
        return f"dependency edges shifted: {added} added and {removed} removed"
    if added > 0:
        return f"added {added} new dependency {_pluralize('edge', added)}"
    if removed > 0:
        return f"removed {removed} dependency {_pluralize('edge', removed)}"
    return ""


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]