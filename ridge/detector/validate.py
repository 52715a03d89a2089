"""Architecture validation: built-in checks and custom rules from YAML."""

from __future__ import annotations

import json
import posixpath
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import yaml

from ridge.model.diff import DiffSeverity
from ridge.model.graph import ArchGraph, EdgeType, Node, NodeType

_INFRA_TYPES = frozenset(
    {NodeType.DATABASE, NodeType.QUEUE, NodeType.CACHE, NodeType.EXTERNAL_API}
)

_RULE_TYPES = ("no_dependency", "require_dependency")


class RulesError(Exception):
    """Raised when a rules file cannot be read, parsed or validated."""


@dataclass
class Violation:
    """A single architecture violation."""

    rule: str
    severity: DiffSeverity | str
    subject: str
    detail: str


@dataclass
class Matcher:
    """Selects nodes by type and/or a glob on the node path relative to the root."""

    type: str = ""
    path: str = ""


@dataclass
class Rule:
    """A single architecture constraint."""

    name: str = ""
    description: str = ""
    type: str = ""
    severity: str = ""
    from_: Matcher = field(default_factory=Matcher)
    to: Matcher = field(default_factory=Matcher)


@dataclass
class RulesConfig:
    """Custom validation rules, usually loaded from .arch-rules.yaml."""

    rules: list[Rule] = field(default_factory=list)


def _text(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise RulesError("parsing rules file: expected a scalar value")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _matcher_from(value: Any) -> Matcher:
    if value is None:
        return Matcher()
    if not isinstance(value, dict):
        raise RulesError("parsing rules file: matcher must be a mapping")
    return Matcher(type=_scalar(value.get("type")), path=_scalar(value.get("path")))


def _rule_from(value: Any) -> Rule:
    if not isinstance(value, dict):
        raise RulesError("parsing rules file: each rule must be a mapping")
    return Rule(
        name=_scalar(value.get("name")),
        description=_scalar(value.get("description")),
        type=_scalar(value.get("type")),
        severity=_scalar(value.get("severity")),
        from_=_matcher_from(value.get("from")),
        to=_matcher_from(value.get("to")),
    )


def load_rules(path: str) -> RulesConfig:
    """Read, parse and validate a rules file."""
    try:
        with open(path, encoding="utf-8") as handle:
            text = handle.read()
    except OSError as err:
        raise RulesError(f"reading rules file: {err}") from err

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise RulesError(f"parsing rules file: {err}") from err

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise RulesError("parsing rules file: top level must be a mapping")
    raw_rules = data.get("rules") or []
    if not isinstance(raw_rules, list):
        raise RulesError("parsing rules file: rules must be a list")

    config = RulesConfig(rules=[_rule_from(item) for item in raw_rules])
    for index, rule in enumerate(config.rules):
        if not rule.name:
            raise RulesError(f"rule {index}: name is required")
        if rule.type not in _RULE_TYPES:
            raise RulesError(
                f"rule {_quote(rule.name)}: type must be no_dependency or require_dependency"
            )
    return config


def check_custom_rules(graph: ArchGraph, rules: RulesConfig, root_path: str = "") -> list[Violation]:
    """Evaluate custom rules against the graph."""
    violations: list[Violation] = []
    for rule in rules.rules:
        if rule.type == "no_dependency":
            violations.extend(_check_no_dependency(graph, rule, root_path))
        elif rule.type == "require_dependency":
            violations.extend(_check_require_dependency(graph, rule, root_path))
    return violations


def _check_no_dependency(graph: ArchGraph, rule: Rule, root_path: str) -> list[Violation]:
    violations = []
    for edge in graph.edges():
        source = graph.get_node(edge.source)
        target = graph.get_node(edge.target)
        if source is None or target is None:
            continue
        if _match_node(source, rule.from_, root_path) and _match_node(target, rule.to, root_path):
            violations.append(
                Violation(
                    rule=rule.name,
                    severity=_parse_severity(rule.severity),
                    subject=f"{source.name} -> {target.name}",
                    detail=_rule_detail(rule, source, target),
                )
            )
    return violations


def _check_require_dependency(graph: ArchGraph, rule: Rule, root_path: str) -> list[Violation]:
    sources = [n for n in graph.nodes() if _match_node(n, rule.from_, root_path)]
    violations = []
    for source in sources:
        found = any(
            (target := graph.get_node(edge.target)) is not None
            and _match_node(target, rule.to, root_path)
            for edge in graph.edges_from(source.id)
        )
        if not found:
            violations.append(
                Violation(
                    rule=rule.name,
                    severity=_parse_severity(rule.severity),
                    subject=source.name,
                    detail=(
                        f"{rule.name}: {_text(source.type)} {_quote(source.name)} "
                        "has no dependency matching target criteria"
                    ),
                )
            )
    return violations


def _glob_to_regex(pattern: str) -> str:
    """Translate a path glob where wildcards never cross '/' into a regex."""
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "\\":
            i += 1
            if i >= n:
                raise ValueError("bad pattern")
            out.append(re.escape(pattern[i]))
        elif c == "[":
            end = pattern.find("]", i + 2 if pattern[i + 1 : i + 2] in ("^", "]") else i + 1)
            if end < 0:
                raise ValueError("bad pattern")
            body = pattern[i + 1 : end]
            negate = body.startswith("^")
            if negate:
                body = body[1:]
            if not body:
                raise ValueError("bad pattern")
            chars = []
            for ch in body:
                chars.append("-" if ch == "-" else re.escape(ch))
            out.append("[" + ("^" if negate else "") + "".join(chars) + "]")
            i = end
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


def _glob_match(pattern: str, name: str) -> bool:
    try:
        return re.fullmatch(_glob_to_regex(pattern), name) is not None
    except (ValueError, re.error):
        return False


def _dir(path: str) -> str:
    if "/" not in path:
        return "."
    head = path.rsplit("/", 1)[0]
    return posixpath.normpath(head) if head else "/"


def _match_node(node: Node, matcher: Matcher, root_path: str) -> bool:
    if matcher.type and _text(node.type) != matcher.type:
        return False
    if matcher.path:
        rel_path = node.path
        if root_path and rel_path.startswith(root_path):
            rel_path = rel_path[len(root_path):].removeprefix("/")
        if not _glob_match(matcher.path, rel_path) and not _glob_match(matcher.path, _dir(rel_path)):
            return False
    return bool(matcher.type or matcher.path)


def _parse_severity(text: str) -> DiffSeverity:
    try:
        severity = DiffSeverity(text.lower())
    except ValueError:
        return DiffSeverity.MEDIUM
    return DiffSeverity.MEDIUM if severity is DiffSeverity.NONE else severity


def _rule_detail(rule: Rule, source: Node, target: Node) -> str:
    head = rule.description or rule.name
    return (
        f"{head}: {source.name} ({_text(source.type)}) -> "
        f"{target.name} ({_text(target.type)})"
    )


def validate_graph(graph: ArchGraph, custom_rules: RulesConfig | None = None) -> list[Violation]:
    """Check the graph against the built-in rules and any custom rules."""
    violations = _check_cycles(graph)
    violations.extend(_check_orphans(graph))
    violations.extend(_check_layering(graph))
    if custom_rules is not None:
        violations.extend(check_custom_rules(graph, custom_rules, graph.root_path))
    return violations


def _check_cycles(graph: ArchGraph) -> list[Violation]:
    if not graph.has_cycle():
        return []
    violations = [
        Violation(
            rule="no_circular_dependencies",
            severity=DiffSeverity.CRITICAL,
            subject=f"cycle({len(scc)} nodes)",
            detail=f"Circular dependency among: [{' '.join(scc)}]",
        )
        for scc in tarjan_scc(graph)
        if len(scc) > 1
    ]
    if not violations:
        violations.append(
            Violation(
                rule="no_circular_dependencies",
                severity=DiffSeverity.CRITICAL,
                subject="cycle",
                detail="Circular dependency detected",
            )
        )
    return violations


def tarjan_scc(graph: ArchGraph) -> list[list[str]]:
    """Strongly connected components of the dependency edges (Tarjan)."""
    adjacency: dict[str, list[str]] = {}
    for edge in graph.edges():
        if edge.type == EdgeType.DEPENDENCY:
            adjacency.setdefault(edge.source, []).append(edge.target)

    counter = 0
    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    sccs: list[list[str]] = []

    def visit(v: str) -> None:
        nonlocal counter
        index[v] = lowlink[v] = counter
        counter += 1
        stack.append(v)
        on_stack.add(v)

    for node in graph.nodes():
        if node.id in index:
            continue
        visit(node.id)
        work = [(node.id, iter(adjacency.get(node.id, ())))]
        while work:
            v, neighbours = work[-1]
            descended = False
            for w in neighbours:
                if w not in index:
                    visit(w)
                    work.append((w, iter(adjacency.get(w, ()))))
                    descended = True
                    break
                if w in on_stack:
                    lowlink[v] = min(lowlink[v], index[w])
            if descended:
                continue
            work.pop()
            if lowlink[v] == index[v]:
                component = []
                while True:
                    w = stack.pop()
                    on_stack.discard(w)
                    component.append(w)
                    if w == v:
                        break
                sccs.append(component)
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[v])
    return sccs


def _check_orphans(graph: ArchGraph) -> list[Violation]:
    connected: set[str] = set()
    for edge in graph.edges():
        connected.add(edge.source)
        connected.add(edge.target)

    violations = []
    for node in graph.nodes():
        if node.type == NodeType.ENDPOINT or node.type in _INFRA_TYPES:
            continue
        if node.id not in connected:
            violations.append(
                Violation(
                    rule="no_orphan_nodes",
                    severity=DiffSeverity.LOW,
                    subject=node.id,
                    detail=f"Node {_quote(node.name)} ({_text(node.type)}) has no connections",
                )
            )
    return violations


def _check_layering(graph: ArchGraph) -> list[Violation]:
    violations = []
    for edge in graph.edges():
        source = graph.get_node(edge.source)
        target = graph.get_node(edge.target)
        if source is None or target is None:
            continue
        if source.type == NodeType.ENDPOINT and target.type == NodeType.DATABASE:
            violations.append(
                Violation(
                    rule="no_endpoint_to_database",
                    severity=DiffSeverity.MEDIUM,
                    subject=f"{source.name} -> {target.name}",
                    detail=(
                        f"Endpoint {_quote(source.name)} directly accesses database "
                        f"{_quote(target.name)}; consider a service layer"
                    ),
                )
            )
    return violations