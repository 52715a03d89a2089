# ridge

A library for reasoning about the architecture of a code base as a graph of
components and the relationships between them: validating it, measuring it,
explaining it, recommending changes, and detecting drift between two versions.

## The model

`ridge.model.graph.ArchGraph` holds `Node` and `Edge` objects.

- `NodeType`: `service`, `module`, `database`, `queue`, `cache`,
  `external_api`, `package`, `endpoint`, `note`.
- `EdgeType`: `dependency`, `api_call`, `data_flow`, `publish`, `subscribe`,
  `read_write`.
- `TopologyType`: `monolith`, `monorepo`, `microservice`, `unknown`.

`ArchGraph` offers `add_node` (returns `False` for a duplicate ID),
`add_edge` (returns `False` for a duplicate source/target/type), `get_node`,
`nodes()` and `nodes_by_type()` (sorted by ID), `edges`, `edges_from`,
`edges_to`, `node_count`, `edge_count`, `merge` (existing node IDs win),
`has_cycle` (over dependency edges), `relative_paths`, `summary`, and
`resolved_edges()`. The last one rewrites `import:<path>` targets to the node
whose path (relative to the graph root) is a suffix of the import path, and
`wikilink:<name>` targets to a note-like node by file stem; unresolvable
edges, self-loops and duplicates are dropped, and resolved imports lose 0.1
confidence with a floor of 0.5.

`Node` and `Edge` have `to_dict()` / `from_dict()`. `ProcessTrace` describes a
chain from an entry point to a terminal node.

`ridge.model.diff` defines `DiffSeverity` (`none` < `low` < `medium` <
`high` < `critical`, with `rank()`), `DiffChangeType`, `DiffEntry` and
`DiffReport` (`has_changes`, `changes_by_type`, `changes_by_severity`).

## Detection — `ridge.detector`

- `boundary.detect_boundaries(root_path)` walks a directory (skipping `.git`,
  `node_modules`, `vendor`, `__pycache__`) and returns a `BoundaryResult`
  with a `TopologyType` and a list of `Boundary` entries, based on files such
  as `go.mod`, `go.work`, `package.json`, `nx.json`, `turbo.json`,
  `rush.json`, `pnpm-workspace.yaml`, `Dockerfile`, compose files,
  `pyproject.toml`/`setup.py`/`setup.cfg`, `Cargo.toml`, `pom.xml`,
  Gradle build files, YAML under `k8s`/`kubernetes`/`deploy` directories, and
  subdirectories of `cmd/`.
- `validate.validate_graph(graph, custom_rules)` returns `Violation` objects
  for circular dependencies (`no_circular_dependencies`), unconnected
  non-endpoint, non-infrastructure nodes (`no_orphan_nodes`) and direct
  endpoint-to-database edges (`no_endpoint_to_database`), plus any custom
  rules. `validate.tarjan_scc(graph)` gives the strongly connected components.
- `validate.load_rules(path)` reads custom rules from YAML and raises
  `RulesError` for unreadable, malformed or invalid files;
  `validate.check_custom_rules(graph, rules, root_path)` evaluates them.
- `metrics.compute_metrics(graph)` returns `Metrics`: component and edge
  counts, fan-out coupling and instability per non-infrastructure node, their
  averages, and the longest dependency chain (`max_depth`).
- `explain.explain_architecture(graph, boundaries)` returns an `Explanation`
  with a summary, topology reasoning, patterns, key decisions and risks.
- `recommend.recommend_architecture(graph, violations, metrics, explanation)`
  returns `Recommendation` objects (break cycles, reduce coupling, stabilise
  core, add a service layer, split a shared database, add caching, split a
  module, remove orphans), sorted high, medium, low.
- `blast_radius.resolve_target_to_id(graph, target)` maps an ID or path suffix
  to a node ID (or `None`); `blast_radius.compute_blast_radius(graph,
  target_id, max_depth)` lists every transitive dependent breadth first, with
  the path back to the target. A `max_depth` of 0 or less means 50.
- `trace.compute_traces(graph)` follows resolved edges from every endpoint to
  databases, queues, caches, external APIs or leaf nodes.
- `notes.link_notes_to_packages(graph)` reads each note node's file and adds a
  `documents` dependency edge (confidence 0.6) to every package whose path
  ends with a path found in an inline code span; it returns the number of
  edges added. `notes.normalize_candidate` and `notes.path_suffixes` are the
  helpers it uses.

### Custom rules

```yaml
rules:
  - name: no-endpoint-db
    description: Endpoints must go through a service
    type: no_dependency          # or require_dependency
    severity: high               # critical, high, medium, low; default medium
    from: {type: endpoint}
    to: {type: database}
  - name: handlers-use-services
    type: require_dependency
    from: {path: "internal/handlers/*"}
    to: {type: service}
```

`path` is a glob matched against the node path relative to the graph root,
or against its directory; `*` and `?` never cross `/`.

## Drift — `ridge.drift`

- `snapshot.save(graph, output_file, label)` writes the graph as JSON and
  returns a `Snapshot`; `snapshot.load(file)` reads one back and
  `Snapshot.to_graph()` rebuilds an `ArchGraph`.
- `compare.compare(baseline, current)` returns a `DiffReport` of added,
  removed and modified nodes and edges, plus a critical entry if the current
  graph has a cycle.
- `narrative.narrate(report)` turns a `DiffReport` into a short paragraph.
- `gitref.validate_ref(ref)` raises `InvalidRefError` for unsafe refs.
  `gitref.checkout_ref(repo_path, ref)` is a context manager that checks the
  ref out into a temporary detached git worktree, yields its path and removes
  it afterwards; git failures raise `GitError`.
- `history.get_significant_commits(repo_path, limit)` returns the most recent
  non-merge commits as `GitLogEntry` objects (limit defaults to 10, capped at
  20). Both git helpers need `git` on the `PATH`.

## Infrastructure — `ridge.infra`

- `cache.Cache(ttl, max_size)`: a thread-safe TTL cache (`get`, `put`,
  `invalidate`, `clear`, `len()`); `cache.cache_key(abs_path, opts_string)`
  builds a 32-hex-digit key.
- `persist.state_dir(server_name)` returns (and creates)
  `~/.mcp-context/<server_name>`; `persist.load_json` and `persist.save_json`
  read and write indented JSON.

## Example

```python
from ridge.model.graph import ArchGraph, Node, Edge, NodeType, EdgeType
from ridge.detector.validate import validate_graph
from ridge.detector.metrics import compute_metrics
from ridge.drift.compare import compare
from ridge.drift.narrative import narrate

graph = ArchGraph("/srv/app")
graph.add_node(Node(id="svc:api", name="API", type=NodeType.SERVICE))
graph.add_node(Node(id="infra:db", name="PostgreSQL", type=NodeType.DATABASE))
graph.add_edge(Edge(source="svc:api", target="infra:db", type=EdgeType.READ_WRITE))

print(graph.summary())
print(validate_graph(graph, None))
print(compute_metrics(graph).max_depth)

print(narrate(compare(ArchGraph("/srv/app"), graph)))
```

## What it does not do

- It does not read source code to build a graph. There are no language
  analyzers or scanner: the caller adds nodes and edges itself (for example
  from its own tooling or a saved snapshot).
- It has no command-line tool and no server; it is a library only.
- `history.HistoryEntry` is a data type only; nothing in the package computes
  architecture history across commits.

## Tests

```
pip install -e .[test]
pytest
```