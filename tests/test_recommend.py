from ridge.detector.explain import explain_architecture
from ridge.detector.metrics import compute_metrics
from ridge.detector.recommend import Recommendation, recommend_architecture
from ridge.detector.validate import validate_graph
from ridge.model.graph import ArchGraph, Edge, EdgeType, Node, NodeType


def build_graph(nodes, edges):
    graph = ArchGraph("/test")
    for node in nodes:
        graph.add_node(node)
    for edge in edges:
        graph.add_edge(edge)
    return graph


def pkg(node_id):
    return Node(id=node_id, name=node_id, type=NodeType.PACKAGE)


def dep(source, target):
    return Edge(source=source, target=target, type=EdgeType.DEPENDENCY)


def recommend(graph):
    violations = validate_graph(graph, None)
    metrics = compute_metrics(graph)
    explanation = explain_architecture(graph, None)
    return recommend_architecture(graph, violations, metrics, explanation)


def letter(base, i):
    return chr(ord(base) + i)


def test_no_cycles_clean():
    graph = build_graph([pkg("a"), pkg("b"), pkg("c")], [dep("a", "b"), dep("b", "c")])
    assert recommend(graph) == []


def test_cycle_detected():
    graph = build_graph(
        [pkg("a"), pkg("b"), pkg("c")],
        [dep("a", "b"), dep("b", "c"), dep("c", "a")],
    )
    recs = [r for r in recommend(graph) if r.category == "break_cycle"]
    assert len(recs) == 1
    assert recs[0].priority == "high"
    assert sorted(recs[0].subject) == ["a", "b", "c"]
    assert recs[0].title == "Break circular dependency among 3 components"


def test_high_coupling():
    nodes = [pkg("hub")]
    edges = []
    targets = [letter("a", i) for i in range(10)]
    for target in targets:
        nodes.append(pkg(target))
        edges.append(dep("hub", target))
    for i, source in enumerate(targets):
        for j in range(1, 4):
            edges.append(dep(source, targets[(i + j) % len(targets)]))

    recs = recommend(build_graph(nodes, edges))
    assert any(r.category == "reduce_coupling" and "hub" in r.subject for r in recs)


def test_unstable_core():
    nodes = [pkg("core")]
    edges = []
    for i in range(4):
        node_id = letter("A", i)
        nodes.append(pkg(node_id))
        edges.append(dep(node_id, "core"))
    for i in range(10):
        node_id = letter("a", i)
        nodes.append(pkg(node_id))
        edges.append(dep("core", node_id))

    recs = recommend(build_graph(nodes, edges))
    stabilize = [r for r in recs if r.category == "stabilize_core"]
    assert [r.subject for r in stabilize] == [["core"]]
    assert stabilize[0].title == "Stabilize core (fan-in 4, instability 0.71)"


def test_endpoint_to_database():
    graph = build_graph(
        [
            Node(id="ep", name="GET /users", type=NodeType.ENDPOINT),
            Node(id="db", name="postgres", type=NodeType.DATABASE),
        ],
        [dep("ep", "db")],
    )
    recs = [r for r in recommend(graph) if r.category == "add_layer"]
    assert len(recs) == 1
    assert recs[0].subject == ["GET /users -> postgres"]


def test_shared_database():
    graph = build_graph(
        [
            Node(id="svc1", name="svc1", type=NodeType.SERVICE),
            Node(id="svc2", name="svc2", type=NodeType.SERVICE),
            Node(id="svc3", name="svc3", type=NodeType.SERVICE),
            Node(id="db", name="postgres", type=NodeType.DATABASE),
        ],
        [
            Edge(source=s, target="db", type=EdgeType.READ_WRITE)
            for s in ("svc1", "svc2", "svc3")
        ],
    )
    recs = [r for r in recommend(graph) if r.category == "split_database"]
    assert len(recs) == 1
    assert recs[0].title == "Consider splitting shared database postgres"
    assert recs[0].subject == ["db"]


def test_missing_cache():
    nodes = [Node(id="svc", name="svc", type=NodeType.SERVICE)]
    edges = []
    for i in range(6):
        node_id = letter("a", i)
        nodes.append(Node(id=node_id, name="GET /" + node_id, type=NodeType.ENDPOINT))
        edges.append(Edge(source=node_id, target="svc", type=EdgeType.API_CALL, label="serves"))

    recs = [r for r in recommend(build_graph(nodes, edges)) if r.category == "add_caching"]
    assert len(recs) == 1
    assert recs[0].priority == "low"
    assert recs[0].subject == ["infrastructure"]


def test_orphan():
    graph = build_graph([pkg("a"), pkg("b"), pkg("orphan")], [dep("a", "b")])
    recs = recommend(graph)
    assert any(r.category == "remove_orphan" and "orphan" in r.subject for r in recs)


def test_multiple_issues_sorted():
    graph = build_graph(
        [pkg("a"), pkg("b"), pkg("orphan")],
        [dep("a", "b"), dep("b", "a")],
    )
    recs = recommend(graph)
    assert len(recs) >= 2
    assert recs[0].priority == "high"
    assert recs[-1].priority == "low"


def test_priority_boosting():
    nodes = [pkg("x"), pkg("y")]
    edges = [dep("x", "y"), dep("y", "x")]
    for i in range(9):
        node_id = letter("a", i)
        nodes.append(pkg(node_id))
        edges.append(dep("x", node_id))
    for i in range(9):
        source = letter("a", i)
        for j in range(3):
            dep_id = source + letter("0", j)
            nodes.append(pkg(dep_id))
            edges.append(dep(source, dep_id))

    recs = recommend(build_graph(nodes, edges))
    split = [r for r in recs if r.category == "split_module" and "x" in r.subject]
    assert len(split) == 1
    assert split[0].priority == "high"


def test_sort_prefers_more_subjects_within_priority():
    graph = ArchGraph("/test")
    recs = recommend_architecture(graph, [], None, None)
    assert recs == []
    # A synthetic mix: cycle with three members outranks single-subject items.
    cyc = build_graph(
        [pkg("a"), pkg("b"), pkg("c"), pkg("lonely")],
        [dep("a", "b"), dep("b", "c"), dep("c", "a")],
    )
    ordered = recommend(cyc)
    assert [r.category for r in ordered] == ["break_cycle", "remove_orphan"]
    assert isinstance(ordered[0], Recommendation)