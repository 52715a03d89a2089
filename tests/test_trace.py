from ridge.detector.trace import compute_traces
from ridge.model.graph import ArchGraph, Edge, EdgeType, Node, NodeType


def test_linear_chain():
    g = ArchGraph("/tmp")
    g.add_node(Node(id="endpoint:api:1", name="GET /users", type=NodeType.ENDPOINT))
    g.add_node(Node(id="pkg:handler", name="handler", type=NodeType.PACKAGE))
    g.add_node(Node(id="infra:database", name="Database", type=NodeType.DATABASE))
    g.add_edge(Edge(source="endpoint:api:1", target="pkg:handler", type=EdgeType.DEPENDENCY, confidence=0.9))
    g.add_edge(Edge(source="pkg:handler", target="infra:database", type=EdgeType.READ_WRITE, confidence=0.8))

    traces = compute_traces(g)
    assert len(traces) == 1
    tr = traces[0]
    assert tr.entry_point == "endpoint:api:1"
    assert tr.terminal == "infra:database"
    assert tr.chain == ["endpoint:api:1", "pkg:handler", "infra:database"]
    assert tr.edge_types == ["dependency", "read_write"]
    assert tr.confidence == 0.8


def test_branching_graph():
    g = ArchGraph("/tmp")
    g.add_node(Node(id="endpoint:api:1", name="POST /order", type=NodeType.ENDPOINT))
    g.add_node(Node(id="pkg:service", name="service", type=NodeType.PACKAGE))
    g.add_node(Node(id="infra:database", name="Database", type=NodeType.DATABASE))
    g.add_node(Node(id="infra:queue", name="Queue", type=NodeType.QUEUE))
    g.add_edge(Edge(source="endpoint:api:1", target="pkg:service", type=EdgeType.DEPENDENCY, confidence=0.9))
    g.add_edge(Edge(source="pkg:service", target="infra:database", type=EdgeType.READ_WRITE, confidence=0.8))
    g.add_edge(Edge(source="pkg:service", target="infra:queue", type=EdgeType.PUBLISH, confidence=0.8))

    traces = compute_traces(g)
    assert len(traces) == 2
    assert {t.terminal for t in traces} == {"infra:database", "infra:queue"}
    assert all(t.entry_point == "endpoint:api:1" for t in traces)


def test_cycle_terminates_without_traces():
    g = ArchGraph("/tmp")
    g.add_node(Node(id="endpoint:api:1", name="GET /loop", type=NodeType.ENDPOINT))
    g.add_node(Node(id="pkg:a", name="A", type=NodeType.PACKAGE))
    g.add_node(Node(id="pkg:b", name="B", type=NodeType.PACKAGE))
    g.add_edge(Edge(source="endpoint:api:1", target="pkg:a", type=EdgeType.DEPENDENCY, confidence=0.9))
    g.add_edge(Edge(source="pkg:a", target="pkg:b", type=EdgeType.DEPENDENCY, confidence=0.9))
    g.add_edge(Edge(source="pkg:b", target="pkg:a", type=EdgeType.DEPENDENCY, confidence=0.9))

    assert compute_traces(g) == []


def test_no_endpoints():
    g = ArchGraph("/tmp")
    g.add_node(Node(id="pkg:a", name="A", type=NodeType.PACKAGE))
    g.add_node(Node(id="pkg:b", name="B", type=NodeType.PACKAGE))
    g.add_edge(Edge(source="pkg:a", target="pkg:b", type=EdgeType.DEPENDENCY, confidence=0.9))
    assert compute_traces(g) == []


def test_min_confidence_across_chain():
    g = ArchGraph("/tmp")
    g.add_node(Node(id="endpoint:api:1", name="GET /data", type=NodeType.ENDPOINT))
    g.add_node(Node(id="pkg:mid", name="middleware", type=NodeType.PACKAGE))
    g.add_node(Node(id="infra:cache", name="Cache", type=NodeType.CACHE))
    g.add_edge(Edge(source="endpoint:api:1", target="pkg:mid", type=EdgeType.DEPENDENCY, confidence=0.9))
    g.add_edge(Edge(source="pkg:mid", target="infra:cache", type=EdgeType.READ_WRITE, confidence=0.7))

    traces = compute_traces(g)
    assert len(traces) == 1
    assert traces[0].confidence == 0.7


def test_leaf_node_ends_trace():
    g = ArchGraph("/tmp")
    g.add_node(Node(id="endpoint:x", name="GET /x", type=NodeType.ENDPOINT))
    g.add_node(Node(id="pkg:leaf", name="leaf", type=NodeType.PACKAGE))
    g.add_edge(Edge(source="endpoint:x", target="pkg:leaf", type=EdgeType.DEPENDENCY))

    traces = compute_traces(g)
    assert len(traces) == 1
    assert traces[0].chain == ["endpoint:x", "pkg:leaf"]
    assert traces[0].terminal == "pkg:leaf"
    assert traces[0].confidence == 1.0


def test_lone_endpoint_has_no_trace():
    g = ArchGraph("/tmp")
    g.add_node(Node(id="endpoint:x", name="GET /x", type=NodeType.ENDPOINT))
    assert compute_traces(g) == []