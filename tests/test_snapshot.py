import json
from datetime import datetime, timezone

import pytest

from ridge.drift.snapshot import Snapshot, load, save
from ridge.model.graph import ArchGraph, Edge, EdgeType, Node, NodeType, TopologyType


def make_graph():
    graph = ArchGraph("/tmp/project")
    graph.topology = TopologyType.MONOLITH
    graph.add_node(Node(id="svc:api", name="API", type=NodeType.SERVICE, language="go"))
    graph.add_node(Node(id="db:pg", name="PostgreSQL", type=NodeType.DATABASE))
    graph.add_edge(
        Edge(source="svc:api", target="db:pg", type=EdgeType.READ_WRITE, label="queries")
    )
    return graph


def test_save_and_load(tmp_path):
    out_file = tmp_path / "arch.snapshot.json"
    snap = save(make_graph(), str(out_file), "v1.0")
    assert snap.label == "v1.0"

    loaded = load(str(out_file))
    assert loaded.label == "v1.0"
    assert len(loaded.nodes) == 2
    assert len(loaded.edges) == 1
    assert loaded.topology == "monolith"
    assert loaded.root_path == "/tmp/project"
    assert loaded.created_at == snap.created_at


def test_round_trip_preserves_graph(tmp_path):
    out_file = tmp_path / "snap.json"
    save(make_graph(), str(out_file), "")
    graph = load(str(out_file)).to_graph()
    assert graph.topology == TopologyType.MONOLITH
    assert graph.get_node("svc:api").language == "go"
    assert graph.get_node("db:pg").type == NodeType.DATABASE
    edge = graph.edges()[0]
    assert (edge.source, edge.target, edge.type, edge.label) == (
        "svc:api",
        "db:pg",
        EdgeType.READ_WRITE,
        "queries",
    )


def test_empty_label_omitted(tmp_path):
    out_file = tmp_path / "snap.json"
    save(make_graph(), str(out_file), "")
    data = json.loads(out_file.read_text(encoding="utf-8"))
    assert "label" not in data
    assert data["version"] == "1"


def test_to_graph():
    snap = Snapshot(
        root_path="/tmp",
        topology="monolith",
        nodes=[
            Node(id="a", name="A", type=NodeType.SERVICE),
            Node(id="b", name="B", type=NodeType.DATABASE),
        ],
        edges=[Edge(source="a", target="b", type=EdgeType.READ_WRITE)],
    )
    graph = snap.to_graph()
    assert graph.node_count() == 2
    assert graph.edge_count() == 1
    assert graph.topology == TopologyType.MONOLITH


def test_load_nonexistent():
    with pytest.raises(FileNotFoundError):
        load("/nonexistent/snapshot.json")


def test_load_malformed(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("[oops", encoding="utf-8")
    with pytest.raises(ValueError, match="parsing snapshot"):
        load(str(path))


def test_load_nanosecond_utc_timestamp(tmp_path):
    path = tmp_path / "snap.json"
    path.write_text(
        json.dumps(
            {
                "version": "1",
                "created_at": "2024-01-02T03:04:05.123456789Z",
                "root_path": "/r",
                "topology": "unknown",
                "nodes": None,
                "edges": None,
            }
        ),
        encoding="utf-8",
    )
    snap = load(str(path))
    assert snap.created_at == datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)
    assert snap.nodes == []
    assert snap.edges == []