import os

import pytest

from ridge.detector.notes import link_notes_to_packages, normalize_candidate, path_suffixes
from ridge.model.graph import ArchGraph, Node, NodeType


@pytest.mark.parametrize(
    "text, expected",
    [
        ("internal/scanner", "internal/scanner"),
        ("internal/scanner/", "internal/scanner"),
        ("internal/scanner/scanner.go", "internal/scanner"),
        ("tools/handlers.go:183-188", ""),
        ("tools/handlers.go:42", ""),
        ("single", ""),
        ("foo bar/baz", ""),
        ("a/b", "a/b"),
        ("src/feature.ts", ""),
        ("path/to/something/file.py", "path/to/something"),
        ("deep/nested/scanner/scanner.go", "deep/nested/scanner"),
    ],
)
def test_normalize_candidate(text, expected):
    assert normalize_candidate(text) == expected


def test_path_suffixes():
    got = path_suffixes("/abs/repo/internal/scanner")
    for want in ["internal/scanner", "repo/internal/scanner", "abs/repo/internal/scanner"]:
        assert want in got
    assert "scanner" not in got
    assert got[0] == "internal/scanner"


def test_path_suffixes_single_segment():
    assert path_suffixes("scanner") == []


def test_link_smoke(tmp_path):
    note_path = tmp_path / "design.md"
    note_path.write_text(
        "Stuff lives in `internal/scanner/`. The orchestrator calls into "
        "`internal/render/forcegraph.go`. Unrelated text mentions internal/scanner "
        "without backticks (should be ignored).",
        encoding="utf-8",
    )
    graph = ArchGraph(str(tmp_path))
    graph.add_node(Node(id="note:design/design", name="design", type=NodeType.NOTE, path=str(note_path)))
    graph.add_node(
        Node(
            id="pkg:scanner/scanner",
            name="scanner",
            type=NodeType.PACKAGE,
            path=os.path.join(str(tmp_path), "internal", "scanner"),
        )
    )
    graph.add_node(
        Node(
            id="pkg:render/render",
            name="render",
            type=NodeType.PACKAGE,
            path=os.path.join(str(tmp_path), "internal", "render"),
        )
    )

    assert link_notes_to_packages(graph) == 2
    documents = [
        e for e in graph.edges() if e.source == "note:design/design" and e.label == "documents"
    ]
    assert len(documents) == 2
    assert all(e.confidence == 0.6 for e in documents)
    assert {e.target for e in documents} == {"pkg:scanner/scanner", "pkg:render/render"}


def test_no_notes_is_noop():
    graph = ArchGraph("/tmp")
    graph.add_node(Node(id="pkg:a/a", type=NodeType.PACKAGE, path="/tmp/a"))
    assert link_notes_to_packages(graph) == 0
    assert graph.edge_count() == 0


def test_dedupes_within_file(tmp_path):
    note_path = tmp_path / "n.md"
    note_path.write_text(
        "Mention `internal/scanner` once. Mention `internal/scanner` again. "
        "And `internal/scanner/`.",
        encoding="utf-8",
    )
    graph = ArchGraph(str(tmp_path))
    graph.add_node(Node(id="note:foo/n", type=NodeType.NOTE, path=str(note_path)))
    graph.add_node(
        Node(
            id="pkg:scanner/scanner",
            type=NodeType.PACKAGE,
            path=os.path.join(str(tmp_path), "internal", "scanner"),
        )
    )
    assert link_notes_to_packages(graph) == 1


def test_missing_note_file_is_skipped(tmp_path):
    graph = ArchGraph(str(tmp_path))
    graph.add_node(Node(id="note:x", type=NodeType.NOTE, path=str(tmp_path / "absent.md")))
    graph.add_node(
        Node(id="pkg:s", type=NodeType.PACKAGE, path=os.path.join(str(tmp_path), "internal", "s"))
    )
    assert link_notes_to_packages(graph) == 0