"""Detection of service and module boundaries from project marker files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from ridge.model.graph import TopologyType

_SKIP_DIRS = frozenset({".git", "node_modules", "vendor", "__pycache__"})

_PY_MARKERS = frozenset({"pyproject.toml", "setup.py", "setup.cfg"})
_COMPOSE_FILES = frozenset(
    {"docker-compose.yml", "docker-compose.yaml", "compose.yml", "compose.yaml"}
)
_GRADLE_FILES = frozenset({"build.gradle", "build.gradle.kts"})


@dataclass
class Boundary:
    """A detected service or module boundary."""

    name: str
    path: str
    type: str
    markers: list[str] = field(default_factory=list)


@dataclass
class BoundaryResult:
    """The detected topology together with every boundary found."""

    topology: TopologyType
    boundaries: list[Boundary] = field(default_factory=list)


@dataclass
class _Markers:
    go_mods: list[str] = field(default_factory=list)
    package_jsons: list[str] = field(default_factory=list)
    dockerfiles: list[str] = field(default_factory=list)
    py_projects: list[str] = field(default_factory=list)
    cargo_tomls: list[str] = field(default_factory=list)
    pom_xmls: list[str] = field(default_factory=list)
    gradle_builds: list[str] = field(default_factory=list)
    cmd_dirs: list[str] = field(default_factory=list)

    has_go_work: bool = False
    has_nx_json: bool = False
    has_turbo_json: bool = False
    has_rush_json: bool = False
    has_pnpm_workspace: bool = False
    has_docker_compose: bool = False
    has_k8s_manifests: bool = False

    @property
    def total_project_markers(self) -> int:
        return (
            len(self.go_mods)
            + len(self.package_jsons)
            + len(self.py_projects)
            + len(self.cargo_tomls)
            + len(self.pom_xmls)
            + len(self.gradle_builds)
        )


def detect_boundaries(root_path: str) -> BoundaryResult:
    """Walk a directory tree and identify its service and module boundaries."""
    abs_root = os.path.abspath(root_path)
    markers = _collect_markers(abs_root)
    topology = _infer_topology(markers)
    return BoundaryResult(topology=topology, boundaries=_build_boundaries(abs_root, markers))


def _sorted_entries(path: str) -> list[os.DirEntry]:
    try:
        with os.scandir(path) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError:
        return []


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def _list_subdirs(path: str) -> list[str]:
    return [e.path for e in _sorted_entries(path) if _is_dir(e)]


def _collect_markers(abs_root: str) -> _Markers:
    """Walk the tree once, in lexical depth-first order, gathering markers."""
    markers = _Markers()
    if not os.path.lexists(abs_root):
        return markers
    root_is_dir = os.path.isdir(abs_root) and not os.path.islink(abs_root)
    stack = [(abs_root, os.path.basename(abs_root), root_is_dir)]
    while stack:
        path, name, is_dir = stack.pop()
        if not is_dir:
            _classify_marker_file(markers, name, os.path.relpath(path, abs_root))
            continue
        if name in _SKIP_DIRS:
            continue
        if name == "cmd":
            markers.cmd_dirs.extend(_list_subdirs(path))
        entries = _sorted_entries(path)
        stack.extend((e.path, e.name, _is_dir(e)) for e in reversed(entries))
    return markers


def _classify_marker_file(markers: _Markers, name: str, rel: str) -> None:
    if name == "go.mod":
        markers.go_mods.append(rel)
    elif name == "go.work":
        markers.has_go_work = True
    elif name == "package.json":
        markers.package_jsons.append(rel)
    elif name == "nx.json":
        markers.has_nx_json = True
    elif name == "turbo.json":
        markers.has_turbo_json = True
    elif name == "rush.json":
        markers.has_rush_json = True
    elif name == "pnpm-workspace.yaml":
        markers.has_pnpm_workspace = True
    elif name in ("Dockerfile", "dockerfile"):
        markers.dockerfiles.append(rel)
    elif name in _COMPOSE_FILES:
        markers.has_docker_compose = True
    elif name in _PY_MARKERS:
        markers.py_projects.append(rel)
    elif name == "Cargo.toml":
        markers.cargo_tomls.append(rel)
    elif name == "pom.xml":
        markers.pom_xmls.append(rel)
    elif name in _GRADLE_FILES:
        markers.gradle_builds.append(rel)
    if _is_in_deploy_dir(name, rel):
        markers.has_k8s_manifests = True


def _rel_dir(rel: str) -> str:
    return os.path.dirname(rel) or "."


def _is_in_deploy_dir(name: str, rel: str) -> bool:
    """True for YAML files under a k8s, kubernetes or deploy directory."""
    if not name.endswith((".yaml", ".yml")):
        return False
    directory = _rel_dir(rel)
    return any(word in directory for word in ("k8s", "kubernetes", "deploy"))


def _boundary_name(directory: str, abs_root: str) -> str:
    if directory == ".":
        return os.path.basename(abs_root)
    return os.path.basename(directory)


def _append_or_augment(
    boundaries: list[Boundary],
    directory: str,
    name: str,
    kind: str,
    marker: str,
    augment: bool,
) -> None:
    for boundary in boundaries:
        if boundary.path == directory:
            if augment:
                boundary.markers.append(marker)
            return
    boundaries.append(Boundary(name=name, path=directory, type=kind, markers=[marker]))


def _build_boundaries(abs_root: str, markers: _Markers) -> list[Boundary]:
    boundaries: list[Boundary] = []
    for mod in markers.go_mods:
        directory = _rel_dir(mod)
        boundaries.append(
            Boundary(
                name=_boundary_name(directory, abs_root),
                path=directory,
                type="module",
                markers=["go.mod"],
            )
        )
    for cmd in markers.cmd_dirs:
        boundaries.append(
            Boundary(
                name=os.path.basename(cmd),
                path=os.path.relpath(cmd, abs_root),
                type="service",
                markers=["cmd/ directory"],
            )
        )

    additions = [
        (markers.dockerfiles, "service", lambda f: "Dockerfile", True),
        (markers.py_projects, "module", os.path.basename, False),
        (markers.cargo_tomls, "module", lambda f: "Cargo.toml", False),
        (markers.pom_xmls, "module", lambda f: "pom.xml", False),
        (markers.gradle_builds, "module", os.path.basename, False),
    ]
    for files, kind, marker_of, augment in additions:
        for rel in files:
            directory = _rel_dir(rel)
            _append_or_augment(
                boundaries,
                directory,
                _boundary_name(directory, abs_root),
                kind,
                marker_of(rel),
                augment,
            )
    return boundaries


def _infer_topology(m: _Markers) -> TopologyType:
    go_mods = len(m.go_mods)
    package_jsons = len(m.package_jsons)
    dockerfiles = len(m.dockerfiles)

    if (
        m.has_go_work
        or m.has_nx_json
        or m.has_turbo_json
        or m.has_rush_json
        or m.has_pnpm_workspace
    ):
        return TopologyType.MONOREPO
    if go_mods > 1:
        return TopologyType.MONOREPO
    if dockerfiles > 1 and (m.has_docker_compose or m.has_k8s_manifests):
        return TopologyType.MICROSERVICE
    if dockerfiles > 2:
        return TopologyType.MICROSERVICE
    if len(m.cmd_dirs) > 1:
        return TopologyType.MONOREPO
    if m.total_project_markers > 2:
        return TopologyType.MONOREPO
    if (go_mods == 1 or package_jsons == 1) and dockerfiles <= 1:
        return TopologyType.MONOLITH
    return TopologyType.UNKNOWN