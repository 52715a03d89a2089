"""Diff report types describing changes between two architecture graphs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DiffSeverity(str, Enum):
    """Severity of an architecture change."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value

    def rank(self) -> int:
        """Position in the order none < low < medium < high < critical."""
        return _SEVERITY_ORDER[self]


_SEVERITY_ORDER = {
    DiffSeverity.NONE: 0,
    DiffSeverity.LOW: 1,
    DiffSeverity.MEDIUM: 2,
    DiffSeverity.HIGH: 3,
    DiffSeverity.CRITICAL: 4,
}


def _rank_of(severity: DiffSeverity | str) -> int:
    try:
        return DiffSeverity(severity).rank()
    except ValueError:
        return 0


class DiffChangeType(str, Enum):
    """The kind of change detected."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"

    def __str__(self) -> str:
        return self.value


@dataclass
class DiffEntry:
    """A single architectural change."""

    change_type: DiffChangeType | str = ""
    severity: DiffSeverity | str = DiffSeverity.NONE
    category: str = ""
    subject: str = ""
    detail: str = ""


@dataclass
class DiffReport:
    """All changes between two architecture graphs."""

    base_ref: str = ""
    compare_ref: str = ""
    changes: list[DiffEntry] = field(default_factory=list)
    max_severity: DiffSeverity | str = DiffSeverity.NONE
    summary: str = ""

    def has_changes(self) -> bool:
        return bool(self.changes)

    def changes_by_type(self, change_type: DiffChangeType | str) -> list[DiffEntry]:
        return [c for c in self.changes if c.change_type == change_type]

    def changes_by_severity(self, min_severity: DiffSeverity | str) -> list[DiffEntry]:
        """Changes at or above the given severity."""
        threshold = _rank_of(min_severity)
        return [c for c in self.changes if _rank_of(c.severity) >= threshold]