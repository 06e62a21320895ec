"""Data models for beadui issues using dataclasses."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from beadui.constants import DEFAULT_PRIORITY, STATUS_CLOSED


class Readiness(str, Enum):
    """Derived work state of an issue."""

    READY = "ready"
    BLOCKED = "blocked"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


@dataclass(frozen=True)
class BlockerRef:
    """Abbreviated copy of an issue embedded in another issue's dependencies."""

    id: str
    title: str = ""
    status: str = ""

    def is_closed(self) -> bool:
        """Check if the blocker is closed."""
        return self.status == STATUS_CLOSED


@dataclass
class Issue:
    """An issue as reported by the external issue store."""

    id: str
    title: str
    description: str = ""
    status: str = "open"
    priority: int = DEFAULT_PRIORITY  # 0-4 range, lower is higher priority
    issue_type: str = ""
    assignee: str | None = None
    notes: str | None = None
    created_at: str = ""
    updated_at: str = ""
    dependencies: list[BlockerRef] = field(default_factory=list[BlockerRef])
    # Display name of the directory this issue was listed from
    source_directory: str = ""

    def is_closed(self) -> bool:
        """Check if the issue is closed."""
        return self.status == STATUS_CLOSED

    def open_blockers(self) -> list[BlockerRef]:
        """Return the dependencies that are not closed yet."""
        return [dep for dep in self.dependencies if not dep.is_closed()]

    def copy(self) -> Issue:
        """Return an independent copy suitable for local editing."""
        return dataclasses.replace(self, dependencies=list(self.dependencies))


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        msg = f"Issue field '{key}' must be a string, got {value!r}"
        raise TypeError(msg)
    return value


def _optional_str(data: dict[str, Any], key: str, default: str | None) -> str | None:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        msg = f"Issue field '{key}' must be a string, got {value!r}"
        raise TypeError(msg)
    return value


def blocker_from_dict(data: Any) -> BlockerRef:
    """Convert a dependency entry to a BlockerRef.

    Only ``id`` is required; title and status default to empty strings.
    """
    if not isinstance(data, dict):
        msg = f"Dependency entry must be an object, got {type(data).__name__}"
        raise TypeError(msg)
    return BlockerRef(
        id=_require_str(data, "id"),
        title=_optional_str(data, "title", "") or "",
        status=_optional_str(data, "status", "") or "",
    )


def dict_to_issue(data: Any) -> Issue:
    """Convert a decoded bd JSON record to an Issue.

    Raises:
        TypeError: If the record or one of its fields has the wrong type.
        ValueError: If a required field is missing.
    """
    if not isinstance(data, dict):
        msg = f"Issue record must be an object, got {type(data).__name__}"
        raise TypeError(msg)

    for key in ("id", "title", "priority"):
        if key not in data:
            msg = f"Issue record is missing required field '{key}'"
            raise ValueError(msg)

    priority = data["priority"]
    # bool is an int subclass; reject it explicitly
    if not isinstance(priority, int) or isinstance(priority, bool):
        msg = f"Issue field 'priority' must be an integer, got {priority!r}"
        raise TypeError(msg)

    raw_deps = data.get("dependencies") or []
    if not isinstance(raw_deps, list):
        msg = "Issue field 'dependencies' must be a list"
        raise TypeError(msg)

    return Issue(
        id=_require_str(data, "id"),
        title=_require_str(data, "title"),
        description=_optional_str(data, "description", "") or "",
        status=_optional_str(data, "status", "open") or "open",
        priority=priority,
        issue_type=_optional_str(data, "issue_type", "") or "",
        assignee=_optional_str(data, "assignee", None),
        notes=_optional_str(data, "notes", None),
        created_at=_optional_str(data, "created_at", "") or "",
        updated_at=_optional_str(data, "updated_at", "") or "",
        dependencies=[blocker_from_dict(dep) for dep in raw_deps],
        source_directory=_optional_str(data, "source_directory", "") or "",
    )


def issue_to_dict(issue: Issue) -> dict[str, Any]:
    """Convert an Issue to a plain dictionary for JSON output."""
    return {
        "id": issue.id,
        "title": issue.title,
        "description": issue.description,
        "status": issue.status,
        "priority": issue.priority,
        "issue_type": issue.issue_type,
        "assignee": issue.assignee,
        "notes": issue.notes,
        "created_at": issue.created_at,
        "updated_at": issue.updated_at,
        "dependencies": [
            {"id": dep.id, "title": dep.title, "status": dep.status}
            for dep in issue.dependencies
        ],
        "source_directory": issue.source_directory,
    }
