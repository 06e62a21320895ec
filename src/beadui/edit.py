"""Local edits of an issue and the pipeline that writes them back."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from beadui.constants import EDITABLE_FIELDS
from beadui.errors import GatewayError, SaveFailed

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from beadui.gateway import Gateway
    from beadui.models import Issue

logger = logging.getLogger(__name__)

# Optional fields where an empty string means "unset"
_OPTIONAL_FIELDS = frozenset({"assignee", "notes"})


def field_updates(issue: Issue) -> Iterator[tuple[str, str]]:
    """Yield the ``(field, value)`` pairs sent to the gateway on save.

    Order is fixed: title, status, priority, then assignee and notes when
    they are set.
    """
    yield "title", issue.title
    yield "status", issue.status
    yield "priority", str(issue.priority)
    if issue.assignee is not None:
        yield "assignee", issue.assignee
    if issue.notes is not None:
        yield "notes", issue.notes


def save_issue(
    gateway: Gateway,
    issue: Issue,
    location: Path | None = None,
) -> None:
    """Write every editable field of *issue* back to the store.

    All fields are attempted even after a failure.

    Raises:
        SaveFailed: If at least one field update failed.
    """
    failures: list[tuple[str, str]] = []
    for name, value in field_updates(issue):
        try:
            gateway.update(issue.id, name, value, location)
        except GatewayError as e:
            logger.warning("update of %s.%s failed: %s", issue.id, name, e)
            failures.append((name, str(e)))
    if failures:
        raise SaveFailed(failures)


@dataclass
class EditSession:
    """An issue being edited and whether it differs from what was loaded."""

    issue: Issue
    modified: bool = False

    @classmethod
    def start(cls, issue: Issue) -> EditSession:
        """Begin editing a private copy of *issue*."""
        return cls(issue=issue.copy())

    def set_field(self, name: str, value: Any) -> bool:
        """Change one editable field.

        Empty strings clear optional fields. The session is only marked
        modified when the value actually changes.

        Returns:
            True if the field changed

        Raises:
            ValueError: If *name* is not an editable field.
        """
        if name not in EDITABLE_FIELDS:
            msg = f"Field '{name}' cannot be edited"
            raise ValueError(msg)
        if name == "priority":
            value = int(value)
        elif name in _OPTIONAL_FIELDS and value == "":
            value = None

        if getattr(self.issue, name) == value:
            return False
        setattr(self.issue, name, value)
        self.modified = True
        return True
