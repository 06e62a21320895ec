"""Aggregation session: one snapshot of issues from every visible directory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from beadui.cache import SnapshotCache
from beadui.deps import build_dependents_map
from beadui.edit import EditSession, save_issue
from beadui.errors import GatewayError, SaveFailed
from beadui.query import (
    Column,
    QueryState,
    column_cardinality,
    compute_rows,
    distinct_values,
    offers_value_filter,
    run_query,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

    from beadui.config import AppConfig, DirectoryConfig
    from beadui.gateway import Gateway
    from beadui.models import Issue
    from beadui.query import IssueRow

logger = logging.getLogger(__name__)


def iter_directory_issues(
    directories: Iterable[DirectoryConfig],
    gateway: Gateway,
) -> Iterator[tuple[DirectoryConfig, list[Issue]]]:
    """List issues per visible directory, stamping their source directory.

    Directories whose listing fails are logged and skipped so one broken
    store does not hide the others.
    """
    for directory in directories:
        if not directory.visible:
            continue
        source_name = directory.source_name
        try:
            issues = gateway.list(directory.path)
        except GatewayError as e:
            logger.warning("Skipping %s: %s", directory.path, e)
            continue
        for issue in issues:
            issue.source_directory = source_name
        yield directory, issues


def list_issues_from_all(
    directories: Iterable[DirectoryConfig],
    gateway: Gateway,
) -> list[Issue]:
    """Concatenate the issues of every visible directory in registration order."""
    all_issues: list[Issue] = []
    for _directory, issues in iter_directory_issues(directories, gateway):
        all_issues.extend(issues)
    return all_issues


class IssueSession:
    """Owns the issue list, snapshot cache, dependents map and query state.

    Nothing here is shared between sessions; two sessions over the same
    gateway keep independent snapshots.
    """

    def __init__(
        self,
        config: AppConfig,
        gateway: Gateway,
        query: QueryState | None = None,
    ) -> None:
        self.config = config
        self.gateway = gateway
        self.query = query if query is not None else QueryState()
        self.cache = SnapshotCache(gateway)
        self.issues: list[Issue] = []
        self.dependents_map: dict[str, list[str]] = {}
        self.error_message: str | None = None
        self.selected_index: int | None = None
        self.refresh_count = 0
        self._rows: list[IssueRow] | None = None

    # -- snapshot ------------------------------------------------------------

    def refresh(self) -> None:
        """Rebuild the snapshot: clear cache, re-list, rebuild dependents."""
        selected = self.selected_issue
        self.cache.clear()
        self._rows = None

        issues: list[Issue] = []
        for directory, listed in iter_directory_issues(
            self.config.directories,
            self.gateway,
        ):
            for issue in listed:
                self.cache.register_issue_source(
                    issue.id,
                    issue.source_directory,
                    directory.path,
                )
            issues.extend(listed)
        self.issues = issues

        self.dependents_map = build_dependents_map(self.issues, self.cache)
        self.error_message = None
        self.refresh_count += 1
        # the selection follows its issue id; it is dropped if the id is gone
        self.selected_index = None
        if selected is not None:
            self.select_id(selected.id)
        logger.info(
            "refreshed %d issues from %d directories",
            len(self.issues),
            len(self.config.visible_directories()),
        )

    def all_rows(self) -> list[IssueRow]:
        """Rows for every issue in the snapshot, computed once per refresh."""
        if self._rows is None:
            self._rows = compute_rows(self.issues, self.cache, self.dependents_map)
        return self._rows

    def rows(self) -> list[IssueRow]:
        """The filtered and sorted view for the current query state."""
        return run_query(self.all_rows(), self.query)

    def cardinality(self, column: Column) -> int:
        """Number of distinct values of *column* across the snapshot."""
        return column_cardinality(self.all_rows(), column)

    def offers_value_filter(self, column: Column) -> bool:
        """Whether a per-value filter menu should be offered for *column*."""
        return offers_value_filter(
            column,
            self.cardinality(column),
            self.query.cardinality_threshold,
        )

    def filter_values(self, column: Column) -> list[str]:
        """Distinct values of *column*, or nothing if it offers no filter menu."""
        if not self.offers_value_filter(column):
            return []
        return distinct_values(self.all_rows(), column)

    # -- selection -----------------------------------------------------------

    def select(self, index: int) -> Issue:
        """Select the issue at *index* of the aggregated list.

        Raises:
            IndexError: If *index* is out of range.
        """
        if not 0 <= index < len(self.issues):
            msg = f"No issue at index {index}"
            raise IndexError(msg)
        self.selected_index = index
        return self.issues[index]

    def select_id(self, issue_id: str) -> Issue | None:
        """Select an issue by id; returns None if it is not in the snapshot."""
        for index, issue in enumerate(self.issues):
            if issue.id == issue_id:
                self.selected_index = index
                return issue
        return None

    def deselect(self) -> None:
        """Clear the selection."""
        self.selected_index = None

    @property
    def selected_issue(self) -> Issue | None:
        """The selected issue from the aggregated list, if any."""
        if self.selected_index is None:
            return None
        return self.issues[self.selected_index]

    # -- detail and editing --------------------------------------------------

    def location_for(self, issue_id: str) -> Path | None:
        """Directory an issue was listed from, if known."""
        source = self.cache.source_of(issue_id)
        return source[1] if source else None

    def load_detail(self, issue_id: str) -> EditSession | None:
        """Load the full detail of an issue for viewing and editing.

        On failure the error is recorded in ``error_message`` and None is
        returned.
        """
        try:
            issue = self.cache.get_issue(issue_id)
        except GatewayError as e:
            self.error_message = f"Error loading issue: {e}"
            return None
        self.error_message = None
        edit = EditSession.start(issue)
        edit.issue.source_directory = self._source_name(issue_id, issue)
        return edit

    def _source_name(self, issue_id: str, issue: Issue) -> str:
        source = self.cache.source_of(issue_id)
        return source[0] if source else issue.source_directory

    def dependents_of(self, issue_id: str) -> list[Issue]:
        """Issues in the snapshot that list *issue_id* as a blocker."""
        by_id = {issue.id: issue for issue in self.issues}
        return [
            by_id[dep_id]
            for dep_id in self.dependents_map.get(issue_id, [])
            if dep_id in by_id
        ]

    def save(self, edit: EditSession) -> None:
        """Write an edit back and refresh on success.

        On failure the edit stays marked modified, the aggregated message is
        stored in ``error_message`` and no refresh happens.

        Raises:
            SaveFailed: If any field update failed.
        """
        issue = edit.issue
        try:
            save_issue(self.gateway, issue, self.location_for(issue.id))
        except SaveFailed as e:
            self.error_message = str(e)
            raise
        edit.modified = False
        self.error_message = None
        self.cache.invalidate(issue.id)
        self.refresh()
