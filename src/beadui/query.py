"""Column projection, cardinality and the filter/sort query pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from beadui.constants import CARDINALITY_THRESHOLD, NO_ASSIGNEE, STATUS_CLOSED
from beadui.deps import get_blockers_count, get_dependents_count, readiness_for

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from beadui.cache import SnapshotCache
    from beadui.models import Issue, Readiness


class Column(str, Enum):
    """Sortable and filterable columns of the issue table."""

    ID = "id"
    DIRECTORY = "directory"
    TITLE = "title"
    STATUS = "status"
    PRIORITY = "priority"
    TYPE = "type"
    ASSIGNEE = "assignee"
    BLOCKERS = "blockers"
    DEPENDENTS = "dependents"

    @property
    def label(self) -> str:
        """Header text for the column."""
        return _COLUMN_LABELS[self]

    @classmethod
    def parse(cls, name: str) -> Column:
        """Look up a column by value or label, case-insensitively.

        Raises:
            ValueError: If no column matches.
        """
        wanted = name.strip().lower()
        for column in cls:
            if wanted in (column.value, column.label.lower()):
                return column
        valid = ", ".join(c.value for c in cls)
        msg = f"Unknown column '{name}' (expected one of: {valid})"
        raise ValueError(msg)


_COLUMN_LABELS = {
    Column.ID: "ID",
    Column.DIRECTORY: "Directory",
    Column.TITLE: "Title",
    Column.STATUS: "Status",
    Column.PRIORITY: "Priority",
    Column.TYPE: "Type",
    Column.ASSIGNEE: "Assignee",
    Column.BLOCKERS: "Blockers",
    Column.DEPENDENTS: "Dependents",
}

# Columns expected to be unique per row; a value menu would be useless
UNIQUE_COLUMNS = frozenset({Column.ID, Column.TITLE})


@dataclass
class ColumnFilter:
    """Values excluded from one column."""

    excluded_values: set[str] = field(default_factory=set[str])

    def is_filtered(self, value: str) -> bool:
        """Check whether rows with *value* are hidden."""
        return value in self.excluded_values

    def toggle_exclude(self, value: str) -> None:
        """Exclude *value*, or include it again if already excluded."""
        if value in self.excluded_values:
            self.excluded_values.remove(value)
        else:
            self.excluded_values.add(value)

    def has_active_filters(self) -> bool:
        """Check whether anything is excluded."""
        return bool(self.excluded_values)


@dataclass(frozen=True)
class IssueRow:
    """An issue with the values computed for display, filtering and sorting."""

    index: int  # position in the aggregated list
    issue: Issue
    readiness: Readiness
    blockers_count: int
    dependents_count: int

    def value(self, column: Column) -> str:
        """Project the row to the display string of *column*."""
        issue = self.issue
        if column is Column.ID:
            return issue.id
        if column is Column.DIRECTORY:
            return issue.source_directory
        if column is Column.TITLE:
            return issue.title
        if column is Column.STATUS:
            return self.readiness.value
        if column is Column.PRIORITY:
            return f"P{issue.priority}"
        if column is Column.TYPE:
            return issue.issue_type
        if column is Column.ASSIGNEE:
            return issue.assignee if issue.assignee is not None else NO_ASSIGNEE
        if column is Column.BLOCKERS:
            return str(self.blockers_count)
        return str(self.dependents_count)

    def matches_text(self, needle: str) -> bool:
        """Case-insensitive substring match over the searchable fields.

        *needle* must already be lower-cased.
        """
        issue = self.issue
        haystacks = [
            issue.id,
            issue.title,
            issue.description,
            issue.status,
            issue.issue_type,
            self.readiness.value,
            str(self.blockers_count),
            str(self.dependents_count),
        ]
        if issue.assignee is not None:
            haystacks.append(issue.assignee)
        return any(needle in text.lower() for text in haystacks)


def _sort_key(column: Column) -> Callable[[IssueRow], Any]:
    keys: dict[Column, Callable[[IssueRow], Any]] = {
        Column.ID: lambda r: r.issue.id,
        Column.DIRECTORY: lambda r: r.issue.source_directory,
        Column.TITLE: lambda r: r.issue.title,
        Column.STATUS: lambda r: r.readiness.value,
        Column.PRIORITY: lambda r: r.issue.priority,
        Column.TYPE: lambda r: r.issue.issue_type,
        Column.ASSIGNEE: lambda r: r.issue.assignee or "",
        Column.BLOCKERS: lambda r: r.blockers_count,
        Column.DEPENDENTS: lambda r: r.dependents_count,
    }
    return keys[column]


def _default_column_filters() -> dict[Column, ColumnFilter]:
    return {Column.STATUS: ColumnFilter({STATUS_CLOSED})}


@dataclass
class QueryState:
    """Inputs of the query pipeline.

    Starts sorted by priority, ascending, with closed issues hidden.
    """

    filter_text: str = ""
    column_filters: dict[Column, ColumnFilter] = field(
        default_factory=_default_column_filters,
    )
    sort_column: Column = Column.PRIORITY
    ascending: bool = True
    cardinality_threshold: int = CARDINALITY_THRESHOLD

    def set_filter_text(self, text: str) -> None:
        """Replace the free-text filter."""
        self.filter_text = text

    def toggle_exclude(self, column: Column, value: str) -> None:
        """Toggle exclusion of *value* in *column*."""
        self.column_filters.setdefault(column, ColumnFilter()).toggle_exclude(value)

    def is_excluded(self, column: Column, value: str) -> bool:
        """Check whether *value* is currently excluded from *column*."""
        column_filter = self.column_filters.get(column)
        return column_filter is not None and column_filter.is_filtered(value)

    def clear_column_filter(self, column: Column) -> None:
        """Remove every exclusion from *column*."""
        self.column_filters.pop(column, None)

    def active_filters(self) -> dict[Column, ColumnFilter]:
        """Return the columns that exclude at least one value."""
        return {c: f for c, f in self.column_filters.items() if f.has_active_filters()}

    def sort_by(self, column: Column) -> None:
        """Sort by *column*; repeating the active column flips the direction."""
        if column is self.sort_column:
            self.ascending = not self.ascending
        else:
            self.sort_column = column
            self.ascending = True


def compute_rows(
    issues: Iterable[Issue],
    cache: SnapshotCache,
    dependents_map: dict[str, list[str]],
) -> list[IssueRow]:
    """Compute readiness and counts once per issue.

    Args:
        issues: The aggregated issue list
        cache: Snapshot cache for full details
        dependents_map: Reverse dependency relation

    Returns:
        One row per issue, in input order
    """
    rows: list[IssueRow] = []
    for index, issue in enumerate(issues):
        blockers_count = get_blockers_count(cache, issue.id)
        rows.append(
            IssueRow(
                index=index,
                issue=issue,
                readiness=readiness_for(issue.status, blockers_count),
                blockers_count=blockers_count,
                dependents_count=get_dependents_count(dependents_map, issue.id),
            ),
        )
    return rows


def filter_rows(rows: Iterable[IssueRow], state: QueryState) -> list[IssueRow]:
    """Apply the text predicate and every column exclusion set."""
    needle = state.filter_text.lower()
    active = state.active_filters()
    kept: list[IssueRow] = []
    for row in rows:
        if needle and not row.matches_text(needle):
            continue
        if any(f.is_filtered(row.value(column)) for column, f in active.items()):
            continue
        kept.append(row)
    return kept


def sort_rows(rows: Iterable[IssueRow], column: Column, ascending: bool) -> list[IssueRow]:
    """Stable sort; ties keep their input order in both directions."""
    return sorted(rows, key=_sort_key(column), reverse=not ascending)


def run_query(rows: Iterable[IssueRow], state: QueryState) -> list[IssueRow]:
    """Filter and sort precomputed rows according to *state*."""
    return sort_rows(filter_rows(rows, state), state.sort_column, state.ascending)


def column_cardinality(rows: Iterable[IssueRow], column: Column) -> int:
    """Count the distinct projected values of *column*."""
    return len({row.value(column) for row in rows})


def offers_value_filter(
    column: Column,
    cardinality: int,
    threshold: int = CARDINALITY_THRESHOLD,
) -> bool:
    """Decide whether a per-value filter menu makes sense for *column*."""
    if column in UNIQUE_COLUMNS:
        return False
    return cardinality <= threshold


def distinct_values(rows: Iterable[IssueRow], column: Column) -> list[str]:
    """Return the sorted distinct projected values of *column*."""
    return sorted({row.value(column) for row in rows})
