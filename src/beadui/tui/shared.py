"""Shared design system for beadui TUI components."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.text import Text

from beadui.constants import PRIORITY_COLORS, READINESS_COLORS
from beadui.query import Column

if TYPE_CHECKING:
    from beadui.query import IssueRow, QueryState

SHARED_CSS = """
#title-bar {
    height: auto;
    max-height: 3;
    padding: 0 2;
    margin: 1 0;
}

#id-display {
    width: auto;
    min-width: 12;
    padding: 0 2;
    content-align: left middle;
    height: 3;
    color: $text-muted;
}

.field-label {
    margin-top: 1;
    color: $text-muted;
}

.field-row {
    height: auto;
    max-height: 5;
    margin-bottom: 1;
}

.field-row > Select {
    width: 1fr;
}

.error-line {
    color: $error;
    height: auto;
}

.collapsible-textarea {
    height: auto;
    min-height: 5;
    max-height: 8;
}
"""


def make_cell(row: IssueRow, column: Column) -> Text:
    """Build the styled table cell for one column of a row."""
    value = row.value(column)
    if column is Column.STATUS:
        return Text(value, style=READINESS_COLORS.get(value, "white"))
    if column is Column.PRIORITY:
        color = PRIORITY_COLORS.get(row.issue.priority, "white")
        return Text(value, style=f"bold {color}")
    return Text(value)


def make_header(column: Column, query: QueryState) -> str:
    """Header label with sort direction and a marker for active filters."""
    label = column.label
    if column is query.sort_column:
        label += " ▲" if query.ascending else " ▼"
    column_filter = query.column_filters.get(column)
    if column_filter is not None and column_filter.has_active_filters():
        label += " ⏷"
    return label
