"""Display and formatting functions for the beadui CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import typer

from beadui.constants import NO_ASSIGNEE, PRIORITY_COLORS, READINESS_COLORS
from beadui.models import issue_to_dict
from beadui.query import Column

if TYPE_CHECKING:
    from beadui.models import Issue
    from beadui.query import IssueRow

# Compact headers keep the count columns narrow on an 80-column terminal
_SHORT_HEADERS = {
    Column.DIRECTORY: "Dir",
    Column.PRIORITY: "Pri",
    Column.BLOCKERS: "Blk",
    Column.DEPENDENTS: "Deps",
}
_FOLDABLE_COLUMNS = frozenset({Column.DIRECTORY, Column.ASSIGNEE})
_TITLE_MIN_WIDTH = 16


def row_to_dict(row: IssueRow) -> dict[str, Any]:
    """Convert a query row to a JSON-friendly dictionary."""
    data = issue_to_dict(row.issue)
    data["readiness"] = row.readiness.value
    data["blockers_count"] = row.blockers_count
    data["dependents_count"] = row.dependents_count
    return data


def format_rows_table(rows: list[IssueRow]) -> str:
    """Format query rows as an aligned table using Rich.

    Returns:
        Formatted table string, or an empty string for no rows
    """
    from io import StringIO

    from rich import box
    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table

    if not rows:
        return ""

    table = Table(
        show_header=True,
        header_style="bold",
        box=box.ROUNDED,
        pad_edge=False,
        show_edge=False,
    )
    for column in Column:
        header = _SHORT_HEADERS.get(column, column.label)
        if column is Column.TITLE:
            table.add_column(header, overflow="fold", min_width=_TITLE_MIN_WIDTH)
        elif column in _FOLDABLE_COLUMNS:
            table.add_column(header, overflow="fold")
        else:
            table.add_column(header, no_wrap=True)

    for row in rows:
        readiness_color = READINESS_COLORS.get(row.readiness.value, "white")
        priority_color = PRIORITY_COLORS.get(row.issue.priority, "white")
        cells: list[str] = []
        for column in Column:
            value = escape(row.value(column))
            if column is Column.STATUS:
                value = f"[{readiness_color}]{value}[/]"
            elif column is Column.PRIORITY:
                value = f"[bold {priority_color}]{value}[/]"
            cells.append(value)
        table.add_row(*cells)

    string_io = StringIO()
    console = Console(file=string_io, force_terminal=True, width=None)
    console.print(table)

    return string_io.getvalue().rstrip()


def _styled_key(label: str) -> str:
    """Style a field label as bold cyan."""
    return typer.style(label, fg="cyan", bold=True)


def format_issue_full(issue: Issue, dependents: list[Issue] | None = None) -> str:
    """Format an issue with its blockers and dependents for ``beadui show``."""
    key = _styled_key
    lines = [
        f"{key('ID:')} {issue.id}",
        f"{key('Title:')} {issue.title}",
        "",
        f"{key('Status:')} {issue.status}",
        f"{key('Priority:')} P{issue.priority}",
        f"{key('Type:')} {issue.issue_type}",
        f"{key('Assignee:')} {issue.assignee or NO_ASSIGNEE}",
    ]
    if issue.source_directory:
        lines.append(f"{key('Directory:')} {issue.source_directory}")
    lines.append(f"{key('Created:')} {issue.created_at}")
    lines.append(f"{key('Updated:')} {issue.updated_at}")

    if issue.description:
        lines.append(f"\n{key('Description:')}\n{issue.description}")

    if issue.notes:
        lines.append(f"\n{key('Notes:')}\n{issue.notes}")

    lines.append(f"\n{key('Blockers (issues blocking this one):')}")
    if issue.dependencies:
        lines.extend(
            f"  → {dep.id} [{dep.status}] {dep.title}" for dep in issue.dependencies
        )
    else:
        lines.append("  None")

    lines.append(f"\n{key('Dependents (issues blocked by this one):')}")
    if dependents:
        lines.extend(f"  ← {dep.id} [{dep.status}] {dep.title}" for dep in dependents)
    else:
        lines.append("  None")

    return "\n".join(lines)
