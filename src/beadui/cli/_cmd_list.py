"""List command for the beadui CLI."""

from __future__ import annotations

import typer

from beadui.query import Column

from ._formatting import format_rows_table, row_to_dict
from ._helpers import get_session, parse_column, parse_exclude
from ._json_state import echo_json, is_json_output


def register(app: typer.Typer) -> None:
    """Register list command."""

    @app.command("list")
    def list_issues(
        filter_text: str = typer.Option(
            "",
            "--filter",
            "-f",
            help="Case-insensitive text to search for",
        ),
        exclude: list[str] | None = typer.Option(
            None,
            "--exclude",
            "-x",
            help="Hide rows whose COLUMN shows VALUE (COLUMN=VALUE, repeatable)",
        ),
        sort: str = typer.Option(
            Column.PRIORITY.value,
            "--sort",
            "-s",
            help="Column to sort by",
        ),
        descending: bool = typer.Option(False, "--desc", help="Sort descending"),
        show_all: bool = typer.Option(
            False,
            "--all",
            "-a",
            help="Include closed issues",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    ) -> None:
        """List issues from every visible directory."""
        sort_column = parse_column(sort)
        exclusions = [parse_exclude(raw) for raw in exclude or []]

        session = get_session()
        query = session.query
        if show_all:
            query.clear_column_filter(Column.STATUS)
        query.set_filter_text(filter_text)
        for column, value in exclusions:
            if not query.is_excluded(column, value):
                query.toggle_exclude(column, value)
        query.sort_column = sort_column
        query.ascending = not descending

        rows = session.rows()
        if is_json_output(json_output):
            echo_json([row_to_dict(row) for row in rows])
            return

        if not rows:
            typer.echo("No issues found")
            return
        typer.echo(format_rows_table(rows))
