"""Show command for the beadui CLI."""

from __future__ import annotations

import typer

from beadui.models import issue_to_dict

from ._formatting import format_issue_full
from ._helpers import get_session
from ._json_state import echo_error, echo_json, is_json_output


def register(app: typer.Typer) -> None:
    """Register show command."""

    @app.command()
    def show(
        issue_id: str = typer.Argument(..., help="Issue ID"),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    ) -> None:
        """Show an issue with its blockers and dependents."""
        as_json = is_json_output(json_output)
        session = get_session()
        edit = session.load_detail(issue_id)
        if edit is None:
            echo_error(session.error_message or f"Issue {issue_id} not found")
            raise typer.Exit(1)

        dependents = session.dependents_of(issue_id)
        if as_json:
            data = issue_to_dict(edit.issue)
            data["dependents"] = [d.id for d in dependents]
            echo_json(data)
            return

        typer.echo(format_issue_full(edit.issue, dependents))
