"""Update command for the beadui CLI."""

from __future__ import annotations

import typer

from beadui.constants import STATUS_CLOSED, STATUS_IN_PROGRESS, STATUS_OPEN
from beadui.errors import SaveFailed
from beadui.models import issue_to_dict

from ._helpers import get_session
from ._json_state import echo_error, echo_json, is_json_output

_STATUSES = (STATUS_OPEN, STATUS_IN_PROGRESS, STATUS_CLOSED)


def _parse_priority(value: str) -> int:
    """Accept ``2`` as well as ``P2``/``p2``."""
    raw = value.strip().lower().removeprefix("p")
    try:
        priority = int(raw)
    except ValueError:
        msg = f"Invalid priority '{value}' (expected 0-4 or P0-P4)"
        raise typer.BadParameter(msg) from None
    if not 0 <= priority <= 4:
        msg = f"Priority must be between 0 and 4, got {priority}"
        raise typer.BadParameter(msg)
    return priority


def register(app: typer.Typer) -> None:
    """Register update command."""

    @app.command()
    def update(
        issue_id: str = typer.Argument(..., help="Issue ID"),
        title: str | None = typer.Option(None, "--title", help="New title"),
        status: str | None = typer.Option(
            None,
            "--status",
            help="New status (open, in_progress, closed)",
        ),
        priority: str | None = typer.Option(
            None,
            "--priority",
            "-p",
            help="New priority (0-4 or P0-P4)",
        ),
        assignee: str | None = typer.Option(None, "--assignee", help="New assignee"),
        notes: str | None = typer.Option(None, "--notes", "-n", help="New notes"),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    ) -> None:
        """Edit an issue and save every editable field back to bd."""
        as_json = is_json_output(json_output)
        if status is not None and status not in _STATUSES:
            echo_error(f"Invalid status '{status}' (expected {', '.join(_STATUSES)})")
            raise typer.Exit(1)
        new_priority = _parse_priority(priority) if priority is not None else None

        session = get_session()
        edit = session.load_detail(issue_id)
        if edit is None:
            echo_error(session.error_message or f"Issue {issue_id} not found")
            raise typer.Exit(1)

        changes = {
            "title": title,
            "status": status,
            "priority": new_priority,
            "assignee": assignee,
            "notes": notes,
        }
        for name, value in changes.items():
            if value is not None:
                edit.set_field(name, value)

        if not edit.modified:
            typer.echo(f"No changes to {issue_id}")
            return

        try:
            session.save(edit)
        except SaveFailed as e:
            echo_error(str(e))
            raise typer.Exit(1) from e

        if as_json:
            echo_json(issue_to_dict(edit.issue))
            return
        typer.echo(f"✓ Updated {issue_id}: {edit.issue.title}")
