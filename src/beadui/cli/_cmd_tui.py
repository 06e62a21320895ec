"""TUI dashboard command for the beadui CLI."""

from __future__ import annotations

import typer


def register(app: typer.Typer) -> None:
    """Register the tui command."""

    @app.command("tui")
    def tui() -> None:
        """Launch the interactive dashboard."""
        from beadui.cli._helpers import get_session
        from beadui.tui.dashboard import BeadUITUI

        session = get_session(refresh=False)
        BeadUITUI(session).run()
