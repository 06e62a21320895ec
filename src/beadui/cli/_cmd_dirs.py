"""Directory registry commands for the beadui CLI."""

from __future__ import annotations

from pathlib import Path

import typer

from beadui.config import load_app_config, normalize_path, save_app_config

from ._helpers import SortedGroup
from ._json_state import echo_error, echo_json, is_json_output

# Sub-app for 'beadui dirs' subcommands
dirs_app = typer.Typer(
    help="Manage the directories beadui reads issues from.",
    no_args_is_help=True,
    cls=SortedGroup,
)


def _set_visibility(path: str, visible: bool) -> None:
    config = load_app_config()
    directory = config.find(path)
    if directory is None:
        echo_error(f"Directory {normalize_path(path)} is not registered")
        raise typer.Exit(1)
    if config.set_visible(path, visible):
        save_app_config(config)
    state = "visible" if visible else "hidden"
    typer.echo(f"✓ {directory.display_name} is {state}")


def register(app: typer.Typer) -> None:
    """Register dirs commands."""
    app.add_typer(dirs_app, name="dirs")

    @dirs_app.command("list")
    def dirs_list(
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    ) -> None:
        """List registered directories."""
        config = load_app_config()
        if is_json_output(json_output):
            echo_json(
                [
                    {
                        "path": str(d.path),
                        "visible": d.visible,
                        "display_name": d.display_name,
                    }
                    for d in config.directories
                ],
            )
            return
        if not config.directories:
            typer.echo("No directories registered")
            return
        for d in config.directories:
            marker = "●" if d.visible else "○"
            typer.echo(f"{marker} {d.display_name}  {d.path}")

    @dirs_app.command("add")
    def dirs_add(
        path: str = typer.Argument(".", help="Directory containing a .beads store"),
        hidden: bool = typer.Option(False, "--hidden", help="Register as hidden"),
    ) -> None:
        """Register a directory."""
        if not Path(path).expanduser().is_dir():
            echo_error(f"{path} is not a directory")
            raise typer.Exit(1)
        config = load_app_config()
        if not config.add_directory(path, visible=not hidden):
            typer.echo(f"{normalize_path(path)} is already registered")
            return
        save_app_config(config)
        added = config.find(path)
        name = added.display_name if added else path
        typer.echo(f"✓ Added {name}")

    @dirs_app.command("remove")
    def dirs_remove(
        path: str = typer.Argument(..., help="Registered directory"),
    ) -> None:
        """Unregister a directory."""
        config = load_app_config()
        if not config.remove_directory(path):
            echo_error(f"Directory {normalize_path(path)} is not registered")
            raise typer.Exit(1)
        save_app_config(config)
        typer.echo(f"✓ Removed {normalize_path(path)}")

    @dirs_app.command("show")
    def dirs_show(
        path: str = typer.Argument(..., help="Registered directory"),
    ) -> None:
        """Include a directory's issues."""
        _set_visibility(path, visible=True)

    @dirs_app.command("hide")
    def dirs_hide(
        path: str = typer.Argument(..., help="Registered directory"),
    ) -> None:
        """Exclude a directory's issues."""
        _set_visibility(path, visible=False)
