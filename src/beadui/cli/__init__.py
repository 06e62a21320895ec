"""beadui CLI commands."""

from __future__ import annotations

import logging

import typer

from ._helpers import SortedGroup

app = typer.Typer(
    help="beadui - browse and edit bd issues across many directories",
    no_args_is_help=True,
    cls=SortedGroup,
)


@app.callback(invoke_without_command=True)
def _global_options(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON for all commands",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log every bd invocation to the log file",
    ),
) -> None:
    from beadui.config import get_config_path
    from beadui.logging import setup_logging

    from ._json_state import set_json_flag

    set_json_flag(json_output)
    try:
        setup_logging(
            get_config_path().parent,
            logging.DEBUG if verbose else logging.INFO,
        )
    except OSError as e:
        typer.echo(f"Warning: logging disabled: {e}", err=True)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


from . import (  # noqa: E402
    _cmd_dirs,
    _cmd_list,
    _cmd_show,
    _cmd_tui,
    _cmd_update,
)

for _mod in (
    _cmd_dirs,
    _cmd_list,
    _cmd_show,
    _cmd_tui,
    _cmd_update,
):
    _mod.register(app)


def main() -> None:
    """Run the beadui CLI application."""
    app()
