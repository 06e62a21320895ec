"""Shared infrastructure for beadui CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from typer.core import TyperGroup

from beadui.config import (
    ensure_directory_registered,
    get_config_path,
    load_app_config,
    save_app_config,
)
from beadui.gateway import BdGateway
from beadui.query import Column
from beadui.session import IssueSession

if TYPE_CHECKING:
    import click

    from beadui.config import AppConfig
    from beadui.gateway import Gateway

logger = logging.getLogger(__name__)


class SortedGroup(TyperGroup):
    """Typer group that lists commands in alphabetical order."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return commands sorted alphabetically."""
        return sorted(super().list_commands(ctx))


def get_gateway() -> Gateway:
    """Return the gateway used by CLI commands."""
    return BdGateway()


def load_config_registering_cwd() -> AppConfig:
    """Load the directory registry, adding the working directory on first use.

    A failure to write the updated registry is logged, not raised.
    """
    config = load_app_config()
    if ensure_directory_registered(config, Path.cwd()):
        try:
            save_app_config(config)
        except OSError as e:
            logger.warning("Could not save config %s: %s", get_config_path(), e)
    return config


def get_session(*, refresh: bool = True) -> IssueSession:
    """Build a session over the configured directories.

    Args:
        refresh: Load the snapshot immediately.
    """
    session = IssueSession(load_config_registering_cwd(), get_gateway())
    if refresh:
        session.refresh()
    return session


def parse_column(name: str) -> Column:
    """Typer parser for column names."""
    try:
        return Column.parse(name)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def parse_exclude(raw: str) -> tuple[Column, str]:
    """Parse a ``COLUMN=VALUE`` exclusion.

    Raises:
        typer.BadParameter: If the format or column is invalid.
    """
    if "=" not in raw:
        msg = f"Expected COLUMN=VALUE, got '{raw}'"
        raise typer.BadParameter(msg)
    name, value = raw.split("=", 1)
    return parse_column(name), value
