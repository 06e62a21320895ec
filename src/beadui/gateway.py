"""Subprocess gateway to the external ``bd`` issue store."""

from __future__ import annotations

import logging
import os
import subprocess
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

import orjson

from beadui.constants import (
    BD_COMMAND,
    BD_COMMAND_ENV,
    BD_TIMEOUT_ENV,
    BD_TIMEOUT_SECONDS,
    BEADS_DB_SUFFIX,
    BEADS_DIRNAME,
)
from beadui.errors import GatewayRejected, GatewayUnavailable, MalformedResponse
from beadui.models import dict_to_issue

if TYPE_CHECKING:
    from beadui.models import Issue

logger = logging.getLogger(__name__)


class Gateway(Protocol):
    """What the engine needs from an issue store.

    Every method raises a :class:`beadui.errors.GatewayError` subclass on
    failure. ``location`` is an optional directory hint.
    """

    def list(self, location: Path | None = None) -> list[Issue]:
        """List every issue visible at *location*."""
        ...

    def get(self, issue_id: str, location: Path | None = None) -> Issue:
        """Fetch one issue with its direct blockers."""
        ...

    def update(
        self,
        issue_id: str,
        field: str,
        value: str,
        location: Path | None = None,
    ) -> None:
        """Set a single field on an issue."""
        ...


def resolve_db_path(location: Path | None) -> Path | None:
    """Find the database file for a directory.

    Looks for the first ``*.db`` file inside ``<location>/.beads``.

    Returns:
        Path to the database file, or None if the directory has none.
    """
    if location is None:
        return None
    beads_dir = Path(location) / BEADS_DIRNAME
    try:
        candidates = sorted(
            entry
            for entry in beads_dir.iterdir()
            if entry.suffix == BEADS_DB_SUFFIX and entry.is_file()
        )
    except OSError:
        return None
    return candidates[0] if candidates else None


def _default_timeout() -> float:
    raw = os.environ.get(BD_TIMEOUT_ENV, "").strip()
    if not raw:
        return BD_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", BD_TIMEOUT_ENV, raw)
        return BD_TIMEOUT_SECONDS


class BdGateway:
    """Gateway implementation that shells out to the ``bd`` CLI."""

    def __init__(
        self,
        command: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            command: Executable to run (default: ``$BEADUI_BD`` or ``bd``)
            timeout: Seconds before a call is abandoned (default: 30, or
                ``$BEADUI_BD_TIMEOUT``)
        """
        self.command = command or os.environ.get(BD_COMMAND_ENV) or BD_COMMAND
        self.timeout = _default_timeout() if timeout is None else timeout

    def build_args(self, args: list[str], location: Path | None = None) -> list[str]:
        """Build the argv for a bd invocation, adding ``--db`` when resolvable."""
        argv = [self.command, *args]
        db_path = resolve_db_path(location)
        if db_path is not None:
            argv.extend(["--db", str(db_path)])
        return argv

    def _run(self, argv: list[str]) -> str:
        """Run bd and return its stdout, mapping failures to gateway errors."""
        started = time.monotonic()
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            msg = f"{self.command} timed out after {self.timeout:g}s"
            raise GatewayUnavailable(msg) from e
        except OSError as e:
            msg = f"Failed to execute {self.command}: {e}"
            raise GatewayUnavailable(msg) from e
        finally:
            logger.debug(
                "ran %s in %.1fms",
                " ".join(argv),
                (time.monotonic() - started) * 1000,
            )

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            raise GatewayRejected(
                detail or f"{self.command} exited with status {result.returncode}",
                returncode=result.returncode,
            )
        return result.stdout

    @staticmethod
    def _decode(output: str) -> Any:
        try:
            return orjson.loads(output)
        except orjson.JSONDecodeError as e:
            msg = f"Failed to parse JSON: {e}"
            raise MalformedResponse(msg) from e

    @staticmethod
    def _to_issue(record: Any) -> Issue:
        try:
            return dict_to_issue(record)
        except (TypeError, ValueError) as e:
            msg = f"Unexpected issue record: {e}"
            raise MalformedResponse(msg) from e

    def list(self, location: Path | None = None) -> list[Issue]:
        """List every issue visible at *location*."""
        payload = self._decode(self._run(self.build_args(["list", "--json"], location)))
        if payload is None:
            return []
        if not isinstance(payload, list):
            msg = f"Expected a JSON array from list, got {type(payload).__name__}"
            raise MalformedResponse(msg)
        return [self._to_issue(record) for record in payload]

    def get(self, issue_id: str, location: Path | None = None) -> Issue:
        """Fetch one issue with its direct blockers.

        ``bd show --json`` prints either the object itself or a one-element
        array depending on the bd version; both are accepted.
        """
        output = self._run(self.build_args(["show", issue_id, "--json"], location))
        payload = self._decode(output)
        if isinstance(payload, list):
            if not payload:
                msg = f"Issue {issue_id} not found in show output"
                raise MalformedResponse(msg)
            payload = payload[0]
        return self._to_issue(payload)

    def update(
        self,
        issue_id: str,
        field: str,
        value: str,
        location: Path | None = None,
    ) -> None:
        """Set a single field on an issue."""
        self._run(self.build_args(["update", issue_id, f"--{field}", value], location))
