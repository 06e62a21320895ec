"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from beadui.config import AppConfig
from beadui.errors import GatewayRejected, GatewayUnavailable
from beadui.models import Issue, dict_to_issue


def make_record(
    issue_id: str,
    title: str | None = None,
    *,
    status: str = "open",
    priority: int = 2,
    assignee: str | None = None,
    blockers: list[tuple[str, str]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a bd JSON record; ``blockers`` holds ``(id, status)`` pairs."""
    record: dict[str, Any] = {
        "id": issue_id,
        "title": title if title is not None else f"Issue {issue_id}",
        "status": status,
        "priority": priority,
        "issue_type": "task",
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-02T00:00:00Z",
    }
    if assignee is not None:
        record["assignee"] = assignee
    if blockers:
        record["dependencies"] = [
            {"id": dep_id, "title": f"Issue {dep_id}", "status": dep_status}
            for dep_id, dep_status in blockers
        ]
    record.update(extra)
    return record


class FakeGateway:
    """In-memory gateway that records every call.

    Listings omit dependencies, like ``bd list``; ``get`` returns them.
    Successful updates are applied so a refresh after save sees them.
    """

    def __init__(self) -> None:
        self.listings: dict[Path, list[str]] = {}
        self.records: dict[str, dict[str, Any]] = {}
        self.failing_lists: set[Path] = set()
        self.failing_gets: set[str] = set()
        self.failing_fields: set[str] = set()
        self.list_calls: list[Path | None] = []
        self.get_calls: list[tuple[str, Path | None]] = []
        self.update_calls: list[tuple[str, str, str, Path | None]] = []

    def add(self, location: Path, *records: dict[str, Any]) -> None:
        """Store records and list them under *location*."""
        for record in records:
            self.records[record["id"]] = record
            self.listings.setdefault(location, []).append(record["id"])

    def list(self, location: Path | None = None) -> list[Issue]:
        self.list_calls.append(location)
        if location in self.failing_lists:
            msg = "no beads database found"
            raise GatewayRejected(msg, returncode=1)
        issues: list[Issue] = []
        for issue_id in self.listings.get(location, []):  # type: ignore[arg-type]
            listed = {
                k: v for k, v in self.records[issue_id].items() if k != "dependencies"
            }
            issues.append(dict_to_issue(listed))
        return issues

    def get(self, issue_id: str, location: Path | None = None) -> Issue:
        self.get_calls.append((issue_id, location))
        if issue_id in self.failing_gets or issue_id not in self.records:
            msg = f"issue {issue_id} not found"
            raise GatewayRejected(msg, returncode=1)
        return dict_to_issue(self.records[issue_id])

    def update(
        self,
        issue_id: str,
        field: str,
        value: str,
        location: Path | None = None,
    ) -> None:
        self.update_calls.append((issue_id, field, value, location))
        if field in self.failing_fields:
            msg = f"{field} rejected"
            raise GatewayRejected(msg, returncode=1)
        if issue_id not in self.records:
            msg = "bd is not running"
            raise GatewayUnavailable(msg)
        self.records[issue_id][field] = int(value) if field == "priority" else value

    def fetches_of(self, issue_id: str) -> int:
        """Count ``get`` calls for one id."""
        return sum(1 for fetched, _ in self.get_calls if fetched == issue_id)

    def updated_fields(self) -> list[str]:
        """Field names passed to ``update``, in call order."""
        return [field for _, field, _, _ in self.update_calls]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config file at a temporary location."""
    config_path = tmp_path / "config" / "config.toml"
    monkeypatch.setenv("BEADUI_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def fake_gateway() -> FakeGateway:
    """Create an empty fake gateway."""
    return FakeGateway()


@pytest.fixture
def two_dirs(tmp_path: Path) -> tuple[Path, Path]:
    """Create two project directories sharing the base name ``repo``."""
    first = tmp_path / "a" / "repo"
    second = tmp_path / "b" / "repo"
    first.mkdir(parents=True)
    second.mkdir(parents=True)
    return first, second


@pytest.fixture
def populated(
    fake_gateway: FakeGateway,
    two_dirs: tuple[Path, Path],
) -> tuple[AppConfig, FakeGateway]:
    """Two directories of issues with a small dependency graph.

    a-2 is blocked by a-1 (open), a-3 by a-1 and b-1 (closed), and b-2 is
    in progress.
    """
    first, second = two_dirs
    fake_gateway.add(
        first,
        make_record("a-1", "Set up CI", priority=1, assignee="alice"),
        make_record("a-2", "Write docs", priority=3, blockers=[("a-1", "open")]),
        make_record(
            "a-3",
            "Release",
            priority=0,
            blockers=[("a-1", "open"), ("b-1", "closed")],
        ),
    )
    fake_gateway.add(
        second,
        make_record("b-1", "Old bug", status="closed", priority=2),
        make_record("b-2", "Refactor", status="in_progress", priority=2, assignee="bob"),
    )
    config = AppConfig()
    config.add_directory(first)
    config.add_directory(second)
    return config, fake_gateway
