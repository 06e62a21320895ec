"""Tests for the dependents graph and readiness."""

from __future__ import annotations

from pathlib import Path

import pytest

from beadui.cache import SnapshotCache
from beadui.deps import (
    build_dependents_map,
    get_blockers_count,
    get_dependents_count,
    get_readiness,
    readiness_for,
)
from beadui.models import Issue, Readiness
from conftest import FakeGateway, make_record


@pytest.fixture
def graph(fake_gateway: FakeGateway, tmp_path: Path) -> tuple[list[Issue], SnapshotCache]:
    """x-2 and x-3 depend on x-1; x-3 also depends on closed x-4."""
    fake_gateway.add(
        tmp_path,
        make_record("x-1"),
        make_record("x-2", blockers=[("x-1", "open")]),
        make_record("x-3", blockers=[("x-1", "open"), ("x-4", "closed")]),
        make_record("x-4", status="closed"),
    )
    return fake_gateway.list(tmp_path), SnapshotCache(fake_gateway)


class TestBuildDependentsMap:
    """Test the reverse dependency relation."""

    def test_reverse_edges(self, graph: tuple[list[Issue], SnapshotCache]) -> None:
        """Blockers map to their dependents in aggregation order."""
        issues, cache = graph
        dependents = build_dependents_map(issues, cache)
        assert dependents == {"x-1": ["x-2", "x-3"], "x-4": ["x-3"]}

    def test_every_edge_is_a_dependency(
        self,
        graph: tuple[list[Issue], SnapshotCache],
    ) -> None:
        """Each dependent really lists the blocker it is filed under."""
        issues, cache = graph
        dependents = build_dependents_map(issues, cache)
        for blocker_id, dependent_ids in dependents.items():
            for dependent_id in dependent_ids:
                deps = cache.get_issue(dependent_id).dependencies
                assert blocker_id in [dep.id for dep in deps]

    def test_details_fetched_once(
        self,
        graph: tuple[list[Issue], SnapshotCache],
        fake_gateway: FakeGateway,
    ) -> None:
        """Counting blockers after the build reuses the cache."""
        issues, cache = graph
        build_dependents_map(issues, cache)
        for issue in issues:
            get_blockers_count(cache, issue.id)
        assert all(fake_gateway.fetches_of(i.id) == 1 for i in issues)

    def test_failed_fetch_contributes_nothing(
        self,
        graph: tuple[list[Issue], SnapshotCache],
        fake_gateway: FakeGateway,
    ) -> None:
        """Issues whose detail fails are skipped."""
        issues, cache = graph
        fake_gateway.failing_gets.add("x-3")
        dependents = build_dependents_map(issues, cache)
        assert dependents == {"x-1": ["x-2"]}


class TestCounts:
    """Test blocker and dependent counts."""

    def test_closed_blockers_not_counted(
        self,
        graph: tuple[list[Issue], SnapshotCache],
    ) -> None:
        """Only open blockers count."""
        _, cache = graph
        assert get_blockers_count(cache, "x-3") == 1
        assert get_blockers_count(cache, "x-1") == 0

    def test_failed_fetch_counts_zero(
        self,
        graph: tuple[list[Issue], SnapshotCache],
        fake_gateway: FakeGateway,
    ) -> None:
        """An unreachable issue has no known blockers."""
        _, cache = graph
        fake_gateway.failing_gets.add("x-2")
        assert get_blockers_count(cache, "x-2") == 0

    def test_dependents_count(self) -> None:
        """Missing keys count as zero."""
        dependents = {"x-1": ["x-2", "x-3"]}
        assert get_dependents_count(dependents, "x-1") == 2
        assert get_dependents_count(dependents, "x-9") == 0


class TestReadiness:
    """Test readiness derivation."""

    @pytest.mark.parametrize(
        ("status", "blockers", "expected"),
        [
            ("closed", 3, Readiness.CLOSED),
            ("in_progress", 2, Readiness.IN_PROGRESS),
            ("open", 1, Readiness.BLOCKED),
            ("open", 0, Readiness.READY),
            ("deferred", 0, Readiness.READY),
        ],
    )
    def test_readiness_for(self, status: str, blockers: int, expected: Readiness) -> None:
        """Status wins for closed and in-progress issues."""
        assert readiness_for(status, blockers) is expected

    def test_get_readiness_skips_lookup_for_closed(
        self,
        graph: tuple[list[Issue], SnapshotCache],
        fake_gateway: FakeGateway,
    ) -> None:
        """Closed issues need no detail fetch."""
        issues, cache = graph
        closed = next(i for i in issues if i.id == "x-4")
        assert get_readiness(closed, cache) is Readiness.CLOSED
        assert fake_gateway.fetches_of("x-4") == 0

    def test_get_readiness_blocked(self, graph: tuple[list[Issue], SnapshotCache]) -> None:
        """An open issue with an open blocker is blocked."""
        issues, cache = graph
        blocked = next(i for i in issues if i.id == "x-2")
        assert get_readiness(blocked, cache) is Readiness.BLOCKED
