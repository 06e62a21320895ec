"""Dependency tracking: dependents graph, blocker counts and readiness."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from beadui.constants import STATUS_CLOSED, STATUS_IN_PROGRESS
from beadui.errors import GatewayError
from beadui.models import Readiness

if TYPE_CHECKING:
    from collections.abc import Iterable

    from beadui.cache import SnapshotCache
    from beadui.models import Issue

logger = logging.getLogger(__name__)


def build_dependents_map(
    issues: Iterable[Issue],
    cache: SnapshotCache,
) -> dict[str, list[str]]:
    """Build the reverse dependency relation for a set of issues.

    Listed issues may come without dependencies, so the full detail of each
    one is loaded through the cache. Issues whose detail cannot be fetched
    contribute no edges.

    Args:
        issues: The aggregated issue list
        cache: Snapshot cache used to load full details

    Returns:
        Mapping of blocker id to the ids of issues that depend on it,
        in aggregation order
    """
    dependents: dict[str, list[str]] = {}

    for issue in issues:
        try:
            full_issue = cache.get_issue(issue.id)
        except GatewayError as e:
            logger.debug("skipping dependents of %s: %s", issue.id, e)
            continue
        for dep in full_issue.dependencies:
            dependents.setdefault(dep.id, []).append(issue.id)

    return dependents


def get_blockers_count(cache: SnapshotCache, issue_id: str) -> int:
    """Count the dependencies of an issue that are not closed.

    Returns 0 if the issue's detail cannot be fetched.
    """
    try:
        full_issue = cache.get_issue(issue_id)
    except GatewayError:
        return 0
    return len(full_issue.open_blockers())


def get_dependents_count(dependents_map: dict[str, list[str]], issue_id: str) -> int:
    """Count the issues that list *issue_id* as a blocker."""
    return len(dependents_map.get(issue_id, ()))


def readiness_for(status: str, blockers_count: int) -> Readiness:
    """Derive readiness from a status and its number of open blockers.

    Closed and in-progress issues keep their status. Every other status is
    blocked if anything still blocks it, otherwise ready.
    """
    if status == STATUS_CLOSED:
        return Readiness.CLOSED
    if status == STATUS_IN_PROGRESS:
        return Readiness.IN_PROGRESS
    if blockers_count > 0:
        return Readiness.BLOCKED
    return Readiness.READY


def get_readiness(issue: Issue, cache: SnapshotCache) -> Readiness:
    """Compute the readiness of an issue.

    Blockers are only looked up for issues that are neither closed nor in
    progress.
    """
    if issue.status in (STATUS_CLOSED, STATUS_IN_PROGRESS):
        return readiness_for(issue.status, 0)
    return readiness_for(issue.status, get_blockers_count(cache, issue.id))
