"""Per-refresh memo of full issue details."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from beadui.gateway import Gateway
    from beadui.models import Issue

logger = logging.getLogger(__name__)


class SnapshotCache:
    """Memoizes ``gateway.get`` results between two refreshes.

    Each issue id is fetched from the gateway at most once per snapshot.
    Failed fetches are not stored, so the next lookup tries again.
    ``clear()`` must run at the start of every refresh.
    """

    def __init__(self, gateway: Gateway) -> None:
        self.gateway = gateway
        self.get_issue_cache: dict[str, Issue] = {}
        # issue id -> (source directory name, location hint)
        self.issue_sources: dict[str, tuple[str, Path | None]] = {}
        self.fetch_count = 0

    def clear(self) -> None:
        """Drop every memoized issue and source registration."""
        self.get_issue_cache.clear()
        self.issue_sources.clear()

    def register_issue_source(
        self,
        issue_id: str,
        source_directory: str,
        location: Path | None,
    ) -> None:
        """Remember where *issue_id* came from so a miss re-fetches there."""
        self.issue_sources[issue_id] = (source_directory, location)

    def source_of(self, issue_id: str) -> tuple[str, Path | None] | None:
        """Return the registered ``(source_directory, location)`` for an id."""
        return self.issue_sources.get(issue_id)

    def invalidate(self, issue_id: str) -> None:
        """Forget the memoized detail for one issue."""
        self.get_issue_cache.pop(issue_id, None)

    def __contains__(self, issue_id: object) -> bool:
        return issue_id in self.get_issue_cache

    def get_issue(self, issue_id: str) -> Issue:
        """Return the full detail for *issue_id*.

        Raises:
            GatewayError: If the issue is not memoized and the fetch fails.
        """
        cached = self.get_issue_cache.get(issue_id)
        if cached is not None:
            return cached

        source = self.issue_sources.get(issue_id)
        location = source[1] if source else None
        self.fetch_count += 1
        logger.debug("cache miss for %s (location=%s)", issue_id, location)
        issue = self.gateway.get(issue_id, location)
        self.get_issue_cache[issue_id] = issue
        return issue
