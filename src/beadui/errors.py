"""Exception types raised by the beadui engine."""

from __future__ import annotations


class BeadUIError(Exception):
    """Base class for all beadui errors."""


class GatewayError(BeadUIError):
    """A call to the external issue store failed."""


class GatewayUnavailable(GatewayError):
    """The bd process could not be started or did not finish in time."""


class GatewayRejected(GatewayError):
    """The bd process ran but exited with a non-zero status."""

    def __init__(self, diagnostic: str, returncode: int | None = None) -> None:
        super().__init__(diagnostic)
        self.diagnostic = diagnostic
        self.returncode = returncode


class MalformedResponse(GatewayError):
    """The bd process printed something that is not a valid issue payload."""


class SaveFailed(BeadUIError):
    """One or more field updates failed while saving an issue.

    ``failures`` holds ``(field, detail)`` pairs in the order they were tried.
    """

    def __init__(self, failures: list[tuple[str, str]]) -> None:
        self.failures = failures
        joined = ", ".join(f"{name}: {detail}" for name, detail in failures)
        super().__init__(f"Failed to save: {joined}")

    @property
    def fields(self) -> list[str]:
        """Names of the fields that failed."""
        return [name for name, _ in self.failures]
