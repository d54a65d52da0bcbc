"""
services/models.py

Responsibility: Defines the value objects passed between the resolver, the
dispatcher, the reconciliation run and the scheduler.
Does NOT: make HTTP calls, cache identifiers, or log.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from exceptions import DdnsError


@dataclass(frozen=True)
class ResolvedName:
    """A zone or record name together with its provider identifier."""

    logical_name: str
    provider_id: str

    # True when the identifier came from the IdentifierCache, not the provider
    cached: bool = False


@dataclass(frozen=True)
class UpdateOutcome:
    """
    The result of one "set address" call.

    Exactly one of `address` (the content the provider confirmed) and
    `error` is set.
    """

    record_name: str
    provider_id: str
    address: str | None = None
    error: DdnsError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class RunResult:
    """
    The aggregate of one reconciliation pass that reached update dispatch.

    Runs that fail before dispatch raise instead of returning a RunResult.
    """

    public_ip: str
    zone: ResolvedName
    outcomes: list[UpdateOutcome] = field(default_factory=list)

    # Wall-clock duration of the run in seconds
    duration: float = 0.0

    @property
    def failures(self) -> list[UpdateOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        """
        Raises the first failed outcome's error, if any update failed.

        Any single failed update makes the whole run a failure.

        Raises:
            DdnsError: The error recorded on the first failed outcome.
        """
        failures = self.failures
        if failures:
            raise failures[0].error  # type: ignore[misc]
