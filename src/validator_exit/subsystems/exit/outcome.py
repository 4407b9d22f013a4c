"""Per-validator outcomes and the aggregate summary of an exit run."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, auto

from validator_exit.subsystems.eligibility import NotEligible


class SkipReason(Enum):
    """Why a selected validator was not exited."""

    ALREADY_EXITED = "already-exited"
    NOT_ACTIVE = "not-active"
    NOT_YET_ELIGIBLE = "not-yet-eligible"


class RunStatus(Enum):
    """How a run ended."""

    COMPLETED = auto()
    """Every selected validator was processed."""

    CANCELLED = auto()
    """The operator did not confirm. Nothing was broadcast."""

    NOTHING_ELIGIBLE = auto()
    """No selected validator was eligible, so confirmation was never asked."""


@dataclass(frozen=True, slots=True)
class Succeeded:
    """The exit was signed and broadcast."""


@dataclass(frozen=True, slots=True)
class Failed:
    """The exit could not be broadcast."""

    reason: str


@dataclass(frozen=True, slots=True)
class Skipped:
    """The validator was left alone."""

    reason: SkipReason

    detail: str = ""
    """Extra context such as the observed status."""

    verdict: NotEligible | None = None
    """Wait estimate when skipped as not yet eligible."""


ExitOutcome = Succeeded | Failed | Skipped
"""Result of processing one validator."""


@dataclass(frozen=True, slots=True)
class ItemResult:
    """Outcome for one selected validator."""

    identity: str
    outcome: ExitOutcome


@dataclass(frozen=True, slots=True)
class ExitSummary:
    """
    Aggregate result of a run.

    For a completed run the three counts always add up to the number of
    selected validators.
    """

    status: RunStatus
    items: tuple[ItemResult, ...] = field(default=())

    @classmethod
    def from_items(cls, items: Sequence[ItemResult]) -> ExitSummary:
        return cls(status=RunStatus.COMPLETED, items=tuple(items))

    def _count(self, kind: type) -> int:
        return sum(1 for item in self.items if isinstance(item.outcome, kind))

    @property
    def succeeded(self) -> int:
        return self._count(Succeeded)

    @property
    def failed(self) -> int:
        return self._count(Failed)

    @property
    def skipped(self) -> int:
        return self._count(Skipped)

    @property
    def total(self) -> int:
        return len(self.items)
