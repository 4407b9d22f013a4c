"""
Exit eligibility.

A validator may broadcast a voluntary exit only after it has been active
for the shard committee period. The rule is a pure function of three
numbers:

    eligible_at_epoch = activation_epoch + shard_committee_period
    eligible          = current_epoch >= eligible_at_epoch

The boundary is inclusive.

Verdicts are cheap to compute and must be recomputed right before any exit
action. The wait estimate on NotEligible is informational only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from validator_exit.subsystems.beacon.validator import Validator
from validator_exit.subsystems.chain.config import MAINNET_CONFIG, ChainConfig, Epoch


@dataclass(frozen=True, slots=True)
class Eligible:
    """The validator may exit now."""

    def describe(self) -> str:
        return "Eligible for exit"


@dataclass(frozen=True, slots=True)
class NotEligible:
    """The validator has not been active long enough."""

    eligible_at_epoch: Epoch
    """First epoch at which an exit is accepted."""

    estimated_wait: timedelta
    """Approximate wall-clock time until that epoch."""

    @property
    def wait_display(self) -> str:
        return format_wait(self.estimated_wait)

    def describe(self) -> str:
        return f"Not eligible until epoch {self.eligible_at_epoch} ({self.wait_display})"


@dataclass(frozen=True, slots=True)
class Unknown:
    """The activation epoch is not known yet, so eligibility cannot be computed."""

    def describe(self) -> str:
        return "Unknown"


EligibilityVerdict = Eligible | NotEligible | Unknown
"""Result of an eligibility check."""


def format_wait(wait: timedelta) -> str:
    """
    Render a wait estimate for operators.

    Minutes are truncated. Waits of an hour or more show hours and minutes.

    Examples:
        25 min 36 s -> "~25m"
        3 h 12 min  -> "~3h 12m"
    """
    total_minutes = int(wait.total_seconds()) // 60
    hours, minutes = divmod(total_minutes, 60)
    if hours > 0:
        return f"~{hours}h {minutes}m"
    return f"~{total_minutes}m"


def evaluate_eligibility(
    activation_epoch: Epoch | None,
    current_epoch: Epoch,
    config: ChainConfig = MAINNET_CONFIG,
) -> EligibilityVerdict:
    """
    Decide whether a validator activated at ``activation_epoch`` may exit.

    Args:
        activation_epoch: Activation epoch, or None if not yet known.
        current_epoch: Epoch of the chain head.
        config: Network timing constants.

    Returns:
        Unknown when activation is not known, Eligible from the eligibility
        epoch onward, NotEligible with a wait estimate before it.
    """
    if activation_epoch is None:
        return Unknown()

    eligible_at = activation_epoch + config.shard_committee_period
    if current_epoch >= eligible_at:
        return Eligible()

    remaining_epochs = eligible_at - current_epoch
    wait = timedelta(seconds=remaining_epochs * config.seconds_per_epoch)
    return NotEligible(eligible_at_epoch=eligible_at, estimated_wait=wait)


@dataclass(frozen=True, slots=True)
class EligibilityEvaluator:
    """Applies the eligibility rule with a network's timing constants."""

    config: ChainConfig = MAINNET_CONFIG
    """Network timing constants."""

    def evaluate(self, validator: Validator | None, current_epoch: Epoch) -> EligibilityVerdict:
        """
        Evaluate one validator at ``current_epoch``.

        A validator unknown to the chain has no activation epoch and
        evaluates to Unknown.
        """
        activation = validator.activation_epoch if validator is not None else None
        return evaluate_eligibility(activation, current_epoch, self.config)
