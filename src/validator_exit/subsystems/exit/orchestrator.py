"""
Exit orchestrator.

Drives a batch of voluntary exits end to end.

Workflow
--------
1. **Preview**: evaluate every selected validator at the current epoch.
   If none is eligible, stop. There is nothing to confirm.
2. **Confirm**: hand the preview to the confirmation policy. Anything but
   an explicit yes cancels the batch before any side effect.
3. **Execute**, one validator at a time:

   - re-read status; exited or inactive validators are skipped
   - re-read the epoch and re-evaluate eligibility; not yet eligible is
     skipped, unknown activation proceeds
   - stage the keystore and broadcast the exit
   - pause briefly before the next validator

The chain keeps moving while the operator reads the preview, so nothing
computed in step 1 is reused in step 3.

Processing is strictly sequential. Errors for one validator become that
validator's outcome and never stop the batch.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from validator_exit.subsystems.beacon import BeaconStateReader, StatusClass, Validator
from validator_exit.subsystems.chain import ChainClock
from validator_exit.subsystems.eligibility import (
    Eligible,
    EligibilityEvaluator,
    EligibilityVerdict,
    NotEligible,
)
from validator_exit.subsystems.keystore import ValidatorDirectory, stage_keystore
from validator_exit.types import BroadcastFailed, ChainUnavailable, InvalidKeystore

from .broadcast import ExitBroadcaster, ExitRequest
from .outcome import (
    ExitOutcome,
    ExitSummary,
    Failed,
    ItemResult,
    RunStatus,
    SkipReason,
    Skipped,
    Succeeded,
)

logger = logging.getLogger(__name__)

DEFAULT_EXIT_DELAY = 2.0
"""Pause in seconds between two broadcasts."""


@dataclass(frozen=True, slots=True)
class ExitPreview:
    """Eligibility of one selected validator, shown before confirmation."""

    identity: str
    validator: Validator | None
    verdict: EligibilityVerdict

    @property
    def is_eligible(self) -> bool:
        return isinstance(self.verdict, Eligible)


class ConfirmationPolicy(Protocol):
    """Shows the preview to the operator and gates the batch on their answer."""

    def present(self, previews: Sequence[ExitPreview]) -> None:
        """Show the current eligibility of every selected validator."""
        ...

    def confirm(self, previews: Sequence[ExitPreview]) -> bool:
        """Return True only on explicit confirmation."""
        ...


class ExitObserver(Protocol):
    """Receives progress events while a batch executes."""

    def on_item_start(self, position: int, total: int, identity: str) -> None: ...

    def on_item_done(self, position: int, total: int, result: ItemResult) -> None: ...


@dataclass(slots=True)
class ExitOrchestrator:
    """Runs voluntary exits for a selection of validators."""

    reader: BeaconStateReader
    """Source of validator state."""

    clock: ChainClock
    """Source of the current epoch."""

    evaluator: EligibilityEvaluator
    """Eligibility rule."""

    directory: ValidatorDirectory
    """Keystore root holding the signing material."""

    broadcaster: ExitBroadcaster
    """External signer and submitter."""

    network_dir: Path
    """Network definition directory passed to the signer."""

    beacon_url: str
    """Beacon node the signer submits to."""

    exit_delay: float = DEFAULT_EXIT_DELAY
    """Pause in seconds between validators."""

    sleep: Callable[[float], None] = field(default=time.sleep)
    """Sleep function (injectable for testing)."""

    observer: ExitObserver | None = None
    """Optional progress listener."""

    def preview(self, identities: Sequence[str]) -> list[ExitPreview]:
        """
        Evaluate every identity at the current epoch.

        Raises:
            ChainUnavailable: If the node cannot be queried.
        """
        current_epoch = self.clock.current_epoch()
        previews = []
        for identity in identities:
            validator = self.reader.get_state(identity)
            verdict = self.evaluator.evaluate(validator, current_epoch)
            previews.append(ExitPreview(identity=identity, validator=validator, verdict=verdict))
        return previews

    def run(
        self,
        identities: Sequence[str],
        confirmation_policy: ConfirmationPolicy,
    ) -> ExitSummary:
        """
        Preview, confirm, then exit every selected validator.

        Args:
            identities: Selected public keys, in processing order.
            confirmation_policy: Shows the preview and gates the batch once.

        Returns:
            The run summary. Only a COMPLETED summary carries items.

        Raises:
            ChainUnavailable: If the preview cannot be computed.
        """
        previews = self.preview(identities)
        confirmation_policy.present(previews)

        if not any(preview.is_eligible for preview in previews):
            logger.info("No selected validator is currently eligible for exit")
            return ExitSummary(status=RunStatus.NOTHING_ELIGIBLE)

        if not confirmation_policy.confirm(previews):
            logger.info("Exit cancelled by operator")
            return ExitSummary(status=RunStatus.CANCELLED)

        total = len(identities)
        items: list[ItemResult] = []
        for position, identity in enumerate(identities, start=1):
            if self.observer is not None:
                self.observer.on_item_start(position, total, identity)

            result = ItemResult(identity=identity, outcome=self.process(identity))
            items.append(result)

            if self.observer is not None:
                self.observer.on_item_done(position, total, result)

            # Back-pressure between broadcasts. Not needed after the last one.
            if position < total and isinstance(result.outcome, Succeeded | Failed):
                self.sleep(self.exit_delay)

        summary = ExitSummary.from_items(items)
        logger.info(
            "Exit run complete: %d succeeded, %d failed, %d skipped",
            summary.succeeded,
            summary.failed,
            summary.skipped,
        )
        return summary

    def process(self, identity: str) -> ExitOutcome:
        """
        Re-check and exit a single validator.

        Never raises for per-validator problems. They become the outcome.
        """
        try:
            validator = self.reader.get_state(identity)
        except ChainUnavailable as exc:
            logger.warning("Cannot read state of %s: %s", identity, exc)
            return Failed(reason=str(exc))

        if validator is None:
            return Skipped(reason=SkipReason.NOT_ACTIVE, detail="unknown to the chain")

        match validator.status.classify():
            case StatusClass.ALREADY_EXITED:
                return Skipped(reason=SkipReason.ALREADY_EXITED, detail=validator.status.value)
            case StatusClass.NOT_ACTIVE:
                return Skipped(reason=SkipReason.NOT_ACTIVE, detail=validator.status.value)
            case StatusClass.ACTIONABLE:
                pass

        # Fresh epoch: the preview's epoch may be stale by now.
        try:
            current_epoch = self.clock.current_epoch()
        except ChainUnavailable as exc:
            logger.warning("Cannot read current epoch: %s", exc)
            return Failed(reason=str(exc))

        verdict = self.evaluator.evaluate(validator, current_epoch)
        if isinstance(verdict, NotEligible):
            return Skipped(
                reason=SkipReason.NOT_YET_ELIGIBLE,
                detail=verdict.describe(),
                verdict=verdict,
            )

        # Eligible or Unknown. Unknown proceeds: the node may simply be slow
        # to index the activation, and the chain rejects early exits anyway.
        return self._broadcast(identity)

    def _broadcast(self, identity: str) -> ExitOutcome:
        try:
            with stage_keystore(self.directory, identity) as staged:
                logger.info("Broadcasting voluntary exit for %s", identity)
                self.broadcaster.broadcast(
                    ExitRequest(
                        keystore=staged,
                        network_dir=self.network_dir,
                        beacon_url=self.beacon_url,
                    )
                )
        except (InvalidKeystore, BroadcastFailed) as exc:
            logger.error("Exit failed for %s: %s", identity, exc)
            return Failed(reason=exc.message)
        return Succeeded()
