"""Tests for the exit orchestrator."""

import errno
import shutil

import pytest

from tests.validator_exit.subsystems.exit.conftest import (
    HEAD_EPOCH,
    IDENTITIES,
    Harness,
    StubPolicy,
)
from validator_exit.subsystems.eligibility import Eligible, NotEligible, Unknown
from validator_exit.subsystems.exit import (
    Failed,
    ItemResult,
    RunStatus,
    SkipReason,
    Skipped,
    Succeeded,
)
from validator_exit.types import ChainUnavailable

A, B, C, D, E = IDENTITIES

EXITED_STATUSES = ["exited_unslashed", "exited_slashed", "withdrawal_possible", "withdrawal_done"]


class TestPreview:
    """Tests for preview()."""

    def test_verdicts_at_current_epoch(self, harness: Harness) -> None:
        """Each identity is evaluated at the head epoch."""
        harness.beacon.add(A, activation_epoch=0)
        harness.beacon.add(B, activation_epoch=HEAD_EPOCH - 255)

        previews = harness.orchestrator.preview([A, B, C])

        assert [p.identity for p in previews] == [A, B, C]
        assert previews[0].verdict == Eligible()
        assert isinstance(previews[1].verdict, NotEligible)
        assert previews[2].validator is None
        assert previews[2].verdict == Unknown()
        assert [p.is_eligible for p in previews] == [True, False, False]

    def test_chain_unavailable_propagates(self, harness: Harness) -> None:
        """Preview needs the chain."""
        harness.beacon.down = True
        with pytest.raises(ChainUnavailable):
            harness.orchestrator.preview([A])


class TestConfirmationGate:
    """Tests for the confirmation gate in run()."""

    def test_declined_broadcasts_nothing(self, harness: Harness) -> None:
        """Without confirmation nothing is broadcast."""
        harness.beacon.add(A)
        policy = StubPolicy(answer=False)

        summary = harness.orchestrator.run([A], policy)

        assert summary.status is RunStatus.CANCELLED
        assert summary.items == ()
        assert harness.broadcaster.calls == []
        assert policy.asked == 1

    def test_nothing_eligible_never_asks(self, harness: Harness) -> None:
        """Confirmation is skipped when no validator is eligible."""
        harness.beacon.add(A, activation_epoch=HEAD_EPOCH)
        harness.beacon.add(B, status="exited_unslashed", activation_epoch=None)
        policy = StubPolicy()

        summary = harness.orchestrator.run([A, B, C], policy)

        assert summary.status is RunStatus.NOTHING_ELIGIBLE
        assert policy.asked == 0
        assert len(policy.presented) == 1
        assert harness.broadcaster.calls == []

    def test_preview_presented_before_confirmation(self, harness: Harness) -> None:
        """The policy sees the preview of every selected validator."""
        harness.beacon.add(A)
        harness.beacon.add(B)
        policy = StubPolicy()

        harness.orchestrator.run([A, B], policy)

        assert [p.identity for p in policy.presented[0]] == [A, B]


class TestExecution:
    """Tests for the execution phase of run()."""

    def test_all_succeed(self, harness: Harness) -> None:
        """Every eligible validator is broadcast in order."""
        for identity in (A, B, C):
            harness.beacon.add(identity)

        summary = harness.orchestrator.run([C, A, B], StubPolicy())

        assert summary.status is RunStatus.COMPLETED
        assert harness.broadcaster.calls == [C, A, B]
        assert summary.succeeded == 3
        assert [item.identity for item in summary.items] == [C, A, B]

    @pytest.mark.parametrize("status", EXITED_STATUSES)
    def test_already_exited_is_skipped(self, harness: Harness, status: str) -> None:
        """Exited validators are skipped even though they are eligible by epoch."""
        harness.beacon.add(A)
        harness.beacon.add(B, status=status, activation_epoch=0)

        summary = harness.orchestrator.run([A, B], StubPolicy())

        assert harness.broadcaster.calls == [A]
        assert summary.items[1] == ItemResult(
            identity=B, outcome=Skipped(reason=SkipReason.ALREADY_EXITED, detail=status)
        )

    @pytest.mark.parametrize("status", ["pending_queued", "active_exiting", "something_new"])
    def test_not_active_is_skipped(self, harness: Harness, status: str) -> None:
        """Validators that are not actionable are skipped."""
        harness.beacon.add(A)
        harness.beacon.add(B, status=status)

        summary = harness.orchestrator.run([A, B], StubPolicy())

        assert harness.broadcaster.calls == [A]
        outcome = summary.items[1].outcome
        assert isinstance(outcome, Skipped)
        assert outcome.reason is SkipReason.NOT_ACTIVE

    def test_unknown_to_chain_is_skipped(self, harness: Harness) -> None:
        """A key the chain does not know is skipped as not active."""
        harness.beacon.add(A)

        summary = harness.orchestrator.run([A, B], StubPolicy())

        assert summary.items[1].outcome == Skipped(
            reason=SkipReason.NOT_ACTIVE, detail="unknown to the chain"
        )

    def test_not_yet_eligible_is_skipped(self, harness: Harness) -> None:
        """Validators short of the committee period are skipped with their wait."""
        harness.beacon.add(A)
        harness.beacon.add(B, activation_epoch=HEAD_EPOCH - 254)

        summary = harness.orchestrator.run([A, B], StubPolicy())

        outcome = summary.items[1].outcome
        assert isinstance(outcome, Skipped)
        assert outcome.reason is SkipReason.NOT_YET_ELIGIBLE
        assert outcome.verdict is not None
        assert outcome.verdict.eligible_at_epoch == HEAD_EPOCH + 2
        assert harness.broadcaster.calls == [A]

    def test_unknown_activation_proceeds(self, harness: Harness) -> None:
        """An active validator without an activation epoch is still broadcast."""
        harness.beacon.add(A)
        harness.beacon.add(B, activation_epoch=None)

        summary = harness.orchestrator.run([A, B], StubPolicy())

        assert harness.broadcaster.calls == [A, B]
        assert summary.succeeded == 2

    def test_failure_does_not_stop_batch(self, harness: Harness) -> None:
        """A failed broadcast is recorded and the next validator still runs."""
        for identity in (A, B, C):
            harness.beacon.add(identity)
        harness.broadcaster.fail_for.add(B)

        summary = harness.orchestrator.run([A, B, C], StubPolicy())

        assert harness.broadcaster.calls == [A, B, C]
        assert summary.items[1].outcome == Failed(reason="lighthouse exited with code 1")
        assert (summary.succeeded, summary.failed, summary.skipped) == (2, 1, 0)

    def test_missing_password_fails_item(self, harness: Harness) -> None:
        """Missing signing material fails only that validator."""
        harness.beacon.add(A)
        harness.beacon.add(B)
        harness.orchestrator.directory.password_path(A).unlink()

        summary = harness.orchestrator.run([A, B], StubPolicy())

        outcome = summary.items[0].outcome
        assert isinstance(outcome, Failed)
        assert "Password file not found" in outcome.reason
        assert harness.broadcaster.calls == [B]

    def test_staging_error_fails_item(
        self, harness: Harness, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A keystore that cannot be copied fails that validator and the batch goes on."""
        harness.beacon.add(A)
        harness.beacon.add(B)
        real_copyfile = shutil.copyfile

        def copyfile(src, dst, *args, **kwargs):
            if A in str(src):
                raise OSError(errno.ENOSPC, "No space left on device")
            return real_copyfile(src, dst, *args, **kwargs)

        monkeypatch.setattr(shutil, "copyfile", copyfile)

        summary = harness.orchestrator.run([A, B], StubPolicy())

        outcome = summary.items[0].outcome
        assert isinstance(outcome, Failed)
        assert "Cannot stage keystore" in outcome.reason
        assert harness.broadcaster.calls == [B]
        assert (summary.succeeded, summary.failed, summary.skipped) == (1, 1, 0)

    def test_malformed_record_mid_batch_fails_item(self, harness: Harness) -> None:
        """A garbled state answer during execution fails that validator only."""
        harness.beacon.add(A)
        harness.beacon.add(B)

        class Garble:
            def __init__(self, beacon):
                self.beacon = beacon

            def present(self, previews):
                pass

            def confirm(self, previews):
                self.beacon.validators[A]["validator"] = "garbage"
                return True

        summary = harness.orchestrator.run([A, B], Garble(harness.beacon))

        assert isinstance(summary.items[0].outcome, Failed)
        assert harness.broadcaster.calls == [B]
        assert summary.total == 2

    def test_status_reread_before_broadcast(self, harness: Harness) -> None:
        """A validator that exits between preview and execution is skipped."""
        harness.beacon.add(A)
        orchestrator = harness.orchestrator
        previews = orchestrator.preview([A])
        assert previews[0].is_eligible

        harness.beacon.add(A, status="exited_unslashed")
        assert isinstance(orchestrator.process(A), Skipped)
        assert harness.broadcaster.calls == []

    def test_chain_lost_mid_batch_fails_item(self, harness: Harness) -> None:
        """A chain outage during execution fails the item instead of the run."""
        harness.beacon.add(A)

        class Outage:
            def __init__(self, beacon):
                self.beacon = beacon

            def present(self, previews):
                pass

            def confirm(self, previews):
                self.beacon.down = True
                return True

        summary = harness.orchestrator.run([A], Outage(harness.beacon))

        assert summary.status is RunStatus.COMPLETED
        assert isinstance(summary.items[0].outcome, Failed)
        assert harness.broadcaster.calls == []

    def test_staging_is_cleaned_up(self, harness: Harness) -> None:
        """Each broadcast sees a fresh staging copy that is removed afterwards."""
        harness.beacon.add(A)
        harness.beacon.add(B)
        harness.broadcaster.fail_for.add(A)

        harness.orchestrator.run([A, B], StubPolicy())

        roots = harness.broadcaster.staged_roots
        assert len(roots) == 2
        assert roots[0] != roots[1]
        assert not any(root.exists() for root in roots)
        keystore, password = harness.broadcaster.staged_contents[1]
        directory = harness.orchestrator.directory
        assert keystore == directory.keystore_path(B).read_text()
        assert password == directory.password_path(B).read_text()


class TestTotality:
    """Every selected validator gets exactly one outcome."""

    def test_counts_sum_to_selection(self, harness: Harness) -> None:
        harness.beacon.add(A)
        harness.beacon.add(B, status="withdrawal_done")
        harness.beacon.add(C, activation_epoch=HEAD_EPOCH)
        harness.beacon.add(D)
        harness.broadcaster.fail_for.add(D)

        summary = harness.orchestrator.run([A, B, C, D, E], StubPolicy())

        assert summary.total == 5
        assert summary.succeeded + summary.failed + summary.skipped == 5
        assert (summary.succeeded, summary.failed, summary.skipped) == (1, 1, 3)
        assert [item.identity for item in summary.items] == [A, B, C, D, E]
        assert isinstance(summary.items[0].outcome, Succeeded)


class TestPacing:
    """Tests for the delay between broadcasts."""

    def test_sleeps_between_broadcasts_only(self, harness: Harness) -> None:
        """The delay follows each broadcast attempt except the last item."""
        harness.beacon.add(A)
        harness.beacon.add(B, status="exited_slashed")
        harness.beacon.add(C)
        harness.broadcaster.fail_for.add(C)
        harness.beacon.add(D)

        harness.orchestrator.run([A, B, C, D], StubPolicy())

        # After A (success) and C (failure). Not after B (skip) nor D (last).
        assert harness.sleeps == [2.0, 2.0]

    def test_single_validator_never_sleeps(self, harness: Harness) -> None:
        harness.beacon.add(A)
        harness.orchestrator.run([A], StubPolicy())
        assert harness.sleeps == []


class TestObserver:
    """Tests for progress notifications."""

    def test_events_in_order(self, harness: Harness) -> None:
        events: list[tuple] = []

        class Recorder:
            def on_item_start(self, position, total, identity):
                events.append(("start", position, total, identity))

            def on_item_done(self, position, total, result):
                events.append(("done", position, total, result.identity))

        harness.beacon.add(A)
        harness.beacon.add(B)
        harness.orchestrator.observer = Recorder()

        harness.orchestrator.run([A, B], StubPolicy())

        assert events == [
            ("start", 1, 2, A),
            ("done", 1, 2, A),
            ("start", 2, 2, B),
            ("done", 2, 2, B),
        ]
