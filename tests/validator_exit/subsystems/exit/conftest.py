"""Fixtures for exit workflow tests."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from tests.validator_exit.helpers import (
    FakeBeacon,
    RecordingBroadcaster,
    make_identity,
    make_keystore_tree,
)
from validator_exit.subsystems.beacon import BeaconStateReader
from validator_exit.subsystems.chain import MAINNET_CONFIG, ChainClock
from validator_exit.subsystems.eligibility import EligibilityEvaluator
from validator_exit.subsystems.exit import ExitOrchestrator, ExitPreview
from validator_exit.subsystems.keystore import ValidatorDirectory

IDENTITIES = [make_identity(seed) for seed in range(1, 6)]
"""Five keystores present in every test tree."""

HEAD_EPOCH = 1_000
"""Epoch of the fake chain head."""


@dataclass
class StubPolicy:
    """Confirmation policy with a fixed answer."""

    answer: bool = True
    presented: list[list[ExitPreview]] = field(default_factory=list)
    asked: int = 0

    def present(self, previews: Sequence[ExitPreview]) -> None:
        self.presented.append(list(previews))

    def confirm(self, previews: Sequence[ExitPreview]) -> bool:
        self.asked += 1
        return self.answer


@dataclass
class Harness:
    """An orchestrator wired to fakes."""

    beacon: FakeBeacon
    broadcaster: RecordingBroadcaster
    orchestrator: ExitOrchestrator
    sleeps: list[float]


@pytest.fixture
def beacon() -> FakeBeacon:
    return FakeBeacon(head_slot=HEAD_EPOCH * MAINNET_CONFIG.slots_per_epoch)


@pytest.fixture
def harness(tmp_path: Path, beacon: FakeBeacon) -> Harness:
    root = make_keystore_tree(tmp_path / "keys", IDENTITIES)
    network_dir = tmp_path / "metadata"
    network_dir.mkdir()

    client = beacon.client()
    broadcaster = RecordingBroadcaster()
    sleeps: list[float] = []
    orchestrator = ExitOrchestrator(
        reader=BeaconStateReader(client),
        clock=ChainClock(client),
        evaluator=EligibilityEvaluator(),
        directory=ValidatorDirectory(root),
        broadcaster=broadcaster,
        network_dir=network_dir,
        beacon_url=client.base_url,
        exit_delay=2.0,
        sleep=sleeps.append,
    )
    return Harness(beacon=beacon, broadcaster=broadcaster, orchestrator=orchestrator, sleeps=sleeps)
