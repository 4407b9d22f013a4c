"""
Chain Clock
===========

Head-slot to epoch conversion.

Exit eligibility is measured in epochs. Rather than deriving the epoch from
wall-clock time and genesis, the clock asks the beacon node for its head
slot. That keeps the tool consistent with the node's own view of the chain.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .config import MAINNET_CONFIG, ChainConfig, Epoch, Slot

if TYPE_CHECKING:
    from validator_exit.subsystems.beacon.client import BeaconApiClient


@dataclass(frozen=True, slots=True)
class ChainClock:
    """Converts the beacon node's head slot to the current epoch."""

    client: BeaconApiClient
    """Client used to query the head header."""

    config: ChainConfig = MAINNET_CONFIG
    """Timing constants of the network."""

    def current_slot(self) -> Slot:
        """
        Get the slot of the current head block.

        Raises:
            ChainUnavailable: If the head query fails or has no parsable slot.
        """
        return self.client.get_head_slot()

    def epoch_at_slot(self, slot: Slot) -> Epoch:
        """Get the epoch containing ``slot``."""
        return slot // self.config.slots_per_epoch

    def current_epoch(self) -> Epoch:
        """
        Get the epoch of the current head block.

        Raises:
            ChainUnavailable: If the head query fails or has no parsable slot.
        """
        return self.epoch_at_slot(self.current_slot())
