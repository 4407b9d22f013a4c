"""
Chain Timing Configuration

Time and lifecycle constants needed to reason about validator exits.

Defaults follow the Ethereum mainnet preset. Networks launched from a
custom genesis ship a network definition directory whose ``config.yaml``
may override them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Final

import yaml
from pydantic import Field, model_validator

from validator_exit.types import StrictBaseModel

logger = logging.getLogger(__name__)

Epoch = int
"""Epoch number since genesis."""

Slot = int
"""Slot number since genesis."""

# --- Time Parameters ---

SECONDS_PER_SLOT: Final = 12
"""The fixed duration of a single slot in seconds."""

SLOTS_PER_EPOCH: Final = 32
"""Number of slots in an epoch on the mainnet preset."""

MINIMAL_SLOTS_PER_EPOCH: Final = 8
"""Number of slots in an epoch on the minimal preset."""

# --- Lifecycle Parameters ---

SHARD_COMMITTEE_PERIOD: Final = 256
"""
Minimum number of epochs a validator must be active before it may exit.

With 12-second slots this is roughly 27 hours.
"""

FAR_FUTURE_EPOCH: Final = 2**64 - 1
"""Sentinel the chain uses for epochs that have not been scheduled yet."""

NETWORK_CONFIG_FILE: Final = "config.yaml"
"""Name of the chain config inside a network definition directory."""


class ChainConfig(StrictBaseModel):
    """
    Timing constants for one network.

    Field names use UPPERCASE aliases to match the cross-client
    ``config.yaml`` convention. Unrelated keys in that file are ignored.
    """

    model_config = StrictBaseModel.model_config | {"extra": "ignore"}

    seconds_per_slot: int = Field(default=SECONDS_PER_SLOT, alias="SECONDS_PER_SLOT", gt=0)
    """Slot duration in seconds."""

    slots_per_epoch: int = Field(default=SLOTS_PER_EPOCH, alias="SLOTS_PER_EPOCH", gt=0)
    """Slots per epoch."""

    shard_committee_period: int = Field(
        default=SHARD_COMMITTEE_PERIOD, alias="SHARD_COMMITTEE_PERIOD", ge=0
    )
    """Minimum active period in epochs before a voluntary exit is accepted."""

    @model_validator(mode="before")
    @classmethod
    def apply_preset_base(cls, data: Any) -> Any:
        """
        Pick the epoch length from ``PRESET_BASE`` when it is not explicit.

        ``SLOTS_PER_EPOCH`` is a preset value and usually absent from
        ``config.yaml``. Minimal-preset devnets only announce themselves
        through ``PRESET_BASE``.
        """
        if not isinstance(data, dict):
            return data
        if "SLOTS_PER_EPOCH" in data or "slots_per_epoch" in data:
            return data
        if str(data.get("PRESET_BASE", "")).strip("'\"").lower() == "minimal":
            return data | {"SLOTS_PER_EPOCH": MINIMAL_SLOTS_PER_EPOCH}
        return data

    @property
    def seconds_per_epoch(self) -> int:
        """Wall-clock duration of one epoch in seconds."""
        return self.seconds_per_slot * self.slots_per_epoch

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> ChainConfig:
        """
        Load configuration from a ``config.yaml`` file.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            pydantic.ValidationError: If a known field has an invalid value.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
        # YAML returns None for an empty file.
        return cls.model_validate(data or {})

    @classmethod
    def from_network_dir(cls, network_dir: Path | str) -> ChainConfig:
        """
        Load the config shipped in a network definition directory.

        Falls back to mainnet defaults when the directory has no config file.
        """
        config_path = Path(network_dir) / NETWORK_CONFIG_FILE
        if not config_path.is_file():
            logger.info("No %s in %s, using mainnet timing", NETWORK_CONFIG_FILE, network_dir)
            return MAINNET_CONFIG
        config = cls.from_yaml_file(config_path)
        logger.debug(
            "Loaded chain timing: %ds slots, %d slots/epoch, %d epoch active period",
            config.seconds_per_slot,
            config.slots_per_epoch,
            config.shard_committee_period,
        )
        return config


MAINNET_CONFIG: Final = ChainConfig()
"""Mainnet timing constants."""
