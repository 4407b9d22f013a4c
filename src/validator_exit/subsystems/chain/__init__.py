"""Chain timing: network constants and the head-based epoch clock."""

from .clock import ChainClock
from .config import MAINNET_CONFIG, ChainConfig, Epoch, Slot

__all__ = [
    "ChainClock",
    "ChainConfig",
    "Epoch",
    "MAINNET_CONFIG",
    "Slot",
]
