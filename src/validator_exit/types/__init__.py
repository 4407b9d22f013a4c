"""Shared types for the validator exit tool."""

from .base import ApiModel, StrictBaseModel
from .exceptions import (
    BroadcastFailed,
    ChainUnavailable,
    EmptySelection,
    ExitToolError,
    InvalidKeystore,
    InvalidSelection,
    SetupFailure,
)

__all__ = [
    "ApiModel",
    "BroadcastFailed",
    "ChainUnavailable",
    "EmptySelection",
    "ExitToolError",
    "InvalidKeystore",
    "InvalidSelection",
    "SetupFailure",
    "StrictBaseModel",
]
