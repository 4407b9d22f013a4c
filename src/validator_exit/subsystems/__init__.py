"""Components of the validator exit tool."""

from .beacon import BeaconApiClient, BeaconStateReader
from .chain import ChainClock, ChainConfig
from .eligibility import EligibilityEvaluator
from .exit import ExitOrchestrator, LighthouseExitBroadcaster
from .keystore import ValidatorDirectory
from .selection import SelectionMode, resolve_selection

__all__ = [
    "BeaconApiClient",
    "BeaconStateReader",
    "ChainClock",
    "ChainConfig",
    "EligibilityEvaluator",
    "ExitOrchestrator",
    "LighthouseExitBroadcaster",
    "SelectionMode",
    "ValidatorDirectory",
    "resolve_selection",
]
