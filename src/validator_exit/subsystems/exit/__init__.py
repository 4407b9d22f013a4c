"""
Voluntary exit workflow.

Lifecycle of a run:

1. Preview eligibility of the selected validators
2. Ask the operator for explicit confirmation
3. Re-check and broadcast each exit in turn
4. Report a summary
"""

from .broadcast import (
    ExitBroadcaster,
    ExitRequest,
    LighthouseExitBroadcaster,
    check_required_tools,
)
from .orchestrator import ConfirmationPolicy, ExitOrchestrator, ExitPreview
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

__all__ = [
    "ConfirmationPolicy",
    "ExitBroadcaster",
    "ExitOrchestrator",
    "ExitOutcome",
    "ExitPreview",
    "ExitRequest",
    "ExitSummary",
    "Failed",
    "ItemResult",
    "LighthouseExitBroadcaster",
    "RunStatus",
    "SkipReason",
    "Skipped",
    "Succeeded",
    "check_required_tools",
]
