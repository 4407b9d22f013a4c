"""Validator lifecycle states reported by the beacon API."""

from __future__ import annotations

from enum import Enum, auto


class StatusClass(Enum):
    """What the exit workflow may do with a validator in a given state."""

    ACTIONABLE = auto()
    """A voluntary exit may be initiated."""

    ALREADY_EXITED = auto()
    """The validator has left the active set. Skip."""

    NOT_ACTIVE = auto()
    """The validator is not in a state that accepts an exit. Skip."""


class ValidatorStatus(Enum):
    """
    Validator status strings from the standard beacon API.

    State Machine Diagram
    ---------------------
    ::

        PENDING_INITIALIZED --> PENDING_QUEUED --> ACTIVE_ONGOING
                                                   |           |
                                                   v           v
                                            ACTIVE_EXITING  ACTIVE_SLASHED
                                                   |           |
                                                   v           v
                                          EXITED_UNSLASHED  EXITED_SLASHED
                                                   |           |
                                                   +-----+-----+
                                                         v
                                                WITHDRAWAL_POSSIBLE
                                                         |
                                                         v
                                                  WITHDRAWAL_DONE

    Transitions only move forward. The network drives every transition;
    broadcasting an exit only moves ACTIVE_ONGOING to ACTIVE_EXITING
    several epochs later.

    UNRECOGNIZED absorbs tags a newer beacon node may introduce. It is never
    actionable.
    """

    PENDING_INITIALIZED = "pending_initialized"
    PENDING_QUEUED = "pending_queued"
    ACTIVE_ONGOING = "active_ongoing"
    ACTIVE_EXITING = "active_exiting"
    ACTIVE_SLASHED = "active_slashed"
    EXITED_UNSLASHED = "exited_unslashed"
    EXITED_SLASHED = "exited_slashed"
    WITHDRAWAL_POSSIBLE = "withdrawal_possible"
    WITHDRAWAL_DONE = "withdrawal_done"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def parse(cls, tag: str) -> ValidatorStatus:
        """
        Map a raw status tag to a member.

        Older nodes report a bare ``pending``. Anything unknown maps to
        UNRECOGNIZED instead of raising.
        """
        normalized = tag.strip().lower()
        if normalized == "pending":
            return cls.PENDING_QUEUED
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNRECOGNIZED

    def classify(self) -> StatusClass:
        """Classify this state for the exit workflow."""
        return _STATUS_CLASSES[self]

    def can_transition_to(self, target: ValidatorStatus) -> bool:
        """
        Check if the network may move a validator from this state to ``target``.

        Args:
            target: The proposed next state.

        Returns:
            True if the transition is allowed by the lifecycle rules.
        """
        return target in _VALID_TRANSITIONS.get(self, set())

    @property
    def is_exited(self) -> bool:
        """True for every state after the validator left the active set."""
        return self.classify() is StatusClass.ALREADY_EXITED


_STATUS_CLASSES: dict[ValidatorStatus, StatusClass] = {
    ValidatorStatus.PENDING_INITIALIZED: StatusClass.NOT_ACTIVE,
    ValidatorStatus.PENDING_QUEUED: StatusClass.NOT_ACTIVE,
    ValidatorStatus.ACTIVE_ONGOING: StatusClass.ACTIONABLE,
    ValidatorStatus.ACTIVE_EXITING: StatusClass.NOT_ACTIVE,
    ValidatorStatus.ACTIVE_SLASHED: StatusClass.ACTIONABLE,
    ValidatorStatus.EXITED_UNSLASHED: StatusClass.ALREADY_EXITED,
    ValidatorStatus.EXITED_SLASHED: StatusClass.ALREADY_EXITED,
    ValidatorStatus.WITHDRAWAL_POSSIBLE: StatusClass.ALREADY_EXITED,
    ValidatorStatus.WITHDRAWAL_DONE: StatusClass.ALREADY_EXITED,
    ValidatorStatus.UNRECOGNIZED: StatusClass.NOT_ACTIVE,
}
"""Exhaustive status classification. Every member must appear."""

_VALID_TRANSITIONS: dict[ValidatorStatus, set[ValidatorStatus]] = {
    ValidatorStatus.PENDING_INITIALIZED: {ValidatorStatus.PENDING_QUEUED},
    ValidatorStatus.PENDING_QUEUED: {ValidatorStatus.ACTIVE_ONGOING},
    ValidatorStatus.ACTIVE_ONGOING: {
        ValidatorStatus.ACTIVE_EXITING,
        ValidatorStatus.ACTIVE_SLASHED,
    },
    ValidatorStatus.ACTIVE_EXITING: {
        ValidatorStatus.EXITED_UNSLASHED,
        ValidatorStatus.EXITED_SLASHED,
    },
    ValidatorStatus.ACTIVE_SLASHED: {ValidatorStatus.EXITED_SLASHED},
    ValidatorStatus.EXITED_UNSLASHED: {ValidatorStatus.WITHDRAWAL_POSSIBLE},
    ValidatorStatus.EXITED_SLASHED: {ValidatorStatus.WITHDRAWAL_POSSIBLE},
    ValidatorStatus.WITHDRAWAL_POSSIBLE: {ValidatorStatus.WITHDRAWAL_DONE},
    ValidatorStatus.WITHDRAWAL_DONE: set(),
    ValidatorStatus.UNRECOGNIZED: set(),
}
"""Forward-only lifecycle transitions."""
