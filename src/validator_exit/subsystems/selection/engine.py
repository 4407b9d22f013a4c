"""
Operator selection of validators to exit.

Turns a selection mode and the operator's raw input into an ordered list of
public keys. Bad individual entries are reported and skipped. Only an empty
result is fatal to the selection.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from validator_exit.subsystems.beacon.validator import normalize_identity
from validator_exit.types import EmptySelection, InvalidSelection

logger = logging.getLogger(__name__)

INDEX_SEPARATOR = ","
"""Separator between positions in a by-index selection."""


class SelectionMode(Enum):
    """How the operator picks validators."""

    ALL = "all"
    """Every discovered validator, in directory order."""

    BY_INDEX = "by_index"
    """Comma-separated 1-based positions into the discovered list."""

    BY_IDENTITY = "by_identity"
    """One public key typed by the operator, discovered or not."""


@dataclass(frozen=True, slots=True)
class Selection:
    """Resolved selection."""

    identities: tuple[str, ...]
    """Public keys to process, in order."""

    rejected: tuple[str, ...] = field(default=())
    """Input tokens that were skipped as invalid."""

    def __len__(self) -> int:
        return len(self.identities)

    def __iter__(self) -> Iterator[str]:
        return iter(self.identities)


def _resolve_by_index(
    all_identities: Sequence[str], user_input: str
) -> tuple[list[str], list[str]]:
    """
    Map 1-based positions to identities.

    Entries keep the order the operator typed. A repeated position is kept
    once. Tokens that are not integers in [1, len(all_identities)] are
    rejected individually.
    """
    selected: list[str] = []
    rejected: list[str] = []
    seen: set[int] = set()

    for raw in user_input.split(INDEX_SEPARATOR):
        token = "".join(raw.split())
        if not token:
            continue
        try:
            position = int(token)
        except ValueError:
            position = 0

        if not 1 <= position <= len(all_identities):
            logger.debug("Invalid number: %s (skipping)", token)
            rejected.append(token)
            continue
        if position in seen:
            continue

        seen.add(position)
        selected.append(all_identities[position - 1])

    return selected, rejected


def resolve_selection(
    mode: SelectionMode,
    all_identities: Sequence[str],
    user_input: str = "",
) -> Selection:
    """
    Resolve the operator's choice into the list of validators to exit.

    Args:
        mode: Selection mode.
        all_identities: Discovered public keys in display order.
        user_input: Positions for BY_INDEX, a public key for BY_IDENTITY.
            Ignored for ALL.

    Returns:
        The resolved selection, with any skipped tokens.

    Raises:
        InvalidSelection: If BY_INDEX or BY_IDENTITY input is blank.
        EmptySelection: If nothing remains after resolution.
    """
    rejected: list[str] = []

    match mode:
        case SelectionMode.ALL:
            identities = list(all_identities)
        case SelectionMode.BY_INDEX:
            if not user_input.strip():
                raise InvalidSelection("No validator numbers entered")
            identities, rejected = _resolve_by_index(all_identities, user_input)
        case SelectionMode.BY_IDENTITY:
            if not user_input.strip():
                raise InvalidSelection("No public key entered")
            # The key need not be in the keystore directory listing.
            identities = [normalize_identity(user_input)]

    if not identities:
        raise EmptySelection("No validators selected")

    return Selection(identities=tuple(identities), rejected=tuple(rejected))
