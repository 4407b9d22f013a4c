"""Per-validator state lookups at the chain head."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from validator_exit.types import ChainUnavailable

from .client import BeaconApiClient
from .validator import Validator

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BeaconStateReader:
    """
    Reads validator records from a beacon node.

    Every call queries the node afresh. Nothing is cached, since status and
    eligibility must reflect the chain at the moment of use.
    """

    client: BeaconApiClient
    """Client for the beacon node."""

    def get_state(self, identity: str) -> Validator | None:
        """
        Fetch the current state of one validator.

        Args:
            identity: 0x-prefixed public key.

        Returns:
            The validator record, or None if the chain does not know the key.
            That is normal for freshly generated keys whose deposit has not
            been processed.

        Raises:
            ChainUnavailable: If the node cannot answer or the answer is malformed.
        """
        data = self.client.get_validator(identity)
        if data is None:
            logger.debug("Validator %s unknown to the chain", identity)
            return None
        if "status" not in data:
            raise ChainUnavailable(f"Validator response for {identity} has no status")
        try:
            return Validator.from_api(identity, data)
        except (ValidationError, ValueError) as exc:
            raise ChainUnavailable(f"Malformed validator record for {identity}: {exc}") from exc
