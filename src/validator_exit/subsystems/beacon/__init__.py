"""
Beacon chain read access.

Provides:

- BeaconApiClient: blocking HTTP client for the standard beacon API
- BeaconStateReader: per-validator state lookups at head
- Validator: the observed validator record
- ValidatorStatus / StatusClass: the lifecycle states and their exit classification
"""

from .client import BeaconApiClient
from .reader import BeaconStateReader
from .status import StatusClass, ValidatorStatus
from .validator import (
    Validator,
    normalize_identity,
    shorten_identity,
    withdrawal_address_from_credentials,
)

__all__ = [
    "BeaconApiClient",
    "BeaconStateReader",
    "StatusClass",
    "Validator",
    "ValidatorStatus",
    "normalize_identity",
    "shorten_identity",
    "withdrawal_address_from_credentials",
]
