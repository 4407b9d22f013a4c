"""Validator record as observed through the beacon API."""

from __future__ import annotations

from typing import Any, Final

from pydantic import Field, field_validator

from validator_exit.subsystems.chain.config import FAR_FUTURE_EPOCH, Epoch
from validator_exit.types import ApiModel

from .status import ValidatorStatus

GWEI_PER_UNIT: Final = 10**9
"""Gwei in one whole unit of the staking currency."""

ETH1_ADDRESS_WITHDRAWAL_PREFIX: Final = "01"
"""Credential prefix byte for execution-layer payout addresses."""

EXECUTION_ADDRESS_LENGTH: Final = 20
"""Length of an execution-layer address in bytes."""

WITHDRAWAL_ADDRESS_NOT_SET: Final = "Not set"
"""Display text for credentials without an extractable payout address."""


def normalize_identity(raw: str) -> str:
    """Return ``raw`` stripped of whitespace with exactly one ``0x`` prefix."""
    body = raw.strip()
    if body[:2].lower() == "0x":
        body = body[2:]
    return f"0x{body}"


def shorten_identity(identity: str) -> str:
    """Abbreviate a public key for one-line display: first 20 and last 8 chars."""
    if len(identity) <= 28:
        return identity
    return f"{identity[:20]}...{identity[-8:]}"


def withdrawal_address_from_credentials(credentials: str | None) -> str | None:
    """
    Extract the payout address from withdrawal credentials.

    Execution-style credentials are ``0x01`` followed by 11 zero bytes and
    the 20-byte address. BLS-style ``0x00`` credentials commit to a key
    hash and have no derivable address.

    Args:
        credentials: 0x-prefixed 32-byte hex string, or None.

    Returns:
        The 0x-prefixed address, or None when no address is derivable.
    """
    if not credentials:
        return None
    body = credentials[2:] if credentials[:2].lower() == "0x" else credentials
    if not body.startswith(ETH1_ADDRESS_WITHDRAWAL_PREFIX):
        return None
    address_hex_len = EXECUTION_ADDRESS_LENGTH * 2
    if len(body) < address_hex_len + 2:
        return None
    return f"0x{body[-address_hex_len:]}"


class Validator(ApiModel):
    """
    One validator's on-chain state at the head of the chain.

    Read-only from the tool's perspective. Only the network mutates it.
    """

    identity: str
    """0x-prefixed BLS public key."""

    index: int | None = None
    """Registry index, None until the deposit is processed."""

    status: ValidatorStatus
    """Lifecycle state."""

    balance_gwei: int = Field(default=0, ge=0)
    """Current balance (stake plus rewards) in gwei."""

    activation_epoch: Epoch | None = None
    """Epoch the validator became active, None until scheduled."""

    withdrawal_credentials: str | None = None
    """0x-prefixed 32-byte credential commitment."""

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v: Any) -> ValidatorStatus:
        """Accept raw API tags, mapping unknown ones to UNRECOGNIZED."""
        if isinstance(v, ValidatorStatus):
            return v
        return ValidatorStatus.parse(str(v))

    @field_validator("activation_epoch", mode="before")
    @classmethod
    def parse_activation_epoch(cls, v: Any) -> int | None:
        """
        Convert the API's string-encoded epoch.

        The far-future sentinel means activation is not scheduled yet.
        """
        if v is None or v == "":
            return None
        if not isinstance(v, str | int):
            raise ValueError(f"activation_epoch is {type(v).__name__}, expected a number")
        epoch = int(v)
        if epoch >= FAR_FUTURE_EPOCH:
            return None
        return epoch

    @classmethod
    def from_api(cls, identity: str, data: dict[str, Any]) -> Validator:
        """
        Build a record from the ``data`` object of a validator response.

        Args:
            identity: Public key the query was made for.
            data: The ``data`` member of the beacon API response.

        Raises:
            ValueError: If the nested validator object is not a mapping.
            pydantic.ValidationError: If required fields are missing or malformed.
        """
        validator = data.get("validator") or {}
        if not isinstance(validator, dict):
            raise ValueError(f"validator member is {type(validator).__name__}, not an object")
        return cls(
            identity=validator.get("pubkey") or identity,
            index=data.get("index"),
            status=data.get("status"),
            balance_gwei=data.get("balance") or 0,
            activation_epoch=validator.get("activation_epoch"),
            withdrawal_credentials=validator.get("withdrawal_credentials"),
        )

    @property
    def withdrawal_address(self) -> str | None:
        """Payout address, or None for credentials without one."""
        return withdrawal_address_from_credentials(self.withdrawal_credentials)

    @property
    def withdrawal_address_display(self) -> str:
        """Payout address for display."""
        return self.withdrawal_address or WITHDRAWAL_ADDRESS_NOT_SET

    @property
    def balance(self) -> float:
        """Balance in whole currency units."""
        return self.balance_gwei / GWEI_PER_UNIT
