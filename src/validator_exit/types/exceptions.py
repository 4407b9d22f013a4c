"""Exception types for the validator exit tool."""

from __future__ import annotations


class ExitToolError(Exception):
    """
    Base exception for all exit tool errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class ChainUnavailable(ExitToolError):
    """
    Raised when the beacon node cannot answer a query.

    Covers unreachable endpoints, timeouts, unexpected status codes and
    bodies that do not contain the expected fields. Recoverable by letting
    the operator point the tool at a different node.
    """


class InvalidKeystore(ExitToolError):
    """
    Raised when the keystore or password file for one identity is missing.

    Fails only the affected validator; the batch continues.
    """


class InvalidSelection(ExitToolError):
    """Raised when operator input cannot be turned into a selection."""


class EmptySelection(InvalidSelection):
    """Raised when a selection resolves to zero validators."""


class BroadcastFailed(ExitToolError):
    """Raised when the external exit broadcaster reports failure."""


class SetupFailure(ExitToolError):
    """
    Raised when the shared environment is unusable.

    Missing tools, an unusable keystore directory or a missing network
    definition all abort the run before any chain interaction.
    """
