"""Validator keystore directory.

Discovers the validators managed locally from a keystore tree in the layout
used by the Lighthouse validator client:

    <root>/
        validators/
            0x8f2a...c1/
                voting-keystore.json
            0x93b0...7e/
                voting-keystore.json
        secrets/
            0x8f2a...c1        (keystore password)
            0x93b0...7e

Each validator subdirectory is named after its public key. The matching
password file in ``secrets/`` carries the same name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from validator_exit.types import InvalidKeystore

logger = logging.getLogger(__name__)

VALIDATORS_DIR: Final = "validators"
"""Subdirectory holding one directory per validator."""

SECRETS_DIR: Final = "secrets"
"""Subdirectory holding one password file per validator."""

KEYSTORE_FILE: Final = "voting-keystore.json"
"""Keystore filename inside each validator directory."""

IDENTITY_PREFIX: Final = "0x"
"""Validator directories are named by their 0x-prefixed public key."""


@dataclass(frozen=True, slots=True)
class KeystorePaths:
    """Location of the signing material for one validator."""

    identity: str
    """0x-prefixed public key."""

    keystore: Path
    """Path to the EIP-2335 keystore JSON."""

    password: Path
    """Path to the file holding the keystore password."""


@dataclass(frozen=True, slots=True)
class ValidatorDirectory:
    """
    A keystore root directory.

    Read-only. Keystores are never created or modified here.
    """

    root: Path
    """Keystore root containing validators/ and secrets/."""

    @property
    def validators_dir(self) -> Path:
        return self.root / VALIDATORS_DIR

    @property
    def secrets_dir(self) -> Path:
        return self.root / SECRETS_DIR

    def is_valid(self) -> bool:
        """True if both the validators/ and secrets/ folders exist."""
        return self.validators_dir.is_dir() and self.secrets_dir.is_dir()

    def list_managed_identities(self) -> list[str]:
        """
        List the public keys of all validators with a keystore.

        A subdirectory counts when it is named ``0x...`` and holds a voting
        keystore. Entries are sorted by name so the order is stable within
        and across invocations.

        Returns:
            Public keys in stable order. Empty if nothing is found.
        """
        if not self.validators_dir.is_dir():
            logger.warning("No %s/ folder under %s", VALIDATORS_DIR, self.root)
            return []

        identities = [
            entry.name
            for entry in sorted(self.validators_dir.iterdir(), key=lambda p: p.name)
            if entry.name.startswith(IDENTITY_PREFIX)
            and entry.is_dir()
            and (entry / KEYSTORE_FILE).is_file()
        ]
        logger.debug("Found %d keystore(s) under %s", len(identities), self.validators_dir)
        return identities

    def keystore_path(self, identity: str) -> Path:
        return self.validators_dir / identity / KEYSTORE_FILE

    def password_path(self, identity: str) -> Path:
        return self.secrets_dir / identity

    def paths_for(self, identity: str) -> KeystorePaths:
        """
        Locate the keystore and password file for one validator.

        Args:
            identity: 0x-prefixed public key.

        Returns:
            Paths to both files.

        Raises:
            InvalidKeystore: If either file is missing.
        """
        keystore = self.keystore_path(identity)
        if not keystore.is_file():
            raise InvalidKeystore(f"Keystore not found: {keystore}")

        password = self.password_path(identity)
        if not password.is_file():
            raise InvalidKeystore(f"Password file not found: {password}")

        return KeystorePaths(identity=identity, keystore=keystore, password=password)
