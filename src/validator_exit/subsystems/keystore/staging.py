"""
Scoped staging of signing material.

The external signer gets its own copy of one keystore and its password in
a fresh temporary directory. The copy mirrors the keystore tree layout so
the signer can be pointed at it with read-only mounts.

The temporary directory is removed on every exit path, including when the
signer fails or raises.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from validator_exit.types import InvalidKeystore

from .directory import (
    KEYSTORE_FILE,
    SECRETS_DIR,
    VALIDATORS_DIR,
    KeystorePaths,
    ValidatorDirectory,
)

logger = logging.getLogger(__name__)

STAGING_PREFIX = "validator-exit-"
"""Prefix for temporary staging directories."""


@contextmanager
def stage_keystore(directory: ValidatorDirectory, identity: str) -> Iterator[KeystorePaths]:
    """
    Copy one validator's keystore and password into a temporary tree.

    Layout of the staged copy::

        <tmp>/validators/<identity>/voting-keystore.json
        <tmp>/secrets/<identity>

    Args:
        directory: Keystore root to copy from.
        identity: 0x-prefixed public key.

    Yields:
        Paths inside the staged copy. Their common root is three levels above
        the keystore file.

    Raises:
        InvalidKeystore: If the keystore or password file is missing, or
            cannot be read or copied.
    """
    source = directory.paths_for(identity)

    try:
        staging = tempfile.TemporaryDirectory(prefix=STAGING_PREFIX)
    except OSError as exc:
        raise InvalidKeystore(f"Cannot stage keystore for {identity}: {exc}") from exc

    with staging as tmp:
        root = Path(tmp)
        keystore = root / VALIDATORS_DIR / identity / KEYSTORE_FILE
        password = root / SECRETS_DIR / identity

        # Unreadable sources and a full temp filesystem fail this validator only.
        try:
            keystore.parent.mkdir(parents=True)
            password.parent.mkdir(parents=True)
            shutil.copyfile(source.keystore, keystore)
            shutil.copyfile(source.password, password)
        except OSError as exc:
            raise InvalidKeystore(f"Cannot stage keystore for {identity}: {exc}") from exc

        logger.debug("Staged keystore for %s in %s", identity, root)
        yield KeystorePaths(identity=identity, keystore=keystore, password=password)

    logger.debug("Removed staging directory for %s", identity)


def staging_root(paths: KeystorePaths) -> Path:
    """Root of a staged tree, given the paths yielded by stage_keystore."""
    return paths.keystore.parent.parent.parent
