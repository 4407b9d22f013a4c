"""Local keystore discovery and scoped staging of signing material."""

from .directory import KeystorePaths, ValidatorDirectory
from .staging import stage_keystore, staging_root

__all__ = [
    "KeystorePaths",
    "ValidatorDirectory",
    "stage_keystore",
    "staging_root",
]
