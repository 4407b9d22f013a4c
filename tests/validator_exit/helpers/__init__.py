"""Test helpers shared across the validator exit test suite."""

from .builders import (
    FakeBeacon,
    RecordingBroadcaster,
    ScriptedConsole,
    make_identity,
    make_keystore_tree,
    validator_data,
)

__all__ = [
    "FakeBeacon",
    "RecordingBroadcaster",
    "ScriptedConsole",
    "make_identity",
    "make_keystore_tree",
    "validator_data",
]
