"""Builders and fakes for beacon responses, keystores, broadcasts and consoles."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from validator_exit.subsystems.beacon import BeaconApiClient
from validator_exit.subsystems.exit import ExitRequest
from validator_exit.subsystems.operator import Console
from validator_exit.types import BroadcastFailed

ZERO_CREDENTIALS = "0x00" + "00" * 31


def make_identity(seed: int) -> str:
    """Deterministic 48-byte public key."""
    return "0x" + f"{seed:02x}" * 48


def validator_data(
    identity: str,
    status: str = "active_ongoing",
    index: int | None = 7,
    balance: int = 32_000_000_000,
    activation_epoch: int | str | None = 0,
    withdrawal_credentials: str = ZERO_CREDENTIALS,
) -> dict[str, Any]:
    """The ``data`` object of a validator response, string-encoded like the beacon API."""
    validator: dict[str, Any] = {
        "pubkey": identity,
        "withdrawal_credentials": withdrawal_credentials,
        "effective_balance": str(balance),
        "slashed": status.endswith("slashed"),
        "activation_eligibility_epoch": "0",
        "exit_epoch": "18446744073709551615",
        "withdrawable_epoch": "18446744073709551615",
    }
    if activation_epoch is not None:
        validator["activation_epoch"] = str(activation_epoch)
    return {
        "index": None if index is None else str(index),
        "balance": str(balance),
        "status": status,
        "validator": validator,
    }


@dataclass
class FakeBeacon:
    """
    In-memory beacon node served through httpx.MockTransport.

    Mutate ``head_slot`` or ``validators`` between calls to simulate the
    chain moving.
    """

    head_slot: int | None = 0
    validators: dict[str, dict[str, Any]] = field(default_factory=dict)
    syncing: bool = False
    health_status: int = 200
    down: bool = False
    requests: list[str] = field(default_factory=list)

    def add(self, identity: str, **kwargs: Any) -> None:
        self.validators[identity] = validator_data(identity, **kwargs)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(path)
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)

        if path == "/eth/v1/node/health":
            return httpx.Response(self.health_status)
        if path == "/eth/v1/node/syncing":
            return httpx.Response(200, json={"data": {"is_syncing": self.syncing}})
        if path == "/eth/v1/beacon/headers/head":
            if self.head_slot is None:
                return httpx.Response(200, json={"data": {}})
            header = {"message": {"slot": str(self.head_slot)}}
            return httpx.Response(200, json={"data": {"header": header}})
        prefix = "/eth/v1/beacon/states/head/validators/"
        if path.startswith(prefix):
            identity = path[len(prefix) :]
            if identity not in self.validators:
                return httpx.Response(404, json={"code": 404, "message": "Validator not found"})
            return httpx.Response(
                200,
                content=json.dumps({"data": self.validators[identity]}),
                headers={"content-type": "application/json"},
            )
        return httpx.Response(404)

    def client(self, url: str = "http://beacon.test:5052") -> BeaconApiClient:
        return BeaconApiClient(url, transport=httpx.MockTransport(self.handler))


def make_keystore_tree(
    root: Path,
    identities: list[str],
    with_password: bool = True,
) -> Path:
    """Create a validators/ + secrets/ keystore tree under ``root``."""
    (root / "validators").mkdir(parents=True, exist_ok=True)
    (root / "secrets").mkdir(parents=True, exist_ok=True)
    for identity in identities:
        validator_dir = root / "validators" / identity
        validator_dir.mkdir()
        (validator_dir / "voting-keystore.json").write_text(json.dumps({"pubkey": identity[2:]}))
        if with_password:
            (root / "secrets" / identity).write_text(f"password-{identity[-4:]}")
    return root


@dataclass
class RecordingBroadcaster:
    """Broadcaster that records calls and fails for chosen identities."""

    fail_for: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)
    staged_roots: list[Path] = field(default_factory=list)
    staged_contents: list[tuple[str, str]] = field(default_factory=list)

    def broadcast(self, request: ExitRequest) -> None:
        identity = request.keystore.identity
        self.calls.append(identity)
        self.staged_roots.append(request.keystore.keystore.parent.parent.parent)
        self.staged_contents.append(
            (request.keystore.keystore.read_text(), request.keystore.password.read_text())
        )
        if identity in self.fail_for:
            raise BroadcastFailed("lighthouse exited with code 1")


class ScriptedConsole(Console):
    """Console that answers prompts from a script and records output."""

    def __init__(self, answers: list[str] | None = None, confirms: list[bool] | None = None):
        super().__init__(color=False)
        self.answers = list(answers or [])
        self.confirms = list(confirms or [])
        self.lines: list[str] = []
        self.prompts: list[str] = []

    def echo(self, text: str = "", fg: str | None = None, bold: bool = False) -> None:
        self.lines.append(text)

    def style(self, text: str, fg: str | None = None, bold: bool = False) -> str:
        return text

    def error(self, message: str) -> None:
        self.lines.append(f"[ERROR] {message}")

    def prompt(self, text: str, default: str | None = None) -> str:
        self.prompts.append(text)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {text}")
        answer = self.answers.pop(0)
        if answer == "" and default is not None:
            return default
        return answer

    def confirm(self, text: str, default: bool = False) -> bool:
        self.prompts.append(text)
        if not self.confirms:
            raise AssertionError(f"Unexpected confirmation: {text}")
        return self.confirms.pop(0)

    @property
    def output(self) -> str:
        return "\n".join(self.lines)
