"""
Voluntary exit broadcaster.

Signing and submitting a voluntary exit is delegated to an external tool.
This module defines the seam and the default implementation, which runs
the Lighthouse account manager in a throwaway container.

The broadcaster only reports success or failure. Anything it prints goes
straight to the operator's terminal.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Protocol

from validator_exit.subsystems.keystore import KeystorePaths, staging_root
from validator_exit.types import BroadcastFailed, SetupFailure

logger = logging.getLogger(__name__)

DEFAULT_IMAGE: Final = "sigp/lighthouse:latest"
"""Container image providing the ``lighthouse`` binary."""

DEFAULT_BROADCAST_TIMEOUT: Final = 300.0
"""Upper bound in seconds for one exit broadcast, image pull included."""

REQUIRED_TOOLS: Final = ("docker",)
"""Executables the default broadcaster needs on PATH."""

KILL_TIMEOUT: Final = 30.0
"""Seconds to wait for docker to stop a container left behind by a timeout."""

Runner = Callable[..., subprocess.CompletedProcess]
"""Signature of subprocess.run, injectable for tests."""


@dataclass(frozen=True, slots=True)
class ExitRequest:
    """Everything the signer needs to exit one validator."""

    keystore: KeystorePaths
    """Staged keystore and password for the validator."""

    network_dir: Path
    """Network definition directory (testnet dir)."""

    beacon_url: str
    """Beacon node to submit the signed exit to."""


class ExitBroadcaster(Protocol):
    """Signs a voluntary exit and submits it to the chain."""

    def broadcast(self, request: ExitRequest) -> None:
        """
        Sign and submit the exit.

        Raises:
            BroadcastFailed: If the exit was not accepted.
        """
        ...


def check_required_tools(
    tools: Sequence[str] = REQUIRED_TOOLS,
    which: Callable[[str], str | None] = shutil.which,
) -> None:
    """
    Verify that external tools are installed.

    Raises:
        SetupFailure: Naming every missing tool.
    """
    missing = [tool for tool in tools if which(tool) is None]
    if missing:
        raise SetupFailure(f"Missing required tools: {', '.join(missing)}")


@dataclass(frozen=True, slots=True)
class LighthouseExitBroadcaster:
    """
    Runs ``lighthouse account validator exit`` in a container.

    The staged keystore tree and the network definition are mounted
    read-only. The container shares the host network so a beacon node on
    localhost is reachable.
    """

    image: str = DEFAULT_IMAGE
    """Lighthouse container image."""

    timeout: float = DEFAULT_BROADCAST_TIMEOUT
    """Seconds before the container run is abandoned."""

    runner: Runner = field(default=subprocess.run)
    """Process runner."""

    def container_name(self, request: ExitRequest) -> str:
        """Container name for ``request``, unique per staged keystore."""
        return staging_root(request.keystore).name

    def command(self, request: ExitRequest) -> list[str]:
        """Build the docker command line for ``request``."""
        root = staging_root(request.keystore)
        identity = request.keystore.identity
        return [
            "docker",
            "run",
            "--rm",
            "--name",
            self.container_name(request),
            "-v",
            f"{root / 'validators'}:/validators:ro",
            "-v",
            f"{root / 'secrets'}:/secrets:ro",
            "-v",
            f"{request.network_dir.resolve()}:/consensus:ro",
            "--network",
            "host",
            self.image,
            "lighthouse",
            "account",
            "validator",
            "exit",
            "--testnet-dir",
            "/consensus",
            "--keystore",
            f"/validators/{identity}/voting-keystore.json",
            "--password-file",
            f"/secrets/{identity}",
            "--beacon-node",
            request.beacon_url,
            "--no-confirmation",
        ]

    def broadcast(self, request: ExitRequest) -> None:
        cmd = self.command(request)
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = self.runner(cmd, check=False, timeout=self.timeout)
        except subprocess.TimeoutExpired as exc:
            # Killing the client leaves the container running. Stop it before
            # its mounts are removed so it cannot submit after being failed.
            self._kill(self.container_name(request))
            raise BroadcastFailed(f"Exit broadcast timed out after {self.timeout:.0f}s") from exc
        except OSError as exc:
            raise BroadcastFailed(f"Could not start docker: {exc}") from exc

        if result.returncode != 0:
            raise BroadcastFailed(f"lighthouse exited with code {result.returncode}")

    def _kill(self, name: str) -> None:
        cmd = ["docker", "kill", name]
        try:
            result = self.runner(cmd, check=False, timeout=KILL_TIMEOUT, capture_output=True)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("Could not stop container %s: %s", name, exc)
            return
        if result.returncode != 0:
            logger.warning("docker kill %s exited with code %d", name, result.returncode)
