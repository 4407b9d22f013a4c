"""
Interactive exit session.

Walks the operator through the exit step by step:

1. Check that required external tools are installed
2. Choose and vet a beacon node
3. Choose the keystore directory
4. Discover validators and show their state
5. Select validators
6. Confirm and execute via the orchestrator
7. Print the summary

Setup problems end the session with exit code 1 before anything is
broadcast. Everything after confirmation completes with exit code 0.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from validator_exit.config import ExitToolConfig
from validator_exit.subsystems.beacon import BeaconApiClient, BeaconStateReader, shorten_identity
from validator_exit.subsystems.chain import ChainClock, ChainConfig
from validator_exit.subsystems.eligibility import EligibilityEvaluator
from validator_exit.subsystems.exit import (
    ExitBroadcaster,
    ExitOrchestrator,
    ExitPreview,
    ItemResult,
    LighthouseExitBroadcaster,
    RunStatus,
    check_required_tools,
)
from validator_exit.subsystems.keystore import ValidatorDirectory
from validator_exit.subsystems.selection import Selection, SelectionMode, resolve_selection
from validator_exit.types import ChainUnavailable, InvalidSelection, SetupFailure

from . import display
from .console import Console

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SETUP_FAILURE = 1

_MENU_MODES: dict[str, SelectionMode] = {
    "1": SelectionMode.ALL,
    "2": SelectionMode.BY_INDEX,
    "3": SelectionMode.BY_IDENTITY,
}
"""Menu choice to selection mode. Any other choice cancels."""


@dataclass(slots=True)
class TypedPhraseConfirmation:
    """
    Confirmation policy requiring the operator to type an exact phrase.

    Empty input, a default, or any variation of the phrase cancels.
    """

    console: Console
    phrase: str
    currency: str

    def present(self, previews: Sequence[ExitPreview]) -> None:
        display.render_warning(self.console, len(previews), self.currency)
        display.render_preview(self.console, previews)

    def confirm(self, previews: Sequence[ExitPreview]) -> bool:
        self.console.echo(f"  To confirm, type '{self.phrase}':", fg="yellow")
        answer = self.console.prompt(">")
        return answer == self.phrase


@dataclass(slots=True)
class ConsoleProgress:
    """Prints batch progress as the orchestrator works."""

    console: Console

    def on_item_start(self, position: int, total: int, identity: str) -> None:
        self.console.echo()
        self.console.echo(
            f"{self.console.style(f'[{position}/{total}]', fg='cyan')} Processing "
            f"{shorten_identity(identity)}"
        )

    def on_item_done(self, position: int, total: int, result: ItemResult) -> None:
        display.render_item_result(self.console, result)


def _default_broadcaster(config: ExitToolConfig) -> ExitBroadcaster:
    return LighthouseExitBroadcaster(
        image=config.lighthouse_image,
        timeout=config.broadcast_timeout,
    )


@dataclass(slots=True)
class ExitSession:
    """One interactive run of the exit tool."""

    config: ExitToolConfig
    """Resolved settings; prompt defaults come from here."""

    console: Console
    """Operator terminal."""

    client_factory: Callable[[str], BeaconApiClient] | None = None
    """Builds a beacon client for a URL. Defaults to BeaconApiClient."""

    broadcaster_factory: Callable[[ExitToolConfig], ExitBroadcaster] = field(
        default=_default_broadcaster
    )
    """Builds the exit broadcaster."""

    tools_check: Callable[[], None] = field(default=check_required_tools)
    """Verifies external tools. Raises SetupFailure."""

    sleep: Callable[[float], None] | None = None
    """Sleep between broadcasts. Defaults to time.sleep."""

    def run(self) -> int:
        """
        Run the session.

        Returns:
            Process exit code.
        """
        try:
            return self._run()
        except SetupFailure as exc:
            self.console.error(exc.message)
            return EXIT_SETUP_FAILURE
        except ChainUnavailable as exc:
            self.console.error(f"Beacon node became unavailable: {exc.message}")
            return EXIT_SETUP_FAILURE

    def _run(self) -> int:
        self.console.info("Checking required tools...")
        self.tools_check()
        self.console.success("All required tools are installed")
        self.console.separator()

        self.console.heading("Step 1: Beacon Node Configuration")
        client = self._connect_beacon()

        with client:
            self.console.separator()
            self.console.heading("Step 2: Keystore Configuration")
            directory = self._choose_keystore_dir()
            network_dir = self._network_dir()
            chain_config = ChainConfig.from_network_dir(network_dir)

            self.console.separator()
            self.console.heading("Step 3: Select Validators to Exit")
            self.console.info("Scanning keystore directory...")
            identities = directory.list_managed_identities()
            if not identities:
                raise SetupFailure(f"No validators found in {directory.root}")

            orchestrator = ExitOrchestrator(
                reader=BeaconStateReader(client),
                clock=ChainClock(client, chain_config),
                evaluator=EligibilityEvaluator(chain_config),
                directory=directory,
                broadcaster=self.broadcaster_factory(self.config),
                network_dir=network_dir,
                beacon_url=client.base_url,
                exit_delay=self.config.exit_delay_seconds,
                observer=ConsoleProgress(self.console),
            )
            if self.sleep is not None:
                orchestrator.sleep = self.sleep

            display.render_validators(
                self.console, orchestrator.preview(identities), self.config.currency_symbol
            )

            selection = self._choose_selection(identities)
            if selection is None:
                self.console.info("Exit cancelled")
                return EXIT_OK

            self.console.separator()
            self.console.heading("Step 4: Confirm Exit")
            policy = TypedPhraseConfirmation(
                console=self.console,
                phrase=self.config.confirmation_phrase,
                currency=self.config.currency_symbol,
            )
            summary = orchestrator.run(selection.identities, policy)

            match summary.status:
                case RunStatus.NOTHING_ELIGIBLE:
                    display.render_nothing_eligible(self.console)
                    self.console.info("Exiting...")
                    return EXIT_OK
                case RunStatus.CANCELLED:
                    self.console.info("Exit cancelled by user")
                    return EXIT_OK
                case RunStatus.COMPLETED:
                    pass

            self.console.separator()
            display.render_summary(
                self.console, summary, client.base_url, self.config.explorer_url
            )
            return EXIT_OK

    def _make_client(self, url: str) -> BeaconApiClient:
        if self.client_factory is not None:
            return self.client_factory(url)
        return BeaconApiClient(url, timeout=self.config.request_timeout)

    def _connect_beacon(self) -> BeaconApiClient:
        """
        Prompt for a beacon URL until a reachable, synced node is found.

        Raises:
            SetupFailure: If the operator declines to try another URL.
        """
        url = self.config.beacon_url
        while True:
            url = self.console.prompt("Beacon node URL", default=url)
            client = self._make_client(url)
            self.console.info(f"Checking beacon node at {url}...")
            try:
                client.check_health()
                if client.is_syncing():
                    self.console.warn("Beacon node is still syncing")
                else:
                    self.console.success("Beacon node is connected and synced")
                    return client
            except ChainUnavailable as exc:
                logger.debug("Beacon node check failed: %s", exc)

            client.close()
            self.console.echo()
            self.console.warn(f"Cannot connect to beacon node at {url}")
            if not self.console.confirm("Try a different URL?", default=True):
                raise SetupFailure("Beacon node is required to exit validators")
            self.console.echo()

    def _choose_keystore_dir(self) -> ValidatorDirectory:
        """
        Prompt for a keystore root until one with validators/ and secrets/ is given.

        Raises:
            SetupFailure: If the operator declines to try another directory.
        """
        default = str(self.config.keystore_dir)
        while True:
            raw = self.console.prompt("Keystore directory", default=default)
            directory = ValidatorDirectory(Path(raw).expanduser().resolve())
            if directory.is_valid():
                self.console.success(f"Keystore directory found: {directory.root}")
                return directory

            self.console.echo()
            self.console.warn("Invalid keystore directory (missing validators/ or secrets/ folder)")
            if not self.console.confirm("Try a different directory?", default=True):
                raise SetupFailure(f"Invalid keystore directory: {directory.root}")
            self.console.echo()

    def _network_dir(self) -> Path:
        network_dir = self.config.consensus_dir.expanduser().resolve()
        if not network_dir.is_dir():
            raise SetupFailure(f"Consensus directory not found: {network_dir}")
        return network_dir

    def _choose_selection(self, identities: Sequence[str]) -> Selection | None:
        """
        Show the selection menu until a usable selection is made.

        Returns:
            The selection, or None if the operator cancelled.
        """
        while True:
            display.render_selection_menu(self.console, len(identities))
            choice = self.console.prompt("Your choice", default="1").strip()
            mode = _MENU_MODES.get(choice)
            if mode is None:
                return None

            user_input = ""
            if mode is SelectionMode.BY_INDEX:
                self.console.echo()
                self.console.echo("  Enter validator numbers separated by comma (e.g., 1,3,5)")
                user_input = self.console.prompt("Validator numbers")
            elif mode is SelectionMode.BY_IDENTITY:
                self.console.echo()
                user_input = self.console.prompt("Enter validator public key (0x...)")

            try:
                selection = resolve_selection(mode, identities, user_input)
            except InvalidSelection as exc:
                self.console.error(exc.message)
                self.console.echo()
                continue

            for token in selection.rejected:
                self.console.warn(f"Invalid number: {token} (skipping)")
            return selection
