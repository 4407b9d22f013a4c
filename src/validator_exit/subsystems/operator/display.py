"""Operator-facing rendering of validators, previews and run summaries."""

from __future__ import annotations

from collections.abc import Sequence

from validator_exit.subsystems.beacon import StatusClass, ValidatorStatus, shorten_identity
from validator_exit.subsystems.eligibility import Eligible, EligibilityVerdict, NotEligible, Unknown
from validator_exit.subsystems.exit import (
    ExitPreview,
    ExitSummary,
    Failed,
    ItemResult,
    Skipped,
    Succeeded,
)

from .console import Console

BANNER_WIDTH = 66


def status_color(status: ValidatorStatus | None) -> str:
    """Terminal color for a lifecycle state."""
    if status is ValidatorStatus.ACTIVE_ONGOING:
        return "green"
    if status is ValidatorStatus.ACTIVE_EXITING or status in (
        ValidatorStatus.EXITED_UNSLASHED,
        ValidatorStatus.EXITED_SLASHED,
    ):
        return "yellow"
    if status is not None and status.classify() is StatusClass.ALREADY_EXITED:
        return "cyan"
    return "red"


def describe_verdict(console: Console, verdict: EligibilityVerdict) -> str:
    match verdict:
        case Eligible():
            return console.style(verdict.describe(), fg="green")
        case Unknown():
            return console.style(verdict.describe(), fg="yellow")
        case NotEligible():
            return console.style(verdict.describe(), fg="red")


def render_validators(console: Console, previews: Sequence[ExitPreview], currency: str) -> None:
    """List discovered validators with their chain state and eligibility."""
    console.echo()
    console.echo(f"Found {len(previews)} validator(s):", bold=True)
    console.echo()

    for position, preview in enumerate(previews, start=1):
        validator = preview.validator
        if validator is None:
            index, status_text, balance, withdrawal = "N/A", "unknown", "0", "Not set"
            color = status_color(None)
        else:
            index = str(validator.index) if validator.index is not None else "N/A"
            status_text = validator.status.value
            balance = f"{validator.balance:.4f}"
            withdrawal = validator.withdrawal_address_display
            color = status_color(validator.status)

        marker = console.style(f"[{position}]", bold=True)
        console.echo(f"  {marker} {shorten_identity(preview.identity)}")
        console.echo(
            f"      Index: {index} | Status: {console.style(status_text, fg=color)}"
            f" | Balance: {balance} {currency}"
        )
        console.echo(f"      Withdrawal: {withdrawal}")
        console.echo(f"      Exit eligibility: {describe_verdict(console, preview.verdict)}")
        console.echo()


def render_selection_menu(console: Console, total: int) -> None:
    console.echo("Which validators do you want to exit?", bold=True)
    console.echo()
    console.echo(f"  1) Exit ALL validators ({total} total)")
    console.echo("  2) Select specific validators by number")
    console.echo("  3) Enter validator public key manually")
    console.echo("  4) Cancel and exit")
    console.echo()


def _banner(console: Console, title: str, lines: Sequence[str], fg: str) -> None:
    rule = "═" * BANNER_WIDTH
    console.echo(f"╔{rule}╗", fg=fg, bold=True)
    console.echo(f"║{title.center(BANNER_WIDTH)}║", fg=fg, bold=True)
    console.echo(f"╠{rule}╣", fg=fg, bold=True)
    for line in lines:
        console.echo(f"║  {line.ljust(BANNER_WIDTH - 2)}║", fg=fg)
    console.echo(f"╚{rule}╝", fg=fg, bold=True)
    console.echo()


def render_warning(console: Console, count: int, currency: str) -> None:
    """Irreversibility warning shown before confirmation."""
    _banner(
        console,
        "WARNING",
        [
            "",
            f"You are about to exit {count} validator(s)",
            "",
            "THIS ACTION IS IRREVERSIBLE!",
            "",
            "After exiting:",
            "• Validator cannot be reactivated with same keys",
            "• Must wait for withdrawal delay (~27+ hours)",
            f"• Funds (stake + rewards, in {currency}) sent to withdrawal address",
            "",
        ],
        fg="red",
    )


def render_preview(console: Console, previews: Sequence[ExitPreview]) -> None:
    """One line per selected validator with its current eligibility."""
    console.echo("  Selected validators:")
    not_eligible = 0
    for preview in previews:
        short = shorten_identity(preview.identity)
        match preview.verdict:
            case Eligible():
                console.echo(f"    {console.style('✓', fg='green')} {short} - Eligible")
            case Unknown():
                console.echo(f"    {console.style('?', fg='yellow')} {short} - Unknown")
            case NotEligible() as verdict:
                not_eligible += 1
                console.echo(
                    f"    {console.style('✗', fg='red')} {short}"
                    f" - Not eligible ({verdict.wait_display})"
                )
    console.echo()

    if not_eligible:
        console.echo(
            f"  Note: {not_eligible} validator(s) are not yet eligible and will be skipped.",
            fg="yellow",
        )
        console.echo()


def render_nothing_eligible(console: Console) -> None:
    console.echo("  No validators are currently eligible for exit.", fg="red")
    console.echo("  Validators must be active for ~27 hours before they can exit.", fg="yellow")
    console.echo()


def render_item_result(console: Console, result: ItemResult) -> None:
    """Outcome line for one processed validator."""
    match result.outcome:
        case Succeeded():
            console.success("Exit broadcast successful!")
        case Failed(reason=reason):
            console.error(f"Exit failed! {reason}")
        case Skipped() as skipped:
            if skipped.verdict is not None:
                console.warn("Not eligible for exit yet!")
                console.echo(
                    f"      Validator must wait until epoch {skipped.verdict.eligible_at_epoch}",
                    fg="yellow",
                )
                console.echo(
                    f"      Estimated time remaining: {skipped.verdict.wait_display}", fg="yellow"
                )
            else:
                console.warn(f"Skipped ({skipped.reason.value}: {skipped.detail}).")


def render_summary(
    console: Console,
    summary: ExitSummary,
    beacon_url: str,
    explorer_url: str | None,
) -> None:
    """Counts, per-item detail and, after any success, the exit timeline."""
    console.echo("Exit Summary", bold=True)
    console.echo()
    console.echo(f"  {console.style('✓ Successful:', fg='green')} {summary.succeeded}")
    console.echo(f"  {console.style('✗ Failed:', fg='red')}     {summary.failed}")
    console.echo(f"  {console.style('⊘ Skipped:', fg='yellow')}    {summary.skipped}")
    console.echo()

    for item in summary.items:
        short = shorten_identity(item.identity)
        match item.outcome:
            case Succeeded():
                console.echo(f"    {short}  exit broadcast")
            case Failed(reason=reason):
                console.echo(f"    {short}  failed: {reason}")
            case Skipped(reason=reason, detail=detail):
                console.echo(f"    {short}  skipped ({reason.value}) {detail}".rstrip())
    console.echo()

    if summary.succeeded > 0:
        lines = [
            "Your validator(s) will now go through:",
            "",
            "1. Exit queue (varies by network congestion)",
            "2. Exit processing (~27 hours minimum)",
            "3. Withdrawal delay (~27 hours after exit)",
            "4. Funds sent to your withdrawal address",
            "",
            "Check status:",
            f"  {beacon_url}/eth/v1/beacon/states/head/validators/<pubkey>",
        ]
        if explorer_url:
            lines.append(f"Or view on explorer: {explorer_url}")
        _banner(console, "EXIT PROCESS STARTED", lines, fg="green")
