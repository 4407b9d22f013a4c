"""
Operator terminal I/O.

All interactive input and operator-facing output goes through Console so
the session can be driven by a scripted console in tests. Diagnostics go
to logging instead.
"""

from __future__ import annotations

import click

SEPARATOR = "─" * 66


class Console:
    """Terminal console backed by click."""

    def __init__(self, color: bool = True) -> None:
        """
        Args:
            color: Emit ANSI styles. Disable for logs or dumb terminals.
        """
        self.color = color

    @property
    def _color_flag(self) -> bool | None:
        # None lets click decide based on whether the stream is a terminal.
        return None if self.color else False

    def echo(self, text: str = "", fg: str | None = None, bold: bool = False) -> None:
        """Print one line, optionally styled."""
        click.secho(text, fg=fg, bold=bold, color=self._color_flag)

    def style(self, text: str, fg: str | None = None, bold: bool = False) -> str:
        """
        Style a fragment for embedding in a line.

        Styles are stripped on output when color is disabled.
        """
        return click.style(text, fg=fg, bold=bold)

    def info(self, message: str) -> None:
        self.echo(f"{self.style('[INFO]', fg='blue')} {message}")

    def success(self, message: str) -> None:
        self.echo(f"{self.style('[SUCCESS]', fg='green')} {message}")

    def warn(self, message: str) -> None:
        self.echo(f"{self.style('[WARN]', fg='yellow')} {message}")

    def error(self, message: str) -> None:
        click.secho(
            f"{self.style('[ERROR]', fg='red')} {message}", err=True, color=self._color_flag
        )

    def heading(self, text: str) -> None:
        self.echo(text, bold=True)
        self.echo()

    def separator(self) -> None:
        self.echo()
        self.echo(SEPARATOR, fg="blue")
        self.echo()

    def prompt(self, text: str, default: str | None = None) -> str:
        """
        Ask for a line of input.

        With a default, empty input returns the default. Without one, empty
        input returns an empty string.
        """
        if default is None:
            return click.prompt(f"  {text}", default="", show_default=False, type=str)
        return click.prompt(f"  {text}", default=default, show_default=True, type=str)

    def confirm(self, text: str, default: bool = False) -> bool:
        """Ask a yes/no question."""
        return click.confirm(f"  {text}", default=default)
