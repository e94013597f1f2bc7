"""Rich-powered console output for depreview.

Besides ordinary log lines this emits GitHub Actions workflow commands
(`::debug::`, `::warning::`, `::error::`) which the runner turns into
debug logs and annotations.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console as RichConsole
from rich.markup import escape

from depreview.github.renderer import render_severity
from depreview.models import Change


def _escape_command_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class Console:
    """Terminal and workflow-log output for depreview using Rich."""

    def __init__(self, console: RichConsole | None = None) -> None:
        self.console = console or RichConsole(soft_wrap=True)

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def info(self, message: str) -> None:
        self.console.print(escape(message))

    def _command(self, name: str, message: str) -> None:
        self.console.print(
            f"::{name}::{_escape_command_data(message)}",
            markup=False,
            highlight=False,
            emoji=False,
        )

    def debug(self, message: str) -> None:
        self._command("debug", message)

    def annotate_warning(self, message: str) -> None:
        self._command("warning", message)

    def annotate_error(self, message: str) -> None:
        self._command("error", message)

    def show_vulnerable_change(self, change: Change) -> None:
        """Print every advisory against one added package."""
        for vuln in change.vulnerabilities:
            self.console.print(
                f"[bold]{escape(change.manifest)} » {escape(change.name)}@"
                f"{escape(change.version)}[/bold] – {escape(vuln.advisory_summary)} "
                f"{render_severity(vuln.severity)}"
            )
            self.console.print(f"  ↪ {escape(vuln.advisory_url)}", highlight=False)

    def show_denied_licenses(self, changes: Sequence[Change]) -> None:
        if not changes:
            return
        self.console.print("\nThe following dependencies have incompatible licenses:\n")
        for change in changes:
            self.console.print(
                f"[bold]{escape(change.manifest)} » {escape(change.name)}@"
                f"{escape(change.version)}[/bold] – License: "
                f"[red]{escape(change.license or '')}[/red]"
            )

    def show_unknown_licenses(self, changes: Sequence[Change]) -> None:
        if not changes:
            return
        self.console.print(
            "\nWe could not detect a license for the following dependencies:\n"
        )
        for change in changes:
            self.console.print(
                f"[bold]{escape(change.manifest)} » {escape(change.name)}@"
                f"{escape(change.version)}[/bold]"
            )
