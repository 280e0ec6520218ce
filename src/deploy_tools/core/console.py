"""Colorized console output for the command line tools.

Lines are tagged by severity: [INFO] in green, [WARN] in yellow and
[ERROR] in red. Errors go to stderr, everything else to stdout.
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape

from .validator import CheckResult, CheckStatus


_SYMBOLS = {
    CheckStatus.PASSED: "✓",
    CheckStatus.WARNING: "⚠",
    CheckStatus.FAILED: "✗",
    CheckStatus.INFO: "ℹ",
    CheckStatus.SKIPPED: "-",
}


class Reporter:
    """Severity-tagged console reporter built on rich."""

    def __init__(
        self,
        console: Optional[Console] = None,
        error_console: Optional[Console] = None,
        color: bool = True,
    ) -> None:
        """Initialize reporter.

        Args:
            console: Console for regular output, defaults to stdout
            error_console: Console for errors, defaults to stderr
            color: Whether to style output
        """
        no_color = not color
        self.console = console or Console(
            no_color=no_color, highlight=False, soft_wrap=True
        )
        self.error_console = error_console or Console(
            stderr=True, no_color=no_color, highlight=False, soft_wrap=True
        )

    def info(self, message: str) -> None:
        """Print an informational line."""
        self.console.print(f"[green][INFO][/green] {escape(message)}")

    def warning(self, message: str) -> None:
        """Print a warning line."""
        self.console.print(f"[yellow][WARN][/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Print an error line to stderr."""
        self.error_console.print(f"[red][ERROR][/red] {escape(message)}")

    def section(self, title: str) -> None:
        """Print a section header preceded by a blank line."""
        self.console.print()
        self.console.print(f"[blue]==== {escape(title)} ====[/blue]")

    def line(self, text: str = "") -> None:
        """Print an unstyled line."""
        self.console.print(escape(text))

    def report(self, result: CheckResult) -> None:
        """Print a check result with its status symbol and detail lines."""
        message = f"{_SYMBOLS[result.status]} {result.message}"
        if result.status == CheckStatus.FAILED:
            self.error(message)
        elif result.status == CheckStatus.WARNING:
            self.warning(message)
        else:
            self.info(message)

        for detail in result.details:
            self.line(detail)
