"""
ConsoleUI - Rich-based console interface.

Renders per-entry outcome lines, run summaries and the tweak catalogue.
"""

from typing import Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..protocol.result import EntryOutcome, Outcome, RunReport
from ..protocol.tweak import TweakDocument

OUTCOME_STYLES = {
    Outcome.APPLIED: "green",
    Outcome.RESTORED: "cyan",
    Outcome.SKIPPED: "yellow",
    Outcome.FAILED: "bold red",
}

KIND_LABELS = {
    "service": "Services",
    "scheduledTask": "Scheduled tasks",
    "registry": "Registry",
    "tweak": "Tweaks",
}


class ConsoleUI:
    """
    Rich console interface for wintweaks.
    """

    def __init__(self, quiet: bool = False, console: Optional[Console] = None):
        self.quiet = quiet
        self.console = console or Console()

    def print(self, *args, **kwargs):
        """Print to console."""
        if self.quiet:
            return
        self.console.print(*args, **kwargs)

    def print_banner(self):
        """Print application banner."""
        if self.quiet:
            return

        banner = f"""
[bold cyan]Windows Tweak Engine[/] [dim]v{__version__}[/]
[dim]Apply and restore services, scheduled tasks and registry values[/]
        """
        self.console.print(Panel(banner.strip(), border_style="cyan"))

    def print_admin_required(self):
        """Shown when the process lacks administrator rights."""
        self.console.print(Panel(
            "[bold]Administrator rights are required to change services, "
            "scheduled tasks and machine registry values.[/]\n"
            "[dim]Re-run from an elevated prompt, or pass --skip-admin-check.[/]",
            title="Not running as administrator",
            border_style="bold red",
        ))

    # =========================================================================
    # Outcomes
    # =========================================================================

    def print_outcome(self, outcome: EntryOutcome):
        """One line per entry, colored by outcome."""
        if self.quiet and outcome.outcome != Outcome.FAILED:
            return

        style = OUTCOME_STYLES.get(outcome.outcome, "white")
        self.console.print(
            f"[{style}]{outcome.outcome.value:<8}[/] {outcome.message}",
            highlight=False,
        )

    def print_report(self, report: RunReport, show_outcomes: bool = False):
        """
        Summarize a run.

        Args:
            report: Finished run
            show_outcomes: Also print every outcome line (when they were not
                streamed while the run was going)
        """
        if show_outcomes:
            for outcome in report.outcomes:
                self.print_outcome(outcome)

        if self.quiet:
            return

        for note in report.notes:
            self.console.print(f"[dim]note:[/] {note}")

        self.print_summary_table(report)

    def print_summary_table(self, report: RunReport):
        """Counts by outcome per resource kind."""
        if self.quiet:
            return

        counters = report.counters
        if not counters:
            self.console.print("[dim]Nothing to do[/]")
            return

        table = Table(title=f"{report.operation.capitalize()} summary")
        table.add_column("Kind", style="bold")
        table.add_column("Applied", justify="right", style="green")
        table.add_column("Restored", justify="right", style="cyan")
        table.add_column("Skipped", justify="right", style="yellow")
        table.add_column("Failed", justify="right", style="red")
        table.add_column("Backups", justify="right", style="dim")

        for kind, counts in counters.items():
            backups = report.backup_counts.get(kind.value)
            table.add_row(
                KIND_LABELS.get(kind.value, kind.value),
                str(counts.applied),
                str(counts.restored),
                str(counts.skipped),
                str(counts.failed),
                "-" if backups is None else str(backups),
            )

        self.console.print()
        self.console.print(table)

    # =========================================================================
    # Catalogue
    # =========================================================================

    def print_tweaks(self, document: TweakDocument, categories: Dict[str, List[str]]):
        """Tweaks grouped by category."""
        for category, keys in categories.items():
            table = Table(title=category or "(uncategorized)", title_justify="left")
            table.add_column("Key", style="cyan", no_wrap=True)
            table.add_column("Tweak")
            table.add_column("Entries", justify="right", style="dim")

            for key in keys:
                tweak = document.get(key)
                entries = len(tweak.service) + len(tweak.scheduled_task) + len(tweak.registry)
                table.add_row(key, tweak.title, str(entries))

            self.console.print(table)

    def print_error(self, message: str, exception: Optional[Exception] = None):
        """Display error message."""
        self.console.print(f"[bold red]Error:[/] {message}")
        if exception:
            self.console.print(f"[dim]{type(exception).__name__}: {exception}[/]")

    def prompt(self, text: str) -> str:
        """Read one line of input."""
        return self.console.input(f"[bold cyan]{text}[/]")
