"""Terminal display and prompts using rich."""

from rich.console import Console
from rich.progress import (
    Progress,
    TextColumn,
    SpinnerColumn,
)
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.text import Text
from rich.table import Table
from typing import Any, Dict, List, Optional
import time
from contextlib import contextmanager

from ..domain.models import (
    BatchResult,
    DateScopedDraft,
    DescriptionGroup,
    LedgerStats,
    Summary,
)
from ..errors import Toggl2JiraError, TransportError
from ..sync.assignment import ACTION_ASSIGN, ACTION_SKIP
from ..sync.summary import format_duration


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


class ModernCLI:
    """Minimalistic CLI interface with rich formatting."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.start_time: Optional[float] = None

    def show_banner(self) -> None:
        """Show application banner."""
        banner = Text("toggl2jira", style="bold blue")
        banner.append(" • Toggl Track → Jira work logs", style="dim")
        self.console.print(Panel(banner, border_style="blue"))

    def validate_config(self, errors: List[str]) -> bool:
        """Show configuration validation results."""
        if errors:
            self.console.print("❌ [red bold]Configuration Error[/red bold]")
            for error in errors:
                self.console.print(f"   • {error}", style="red")
            self.console.print("   Please check your .env file or set these environment variables.")
            return False
        return True

    def start_sync(self, time_range: str, dry_run: bool = False) -> None:
        """Start sync operation display."""
        self.start_time = time.time()

        mode_text = "[yellow]DRY RUN[/yellow]" if dry_run else "[blue]Fetching[/blue]"
        self.console.print(f"\n⏳ {mode_text} time entries [cyan]{time_range}[/cyan]...")

    def show_summary(self, summary: Summary) -> None:
        """Show the three reconciliation buckets and totals."""
        self.console.print("\n[bold]=== SUMMARY ===[/bold]")

        if summary.already_synced:
            self.console.print("\n[dim bold]Already synced to Jira:[/dim bold]")
            table = Table(show_header=True, box=None)
            table.add_column("Issue Key", width=15, style="cyan")
            table.add_column("Time", width=10, justify="right", style="blue")
            table.add_column("Description", width=50, overflow="ellipsis", style="dim")
            table.add_column("Entries", width=8, justify="right")
            for row in summary.already_synced:
                table.add_row(
                    row.issue_key,
                    row.duration_formatted,
                    _truncate(row.description, 50),
                    str(row.entry_count),
                )
            self.console.print(table)

        if summary.jira_work_logs:
            self.console.print("\n[green bold]Work logs to be created in Jira:[/green bold]")
            table = Table(show_header=True, box=None)
            table.add_column("Issue Key", width=15, style="cyan")
            table.add_column("Date", width=10)
            table.add_column("Time", width=10, justify="right", style="blue")
            table.add_column("Comment", width=50, overflow="ellipsis")
            table.add_column("Entries", width=8, justify="right")
            for draft in summary.jira_work_logs:
                if isinstance(draft, DateScopedDraft):
                    day = draft.date.isoformat()
                    comment = ", ".join(item.time_range for item in draft.breakdown)
                else:
                    day = ""
                    comment = draft.comment
                table.add_row(
                    draft.issue_key,
                    day,
                    draft.duration_formatted,
                    _truncate(comment, 50),
                    str(draft.entry_count),
                )
            self.console.print(table)

        if summary.non_jira:
            self.console.print("\n[yellow bold]Time entries without Jira issue keys:[/yellow bold]")
            table = Table(show_header=True, box=None)
            table.add_column("Description", width=60, overflow="ellipsis")
            table.add_column("Total Time", width=12, justify="right", style="blue")
            table.add_column("Entries", width=8, justify="right")
            for row in summary.non_jira:
                table.add_row(
                    _truncate(row.description, 60), row.duration_formatted, str(row.entry_count)
                )
            self.console.print(table)

        totals = summary.totals
        self.console.print("\n[bold]Totals:[/bold]")
        if totals.already_synced_seconds > 0:
            self.console.print(
                f"  Already synced: [dim]{format_duration(totals.already_synced_seconds)}[/dim]"
            )
        self.console.print(f"  Jira time: [green]{format_duration(totals.jira_seconds)}[/green]")
        self.console.print(
            f"  Non-Jira time: [yellow]{format_duration(totals.non_jira_seconds)}[/yellow]"
        )
        self.console.print(f"  Total time: [cyan]{format_duration(totals.total_seconds)}[/cyan]")

    def show_batch_result(self, batch: BatchResult) -> None:
        """Show outcome of work log submission."""
        if batch.successful:
            self.console.print(
                f"[green]✓ Successfully created {len(batch.successful)} work log(s).[/green]"
            )

        if batch.failed:
            self.console.print(f"[red]✗ Failed to create {len(batch.failed)} work log(s):[/red]")
            for failure in batch.failed:
                self.console.print(
                    f"  - {failure.draft.issue_key} "
                    f"(entries {', '.join(failure.draft.entry_ids)}): {failure.error}",
                    style="red",
                )

        for warning in batch.persistence_warnings:
            self.show_warning(f"Sync history not saved: {warning}")

        self.complete_sync(len(batch.successful), len(batch.failed))

    def complete_sync(self, created: int, failed: int) -> None:
        """Show framed completion line."""
        duration = 0.0 if self.start_time is None else time.time() - self.start_time
        status_icon = "✅" if failed == 0 else "⚠️ "
        summary = (
            f"{status_icon} [green bold]{duration:.2f}s[/green bold] • "
            f"[white]{created} created[/white] • "
            f"[red]{failed} failed[/red]"
        )
        self.console.print(Panel(summary, border_style="green", title="Sync Summary"))

    def show_config(self, config: Dict[str, Any]) -> None:
        """Show configuration with masked secrets."""
        self.console.print("[cyan]Current configuration:[/cyan]")
        for section, values in config.items():
            self.console.print(f"\n[bold]{section.capitalize()}:[/bold]")
            for key, value in values.items():
                self.console.print(f"  {key}: {value}")
        self.console.print("\n[yellow]To update configuration, please edit the .env file.[/yellow]")

    def show_history(self, stats: LedgerStats) -> None:
        """Show sync history statistics."""
        if stats.total_entries == 0:
            self.console.print("[yellow]No sync history found.[/yellow]")
            return

        self.console.print("[cyan bold]Sync History Statistics[/cyan bold]")
        self.console.print(f"  Synced entries: {stats.total_entries}")
        self.console.print(f"  Total time: {format_duration(stats.total_seconds)}")
        self.console.print(f"  Unique issues: {stats.unique_issue_count}")
        if stats.issues:
            self.console.print(f"  Issues: {', '.join(stats.issues)}")

    def show_health(self, health: Dict[str, Dict[str, str]]) -> bool:
        """Show API connectivity results."""
        for service in ("toggl", "jira"):
            status = health[service]
            if status["status"] == "healthy":
                self.console.print(f"✅ [green]{service.capitalize()} API connected[/green]")
            else:
                self.console.print(
                    f"❌ [red]{service.capitalize()} API unavailable:[/red] {status['message']}"
                )
        return health["overall"]["status"] == "healthy"

    def show_error(self, error: str) -> None:
        """Show error message."""
        self.console.print(f"\n❌ [red bold]Error:[/red bold] {error}")

    def show_warning(self, message: str) -> None:
        """Show warning message."""
        self.console.print(f"⚠️  [yellow]{message}[/yellow]")

    def show_info(self, message: str) -> None:
        self.console.print(f"\n[yellow]{message}[/yellow]")

    def ask_confirmation(self, message: str, default: bool = False) -> bool:
        """Ask for user confirmation."""
        return Confirm.ask(f"❓ {message}", console=self.console, default=default)

    @contextmanager
    def progress_spinner(self, description: str):
        """Context manager for showing a spinner with description."""
        with Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            console=self.console,
            transient=True,
        ) as progress:
            task = progress.add_task(description, total=None)
            try:
                yield progress
            finally:
                progress.remove_task(task)


class RichPrompter:
    """Interactive issue assignment prompts backed by rich."""

    def __init__(self, cli: ModernCLI):
        self.cli = cli
        self.console = cli.console

    def confirm_assignment(self, group_count: int) -> bool:
        return self.cli.ask_confirmation(
            f"You have {group_count} group(s) of entries without Jira issue keys. "
            "Would you like to assign them to Jira issues?",
            default=True,
        )

    def choose_action(self, group: DescriptionGroup) -> str:
        self.console.print(f"\n[cyan]Group: {group.description}[/cyan]")
        self.console.print(f"  Total time: {format_duration(group.total_seconds)}", style="dim")
        self.console.print(f"  Number of entries: {len(group.entries)}", style="dim")
        return Prompt.ask(
            "What would you like to do with this group?",
            choices=[ACTION_ASSIGN, ACTION_SKIP],
            default=ACTION_ASSIGN,
            console=self.console,
        )

    def ask_issue_key(self, group: DescriptionGroup) -> Optional[str]:
        answer = Prompt.ask(
            "Enter Jira issue key (e.g., PROJ-123), empty to cancel",
            default="",
            show_default=False,
            console=self.console,
        )
        return answer or None

    def report_invalid(self, issue_key: str, error: Toggl2JiraError) -> None:
        self.console.print(f"[red]{error}[/red]")

    def ask_retry_after_error(self, issue_key: str, error: TransportError) -> bool:
        self.console.print(f"[red]Error validating issue {issue_key}: {error}[/red]")
        return self.cli.ask_confirmation("Would you like to try another issue key?", default=True)
