"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from shardplan.sharding.partitioner import Assignment
    from shardplan.sharding.planner import SuitePlan

console = Console()

_BALANCED_RATIO = 1.05
_FAIR_RATIO = 1.25
_BAR_WIDTH = 30


def _balance_color(ratio: float) -> str:
    """Return a Rich color name for makespan / lower-bound."""
    if ratio <= _BALANCED_RATIO:
        return "green"
    if ratio <= _FAIR_RATIO:
        return "yellow"
    return "red"


def _format_weight(weight: float) -> str:
    if float(weight).is_integer():
        return str(int(weight))
    return f"{weight:.2f}"


class CLIReporter:
    """Rich terminal output for discovery and planning."""

    def __init__(self) -> None:
        """Initialize the CLI reporter."""
        self.console = console

    def print_header(self, title: str) -> None:
        """Print a bold header."""
        self.console.print(f"\n[bold cyan]{title}[/bold cyan]\n")

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    def print_suite_list(self, suites: tuple[str, ...] | list[str]) -> None:
        """Print discovered suite paths, one per line."""
        if not suites:
            self.console.print("  [dim]No test suites found[/dim]")
            return
        for path in suites:
            self.console.print(f"  {escape(path)}")

    def print_assignment(self, assignment: Assignment, *, show_suites: bool = False) -> None:
        """Print one row per thread with its suite count and weight."""
        table = Table(title="Thread Assignment", title_style="bold cyan")
        table.add_column("Thread", justify="right", style="bold")
        table.add_column("Suites", justify="right")
        table.add_column("Weight", justify="right")
        table.add_column("Load")
        if show_suites:
            table.add_column("Paths")

        makespan = assignment.makespan
        for thread in assignment:
            filled = round(thread.weight / makespan * _BAR_WIDTH) if makespan else 0
            bar = f"[cyan]{'█' * filled}[/cyan][dim]{'░' * (_BAR_WIDTH - filled)}[/dim]"
            row = [
                str(thread.index),
                str(len(thread.suites)),
                _format_weight(thread.weight),
                bar,
            ]
            if show_suites:
                row.append("\n".join(escape(p) for p in thread.paths))
            table.add_row(*row)

        self.console.print(table)

    def print_plan_summary(self, plan: SuitePlan) -> None:
        """Print totals and how close the split is to the pigeonhole bound."""
        assignment = plan.assignment
        if not assignment.bins:
            self.console.print("  [dim]Nothing to plan[/dim]")
            return

        lower = assignment.lower_bound
        ratio = assignment.makespan / lower if lower else 1.0
        color = _balance_color(ratio)
        weights = (
            f"{len(plan.weights)} weight override(s) from {escape(plan.weights.source)}"
            if plan.weights.source
            else "default weights only"
        )
        self.console.print()
        self.console.print(
            f"  [bold]{assignment.suite_count}[/bold] suites  "
            f"[bold]{len(assignment)}[/bold] threads  "
            f"heaviest [bold {color}]{_format_weight(assignment.makespan)}[/bold {color}] "
            f"[dim](ideal {_format_weight(lower)})[/dim]"
        )
        self.console.print(f"  [dim]{weights}[/dim]")
        self.console.print()


# Singleton instance for easy import
reporter = CLIReporter()
