"""Rich console formatter for aggregation results."""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from ..domain import AggregateResult


def _truncate_address(address: str) -> str:
    """Truncate address for display."""
    if len(address) <= 14:
        return address
    return f"{address[:6]}...{address[-4:]}"


def _format_usd(value: float) -> str:
    return f"${value:,.2f}"


def build_result_table(result: AggregateResult) -> Table:
    """Per-account breakdown with a total row."""
    table = Table(title=None, expand=True, show_lines=False)
    table.add_column("Wallet", style="cyan", no_wrap=True)
    table.add_column("Value (USD)", justify="right", style="green")

    for account, value in result.per_account.items():
        table.add_row(_truncate_address(account), _format_usd(value))

    table.add_row("[bold]TOTAL[/]", f"[bold]{_format_usd(result.total)}[/]")
    return table


def format_result_table(result: AggregateResult, console: Console | None = None) -> None:
    """Print the aggregation result as a panel to stdout.

    Args:
        result: The aggregation result to format
        console: Console to print to; a fresh stdout console when omitted
    """
    console = console or Console()

    summary = Table(show_header=False, box=None, padding=(0, 1))
    summary.add_column("Key", style="dim")
    summary.add_column("Value", style="cyan")
    summary.add_row("Wallets", str(len(result.per_account)))
    summary.add_row("Timestamp", result.timestamp or "-")

    panel = Panel(
        Group(summary, "", build_result_table(result)),
        title="[bold white]Wallet Balances[/]",
        border_style="white",
        padding=(1, 2),
    )

    console.print()
    console.print(panel)
    console.print()
