"""Analytics summary command."""

import click
from rich.console import Console
from rich.table import Table

from ..helpers import get_controller


@click.command()
@click.option('--days', default=7, show_default=True, help='Days of completion history to show')
@click.pass_context
def stats(ctx, days):
    """Show completion analytics"""
    console = Console()
    controller = get_controller(ctx)
    analytics = controller.analytics

    table = Table(title="Productivity")
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", style="white", justify="right")
    table.add_row("Total tasks", str(analytics.total_tasks))
    table.add_row("Active", str(analytics.active_tasks))
    table.add_row("Completed", str(analytics.completed_tasks))
    table.add_row("Completion rate", f"{analytics.completion_rate:.0%}")
    table.add_row("Completed today", str(analytics.tasks_completed_today))
    table.add_row("Streak", f"{analytics.streak_days} day(s)")
    console.print(table)

    history = controller.state.completion_history[-days:] if days > 0 else ()
    if not history:
        console.print("[yellow]No completed tasks yet.[/yellow]")
        return

    history_table = Table(title="Completion history")
    history_table.add_column("Date", style="cyan")
    history_table.add_column("Completed", style="green", justify="right")
    for entry in history:
        history_table.add_row(entry.date, str(entry.count))
    console.print(history_table)
