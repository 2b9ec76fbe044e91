import click
from rich.table import Table

from bullscope.cli.utils import console, print_help_panel, run
from bullscope.explorer import Explorer
from bullscope.stats import KIND_FIELDS


@click.group(name="queue", invoke_without_command=True)
@click.pass_context
def queue_app(ctx: click.Context) -> None:
    """
    Inspects the queues found under the configured prefix.
    """
    if ctx.invoked_subcommand is None:
        print_help_panel(
            "Queue CLI",
            "📦 Queue Commands",
            "List queues and show their per-state counts.",
            ["bullscope queue list", "bullscope queue info orders"],
        )
        click.echo(ctx.get_help())


@queue_app.command("list")
def list_queues() -> None:
    """
    Lists every queue with its per-state counts and orphaned hashes.
    """

    async def fetch(explorer: Explorer):
        return await explorer.get_all_stats()

    stats = run(fetch)
    if not stats:
        console.print("[yellow]No queues found.[/yellow]")
        return

    table = Table(title="Queues", header_style="bold cyan")
    table.add_column("Queue", style="bold", no_wrap=True)
    for kind in KIND_FIELDS:
        table.add_column(kind, justify="right")
    table.add_column("orphaned", justify="right", style="yellow")

    for stat in stats:
        counts = stat.counts
        table.add_row(stat.name, *(str(counts[kind]) for kind in KIND_FIELDS), str(stat.orphaned))
    console.print(table)


@queue_app.command("info")
@click.argument("queue")
def info_queue(queue: str) -> None:
    """
    Shows the counts of one queue.

    Args:
        queue: The name of the queue.
    """

    async def fetch(explorer: Explorer):
        return await explorer.get_queue_stat(queue)

    stat = run(fetch)
    console.print(f"[cyan]Queue '{queue}'[/cyan]\n")
    table = Table(header_style="bold cyan")
    table.add_column("State")
    table.add_column("Jobs", justify="right")
    for kind, count in stat.counts.items():
        table.add_row(kind, str(count))
    table.add_row("orphaned", str(stat.orphaned), style="yellow")
    table.add_row("total", str(stat.total), style="bold")
    console.print(table)
