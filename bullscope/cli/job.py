import click
from rich.table import Table

from bullscope.cli.utils import console, format_value, print_help_panel, run
from bullscope.core.enums import ALL_STATES
from bullscope.explorer import Explorer


@click.group(name="job", invoke_without_command=True)
@click.pass_context
def job_app(ctx: click.Context) -> None:
    """Job inspection commands."""
    if ctx.invoked_subcommand is None:
        print_help_panel(
            "Job CLI",
            "🛠️  Job Commands",
            "List, search and inspect jobs.",
            [
                "bullscope job list orders --state failed",
                "bullscope job list orders --query timeout",
                "bullscope job inspect 42 --queue orders",
            ],
        )
        click.echo(ctx.get_help())


@job_app.command("list")
@click.argument("queue")
@click.option("--state", default=ALL_STATES, show_default=True, help="Job state, or 'all'.")
@click.option("--query", "-q", default="", help="Case-insensitive substring filter.")
@click.option("--limit", default=100, show_default=True, type=int, help="Jobs read per state.")
def list_jobs(queue: str, state: str, query: str, limit: int) -> None:
    """List the jobs of a queue."""

    async def fetch(explorer: Explorer):
        return await explorer.get_jobs_by_state(queue, state, limit, query or None)

    jobs = run(fetch)
    if not jobs:
        console.print("[yellow]No jobs found.[/yellow]")
        return

    table = Table(title=f"Jobs of '{queue}' ({state})", header_style="bold cyan")
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Name")
    table.add_column("State")
    table.add_column("Created")
    table.add_column("Attempts", justify="right")
    table.add_column("Failed reason", style="red")
    for job in jobs:
        table.add_row(
            job.id,
            format_value(job.name),
            str(job.state),
            job.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            str(job.attempts_made),
            format_value(job.failed_reason),
        )
    console.print(table)


@job_app.command("inspect")
@click.argument("job_id")
@click.option("--queue", required=True, help="Queue name the job belongs to.")
def inspect_job(job_id: str, queue: str) -> None:
    """Inspect job details."""

    async def fetch(explorer: Explorer):
        return await explorer.get_job(queue, job_id)

    job = run(fetch)
    console.print_json(data=job.to_dict(), default=str)
