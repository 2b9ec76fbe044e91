import click

from bullscope import __version__
from bullscope.cli.utils import console, print_help_panel, run
from bullscope.conf import settings
from bullscope.explorer import Explorer


@click.group(name="info", invoke_without_command=True)
@click.pass_context
def info_app(ctx: click.Context) -> None:
    """Information commands."""
    if ctx.invoked_subcommand is None:
        print_help_panel(
            "Info CLI",
            "ℹ️  Information Commands",
            "Get information about bullscope and the inspected store.",
            ["bullscope info version", "bullscope info store"],
        )
        click.echo(ctx.get_help())


@info_app.command("version")
def version_command() -> None:
    """Show bullscope version."""
    console.print(f"[cyan]bullscope version: {__version__}[/cyan]")


@info_app.command("store")
def store_command() -> None:
    """Show the store configuration and whether it answers."""

    async def check(explorer: Explorer):
        return explorer, await explorer.ping()

    explorer, alive = run(check)
    store = explorer.store
    console.print(f"[green]Store:[/green] [cyan]{store.__class__.__module__}.{store.__class__.__name__}[/cyan]")
    console.print(f"[green]Prefix:[/green] {explorer.prefix}")
    console.print(f"[green]Schema:[/green] {explorer.schema.name}")
    console.print(f"[green]Read policy:[/green] {explorer.read_policy}")
    if settings.store is None:
        console.print(f"[green]Connection:[/green] {settings.connection_url}")
    status = "[green]reachable[/green]" if alive else "[red]not answering[/red]"
    console.print(f"[green]Status:[/green] {status}")
