import click

from bullscope.cli.utils import console, print_help_panel, run
from bullscope.explorer import Explorer
from bullscope.stores.base import range_slice


@click.group(name="raw", invoke_without_command=True)
@click.pass_context
def raw_app(ctx: click.Context) -> None:
    """
    Read-only access to the underlying keys, for debugging a layout the
    explorer does not understand.
    """
    if ctx.invoked_subcommand is None:
        print_help_panel(
            "Raw CLI",
            "🔑 Raw Key Commands",
            "Scan keys and dump hashes and collections as stored.",
            [
                "bullscope raw keys 'bull:orders:*'",
                "bullscope raw hgetall bull:orders:42",
                "bullscope raw range bull:orders:wait --stop 9",
            ],
        )
        click.echo(ctx.get_help())


@raw_app.command("keys")
@click.argument("pattern")
def keys_command(pattern: str) -> None:
    """List the keys matching a glob pattern."""

    async def fetch(explorer: Explorer):
        return sorted({key async for key in explorer.store.scan_keys(pattern, explorer.scan_count)})

    keys = run(fetch)
    if not keys:
        console.print("[yellow]No keys found.[/yellow]")
        return
    for key in keys:
        console.print(key, highlight=False)


@raw_app.command("hgetall")
@click.argument("key")
def hgetall_command(key: str) -> None:
    """Dump every field of a hash."""

    async def fetch(explorer: Explorer):
        return await explorer.store.hgetall(key)

    fields = run(fetch)
    if not fields:
        console.print(f"[yellow]Hash '{key}' is empty or missing.[/yellow]")
        return
    console.print_json(data=fields)


@raw_app.command("range")
@click.argument("key")
@click.option("--start", default=0, show_default=True, type=int)
@click.option("--stop", default=-1, show_default=True, type=int)
def range_command(key: str, start: int, stop: int) -> None:
    """Dump the members of a list, sorted set or set."""

    async def fetch(explorer: Explorer):
        store = explorer.store
        key_type = await store.key_type(key)
        if key_type == "list":
            return key_type, await store.lrange(key, start, stop)
        if key_type == "zset":
            return key_type, await store.zrange(key, start, stop)
        if key_type == "set":
            members = sorted(await store.smembers(key))
            return key_type, members[range_slice(len(members), start, stop)]
        return key_type, []

    key_type, members = run(fetch)
    if key_type not in ("list", "zset", "set"):
        console.print(f"[yellow]Key '{key}' is of type '{key_type}', not a collection.[/yellow]")
        return
    console.print(f"[cyan]{key}[/cyan] ({key_type}, {len(members)} members)")
    for member in members:
        console.print(f"• {member}", highlight=False)
