import click

from bullscope.cli.utils import console, get_centered_logo
from bullscope.conf import settings
from bullscope.logging import setup_logging


@click.command(name="serve")
@click.option("--host", default=None, help="Interface to bind. Defaults to SERVER_HOST.")
@click.option("--port", default=None, type=int, help="Port to bind. Defaults to SERVER_PORT.")
def serve_command(host: str | None, port: int | None) -> None:
    """Start the dashboard and the metrics endpoint."""
    import uvicorn

    from bullscope.contrib.dashboard.app import create_dashboard_app

    setup_logging()
    host = host or settings.server_host
    port = port or settings.server_port

    console.print(get_centered_logo(), style="bold cyan")
    console.print(f"[green]Serving on http://{host}:{port} (prefix '{settings.queue_prefix}')[/green]")
    uvicorn.run(create_dashboard_app(), host=host, port=port, log_level=settings.logging_level.lower())
