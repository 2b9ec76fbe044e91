import click

from bullscope.cli.info import info_app
from bullscope.cli.job import job_app
from bullscope.cli.queue import queue_app
from bullscope.cli.raw import raw_app
from bullscope.cli.serve import serve_command


@click.group()
def app():
    """bullscope command-line interface."""
    pass

# Register subcommands
app.add_command(queue_app, name="queue")
app.add_command(job_app, name="job")
app.add_command(info_app, name="info")
app.add_command(raw_app, name="raw")
app.add_command(serve_command, name="serve")

def main():
    app()

if __name__ == "__main__":
    main()
