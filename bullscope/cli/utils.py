from typing import Any, Awaitable, Callable, TypeVar

import anyio
import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from bullscope.core.dependencies import get_explorer
from bullscope.exceptions import BullscopeException, JobNotFound, StoreUnavailable, UnknownState
from bullscope.explorer import Explorer

T = TypeVar("T")

console = Console()

# ASCII art logo for bullscope, shown in the help panels.
BULLSCOPE_LOGO = r"""
 _           _ _
| |__  _   _| | |___  ___ ___  _ __   ___
| '_ \| | | | | / __|/ __/ _ \| '_ \ / _ \
| |_) | |_| | | \__ \ (_| (_) | |_) |  __/
|_.__/ \__,_|_|_|___/\___\___/| .__/ \___|
                              |_|
""".rstrip()


def get_centered_logo() -> str:
    """
    Centers BULLSCOPE_LOGO based on the current terminal width.
    """
    terminal_width = console.size.width
    return "\n".join(line.center(terminal_width) for line in BULLSCOPE_LOGO.splitlines())


def print_help_panel(title: str, header: str, description: str, examples: list[str]) -> None:
    """
    Prints the logo, a header, a description and usage examples inside a
    Rich Panel. Every command group uses it when invoked without a
    subcommand.
    """
    text = Text()
    text.append(get_centered_logo(), style="bold cyan")
    text.append(f"\n\n{header}\n\n", style="bold cyan")
    text.append(f"{description}\n\n", style="white")
    text.append("Examples:\n", style="bold yellow")
    for example in examples:
        text.append(f"  {example}\n")
    console.print(Panel(text, title=title, border_style="cyan"))


def run(func: Callable[[Explorer], Awaitable[T]]) -> T:
    """
    Runs `func` with the configured explorer and turns bullscope errors into
    a red message and exit status 1.
    """

    async def runner() -> T:
        return await func(get_explorer())

    try:
        return anyio.run(runner)
    except (JobNotFound, UnknownState) as exc:
        console.print(f"[red]{exc}[/red]")
    except StoreUnavailable as exc:
        console.print(f"[red]Store unavailable: {exc}[/red]")
    except BullscopeException as exc:
        console.print(f"[red]Error: {exc}[/red]")
    raise click.exceptions.Exit(1)


def format_value(value: Any) -> str:
    if value in (None, "", {}, []):
        return "-"
    return str(value)
