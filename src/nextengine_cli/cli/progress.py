"""Progress indicators and status lines for CLI operations.

Everything here writes to stderr: stdout is reserved for the raw API
response so it can be piped.
"""

from contextlib import contextmanager
from typing import Generator

from rich.console import Console
from rich.status import Status

# Shared console instance
console = Console(stderr=True)


@contextmanager
def api_spinner(message: str) -> Generator[Status, None, None]:
    """Spinner for API calls with unknown duration.

    Usage:
        with api_spinner("APIリクエスト中..."):
            body = service.invoke(path)

    Args:
        message: Status message to display during operation

    Yields:
        Rich Status object for updating the message if needed
    """
    with console.status(f"[bold green]{message}", spinner="dots") as status:
        yield status


def print_success(message: str) -> None:
    """Print a success message with checkmark."""
    console.print(f"[green]✓[/green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠[/yellow] {message}")
