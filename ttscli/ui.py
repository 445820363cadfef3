"""
UI module for ttscli package.

Contains the progress spinner and console output helpers.
"""

from contextlib import contextmanager
from typing import Iterable

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

error_console = Console(stderr=True)


@contextmanager
def progress_context(description: str = "Processing..."):
    """
    Show a transient spinner while the body runs.

    Args:
        description: Task description

    Yields:
        Progress instance
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        TimeElapsedColumn(),
        transient=True,
        console=Console(),
    ) as progress:
        task = progress.add_task(description, total=None)
        yield progress
        progress.stop_task(task)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(message, style="bold red", markup=False, highlight=False, soft_wrap=True)


def print_catalog(title: str, entries: Iterable) -> None:
    """Print voices or models as name / id / description blocks."""
    print(f"\n{title}:")
    print("=" * len(title))
    for entry in entries:
        print(f"- Name: {entry.name}")
        print(f"  ID: {entry.id}")
        print(f"  Description: {entry.description or 'No description'}")
        print("  --------------")
