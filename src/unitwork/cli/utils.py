"""
CLI utility helpers — consoles and error output.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape

from unitwork.core.errors import UnitworkError

console = Console()
err_console = Console(stderr=True)


def fail(error: UnitworkError) -> None:
    """Print *error* with its category and context, then exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}")
    context = error.context.to_dict()
    if context:
        err_console.print(f"[dim]{escape(str(context))}[/dim]")
    raise typer.Exit(code=1)
