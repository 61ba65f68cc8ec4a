"""
Root Typer application for the unitwork CLI.

Commands
--------
demo     Create the sample tables, add a person, commit and read people back.
schema   Print CREATE TABLE statements for the sample entities.
config   Show the settings resolved from ``UNITWORK_*`` variables and ``.env``.
"""

from __future__ import annotations

import asyncio

import typer

from unitwork.cli.utils import console, fail
from unitwork.core.errors import UnitworkError
from unitwork.core.logging import configure_logging, get_logger
from unitwork.core.settings import UnitworkSettings

app = typer.Typer(
    name="unitwork",
    help="unitwork — change-tracking unit of work over parameterized SQL.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

logger = get_logger(__name__)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from unitwork import VERSION

        typer.echo(f"unitwork {VERSION}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """unitwork CLI — sample entities against a real database."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def demo(
    database: str | None = typer.Option(None, "--db", "-d", help="Database URL (defaults to UNITWORK_DATABASE_URL)"),
    name: str = typer.Option("Name", "--name", help="Person name to insert"),
    surname: str = typer.Option("Surname", "--surname", help="Person surname to insert"),
    age: int = typer.Option(0, "--age", help="Person age to insert"),
) -> None:
    """Add a person, commit, then list every person in the table."""
    settings = UnitworkSettings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    try:
        asyncio.run(_demo(database or settings.database_url, settings.echo_sql, name, surname, age))
    except UnitworkError as e:
        fail(e)


async def _demo(url: str, echo: bool, name: str, surname: str, age: int) -> None:
    from unitwork.core.connection import create_connection
    from unitwork.models import City, Person
    from unitwork.orm import UnitOfWork, create_tables

    conn, info = create_connection(url, echo=echo)
    logger.info("demo_started", backend=info.backend, persistent=info.persistent)
    await create_tables(conn, City, Person)

    uow = UnitOfWork(conn)
    uow.add(Person(name=name, surname=surname, age=age))
    console.print(f"Rows affected: {await uow.commit()}", markup=False, highlight=False)
    for person in await uow.get_entities(Person):
        console.print(str(person), markup=False, highlight=False)


@app.command()
def schema() -> None:
    """Print the CREATE TABLE statements for the sample entities."""
    from unitwork.models import City, Person
    from unitwork.orm import create_table_sql

    for entity_type in (City, Person):
        console.print(create_table_sql(entity_type), markup=False, highlight=False, soft_wrap=True)


@app.command("config")
def show_config(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show the resolved settings."""
    settings = UnitworkSettings()

    if format == "json":
        console.print_json(settings.model_dump_json())
        return

    if format == "env":
        for key, value in sorted(settings.model_dump().items()):
            console.print(f"UNITWORK_{key.upper()}={value}", markup=False, highlight=False)
        return

    from rich.table import Table

    table = Table(title="unitwork settings")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for key, value in settings.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)
