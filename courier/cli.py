"""Courier CLI — command line interface."""

import asyncio

import click
from rich.console import Console
from rich.table import Table

from . import __version__

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="courier")
def cli():
    """Courier — Telegram channel adapter for agent backends"""
    pass


@cli.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def start(debug):
    """Start the Telegram channel."""
    from .config import load_settings
    from .main import run

    settings = load_settings()
    if debug:
        settings.debug = True
    console.print("[bold blue]Starting Courier...[/bold blue]")
    asyncio.run(run(settings))


@cli.command()
def groups():
    """List registered groups."""
    from .config import load_settings
    from .store import load_registered_groups

    settings = load_settings()
    registered = load_registered_groups(settings.groups_file)
    if not registered:
        console.print(f"[yellow]No registered groups in {settings.groups_file}[/yellow]")
        return

    table = Table(title=f"Registered Groups ({len(registered)})")
    table.add_column("JID", style="bold")
    table.add_column("Name")
    table.add_column("Folder")
    for group in registered.values():
        table.add_row(group.jid, group.name, group.folder)
    console.print(table)


def main():
    cli()


if __name__ == "__main__":
    main()
