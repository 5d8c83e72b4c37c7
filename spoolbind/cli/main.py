"""Main CLI entry point for spoolbind."""

import click
from rich.console import Console

from spoolbind import __version__
from spoolbind.config import get_settings
from spoolbind.utils import setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="spoolbind")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--mock", is_flag=True, help="Use the mock material station and job executor")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, mock: bool) -> None:
    """spoolbind - map multi-material job tools to material station slots.

    Binds every tool of a multi-color job to a loaded slot of the printer's
    material station, checks materials and colors, then starts the job.
    """
    ctx.ensure_object(dict)
    settings = get_settings()
    if mock:
        settings = settings.model_copy(update={"mock_mode": True})
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose
    setup_logging("DEBUG" if verbose else settings.log_level)


# Import and register command groups
from spoolbind.cli.station_cmd import station
from spoolbind.cli.match_cmd import match

cli.add_command(station)
cli.add_command(match)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show configuration."""
    settings = ctx.obj["settings"]

    console.print("[bold]spoolbind Status[/bold]")
    console.print(f"Version: {__version__}")
    console.print()
    console.print("[bold]Printer:[/bold]")
    if settings.printer_url:
        console.print(f"  URL: {settings.printer_url}")
        console.print(f"  Context: {settings.context_id or 'default'}")
        console.print(f"  Token: {'[green]Configured[/green]' if settings.api_token else '[yellow]Not set[/yellow]'}")
    else:
        console.print("  [yellow]Not configured[/yellow]")
    console.print(f"  Mock Mode: {settings.mock_mode}")
    console.print()
    console.print("[bold]Timeouts:[/bold]")
    console.print(f"  Station fetch: {settings.station_fetch_timeout:.0f}s")
    console.print(f"  Job start: {settings.request_timeout:.0f}s")
    console.print(f"Auto-level: {settings.leveling}")


if __name__ == "__main__":
    cli()
