"""Material station CLI commands."""

import asyncio

import click
from rich.console import Console

from spoolbind.matching.sinks import SlotView
from spoolbind.utils import slot_label

console = Console()


@click.group()
def station() -> None:
    """Material station commands."""
    pass


@station.command("show")
@click.pass_context
def show_station(ctx: click.Context) -> None:
    """Show what is loaded in each material station slot."""
    from spoolbind.cli.console_sinks import render_slot_table
    from spoolbind.station.provider import StationUnavailableError, create_station_provider

    settings = ctx.obj["settings"]
    provider = create_station_provider(settings)

    try:
        snapshot = asyncio.run(provider.fetch(settings.context_id))
    except StationUnavailableError as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    if snapshot is None:
        console.print("[yellow]Material station status unavailable.[/yellow]")
        ctx.exit(1)
    if not snapshot.connected:
        console.print(f"[yellow]{snapshot.error_message or 'Material station not connected.'}[/yellow]")
        ctx.exit(1)

    views = [
        SlotView(
            slot_id=s.slot_id,
            display_id=s.display_id,
            label=slot_label(s.display_id),
            material_type=s.material_type,
            material_color=s.material_color,
            is_empty=s.is_empty,
        )
        for s in snapshot.slots
    ]
    console.print(render_slot_table(views))
    loaded = snapshot.get_loaded_slots()
    console.print(f"Loaded: {len(loaded)} of {len(snapshot.slots)} slots")
    console.print(f"Status: {snapshot.status.value}")
    if snapshot.active_slot is not None:
        console.print(f"Active slot: {snapshot.active_slot}")
