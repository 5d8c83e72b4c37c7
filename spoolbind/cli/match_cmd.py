"""Material matching CLI commands."""

import asyncio
import json
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console

console = Console()

INTERACTIVE_HELP = """Commands:
  t N        select/deselect Tool N
  s N        bind the selected tool to Slot N
  r N        remove the mapping of Tool N
  refresh    re-read the material station
  show       show requirements, slots and mappings
  submit     start the job
  q          quit without starting"""


def parse_mapping(value: str) -> Tuple[int, int]:
    """Parse ``TOOL:SLOT`` (both 1-based, as displayed) into (tool_id, slot display id)."""
    try:
        tool, slot = value.split(":", 1)
        tool_number, slot_number = int(tool), int(slot)
    except ValueError:
        raise click.BadParameter(f"Expected TOOL:SLOT, got '{value}'")
    if tool_number < 1 or slot_number < 1:
        raise click.BadParameter(f"Tool and slot numbers start at 1, got '{value}'")
    return tool_number - 1, slot_number


def load_job(path: Path):
    """Load a job file description from JSON."""
    from spoolbind.jobs.models import JobFile

    try:
        data = json.loads(path.read_text())
        return JobFile.from_dict(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise click.ClickException(f"Invalid job file {path}: {e}")


@click.command()
@click.argument("job_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--map", "-m", "mappings", multiple=True, help="Bind TOOL:SLOT (1-based), repeatable")
@click.option("--leveling/--no-leveling", default=None, help="Auto-level the bed before printing")
@click.option("--submit", is_flag=True, help="Start the job once every tool is mapped")
@click.pass_context
def match(
    ctx: click.Context,
    job_file: Path,
    mappings: Tuple[str, ...],
    leveling: Optional[bool],
    submit: bool,
) -> None:
    """Map job tools to material station slots and optionally start the job.

    Without --map the command runs interactively.

    Example: spoolbind match job.json -m 1:1 -m 2:3 --submit
    """
    parsed = [parse_mapping(m) for m in mappings]
    job = load_job(job_file)
    code = asyncio.run(_run_match(ctx.obj["settings"], job, parsed, leveling, submit))
    ctx.exit(code)


async def _run_match(settings, job, mappings, leveling, submit) -> int:
    from spoolbind.cli.console_sinks import ConsoleNotificationSink, ConsoleRenderSink
    from spoolbind.jobs.executor import create_job_executor
    from spoolbind.matching.errors import NotApplicableError
    from spoolbind.matching.workflow import MaterialMatchingWorkflow
    from spoolbind.station.provider import create_station_provider
    from spoolbind.utils import format_duration, format_weight

    notifications = ConsoleNotificationSink(console)
    renderer = ConsoleRenderSink(console)
    workflow = MaterialMatchingWorkflow(
        create_station_provider(settings),
        create_job_executor(settings),
        notifications=notifications,
        renderer=renderer,
        settings=settings,
    )

    console.print(f"[bold]Match Materials - {job.name}[/bold]")
    if job.printing_time or job.total_filament_weight:
        console.print(
            f"[dim]Estimated time: {format_duration(job.printing_time)}  "
            f"Filament: {format_weight(job.total_filament_weight or 0.0)}[/dim]"
        )
    if job.requires_station():
        console.print(f"[dim]{job.material_summary()}[/dim]")
    try:
        await workflow.open(job, leveling=leveling)
    except NotApplicableError:
        return 1

    if not mappings:
        return await _interactive(workflow, renderer)

    failed = False
    for tool_id, slot_id in mappings:
        if workflow.select_tool(tool_id) is None:
            workflow.select_tool(tool_id)
        slot = workflow.find_slot(slot_id)
        if slot is None:
            notifications.show_error(f"Slot {slot_id} is not available in the material station.")
            workflow.select_tool(tool_id)
            failed = True
            continue
        if not workflow.select_slot(slot).ok:
            failed = True

    renderer.show()

    if not submit:
        return 1 if failed else 0
    if not await workflow.submit():
        return 1
    return 0


async def _interactive(workflow, renderer) -> int:
    renderer.show()
    console.print(INTERACTIVE_HELP)

    while workflow.session is not None:
        command = click.prompt("match", default="show", show_default=False).strip().lower()
        verb, _, arg = command.partition(" ")

        if verb in ("q", "quit", "exit"):
            workflow.close()
            return 1
        if verb == "show":
            renderer.show()
        elif verb == "refresh":
            await workflow.refresh_station()
            renderer.show()
        elif verb == "submit":
            if await workflow.submit():
                return 0
        elif verb in ("t", "s", "r") and arg.isdigit() and int(arg) >= 1:
            number = int(arg)
            if verb == "t":
                workflow.select_tool(number - 1)
            elif verb == "r":
                workflow.remove_mapping(number - 1)
            else:
                slot = workflow.find_slot(number)
                if slot is None:
                    workflow.notifications.show_error(
                        f"Slot {number} is not available in the material station."
                    )
                    continue
                workflow.select_slot(slot)
            renderer.show()
        else:
            console.print(INTERACTIVE_HELP)

    return 0
