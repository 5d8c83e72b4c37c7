"""Rich console sinks for running the matching workflow in a terminal."""

import re
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from spoolbind.matching.sinks import BindingView, Severity, SlotListView, SlotView, ToolView

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")

SEVERITY_STYLES = {
    Severity.INFO: "cyan",
    Severity.SUCCESS: "green",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}


class ConsoleNotificationSink:
    """Prints workflow messages to the console."""

    def __init__(self, console: Console):
        self.console = console
        self.last_error: Optional[str] = None

    def show_error(self, text: str) -> None:
        self.last_error = text
        self.console.print(f"[red]✗ {text}[/red]")

    def show_warning(self, text: str) -> None:
        self.console.print(f"[yellow]⚠ {text}[/yellow]")

    def clear_messages(self) -> None:
        self.last_error = None

    def toast(self, text: str, severity: Severity) -> None:
        style = SEVERITY_STYLES.get(severity, "white")
        self.console.print(f"[{style}]{text}[/{style}]")


class ConsoleRenderSink:
    """
    Keeps the latest views and renders them as tables on demand.

    Render calls arrive after every state change; printing all of them
    would flood the terminal, so ``show()`` prints the latest views.
    """

    def __init__(self, console: Console):
        self.console = console
        self.tools: List[ToolView] = []
        self.slots = SlotListView(slots=[])
        self.bindings: List[BindingView] = []
        self.submit_enabled = False

    def render_requirements(self, tools: List[ToolView]) -> None:
        self.tools = tools

    def render_slots(self, slots: SlotListView) -> None:
        self.slots = slots

    def render_bindings(self, bindings: List[BindingView]) -> None:
        self.bindings = bindings

    def set_submit_enabled(self, enabled: bool) -> None:
        self.submit_enabled = enabled

    def show(self) -> None:
        tools = Table(title="Job Requirements")
        tools.add_column("Tool", style="cyan")
        tools.add_column("Material", style="green")
        tools.add_column("Color")
        tools.add_column("Mapped To")
        for tool in self.tools:
            marker = "▶ " if tool.selected else ""
            tools.add_row(
                f"{marker}{tool.label}",
                tool.material_name,
                swatch(tool.material_color),
                f"Slot {tool.mapped_slot}" if tool.mapped else "-",
            )
        self.console.print(tools)

        if self.slots.placeholder:
            self.console.print(f"[yellow]{self.slots.placeholder}[/yellow]")
        else:
            self.console.print(render_slot_table(self.slots.slots))

        if self.bindings:
            self.console.print("[bold]Mappings:[/bold]")
            for binding in self.bindings:
                flag = " [yellow](color differs)[/yellow]" if binding.color_warning else ""
                self.console.print(f"  {binding.text}{flag}")
        else:
            self.console.print("[dim]Select a tool and then choose a matching slot to create mappings.[/dim]")

        state = "[green]ready[/green]" if self.submit_enabled else "[dim]incomplete[/dim]"
        self.console.print(f"Start job: {state}")


def render_slot_table(slots: List[SlotView], title: str = "Material Station") -> Table:
    table = Table(title=title)
    table.add_column("Slot", style="cyan")
    table.add_column("Material", style="green")
    table.add_column("Color")
    table.add_column("Status")
    for slot in slots:
        if slot.is_empty:
            status = "[dim]empty[/dim]"
        elif slot.assigned:
            status = "[yellow]assigned[/yellow]"
        else:
            status = "[green]available[/green]"
        table.add_row(
            slot.label,
            "Empty" if slot.is_empty else (slot.material_type or "Unknown"),
            swatch(slot.material_color),
            status,
        )
    return table


def swatch(color: Optional[str]) -> str:
    """Color label with a colored block when the label is a hex color."""
    if not color:
        return "-"
    if HEX_COLOR.match(color):
        return f"[{color}]■[/] {color}"
    return color
