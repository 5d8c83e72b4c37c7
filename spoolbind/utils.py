"""Shared utilities for spoolbind."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Rich console for pretty output
console = Console()


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Set up logging with Rich handler."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    return logging.getLogger("spoolbind")


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module."""
    return logging.getLogger(f"spoolbind.{name}")


def normalize_label(value: Optional[str]) -> str:
    """Normalize a material or color label for comparison (trim + casefold)."""
    return (value or "").strip().casefold()


def tool_label(tool_id: int) -> str:
    """Operator-facing tool name; tool ids are 0-based, labels 1-based."""
    return f"Tool {tool_id + 1}"


def slot_label(display_id: int) -> str:
    """Operator-facing slot name for a 1-based slot display id."""
    return f"Slot {display_id}"


def format_weight(grams: float) -> str:
    """Format filament weight as human-readable string."""
    if grams >= 1000:
        return f"{grams / 1000:.2f} kg"
    return f"{grams:.1f} g"


def format_duration(seconds: float) -> str:
    """Format duration in seconds as human-readable string."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        minutes = seconds // 60
        secs = seconds % 60
        return f"{minutes:.0f}m {secs:.0f}s"
    else:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        return f"{hours:.0f}h {minutes:.0f}m"
