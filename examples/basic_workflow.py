#!/usr/bin/env python3
"""
Basic workflow example.

Demonstrates binding a two-color job to the mock material station and
starting it.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from spoolbind.config import Settings
from spoolbind.jobs import JobFile, MockJobStartExecutor
from spoolbind.matching import MaterialMatchingWorkflow, Severity
from spoolbind.station import create_mock_station


class PrintNotifications:
    """Print workflow messages."""

    def show_error(self, text: str):
        print(f"  [ERROR] {text}")

    def show_warning(self, text: str):
        print(f"  [WARN] {text}")

    def clear_messages(self):
        pass

    def toast(self, text: str, severity: Severity):
        print(f"  [{severity.value.upper()}] {text}")


JOB = {
    "fileName": "two_tone_vase.3mf",
    "displayName": "Two-tone vase",
    "metadataType": "ad5x",
    "toolDatas": [
        {"toolId": 0, "materialName": "PLA", "materialColor": "#FF0000", "filamentWeight": 18.2},
        {"toolId": 1, "materialName": "PLA", "materialColor": "#000000", "filamentWeight": 6.4},
    ],
}


async def run():
    job = JobFile.from_dict(JOB)
    print(job.material_summary())
    print()

    station = create_mock_station()
    executor = MockJobStartExecutor()
    workflow = MaterialMatchingWorkflow(
        station,
        executor,
        notifications=PrintNotifications(),
        settings=Settings(mock_mode=True),
    )

    await workflow.open(job)
    print(f"Station: {workflow.session.station}")
    print()

    # Tool 1 -> Slot 1 (red PLA), Tool 2 -> Slot 2 (white PLA, color warning)
    for tool_id, slot_id in [(0, 1), (1, 2)]:
        workflow.select_tool(tool_id)
        outcome = workflow.select_slot(workflow.find_slot(slot_id))
        if outcome.ok:
            print(f"Bound Tool {tool_id + 1} -> Slot {slot_id}")

    print()
    started = await workflow.submit()
    print(f"\nJob started: {started}")
    for call in executor.calls:
        print(f"  {call.filename}: {[b.to_payload() for b in call.bindings]}")
    return started


def main():
    """Run basic workflow example."""
    print("=" * 50)
    print("spoolbind Basic Workflow Example")
    print("=" * 50)
    print()

    return 0 if asyncio.run(run()) else 1


if __name__ == "__main__":
    sys.exit(main())
