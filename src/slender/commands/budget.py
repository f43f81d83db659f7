"""
Budget - Inspect budget snapshots written by labeled calls.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..config import DEFAULT_BUDGET_FILE
from ..telemetry.budget import BudgetRecorder, load_snapshots

budget_file_option = click.option(
    "--file",
    "budget_file",
    envvar="SLENDER_BUDGET_FILE",
    default=DEFAULT_BUDGET_FILE,
    show_default=True,
    type=click.Path(path_type=Path),
    help="Snapshot file",
)


@click.group()
def budget() -> None:
    """Inspect recorded resource budgets."""
    pass


@budget.command("show")
@budget_file_option
@click.option("--label", default=None, help="Only show snapshots with this label")
def budget_show(budget_file: Path, label: Optional[str]) -> None:
    """Show recorded snapshots."""
    records = load_snapshots(budget_file)
    if label:
        records = [r for r in records if r.get("label") == label]

    if not records:
        click.echo("No budget snapshots.")
        return

    click.echo(f"Snapshots: {len(records)}")
    for record in records:
        click.echo(
            f"  {record.get('label')}: {record.get('method')}"
            f"  cpu={record.get('cpu_insns')}"
            f"  mem={record.get('mem_bytes')}"
            f"  read={record.get('read_entries')}/{record.get('read_bytes')}B"
            f"  write={record.get('write_entries')}/{record.get('write_bytes')}B"
            f"  events={record.get('events_bytes')}B"
            f"  fee={record.get('min_resource_fee')}"
        )


@budget.command("clear")
@budget_file_option
def budget_clear(budget_file: Path) -> None:
    """Delete the snapshot file."""
    BudgetRecorder(budget_file).clear()
    click.echo("Budget snapshots cleared.")
