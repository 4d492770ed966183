"""
Display utilities for presenting machine information.
"""

from typing import List

from rich.console import Console
from rich.table import Table

from ..config import Flag
from ..models import MachineInstance, MachineState

console = Console()

STATE_STYLES = {
    MachineState.RUNNING: "green",
    MachineState.STARTING: "yellow",
    MachineState.STOPPING: "yellow",
    MachineState.STOPPED: "red",
    MachineState.UNKNOWN: "dim",
}


def display_success(message: str) -> None:
    console.print(f"[green]{message}[/green]")


def display_warning(message: str) -> None:
    console.print(f"[yellow]{message}[/yellow]")


def display_error(message: str) -> None:
    console.print(f"[red]{message}[/red]")


def display_state(name: str, state: MachineState) -> None:
    """Print the machine state in its colour."""
    style = STATE_STYLES.get(state, "white")
    console.print(f"[bold]{name}[/bold]: [{style}]{state.value}[/{style}]")


def display_machine(name: str, instance: MachineInstance) -> None:
    """Display the persisted machine details in a table."""
    table = Table(title=f"Machine {name}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Instance", instance.instance_id or "N/A")
    table.add_row("Display name", instance.display_name)
    table.add_row("Shape", instance.shape or "N/A")
    table.add_row("Availability domain", instance.availability_domain or "N/A")
    table.add_row("Fault domain", instance.fault_domain or "N/A")
    table.add_row("Public IP", instance.public_ip or "not yet available")
    table.add_row("SSH", f"{instance.ssh_user}@{instance.public_ip or '<pending>'}:{instance.ssh_port}")

    console.print(table)


def display_create_flags(flags: List[Flag]) -> None:
    """List the driver options with their env vars and defaults."""
    table = Table(title="OCI driver options")
    table.add_column("Flag", style="cyan")
    table.add_column("Env var", style="green")
    table.add_column("Default", style="yellow")
    table.add_column("Required")
    table.add_column("Usage")

    for flag in flags:
        table.add_row(
            f"--{flag.name}",
            flag.env_var,
            flag.default or "",
            "yes" if flag.required else "",
            flag.usage,
        )

    console.print(table)
