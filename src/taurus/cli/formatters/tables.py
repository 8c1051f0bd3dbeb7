"""Rich tables for agent status and configuration."""

from typing import Any

from rich.table import Table

from taurus.agents.status import StatusSnapshot
from taurus.cli.formatters import console

_STATUS_STYLES = {
    "active": "success",
    "healthy": "success",
    "pending": "warning",
    "standby": "warning",
    "unknown": "muted",
    "inactive": "muted",
    "unhealthy": "error",
    "error": "error",
}


def create_table(
    title: str | None = None,
    *,
    show_header: bool = True,
    border_style: str = "blue",
) -> Table:
    """Create a Rich Table with the shared Taurus styling."""
    return Table(
        title=title,
        show_header=show_header,
        border_style=border_style,
        header_style="bold cyan",
        row_styles=["", "dim"],
    )


def create_key_value_table(data: dict[str, Any], title: str | None = None) -> Table:
    """Create a two-column table for key-value data.

    Example:
        table = create_key_value_table({"Port": 3000}, "API")
        print_table(table)
    """
    table = create_table(title, show_header=False)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(str(key), str(value))

    return table


def styled(value: str) -> str:
    """Wrap an agent or health status in its semantic style."""
    style = _STATUS_STYLES.get(value.lower())
    return f"[{style}]{value}[/]" if style else value


def create_agents_table(snapshot: StatusSnapshot, title: str | None = "Agents") -> Table:
    """One row per agent, in registry order."""
    table = create_table(title)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Health", justify="center")
    table.add_column("Priority", justify="center")
    table.add_column("Capabilities")
    table.add_column("Last Check", style="muted")

    for view in snapshot.agents:
        last_check = (
            view.last_health_check.strftime("%Y-%m-%d %H:%M:%S")
            if view.last_health_check
            else "-"
        )
        table.add_row(
            view.name,
            styled(view.status.value),
            styled(view.health_status.value),
            view.priority.value,
            ", ".join(view.capabilities),
            last_check,
        )

    return table


def print_table(table: Table) -> None:
    """Print a Rich Table to the shared console."""
    console.print(table)


__all__ = [
    "create_agents_table",
    "create_key_value_table",
    "create_table",
    "print_table",
    "styled",
]
