"""Rich formatters for CLI output.

A single Console is shared by every command so styling stays consistent.

Semantic Colors:
- green: success, healthy, active
- yellow: warning, pending, standby
- red: error, unhealthy
- blue: info
"""

from rich.console import Console
from rich.theme import Theme

TAURUS_THEME = Theme(
    {
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "info": "blue",
        "muted": "dim",
        "highlight": "bold cyan",
    }
)

console = Console(theme=TAURUS_THEME, force_terminal=True)

__all__ = ["console", "TAURUS_THEME"]
