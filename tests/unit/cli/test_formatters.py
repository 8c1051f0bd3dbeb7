"""Unit tests for the Rich table and panel formatters."""

from io import StringIO

from rich.console import Console
from rich.table import Table

from taurus.agents.models import AgentStatus, HealthStatus
from taurus.agents.registry import AgentRegistry
from taurus.agents.status import build_status
from taurus.cli.formatters import TAURUS_THEME
from taurus.cli.formatters.panels import message_panel
from taurus.cli.formatters.tables import (
    create_agents_table,
    create_key_value_table,
    create_table,
    styled,
)
from taurus.config.models import OrchestratorConfig


def _render(renderable: object) -> str:
    buffer = StringIO()
    Console(file=buffer, theme=TAURUS_THEME, width=160, no_color=True).print(renderable)
    return buffer.getvalue()


class TestCreateTable:
    """Tests for create_table function."""

    def test_defaults(self) -> None:
        table = create_table("Agents")

        assert isinstance(table, Table)
        assert table.title == "Agents"
        assert table.border_style == "blue"
        assert table.show_header is True

    def test_key_value_rows(self) -> None:
        """Every pair becomes one row."""
        table = create_key_value_table({"Port": 3000, "Host": "0.0.0.0"}, "API")

        assert table.row_count == 2
        assert table.show_header is False
        assert "3000" in _render(table)


class TestStyled:
    """Tests for status styling."""

    def test_known_statuses(self) -> None:
        assert styled("active") == "[success]active[/]"
        assert styled("ERROR") == "[error]ERROR[/]"
        assert styled("standby") == "[warning]standby[/]"

    def test_unknown_value_is_plain(self) -> None:
        assert styled("high") == "high"


class TestAgentsTable:
    """Tests for the agents table."""

    def test_one_row_per_agent(self, make_agent) -> None:
        """Rows follow registry order and show health."""
        registry = AgentRegistry(
            [
                make_agent("apify", status=AgentStatus.ACTIVE, health_status=HealthStatus.HEALTHY),
                make_agent("github", status=AgentStatus.STANDBY),
            ]
        )

        table = create_agents_table(build_status(registry, OrchestratorConfig()))
        output = _render(table)

        assert table.row_count == 2
        assert output.index("apify") < output.index("github")
        assert "healthy" in output
        assert "standby" in output
        assert "localhost" not in output


class TestMessagePanel:
    """Tests for message panels."""

    def test_title_defaults_to_kind(self) -> None:
        output = _render(message_panel("Config written", "success"))

        assert "Success" in output
        assert "Config written" in output

    def test_custom_title(self) -> None:
        assert "Config Exists" in _render(message_panel("exists", "error", "Config Exists"))
