"""Shared fixtures for the Taurus test suite."""

from collections.abc import Callable
from typing import Any

import pytest

from taurus.agents.lifecycle import LifecycleController
from taurus.agents.models import Agent, AgentStatus, HealthStatus, Priority
from taurus.agents.notify import Notifier
from taurus.agents.registry import AgentRegistry
from taurus.agents.status import StatusSnapshot
from taurus.config.models import OrchestratorConfig, default_agent_declarations


@pytest.fixture(autouse=True)
def _isolate_agent_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real agent credentials in the environment out of the tests."""
    for declaration in default_agent_declarations().values():
        if declaration.endpoint_env:
            monkeypatch.delenv(declaration.endpoint_env, raising=False)
    monkeypatch.delenv("PORT", raising=False)


@pytest.fixture
def make_agent() -> Callable[..., Agent]:
    """Factory for agents with sensible defaults."""

    def _make(
        name: str = "github",
        *,
        endpoint: str | None = "http://localhost:9100",
        capabilities: tuple[str, ...] = ("code_analysis",),
        priority: Priority = Priority.MEDIUM,
        status: AgentStatus = AgentStatus.PENDING,
        health_status: HealthStatus = HealthStatus.UNKNOWN,
    ) -> Agent:
        return Agent(
            name=name,
            endpoint=endpoint,
            capabilities=capabilities,
            priority=priority,
            status=status,
            health_status=health_status,
        )

    return _make


@pytest.fixture
def settings() -> OrchestratorConfig:
    """Default orchestrator settings."""
    return OrchestratorConfig()


@pytest.fixture
def registry() -> AgentRegistry:
    return AgentRegistry()


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def snapshots(notifier: Notifier) -> list[StatusSnapshot]:
    """Snapshots delivered to a synchronous sink, in order."""
    received: list[StatusSnapshot] = []
    notifier.subscribe(received.append)
    return received


@pytest.fixture
def controller(
    registry: AgentRegistry, settings: OrchestratorConfig, notifier: Notifier
) -> LifecycleController:
    return LifecycleController(registry, settings, notifier)


@pytest.fixture
def agent_config() -> dict[str, Any]:
    """A valid raw agent configuration."""
    return {
        "endpoint": "http://localhost:9010",
        "capabilities": ["alert_system", "collaboration"],
        "priority": "medium",
    }
