"""Status snapshot - the query surface handed to observers.

Snapshots are frozen Pydantic models. Field names are snake_case in Python
and serialize to camelCase for the management API and WebSocket payloads:

    snapshot.model_dump(mode="json", by_alias=True)
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taurus.agents.models import Agent, AgentStatus, HealthStatus, Priority, utcnow

if TYPE_CHECKING:
    from taurus.agents.registry import AgentRegistry
    from taurus.config.models import OrchestratorConfig


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class AgentView(_SnapshotModel):
    """Public view of one agent. The endpoint is never exposed."""

    name: str
    status: AgentStatus
    health_status: HealthStatus
    capabilities: list[str]
    priority: Priority
    last_health_check: datetime | None = None

    @classmethod
    def from_agent(cls, agent: Agent) -> AgentView:
        return cls(
            name=agent.name,
            status=agent.status,
            health_status=agent.health_status,
            capabilities=list(agent.capabilities),
            priority=agent.priority,
            last_health_check=agent.last_health_check,
        )


class OrchestratorView(_SnapshotModel):
    """Orchestrator settings exposed alongside the agents."""

    auto_scaling_enabled: bool
    max_concurrent_agents: int
    load_balancing_strategy: str


class StatusSnapshot(_SnapshotModel):
    """Full orchestrator status at one point in time.

    Attributes:
        total_agents: Number of registered agents.
        active_agents: Size of the active-set.
        healthy_agents: Active agents whose last probe was healthy.
        pending_agents: Agents registered but never activated.
        agents: Every agent, in registry insertion order.
        orchestrator: Orchestrator settings.
        generated_at: When the snapshot was taken.
    """

    total_agents: int
    active_agents: int
    healthy_agents: int
    pending_agents: int
    agents: list[AgentView]
    orchestrator: OrchestratorView
    generated_at: datetime = Field(default_factory=utcnow)

    def agent(self, name: str) -> AgentView | None:
        """Look up one agent's view by name."""
        return next((view for view in self.agents if view.name == name), None)

    def to_payload(self) -> dict[str, object]:
        """Serialize for JSON transports (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)


def build_status(registry: AgentRegistry, settings: OrchestratorConfig) -> StatusSnapshot:
    """Build a snapshot from the registry's current state."""
    agents = registry.all()
    active = registry.active_agents()
    return StatusSnapshot(
        total_agents=len(agents),
        active_agents=len(active),
        healthy_agents=sum(1 for agent in active if agent.health_status == HealthStatus.HEALTHY),
        pending_agents=sum(1 for agent in agents.values() if agent.status == AgentStatus.PENDING),
        agents=[AgentView.from_agent(agent) for agent in agents.values()],
        orchestrator=OrchestratorView(
            auto_scaling_enabled=settings.auto_scaling_enabled,
            max_concurrent_agents=settings.max_concurrent_agents,
            load_balancing_strategy=settings.load_balancing_strategy,
        ),
    )


__all__ = [
    "AgentView",
    "OrchestratorView",
    "StatusSnapshot",
    "build_status",
]
