"""Agent entity and its state enums.

An Agent is a frozen value. Every state change produces a new Agent through
``Agent.evolve`` and is stored by the registry, so a snapshot handed out by
``AgentRegistry.all()`` never changes underneath its holder.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class AgentStatus(StrEnum):
    """Lifecycle state of an agent.

    Attributes:
        PENDING: Registered, never activated.
        STANDBY: Declared spare capacity, eligible for scale-up.
        ACTIVE: In the active-set and probed every health pass.
        INACTIVE: Deactivated by an operator or by scale-down.
        ERROR: Last activation faulted; needs an explicit activation retry.
    """

    PENDING = "pending"
    STANDBY = "standby"
    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"


class HealthStatus(StrEnum):
    """Result of the most recent health probe.

    UNHEALTHY means the probe confirmed the agent is down; ERROR means the
    probe could not determine it (fault or timeout).
    """

    UNKNOWN = "unknown"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    ERROR = "error"


class Priority(StrEnum):
    """Ordinal hint biasing which agents auto-scaling promotes or demotes."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Agent:
    """A named external integration the orchestrator manages.

    Attributes:
        name: Unique, immutable registry key.
        endpoint: Opaque connection descriptor (URL or token), may be unset.
        capabilities: Capability tags; never empty once accepted by add_agent.
        priority: Auto-scaling precedence.
        status: Lifecycle state.
        health_status: Latest probe outcome; meaningful only while ACTIVE.
        last_health_check: When the agent was last probed or activated.
        added_at: When the agent entered the registry.
        error_message: Last activation fault, cleared on successful activation.
    """

    name: str
    endpoint: str | None
    capabilities: tuple[str, ...]
    priority: Priority
    status: AgentStatus = AgentStatus.PENDING
    health_status: HealthStatus = HealthStatus.UNKNOWN
    last_health_check: datetime | None = None
    added_at: datetime = field(default_factory=utcnow)
    error_message: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == AgentStatus.ACTIVE

    @property
    def is_healthy(self) -> bool:
        return self.is_active and self.health_status == HealthStatus.HEALTHY

    def has_capability(self, capability: str) -> bool:
        return capability in self.capabilities

    def evolve(self, **changes: Any) -> Agent:
        """Return a copy with the given fields changed. The name cannot change."""
        if "name" in changes and changes["name"] != self.name:
            msg = "Agent name is immutable"
            raise ValueError(msg)
        return replace(self, **changes)


__all__ = [
    "Agent",
    "AgentStatus",
    "HealthStatus",
    "Priority",
    "utcnow",
]
