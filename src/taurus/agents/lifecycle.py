"""Lifecycle Controller - the only writer of the agent registry.

This module provides:
- add_agent: validate a configuration and register a pending agent
- activate_agent / deactivate_agent: move agents in and out of the active-set
- remove_agent: deactivate, then delete
- record_health: store a probe outcome for an agent that is still active

Every operation reads and writes the registry without awaiting in between,
so two operations interleaved on the event loop always observe a consistent
registry. Each mutation is followed by a notification carrying the full
status snapshot.

Usage:
    controller = LifecycleController(registry, settings, notifier)
    controller.add_agent("slack", {
        "endpoint": "http://localhost:9010",
        "capabilities": ["alert_system"],
        "priority": "medium",
    })
    controller.activate_agent("slack")
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from taurus.agents.models import Agent, AgentStatus, HealthStatus, Priority, utcnow
from taurus.agents.status import StatusSnapshot, build_status
from taurus.core.errors import NotFoundError, ValidationError
from taurus.observability.logging import get_logger

if TYPE_CHECKING:
    from taurus.agents.notify import Notifier
    from taurus.agents.registry import AgentRegistry
    from taurus.config.models import OrchestratorConfig

log = get_logger(__name__)

ActivationCheck = Callable[[Agent], None]
"""Raises to veto an activation; the agent then moves to ERROR."""


def _parse_capabilities(raw: Any) -> tuple[str, ...]:
    if raw is None:
        raise ValidationError("Agent capabilities are required", field="capabilities")
    if isinstance(raw, str) or not isinstance(raw, Iterable):
        raise ValidationError(
            "Agent capabilities must be a list of tags",
            field="capabilities",
            value=raw,
        )
    capabilities = tuple(dict.fromkeys(str(tag).strip() for tag in raw if str(tag).strip()))
    if not capabilities:
        raise ValidationError("Agent capabilities must not be empty", field="capabilities")
    return capabilities


def _parse_priority(raw: Any) -> Priority:
    if raw is None or raw == "":
        raise ValidationError("Agent priority is required", field="priority")
    try:
        return Priority(str(raw).lower())
    except ValueError as e:
        raise ValidationError(
            f"Agent priority must be one of {[p.value for p in Priority]}",
            field="priority",
            value=raw,
        ) from e


def validate_agent_config(name: str, config: Mapping[str, Any]) -> Agent:
    """Turn a raw configuration into a pending Agent.

    Raises:
        ValidationError: If the name is blank or endpoint, capabilities or
            priority is missing or malformed.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Agent name is required", field="name", value=name)
    if not isinstance(config, Mapping):
        raise ValidationError(
            f"Invalid agent configuration for {name}",
            field="config",
            value=config,
        )

    endpoint = config.get("endpoint")
    if not endpoint or not isinstance(endpoint, str):
        raise ValidationError(
            f"Invalid agent configuration for {name}: endpoint is required",
            field="endpoint",
            value=endpoint,
        )

    return Agent(
        name=name.strip(),
        endpoint=endpoint,
        capabilities=_parse_capabilities(config.get("capabilities")),
        priority=_parse_priority(config.get("priority")),
        status=AgentStatus.PENDING,
        health_status=HealthStatus.UNKNOWN,
        added_at=utcnow(),
    )


class LifecycleController:
    """Activate, deactivate, add and remove agents.

    Args:
        registry: The agent store this controller owns.
        settings: Orchestrator settings (auto-scaling flag, limits).
        notifier: Optional notifier invoked after every mutation.
        activation_check: Optional hook run before activation; raising from
            it marks the agent ERROR instead of ACTIVE.
    """

    def __init__(
        self,
        registry: AgentRegistry,
        settings: OrchestratorConfig,
        notifier: Notifier | None = None,
        activation_check: ActivationCheck | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings
        self._notifier = notifier
        self._activation_check = activation_check

    @property
    def settings(self) -> OrchestratorConfig:
        return self._settings

    def status(self) -> StatusSnapshot:
        """Current status snapshot."""
        return build_status(self._registry, self._settings)

    def publish(self) -> None:
        """Push the current snapshot to the notifier, if anyone listens."""
        if self._notifier is not None and self._notifier.has_subscribers:
            self._notifier.notify(self.status())

    def seed_agent(self, agent: Agent) -> None:
        """Insert a declared agent as-is, bypassing config validation.

        Declared agents may lack an endpoint when their environment variable
        is unset. Seeding does not notify.
        """
        self._registry.upsert(agent)
        log.debug(
            "agents.lifecycle.agent_seeded",
            agent=agent.name,
            status=agent.status.value,
            has_endpoint=bool(agent.endpoint),
        )

    def add_agent(self, name: str, config: Mapping[str, Any]) -> Agent:
        """Register a new agent as PENDING.

        High-priority agents are activated straight away when auto-scaling
        is enabled.

        Returns:
            The stored agent after any immediate activation.

        Raises:
            ValidationError: If the configuration is malformed. The registry
                is left untouched.
        """
        agent = validate_agent_config(name, config)

        if agent.name in self._registry:
            log.warning("agents.lifecycle.agent_replaced", agent=agent.name)

        self._registry.upsert(agent)
        log.info(
            "agents.lifecycle.agent_added",
            agent=agent.name,
            priority=agent.priority.value,
            capabilities=list(agent.capabilities),
            endpoint=agent.endpoint,
        )
        self.publish()

        if self._settings.auto_scaling_enabled and agent.priority == Priority.HIGH:
            self.activate_agent(agent.name)

        return self._registry.get(agent.name) or agent

    def activate_agent(self, name: str) -> bool:
        """Move an agent into the active-set.

        Activating an agent that is already active only refreshes its
        health fields.

        Returns:
            True if the agent is now active, False if activation faulted
            and the agent was moved to ERROR.

        Raises:
            NotFoundError: If the name is not registered.
        """
        agent = self._registry.get(name)
        if agent is None:
            raise NotFoundError(f"Agent {name} not found", agent_name=name)

        now = utcnow()
        try:
            if self._activation_check is not None:
                self._activation_check(agent)
        except Exception as e:
            self._registry.upsert(
                agent.evolve(
                    status=AgentStatus.ERROR,
                    health_status=HealthStatus.UNHEALTHY,
                    error_message=str(e),
                )
            )
            log.error(
                "agents.lifecycle.activation_failed",
                agent=name,
                previous_status=agent.status.value,
                error=str(e),
            )
            self.publish()
            return False

        was_active = agent.is_active
        self._registry.upsert(
            agent.evolve(
                status=AgentStatus.ACTIVE,
                health_status=HealthStatus.HEALTHY,
                last_health_check=now,
                error_message=None,
            )
        )
        if was_active:
            log.debug("agents.lifecycle.agent_refreshed", agent=name)
        else:
            log.info(
                "agents.lifecycle.agent_activated",
                agent=name,
                previous_status=agent.status.value,
                capabilities=list(agent.capabilities),
                active_count=len(self._registry.active_names()),
            )
        self.publish()
        return True

    def deactivate_agent(self, name: str) -> bool:
        """Take an agent out of the active-set.

        Unknown or already inactive agents are a silent no-op.

        Returns:
            True if the agent changed state.
        """
        agent = self._registry.get(name)
        if agent is None or agent.status == AgentStatus.INACTIVE:
            return False

        self._registry.upsert(agent.evolve(status=AgentStatus.INACTIVE))
        log.info(
            "agents.lifecycle.agent_deactivated",
            agent=name,
            previous_status=agent.status.value,
            active_count=len(self._registry.active_names()),
        )
        self.publish()
        return True

    def remove_agent(self, name: str, *, strict: bool = False) -> bool:
        """Deactivate an agent, then delete it from the registry.

        Args:
            name: Agent to remove.
            strict: Raise for unknown names instead of ignoring them.

        Returns:
            True if an agent was deleted.

        Raises:
            NotFoundError: If strict and the name is not registered.
        """
        if name not in self._registry:
            if strict:
                raise NotFoundError(f"Agent {name} not found", agent_name=name)
            return False

        self.deactivate_agent(name)
        self._registry.delete(name)
        log.info("agents.lifecycle.agent_removed", agent=name, total=len(self._registry))
        self.publish()
        return True

    def record_health(
        self,
        name: str,
        health_status: HealthStatus,
        checked_at: datetime | None = None,
    ) -> Agent | None:
        """Store a probe outcome.

        Ignored when the agent was removed or deactivated while its probe
        was in flight. Does not notify; the prober publishes once per pass.

        Returns:
            The updated agent, or None if the outcome was discarded.

        Raises:
            ValidationError: If health_status is not a HealthStatus value.
        """
        try:
            health_status = HealthStatus(health_status)
        except ValueError as e:
            raise ValidationError(
                f"Unknown health status for {name}",
                field="health_status",
                value=health_status,
            ) from e

        agent = self._registry.get(name)
        if agent is None or not agent.is_active:
            log.debug("agents.lifecycle.health_discarded", agent=name)
            return None

        updated = agent.evolve(
            health_status=health_status,
            last_health_check=checked_at or utcnow(),
        )
        self._registry.upsert(updated)
        return updated


__all__ = [
    "ActivationCheck",
    "LifecycleController",
    "validate_agent_config",
]
