"""Auto-Scaler - reacts to the health ratio of the active-set.

``plan_scaling`` is a pure decision function over the health aggregates,
a registry snapshot and the orchestrator settings. ``AutoScaler`` applies
the decision through the LifecycleController.

Rules (defaults in OrchestratorConfig):
- Scale up: ratio < scale_up_threshold (0.7) activates up to
  scale_up_batch (2) STANDBY agents whose priority is not LOW, in registry
  insertion order.
- Scale down: total_active > max_concurrent_agents and
  ratio > scale_down_threshold (0.95) deactivates up to scale_down_batch (1)
  ACTIVE agents with LOW priority, in active-set order.

Both branches are evaluated in the same pass. No eligible candidates is a
steady state, not an error.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from taurus.agents.models import Agent, AgentStatus, Priority
from taurus.observability.logging import get_logger

if TYPE_CHECKING:
    from taurus.agents.lifecycle import LifecycleController
    from taurus.agents.registry import AgentRegistry
    from taurus.config.models import OrchestratorConfig

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ScalingDecision:
    """Agents to promote and demote in one auto-scaling pass.

    Attributes:
        activate: STANDBY agents to activate, in order.
        deactivate: ACTIVE agents to deactivate, in order.
        health_ratio: healthy/total ratio the decision was based on, or None
            when scaling was not evaluated.
    """

    activate: tuple[str, ...] = ()
    deactivate: tuple[str, ...] = ()
    health_ratio: float | None = None

    @property
    def is_noop(self) -> bool:
        return not self.activate and not self.deactivate


def plan_scaling(
    healthy_count: int,
    total_active: int,
    agents: Mapping[str, Agent],
    active_order: Sequence[str],
    settings: OrchestratorConfig,
) -> ScalingDecision:
    """Decide which agents to activate or deactivate.

    Args:
        healthy_count: Active agents found healthy in the last pass.
        total_active: Active agents probed in the last pass.
        agents: Registry snapshot in insertion order.
        active_order: Active-set in activation order.
        settings: Thresholds, batch sizes and the auto-scaling switch.
    """
    if not settings.auto_scaling_enabled or total_active <= 0:
        return ScalingDecision()

    ratio = healthy_count / total_active

    activate: tuple[str, ...] = ()
    if ratio < settings.scale_up_threshold:
        standby = [
            name
            for name, agent in agents.items()
            if agent.status == AgentStatus.STANDBY and agent.priority != Priority.LOW
        ]
        activate = tuple(standby[: settings.scale_up_batch])

    deactivate: tuple[str, ...] = ()
    if total_active > settings.max_concurrent_agents and ratio > settings.scale_down_threshold:
        low_priority = [
            name
            for name in active_order
            if name in agents and agents[name].priority == Priority.LOW
        ]
        deactivate = tuple(low_priority[: settings.scale_down_batch])

    return ScalingDecision(activate=activate, deactivate=deactivate, health_ratio=ratio)


class AutoScaler:
    """Applies scaling decisions through the LifecycleController."""

    def __init__(
        self,
        registry: AgentRegistry,
        controller: LifecycleController,
        settings: OrchestratorConfig,
    ) -> None:
        self._registry = registry
        self._controller = controller
        self._settings = settings

    def evaluate(self, healthy_count: int, total_active: int) -> ScalingDecision:
        """Plan and apply one auto-scaling pass."""
        decision = plan_scaling(
            healthy_count,
            total_active,
            self._registry.all(),
            self._registry.active_names(),
            self._settings,
        )

        for name in decision.activate:
            if self._controller.activate_agent(name):
                log.info(
                    "agents.scaler.scaled_up",
                    agent=name,
                    health_ratio=decision.health_ratio,
                )

        for name in decision.deactivate:
            if self._controller.deactivate_agent(name):
                log.info(
                    "agents.scaler.scaled_down",
                    agent=name,
                    health_ratio=decision.health_ratio,
                    total_active=total_active,
                    max_concurrent_agents=self._settings.max_concurrent_agents,
                )

        return decision


__all__ = ["AutoScaler", "ScalingDecision", "plan_scaling"]
