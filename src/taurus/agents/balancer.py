"""Round-robin selection over the active-set."""

from __future__ import annotations

from typing import TYPE_CHECKING

from taurus.agents.models import Agent

if TYPE_CHECKING:
    from taurus.agents.registry import AgentRegistry


class RoundRobinBalancer:
    """Hands out healthy active agents in rotating activation order.

    The cursor is the name of the last agent returned. The next call picks
    the first eligible agent after that name in the active-set, wrapping
    around; if that agent has left the active-set the rotation restarts.
    """

    strategy = "round_robin"

    def __init__(self, registry: AgentRegistry) -> None:
        self._registry = registry
        self._last: str | None = None

    def next_agent(self, capability: str | None = None) -> Agent | None:
        """Return the next healthy active agent, optionally by capability."""
        active = self._registry.active_agents()
        eligible = [
            index
            for index, agent in enumerate(active)
            if agent.is_healthy and (capability is None or agent.has_capability(capability))
        ]
        if not eligible:
            return None

        names = [agent.name for agent in active]
        position = names.index(self._last) if self._last in names else -1
        index = next((i for i in eligible if i > position), eligible[0])

        chosen = active[index]
        self._last = chosen.name
        return chosen


__all__ = ["RoundRobinBalancer"]
