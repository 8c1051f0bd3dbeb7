"""Agent Registry - owned entity store for agents and the active-set.

This module provides:
- Name-keyed storage of Agent values in insertion order
- The active-set: names of ACTIVE agents in activation order
- Snapshots for readers that must not alias live state

Active-set membership is derived from the stored status inside ``upsert``
and ``delete``, so an agent is ACTIVE exactly when its name appears once in
the active-set. The registry performs no validation and emits nothing; the
LifecycleController is its only writer.

Usage:
    registry = AgentRegistry()
    registry.upsert(Agent(name="github", endpoint=url, capabilities=caps,
                          priority=Priority.MEDIUM))

    agent = registry.get("github")
    active = registry.active_names()
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from taurus.agents.models import Agent, AgentStatus


class AgentRegistry:
    """In-memory agent store with an ordered active-set.

    Not safe for concurrent mutation from several threads; all writes happen
    on the orchestrator's event loop.
    """

    def __init__(self, agents: Iterable[Agent] = ()) -> None:
        self._agents: dict[str, Agent] = {}
        self._active: list[str] = []
        for agent in agents:
            self.upsert(agent)

    def get(self, name: str) -> Agent | None:
        """Get an agent by name, or None if unknown."""
        return self._agents.get(name)

    def upsert(self, agent: Agent) -> None:
        """Insert or replace an agent.

        A replaced agent keeps its insertion position. The active-set is
        brought in line with the stored status in the same step.
        """
        self._agents[agent.name] = agent
        if agent.status == AgentStatus.ACTIVE:
            if agent.name not in self._active:
                self._active.append(agent.name)
        elif agent.name in self._active:
            self._active.remove(agent.name)

    def delete(self, name: str) -> Agent | None:
        """Remove an agent entirely. Returns the removed agent, if any."""
        agent = self._agents.pop(name, None)
        if name in self._active:
            self._active.remove(name)
        return agent

    def all(self) -> dict[str, Agent]:
        """Snapshot of every agent keyed by name, in insertion order."""
        return dict(self._agents)

    def active_names(self) -> tuple[str, ...]:
        """Snapshot of the active-set in activation order."""
        return tuple(self._active)

    def active_agents(self) -> list[Agent]:
        """Active agents in activation order."""
        return [self._agents[name] for name in self._active]

    def names_with_status(self, status: AgentStatus) -> list[str]:
        """Names of agents in the given status, in insertion order."""
        return [name for name, agent in self._agents.items() if agent.status == status]

    def __contains__(self, name: object) -> bool:
        return name in self._agents

    def __len__(self) -> int:
        return len(self._agents)

    def __iter__(self) -> Iterator[Agent]:
        return iter(list(self._agents.values()))


__all__ = ["AgentRegistry"]
