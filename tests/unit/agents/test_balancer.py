"""Unit tests for taurus.agents.balancer module."""

from collections.abc import Callable

from taurus.agents.balancer import RoundRobinBalancer
from taurus.agents.models import Agent, AgentStatus, HealthStatus
from taurus.agents.registry import AgentRegistry


def _healthy(make_agent: Callable[..., Agent], name: str, *capabilities: str) -> Agent:
    return make_agent(
        name,
        capabilities=capabilities or ("code_analysis",),
        status=AgentStatus.ACTIVE,
        health_status=HealthStatus.HEALTHY,
    )


class TestRoundRobinBalancer:
    """Test rotation over healthy active agents."""

    def test_rotates_and_wraps(self, make_agent: Callable[..., Agent]) -> None:
        """Agents are handed out in activation order, then wrap."""
        registry = AgentRegistry([_healthy(make_agent, n) for n in ("a", "b", "c")])
        balancer = RoundRobinBalancer(registry)

        picks = [balancer.next_agent().name for _ in range(4)]  # type: ignore[union-attr]

        assert picks == ["a", "b", "c", "a"]

    def test_skips_unhealthy_and_inactive(self, make_agent: Callable[..., Agent]) -> None:
        """Only healthy active agents are eligible."""
        registry = AgentRegistry(
            [
                _healthy(make_agent, "a"),
                make_agent("b", status=AgentStatus.ACTIVE, health_status=HealthStatus.ERROR),
                make_agent("c", status=AgentStatus.STANDBY, health_status=HealthStatus.HEALTHY),
                _healthy(make_agent, "d"),
            ]
        )
        balancer = RoundRobinBalancer(registry)

        picks = [balancer.next_agent().name for _ in range(3)]  # type: ignore[union-attr]

        assert picks == ["a", "d", "a"]

    def test_filters_by_capability(self, make_agent: Callable[..., Agent]) -> None:
        """A capability restricts the candidates."""
        registry = AgentRegistry(
            [
                _healthy(make_agent, "a", "web_scraping"),
                _healthy(make_agent, "b", "research"),
                _healthy(make_agent, "c", "research", "web_scraping"),
            ]
        )
        balancer = RoundRobinBalancer(registry)

        first = balancer.next_agent("research")
        second = balancer.next_agent("research")
        third = balancer.next_agent("research")

        assert [first.name, second.name, third.name] == ["b", "c", "b"]  # type: ignore[union-attr]

    def test_none_when_nothing_eligible(self, make_agent: Callable[..., Agent]) -> None:
        """No healthy match returns None."""
        registry = AgentRegistry([_healthy(make_agent, "a")])
        balancer = RoundRobinBalancer(registry)

        assert balancer.next_agent("payment_processing") is None
        assert RoundRobinBalancer(AgentRegistry()).next_agent() is None

    def test_restarts_when_cursor_leaves(self, make_agent: Callable[..., Agent]) -> None:
        """If the last pick left the active-set the rotation restarts."""
        registry = AgentRegistry([_healthy(make_agent, n) for n in ("a", "b", "c")])
        balancer = RoundRobinBalancer(registry)
        balancer.next_agent()
        balancer.next_agent()

        leaving = registry.get("b")
        assert leaving is not None
        registry.upsert(leaving.evolve(status=AgentStatus.INACTIVE))

        assert balancer.next_agent().name == "a"  # type: ignore[union-attr]
