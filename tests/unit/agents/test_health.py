"""Unit tests for taurus.agents.health module."""

import asyncio
from collections.abc import Callable, Iterator

import httpx
import pytest
import stamina

from taurus.agents.health import (
    AgentProbe,
    DeclaredStateProbe,
    HealthProber,
    HttpProbe,
    is_declared_healthy,
)
from taurus.agents.lifecycle import LifecycleController
from taurus.agents.models import Agent, AgentStatus, HealthStatus, Priority
from taurus.agents.registry import AgentRegistry
from taurus.agents.scaling import AutoScaler
from taurus.agents.status import StatusSnapshot
from taurus.config.models import OrchestratorConfig


@pytest.fixture(autouse=True)
def _no_retry_waits() -> Iterator[None]:
    stamina.set_testing(True)
    yield
    stamina.set_testing(False)


class ScriptedProbe:
    """Probe returning a fixed outcome per agent name."""

    def __init__(self, outcomes: dict[str, HealthStatus | Exception], delay: float = 0.0) -> None:
        self.outcomes = outcomes
        self.delay = delay
        self.calls: list[str] = []

    async def probe(self, agent: Agent) -> HealthStatus:
        self.calls.append(agent.name)
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes.get(agent.name, HealthStatus.HEALTHY)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _seed_active(
    controller: LifecycleController, make_agent: Callable[..., Agent], *names: str
) -> None:
    for name in names:
        controller.seed_agent(make_agent(name, status=AgentStatus.ACTIVE))


class TestDeclaredStateProbe:
    """Test the declared-state probe."""

    async def test_active_with_endpoint_is_healthy(self, make_agent: Callable[..., Agent]) -> None:
        """An active agent with an endpoint is healthy."""
        agent = make_agent(status=AgentStatus.ACTIVE)

        assert is_declared_healthy(agent)
        assert await DeclaredStateProbe().probe(agent) == HealthStatus.HEALTHY

    async def test_missing_endpoint_is_unhealthy(self, make_agent: Callable[..., Agent]) -> None:
        """An active agent without an endpoint is unhealthy."""
        agent = make_agent(endpoint=None, status=AgentStatus.ACTIVE)

        assert await DeclaredStateProbe().probe(agent) == HealthStatus.UNHEALTHY

    def test_satisfies_protocol(self) -> None:
        """Both probes implement AgentProbe."""
        assert isinstance(DeclaredStateProbe(), AgentProbe)
        assert isinstance(HttpProbe(), AgentProbe)


class TestHttpProbe:
    """Test the HTTP probe against a mock transport."""

    @staticmethod
    def _probe(handler: Callable[[httpx.Request], httpx.Response]) -> HttpProbe:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HttpProbe(client, health_path="/health")

    async def test_success_is_healthy(self, make_agent: Callable[..., Agent]) -> None:
        """A 2xx response is healthy and hits the health path."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200)

        agent = make_agent(endpoint="http://localhost:9001/", status=AgentStatus.ACTIVE)

        assert await self._probe(handler).probe(agent) == HealthStatus.HEALTHY
        assert seen == ["http://localhost:9001/health"]

    async def test_client_error_is_still_reachable(self, make_agent: Callable[..., Agent]) -> None:
        """A 4xx response means the agent answered."""
        agent = make_agent(status=AgentStatus.ACTIVE)

        status = await self._probe(lambda _: httpx.Response(404)).probe(agent)

        assert status == HealthStatus.HEALTHY

    async def test_server_error_is_unhealthy(self, make_agent: Callable[..., Agent]) -> None:
        """A 5xx response is unhealthy."""
        agent = make_agent(status=AgentStatus.ACTIVE)

        status = await self._probe(lambda _: httpx.Response(503)).probe(agent)

        assert status == HealthStatus.UNHEALTHY

    async def test_connection_refused_retried_then_unhealthy(
        self, make_agent: Callable[..., Agent]
    ) -> None:
        """Connection errors are retried before reporting unhealthy."""
        attempts: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(1)
            raise httpx.ConnectError("refused", request=request)

        agent = make_agent(status=AgentStatus.ACTIVE)

        assert await self._probe(handler).probe(agent) == HealthStatus.UNHEALTHY
        assert len(attempts) >= 1

    async def test_timeout_is_error(self, make_agent: Callable[..., Agent]) -> None:
        """A timeout means the health could not be determined."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        agent = make_agent(status=AgentStatus.ACTIVE)

        assert await self._probe(handler).probe(agent) == HealthStatus.ERROR

    async def test_token_endpoint_uses_declared_state(
        self, make_agent: Callable[..., Agent]
    ) -> None:
        """Non-URL endpoints never hit the network."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        agent = make_agent(endpoint="apify_api_123456789", status=AgentStatus.ACTIVE)

        assert await self._probe(handler).probe(agent) == HealthStatus.HEALTHY

    async def test_aclose_only_closes_owned_client(self) -> None:
        """A caller-provided client is left open."""
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda _: httpx.Response(200)))
        probe = HttpProbe(client)

        await probe.aclose()

        assert not client.is_closed
        await client.aclose()


class TestHealthProber:
    """Test HealthProber.run_pass."""

    async def test_records_each_outcome(
        self,
        controller: LifecycleController,
        registry: AgentRegistry,
        make_agent: Callable[..., Agent],
    ) -> None:
        """Every active agent is probed and its outcome stored."""
        _seed_active(controller, make_agent, "a", "b", "c")
        probe = ScriptedProbe({"b": HealthStatus.UNHEALTHY})
        prober = HealthProber(registry, controller, probe=probe)

        report = await prober.run_pass()

        assert sorted(probe.calls) == ["a", "b", "c"]
        assert report.total_active == 3
        assert report.healthy_count == 2
        assert report.health_ratio == pytest.approx(2 / 3)
        assert registry.get("b").health_status == HealthStatus.UNHEALTHY  # type: ignore[union-attr]
        assert all(agent.last_health_check is not None for agent in registry)
        assert prober.passes_completed == 1

    async def test_probe_fault_is_isolated(
        self,
        controller: LifecycleController,
        registry: AgentRegistry,
        make_agent: Callable[..., Agent],
    ) -> None:
        """One raising probe marks that agent error and the rest are recorded."""
        _seed_active(controller, make_agent, "a", "b", "c")
        probe = ScriptedProbe({"b": RuntimeError("socket closed")})
        prober = HealthProber(registry, controller, probe=probe)

        report = await prober.run_pass()

        assert registry.get("a").health_status == HealthStatus.HEALTHY  # type: ignore[union-attr]
        assert registry.get("b").health_status == HealthStatus.ERROR  # type: ignore[union-attr]
        assert registry.get("c").health_status == HealthStatus.HEALTHY  # type: ignore[union-attr]
        assert [r.agent for r in report.faulted] == ["b"]
        assert "socket closed" in (report.faulted[0].error_message or "")
        assert registry.get("b").status == AgentStatus.ACTIVE  # type: ignore[union-attr]

    async def test_timeout_is_error(
        self,
        controller: LifecycleController,
        registry: AgentRegistry,
        make_agent: Callable[..., Agent],
    ) -> None:
        """A probe exceeding the timeout is recorded as error."""
        _seed_active(controller, make_agent, "slow")
        probe = ScriptedProbe({}, delay=1.0)
        prober = HealthProber(registry, controller, probe=probe, timeout=0.01)

        report = await prober.run_pass()

        assert registry.get("slow").health_status == HealthStatus.ERROR  # type: ignore[union-attr]
        assert report.healthy_count == 0
        assert "timed out" in (report.results[0].error_message or "")

    @pytest.mark.parametrize("outcome", ["degraded", True, None, HealthStatus.UNKNOWN])
    async def test_unusable_outcome_is_error(
        self,
        outcome: object,
        controller: LifecycleController,
        registry: AgentRegistry,
        snapshots: list[StatusSnapshot],
        make_agent: Callable[..., Agent],
    ) -> None:
        """An unusable outcome is recorded as error and the pass continues."""
        _seed_active(controller, make_agent, "a", "b")

        class MisbehavingProbe:
            async def probe(self, agent: Agent) -> HealthStatus:
                if agent.name == "a":
                    return outcome  # type: ignore[return-value]
                return HealthStatus.HEALTHY

        report = await HealthProber(registry, controller, probe=MisbehavingProbe()).run_pass()

        assert registry.get("a").health_status == HealthStatus.ERROR  # type: ignore[union-attr]
        assert registry.get("b").health_status == HealthStatus.HEALTHY  # type: ignore[union-attr]
        assert [r.agent for r in report.faulted] == ["a"]
        assert len(snapshots) == 1
        assert controller.status().healthy_agents == 1

    async def test_deactivated_in_flight_is_discarded(
        self,
        controller: LifecycleController,
        registry: AgentRegistry,
        make_agent: Callable[..., Agent],
    ) -> None:
        """An agent deactivated while its probe runs keeps its inactive state."""
        _seed_active(controller, make_agent, "a", "b")

        class DeactivatingProbe:
            async def probe(self, agent: Agent) -> HealthStatus:
                if agent.name == "a":
                    controller.deactivate_agent("a")
                await asyncio.sleep(0)
                return HealthStatus.HEALTHY

        report = await HealthProber(registry, controller, probe=DeactivatingProbe()).run_pass()

        assert registry.get("a").status == AgentStatus.INACTIVE  # type: ignore[union-attr]
        assert [r.agent for r in report.results] == ["b"]
        assert report.total_active == 1

    async def test_publishes_once_per_pass(
        self,
        controller: LifecycleController,
        registry: AgentRegistry,
        snapshots: list[StatusSnapshot],
        make_agent: Callable[..., Agent],
    ) -> None:
        """One snapshot is published per pass, not per agent."""
        _seed_active(controller, make_agent, "a", "b", "c")

        await HealthProber(registry, controller, probe=ScriptedProbe({})).run_pass()

        assert len(snapshots) == 1
        assert snapshots[0].healthy_agents == 3

    async def test_empty_active_set(
        self, controller: LifecycleController, registry: AgentRegistry
    ) -> None:
        """A pass over nothing reports zero and no ratio."""
        report = await HealthProber(registry, controller).run_pass()

        assert report.total_active == 0
        assert report.health_ratio is None
        assert report.scaling.is_noop

    async def test_feeds_auto_scaler(
        self,
        controller: LifecycleController,
        registry: AgentRegistry,
        settings: OrchestratorConfig,
        make_agent: Callable[..., Agent],
    ) -> None:
        """A poor pass promotes standby agents through the scaler."""
        _seed_active(controller, make_agent, "a", "b")
        spare = make_agent("spare", status=AgentStatus.STANDBY, priority=Priority.HIGH)
        controller.seed_agent(spare)
        scaler = AutoScaler(registry, controller, settings)
        probe = ScriptedProbe({"a": HealthStatus.UNHEALTHY, "b": HealthStatus.UNHEALTHY})

        report = await HealthProber(registry, controller, probe=probe, scaler=scaler).run_pass()

        assert report.scaling.activate == ("spare",)
        assert registry.get("spare").status == AgentStatus.ACTIVE  # type: ignore[union-attr]
