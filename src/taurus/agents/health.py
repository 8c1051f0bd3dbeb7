"""Health Prober - periodic liveness assessment of active agents.

This module provides:
- AgentProbe: the capability interface ``probe(agent) -> HealthStatus``
- DeclaredStateProbe: pure self-consistency check (default)
- HttpProbe: network check over httpx for URL endpoints
- HealthProber: runs one pass over the active-set and feeds the AutoScaler

Outcome mapping:
- probe returns HEALTHY / UNHEALTHY: recorded as-is
- probe exceeds the timeout: ERROR (could not determine)
- probe raises or returns an unknown status: ProbeFault logged, ERROR; the pass
  continues

Usage:
    prober = HealthProber(registry, controller, scaler=scaler, timeout=5.0)
    report = await prober.run_pass()
    print(report.healthy_count, report.total_active)
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx
import stamina

from taurus.agents.models import Agent, HealthStatus, utcnow
from taurus.agents.scaling import ScalingDecision
from taurus.core.errors import ProbeFault
from taurus.core.security import is_url
from taurus.observability.logging import bind_context, get_logger, unbind_context

if TYPE_CHECKING:
    from taurus.agents.lifecycle import LifecycleController
    from taurus.agents.registry import AgentRegistry
    from taurus.agents.scaling import AutoScaler

log = get_logger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0
CONNECT_RETRIES = 2


# =============================================================================
# Probes
# =============================================================================


@runtime_checkable
class AgentProbe(Protocol):
    """Assesses the liveness of a single agent."""

    async def probe(self, agent: Agent) -> HealthStatus: ...


def is_declared_healthy(agent: Agent) -> bool:
    """An agent is healthy iff it has an endpoint and is ACTIVE."""
    return bool(agent.endpoint) and agent.is_active


class DeclaredStateProbe:
    """Probe that only checks the agent's own declared state."""

    async def probe(self, agent: Agent) -> HealthStatus:
        return HealthStatus.HEALTHY if is_declared_healthy(agent) else HealthStatus.UNHEALTHY


class HttpProbe:
    """Probe that issues ``GET`` against URL endpoints.

    Endpoints that are not http(s) URLs (API tokens) fall back to the
    declared-state check. Connection errors are retried with stamina before
    the agent is reported UNHEALTHY; a timeout is reported as ERROR.

    Args:
        client: Optional shared httpx client. One is created lazily otherwise.
        timeout: Per-request timeout in seconds.
        health_path: Path appended to the endpoint URL.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        health_path: str = "",
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._health_path = health_path

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
        return self._client

    async def aclose(self) -> None:
        """Close the client if this probe created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def probe(self, agent: Agent) -> HealthStatus:
        if not agent.endpoint or not is_url(agent.endpoint):
            return HealthStatus.HEALTHY if is_declared_healthy(agent) else HealthStatus.UNHEALTHY

        url = agent.endpoint.rstrip("/") + self._health_path
        try:
            response = await self._get(url)
        except httpx.TimeoutException:
            log.warning("agents.health.http_timeout", agent=agent.name, timeout=self._timeout)
            return HealthStatus.ERROR
        except httpx.TransportError as e:
            log.info("agents.health.http_unreachable", agent=agent.name, error=str(e))
            return HealthStatus.UNHEALTHY

        if response.status_code >= 500:
            return HealthStatus.UNHEALTHY
        return HealthStatus.HEALTHY

    async def _get(self, url: str) -> httpx.Response:
        @stamina.retry(
            on=httpx.ConnectError,
            attempts=CONNECT_RETRIES,
            wait_initial=0.1,
            wait_max=1.0,
            wait_jitter=0.1,
        )
        async def _do_get() -> httpx.Response:
            return await self._get_client().get(url)

        return await _do_get()


# =============================================================================
# Reports
# =============================================================================


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of probing one agent.

    Attributes:
        agent: Agent name.
        health_status: Recorded health status.
        checked_at: When the outcome was recorded.
        error_message: Fault or timeout description, if any.
    """

    agent: str
    health_status: HealthStatus
    checked_at: datetime
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class HealthReport:
    """Summary of one probing pass.

    Attributes:
        results: Per-agent outcomes, in active-set order.
        healthy_count: Agents recorded HEALTHY.
        total_active: Agents probed and recorded.
        scaling: Auto-scaling decision taken after the pass.
        started_at: When the pass started.
        completed_at: When the pass completed.
    """

    results: tuple[ProbeResult, ...]
    healthy_count: int
    total_active: int
    scaling: ScalingDecision = field(default_factory=ScalingDecision)
    started_at: datetime = field(default_factory=utcnow)
    completed_at: datetime = field(default_factory=utcnow)

    @property
    def health_ratio(self) -> float | None:
        if self.total_active == 0:
            return None
        return self.healthy_count / self.total_active

    @property
    def faulted(self) -> tuple[ProbeResult, ...]:
        return tuple(r for r in self.results if r.health_status == HealthStatus.ERROR)


# =============================================================================
# Prober
# =============================================================================


class HealthProber:
    """Runs probing passes over the active-set.

    Args:
        registry: Agent store to read the active-set from.
        controller: Lifecycle controller that records outcomes.
        probe: Probe implementation. Defaults to DeclaredStateProbe.
        scaler: Optional auto-scaler invoked after each pass.
        timeout: Upper bound for a single probe, in seconds.
    """

    def __init__(
        self,
        registry: AgentRegistry,
        controller: LifecycleController,
        probe: AgentProbe | None = None,
        scaler: AutoScaler | None = None,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        self._registry = registry
        self._controller = controller
        self._probe: AgentProbe = probe or DeclaredStateProbe()
        self._scaler = scaler
        self._timeout = timeout
        self.passes_completed = 0

    @property
    def probe(self) -> AgentProbe:
        return self._probe

    async def run_pass(self) -> HealthReport:
        """Probe every active agent, then run auto-scaling.

        A single agent's failure never aborts the pass.
        """
        started_at = utcnow()
        names = self._registry.active_names()

        outcomes = await asyncio.gather(*(self._probe_one(name) for name in names))
        results = tuple(r for r in outcomes if r is not None)
        healthy_count = sum(1 for r in results if r.health_status == HealthStatus.HEALTHY)
        total_active = len(results)

        decision = ScalingDecision()
        if self._scaler is not None:
            decision = self._scaler.evaluate(healthy_count, total_active)

        report = HealthReport(
            results=results,
            healthy_count=healthy_count,
            total_active=total_active,
            scaling=decision,
            started_at=started_at,
            completed_at=utcnow(),
        )
        self.passes_completed += 1

        log.info(
            "agents.health.pass_completed",
            healthy_count=healthy_count,
            total_active=total_active,
            faulted=len(report.faulted),
            scaled_up=list(decision.activate),
            scaled_down=list(decision.deactivate),
        )
        self._controller.publish()
        return report

    async def _probe_one(self, name: str) -> ProbeResult | None:
        agent = self._registry.get(name)
        if agent is None or not agent.is_active:
            return None

        # Runs in its own gather task, so the bound agent stays local to this probe.
        bind_context(agent=name)
        try:
            health, error_message = await self._assess(agent)
            checked_at = utcnow()
            if self._controller.record_health(name, health, checked_at) is None:
                return None
            return ProbeResult(
                agent=name,
                health_status=health,
                checked_at=checked_at,
                error_message=error_message,
            )
        finally:
            unbind_context("agent")

    async def _assess(self, agent: Agent) -> tuple[HealthStatus, str | None]:
        """Run the probe, mapping timeouts, faults and unknown results to ERROR."""
        try:
            outcome = await asyncio.wait_for(self._probe.probe(agent), timeout=self._timeout)
            health = HealthStatus(outcome)
            if health == HealthStatus.UNKNOWN:
                raise ValueError(f"{health.value!r} is not a probe outcome")
            return health, None
        except TimeoutError:
            log.warning("agents.health.probe_timeout", timeout=self._timeout)
            return HealthStatus.ERROR, f"probe timed out after {self._timeout}s"
        except Exception as e:
            fault = ProbeFault.from_exception(e, agent_name=agent.name)
            log.error(
                "agents.health.probe_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return HealthStatus.ERROR, fault.message


__all__ = [
    "AgentProbe",
    "DeclaredStateProbe",
    "HealthProber",
    "HealthReport",
    "HttpProbe",
    "ProbeResult",
    "is_declared_healthy",
]
