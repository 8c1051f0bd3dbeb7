"""Orchestrator facade - the management surface over the agent core.

The Orchestrator owns the registry and wires the Lifecycle Controller,
Health Prober, Auto-Scaler, balancer and Notifier together. It seeds the
registry from the declared agents, runs the two periodic loops (health and
re-sync) and converts lifecycle errors into Result values for callers such
as the HTTP API and the CLI.

Usage:
    orchestrator = Orchestrator(resolve_config())
    orchestrator.subscribe(print_snapshot)
    await orchestrator.start()

    result = orchestrator.activate_agent("github")
    if result.is_err:
        print(result.error)

    await orchestrator.stop()
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
import contextlib
from typing import Any

from taurus.agents.balancer import RoundRobinBalancer
from taurus.agents.health import AgentProbe, DeclaredStateProbe, HealthProber, HttpProbe
from taurus.agents.lifecycle import ActivationCheck, LifecycleController
from taurus.agents.models import Agent, AgentStatus, HealthStatus, Priority, utcnow
from taurus.agents.notify import Notifier, StatusSink
from taurus.agents.registry import AgentRegistry
from taurus.agents.scaling import AutoScaler
from taurus.agents.status import StatusSnapshot
from taurus.config.loader import resolve_endpoint
from taurus.config.models import OrchestratorConfig, TaurusConfig, get_default_config
from taurus.core.errors import TaurusError
from taurus.core.types import Result
from taurus.observability.logging import get_logger

log = get_logger(__name__)


def build_probe(settings: OrchestratorConfig) -> AgentProbe:
    """Create the probe selected by ``settings.probe``."""
    if settings.probe == "http":
        return HttpProbe(timeout=settings.probe_timeout)
    return DeclaredStateProbe()


class Orchestrator:
    """Agent orchestration service.

    Args:
        config: Full configuration. Defaults to the built-in declarations.
        probe: Probe override. Defaults to the probe named in the config.
        notifier: Notifier override, shared with other components if given.
        activation_check: Optional hook run before every activation.
    """

    def __init__(
        self,
        config: TaurusConfig | None = None,
        *,
        probe: AgentProbe | None = None,
        notifier: Notifier | None = None,
        activation_check: ActivationCheck | None = None,
    ) -> None:
        self._config = config or get_default_config()
        self._settings = self._config.orchestrator
        self._registry = AgentRegistry()
        self._notifier = notifier or Notifier()
        self._controller = LifecycleController(
            self._registry,
            self._settings,
            self._notifier,
            activation_check=activation_check,
        )
        self._scaler = AutoScaler(self._registry, self._controller, self._settings)
        self._prober = HealthProber(
            self._registry,
            self._controller,
            probe=probe or build_probe(self._settings),
            scaler=self._scaler,
            timeout=self._settings.probe_timeout,
        )
        self._balancer = RoundRobinBalancer(self._registry)

        self._health_task: asyncio.Task[None] | None = None
        self._resync_task: asyncio.Task[None] | None = None

        self._seed()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def config(self) -> TaurusConfig:
        return self._config

    @property
    def settings(self) -> OrchestratorConfig:
        return self._settings

    @property
    def registry(self) -> AgentRegistry:
        return self._registry

    @property
    def controller(self) -> LifecycleController:
        return self._controller

    @property
    def prober(self) -> HealthProber:
        return self._prober

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    @property
    def is_running(self) -> bool:
        return self._health_task is not None and not self._health_task.done()

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    def _seed(self) -> None:
        """Insert the declared agents, then activate the declared-active ones.

        Declared-active agents enter as PENDING and go through
        activate_agent, high priority first and otherwise in declaration
        order, so the active-set matches their status from the start.
        """
        to_activate: list[Agent] = []
        for name, declaration in self._config.agents.items():
            declared_active = declaration.status == AgentStatus.ACTIVE
            agent = Agent(
                name=name,
                endpoint=resolve_endpoint(declaration),
                capabilities=tuple(declaration.capabilities),
                priority=declaration.priority,
                status=AgentStatus.PENDING if declared_active else declaration.status,
                health_status=HealthStatus.UNKNOWN,
                added_at=utcnow(),
            )
            self._controller.seed_agent(agent)
            if declared_active:
                to_activate.append(agent)

        to_activate.sort(key=lambda agent: agent.priority != Priority.HIGH)
        for agent in to_activate:
            self._controller.activate_agent(agent.name)

        log.info(
            "orchestrator.registry.seeded",
            total=len(self._registry),
            active=len(self._registry.active_names()),
        )

    # -------------------------------------------------------------------------
    # Query
    # -------------------------------------------------------------------------

    def get_status(self) -> StatusSnapshot:
        """Current status snapshot."""
        return self._controller.status()

    def select_agent(self, capability: str | None = None) -> Agent | None:
        """Round-robin pick of a healthy active agent."""
        return self._balancer.next_agent(capability)

    def subscribe(self, sink: StatusSink) -> Callable[[], None]:
        """Receive the full snapshot after every mutation and re-sync."""
        return self._notifier.subscribe(sink)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _run(
        self, operation: str, name: str, action: Callable[[], object]
    ) -> Result[StatusSnapshot, TaurusError]:
        try:
            action()
        except TaurusError as e:
            log.warning(
                "orchestrator.operation.rejected",
                operation=operation,
                agent=name,
                error_type=type(e).__name__,
                error=e.message,
            )
            return Result.err(e)
        return Result.ok(self.get_status())

    def add_agent(
        self, name: str, agent_config: Mapping[str, Any]
    ) -> Result[StatusSnapshot, TaurusError]:
        """Register a new agent from a raw configuration mapping."""
        return self._run(
            "add_agent", name, lambda: self._controller.add_agent(name, agent_config)
        )

    def remove_agent(self, name: str) -> Result[StatusSnapshot, TaurusError]:
        """Deactivate and delete an agent. Unknown names are a no-op."""
        return self._run("remove_agent", name, lambda: self._controller.remove_agent(name))

    def deactivate_agent(self, name: str) -> Result[StatusSnapshot, TaurusError]:
        """Take an agent out of the active-set. Unknown names are a no-op."""
        return self._run(
            "deactivate_agent", name, lambda: self._controller.deactivate_agent(name)
        )

    def activate_agent(self, name: str) -> Result[StatusSnapshot, TaurusError]:
        """Activate an agent.

        Returns Err for an unknown name and when the activation check
        faulted; in the latter case the agent is left in ERROR.
        """

        def _activate() -> None:
            if not self._controller.activate_agent(name):
                agent = self._registry.get(name)
                reason = agent.error_message if agent is not None else None
                raise TaurusError(
                    f"Activation of {name} failed: {reason}",
                    details={"agent": name, "status": AgentStatus.ERROR.value},
                )

        return self._run("activate_agent", name, _activate)

    async def run_health_check_now(self) -> Result[StatusSnapshot, TaurusError]:
        """Run one health pass immediately, outside the schedule."""
        try:
            await self._prober.run_pass()
        except TaurusError as e:
            return Result.err(e)
        return Result.ok(self.get_status())

    # -------------------------------------------------------------------------
    # Periodic loops
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Start the health and re-sync loops.

        Idempotent: calling it while running does nothing.
        """
        if self.is_running:
            return
        self._health_task = asyncio.create_task(
            self._loop("health", self._settings.health_check_interval, self._health_tick)
        )
        self._resync_task = asyncio.create_task(
            self._loop("resync", self._settings.resync_interval, self._resync_tick)
        )
        log.info(
            "orchestrator.loops.started",
            health_check_interval=self._settings.health_check_interval,
            resync_interval=self._settings.resync_interval,
            probe=type(self._prober.probe).__name__,
        )

    async def stop(self) -> None:
        """Stop both loops and wait for in-flight notifications."""
        for task in (self._health_task, self._resync_task):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._health_task = None
        self._resync_task = None

        await self._notifier.drain()
        probe = self._prober.probe
        if isinstance(probe, HttpProbe):
            await probe.aclose()
        log.info("orchestrator.loops.stopped")

    async def _loop(
        self, name: str, interval: float, tick: Callable[[], Awaitable[None]]
    ) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await tick()
            except Exception as e:
                log.exception(
                    "orchestrator.loop.iteration_failed",
                    loop=name,
                    error=str(e),
                )

    async def _health_tick(self) -> None:
        await self._prober.run_pass()

    async def _resync_tick(self) -> None:
        report = await self._prober.run_pass()
        self._notifier.notify(self.get_status())
        log.info(
            "orchestrator.registry.resynced",
            total=len(self._registry),
            healthy=report.healthy_count,
            active=report.total_active,
        )


__all__ = ["Orchestrator", "build_probe"]
