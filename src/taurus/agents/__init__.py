"""Agent orchestration core for Taurus.

This package provides:
- Agent Registry: owned store of agents and the ordered active-set
- Lifecycle Controller: add/remove/activate/deactivate with validation
- Health Prober: periodic probing of active agents
- Auto-Scaler: health-ratio driven activation and deactivation
- Notifier: fire-and-forget broadcast of status snapshots
"""

from taurus.agents.balancer import RoundRobinBalancer
from taurus.agents.health import (
    AgentProbe,
    DeclaredStateProbe,
    HealthProber,
    HealthReport,
    HttpProbe,
    ProbeResult,
)
from taurus.agents.lifecycle import LifecycleController, validate_agent_config
from taurus.agents.models import Agent, AgentStatus, HealthStatus, Priority
from taurus.agents.notify import Notifier, StatusSink
from taurus.agents.registry import AgentRegistry
from taurus.agents.scaling import AutoScaler, ScalingDecision, plan_scaling
from taurus.agents.status import AgentView, OrchestratorView, StatusSnapshot, build_status

__all__ = [
    # Models
    "Agent",
    "AgentStatus",
    "HealthStatus",
    "Priority",
    # Registry
    "AgentRegistry",
    # Lifecycle
    "LifecycleController",
    "validate_agent_config",
    # Health
    "AgentProbe",
    "DeclaredStateProbe",
    "HttpProbe",
    "HealthProber",
    "HealthReport",
    "ProbeResult",
    # Scaling
    "AutoScaler",
    "ScalingDecision",
    "plan_scaling",
    # Balancing
    "RoundRobinBalancer",
    # Notifications
    "Notifier",
    "StatusSink",
    # Status
    "AgentView",
    "OrchestratorView",
    "StatusSnapshot",
    "build_status",
]
