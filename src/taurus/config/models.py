"""Pydantic models for Taurus configuration.

Classes:
    AgentDeclaration: One statically declared agent integration
    OrchestratorConfig: Health-check cadence, auto-scaling policy, limits
    ApiConfig: Management API server settings
    TaurusConfig: Top-level configuration combining all sections
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from taurus.agents.models import AgentStatus, Priority
from taurus.observability.logging import LoggingConfig

_INITIAL_STATUSES = frozenset({AgentStatus.ACTIVE, AgentStatus.STANDBY, AgentStatus.PENDING})


class AgentDeclaration(BaseModel, frozen=True):
    """A statically declared agent, seeded into the registry at startup.

    Attributes:
        endpoint: Literal endpoint, used when endpoint_env is unset or empty.
        endpoint_env: Environment variable holding the endpoint.
        capabilities: Capability tags (at least one).
        priority: Auto-scaling precedence.
        status: Initial lifecycle state.
    """

    endpoint: str | None = None
    endpoint_env: str | None = None
    capabilities: tuple[str, ...] = Field(min_length=1)
    priority: Priority
    status: AgentStatus = AgentStatus.STANDBY

    @field_validator("status")
    @classmethod
    def validate_initial_status(cls, v: AgentStatus) -> AgentStatus:
        """Declared agents start active, standby or pending."""
        if v not in _INITIAL_STATUSES:
            msg = f"initial status must be one of {sorted(s.value for s in _INITIAL_STATUSES)}"
            raise ValueError(msg)
        return v


class OrchestratorConfig(BaseModel, frozen=True):
    """Orchestrator behaviour.

    Attributes:
        max_concurrent_agents: Active agents allowed before scale-down kicks in.
        auto_scaling_enabled: Whether health passes may (de)activate agents.
        load_balancing_strategy: Selection strategy over the active-set.
        health_check_interval: Seconds between health passes.
        resync_interval: Seconds between full re-syncs (probe + forced push).
        scale_up_threshold: Health ratio below which standby agents are promoted.
        scale_down_threshold: Health ratio above which low-priority agents may go.
        scale_up_batch: Maximum agents activated per pass.
        scale_down_batch: Maximum agents deactivated per pass.
        probe: Probe implementation, "declared" or "http".
        probe_timeout: Upper bound for one probe, in seconds.
    """

    max_concurrent_agents: int = Field(default=10, ge=1)
    auto_scaling_enabled: bool = True
    load_balancing_strategy: Literal["round_robin"] = "round_robin"
    health_check_interval: float = Field(default=30.0, gt=0)
    resync_interval: float = Field(default=300.0, gt=0)
    scale_up_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    scale_down_threshold: float = Field(default=0.95, ge=0.0, le=1.0)
    scale_up_batch: int = Field(default=2, ge=0)
    scale_down_batch: int = Field(default=1, ge=0)
    probe: Literal["declared", "http"] = "declared"
    probe_timeout: float = Field(default=5.0, gt=0)

    @field_validator("scale_down_threshold")
    @classmethod
    def validate_scale_down_threshold(cls, v: float, info: ValidationInfo) -> float:
        """Validate that scale_down_threshold >= scale_up_threshold."""
        up = info.data.get("scale_up_threshold", 0.7)
        if v < up:
            msg = f"scale_down_threshold ({v}) must be >= scale_up_threshold ({up})"
            raise ValueError(msg)
        return v


class ApiConfig(BaseModel, frozen=True):
    """Management API server settings.

    Attributes:
        host: Bind address.
        port: Bind port.
        status_push_interval: Seconds between unsolicited status pushes to
            each WebSocket observer.
        cors_origins: Allowed CORS origins.
    """

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    status_push_interval: float = Field(default=30.0, gt=0)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


def _declare(
    capabilities: tuple[str, ...],
    priority: Priority,
    status: AgentStatus,
    *,
    endpoint: str | None = None,
    endpoint_env: str | None = None,
) -> AgentDeclaration:
    return AgentDeclaration(
        endpoint=endpoint,
        endpoint_env=endpoint_env,
        capabilities=capabilities,
        priority=priority,
        status=status,
    )


def default_agent_declarations() -> dict[str, AgentDeclaration]:
    """The built-in agent integrations, in declaration order."""
    high, medium, low = Priority.HIGH, Priority.MEDIUM, Priority.LOW
    active, standby, pending = AgentStatus.ACTIVE, AgentStatus.STANDBY, AgentStatus.PENDING
    return {
        # Core intelligence agents
        "apify": _declare(
            ("web_scraping", "data_extraction", "content_monitoring"),
            high,
            active,
            endpoint_env="APIFY_TOKEN",
        ),
        "perplexity": _declare(
            ("ai_analysis", "research", "sentiment_analysis"),
            high,
            active,
            endpoint="demo-key",
            endpoint_env="PERPLEXITY_API_KEY",
        ),
        # Platform integration agents
        "linkedin": _declare(
            ("social_monitoring", "professional_network_analysis"),
            medium,
            standby,
            endpoint_env="LINKEDIN_MCP_URL",
        ),
        "github": _declare(
            ("code_analysis", "repository_monitoring", "tech_stack_detection"),
            medium,
            standby,
            endpoint_env="GITHUB_MCP_URL",
        ),
        "clickup": _declare(
            ("project_management", "task_automation", "workflow_tracking"),
            low,
            standby,
            endpoint_env="CLICKUP_MCP_URL",
        ),
        "firecrawl": _declare(
            ("deep_crawling", "content_extraction", "site_mapping"),
            medium,
            standby,
            endpoint="demo-key",
            endpoint_env="FIRECRAWL_API_KEY",
        ),
        # Design and UI agents
        "design_tokens": _declare(
            ("css_generation", "design_system", "theme_management"),
            medium,
            active,
            endpoint="http://localhost:9001",
        ),
        "component_library": _declare(
            ("component_generation", "ui_library", "template_creation"),
            medium,
            active,
            endpoint="http://localhost:9002",
        ),
        "icon_assets": _declare(
            ("icon_management", "svg_optimization", "asset_library"),
            low,
            active,
            endpoint="http://localhost:9003",
        ),
        "tailwind_mcp": _declare(
            ("responsive_design", "utility_generation", "layout_optimization"),
            medium,
            active,
            endpoint="http://localhost:9004",
        ),
        "webflow_mcp": _declare(
            ("cms_management", "site_publishing", "no_code_updates"),
            medium,
            active,
            endpoint="http://localhost:9077",
        ),
        # Integrations awaiting rollout
        "salesforce": _declare(
            ("crm_integration", "lead_management", "sales_automation"),
            high,
            pending,
            endpoint_env="SALESFORCE_MCP_URL",
        ),
        "google_analytics": _declare(
            ("traffic_analysis", "user_behavior", "conversion_tracking"),
            high,
            pending,
            endpoint_env="GA_MCP_URL",
        ),
        "slack": _declare(
            ("team_communication", "alert_system", "collaboration"),
            medium,
            pending,
            endpoint_env="SLACK_MCP_URL",
        ),
        "notion": _declare(
            ("documentation", "knowledge_base", "content_management"),
            medium,
            pending,
            endpoint_env="NOTION_MCP_URL",
        ),
        "stripe": _declare(
            ("payment_processing", "revenue_tracking", "subscription_management"),
            high,
            pending,
            endpoint_env="STRIPE_MCP_URL",
        ),
        "aws": _declare(
            ("cloud_infrastructure", "data_storage", "computing_resources"),
            high,
            pending,
            endpoint_env="AWS_MCP_URL",
        ),
        "azure": _declare(
            ("ai_services", "cognitive_apis", "enterprise_integration"),
            high,
            pending,
            endpoint_env="AZURE_MCP_URL",
        ),
    }


class TaurusConfig(BaseModel, frozen=True):
    """Top-level Taurus configuration, validated from ~/.taurus/config.yaml.

    Attributes:
        orchestrator: Orchestrator behaviour.
        api: Management API settings.
        logging: Structured logging settings.
        agents: Declared agents keyed by name, in seeding order.
    """

    orchestrator: OrchestratorConfig = Field(default_factory=OrchestratorConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    agents: dict[str, AgentDeclaration] = Field(default_factory=default_agent_declarations)


def get_default_config() -> TaurusConfig:
    """Get the default Taurus configuration."""
    return TaurusConfig()


def get_config_dir() -> Path:
    """Get the Taurus configuration directory path (~/.taurus/)."""
    return Path.home() / ".taurus"
