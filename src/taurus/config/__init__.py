"""Configuration module for Taurus.

Configuration is stored in ~/.taurus/config.yaml; every section has defaults,
so a missing file means the built-in agent declarations and policies apply.

Usage:
    from taurus.config import resolve_config

    config = resolve_config()
    interval = config.orchestrator.health_check_interval
"""

from taurus.config.loader import (
    config_exists,
    create_default_config,
    ensure_config_dir,
    load_config,
    resolve_config,
    resolve_endpoint,
)
from taurus.config.models import (
    AgentDeclaration,
    ApiConfig,
    OrchestratorConfig,
    TaurusConfig,
    default_agent_declarations,
    get_config_dir,
    get_default_config,
)

__all__ = [
    # Models
    "TaurusConfig",
    "AgentDeclaration",
    "ApiConfig",
    "OrchestratorConfig",
    "default_agent_declarations",
    "get_config_dir",
    "get_default_config",
    # Loader
    "config_exists",
    "create_default_config",
    "ensure_config_dir",
    "load_config",
    "resolve_config",
    "resolve_endpoint",
]
