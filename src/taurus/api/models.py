"""Request and response models for the management API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taurus.agents.status import AgentView


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddAgentRequest(_ApiModel):
    """Body of ``POST /api/mcp/agents``.

    The agent configuration is validated by the lifecycle layer, not here,
    so malformed configurations are reported as 400 with the field name.
    """

    agent_name: str = Field(min_length=1)
    agent_config: dict[str, Any] = Field(default_factory=dict)


class StatusResponse(_ApiModel):
    success: bool = True
    message: str | None = None
    mcp_status: dict[str, Any]


class SelectResponse(_ApiModel):
    success: bool = True
    agent: AgentView


class ErrorResponse(_ApiModel):
    success: bool = False
    error: str
    field: str | None = None
