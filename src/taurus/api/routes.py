"""Agent management routes under ``/api/mcp``.

Every mutation responds with the post-mutation status snapshot. Lifecycle
errors are raised as-is and turned into JSON error responses by the handler
registered in ``create_app``.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from taurus.agents.status import AgentView, StatusSnapshot
from taurus.api.models import AddAgentRequest, ErrorResponse, SelectResponse, StatusResponse
from taurus.core.errors import NotFoundError, TaurusError
from taurus.core.types import Result
from taurus.orchestrator import Orchestrator

router = APIRouter(prefix="/api/mcp", tags=["agents"])

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid agent configuration"},
    404: {"model": ErrorResponse, "description": "Agent not found"},
}


def get_orchestrator(request: Request) -> Orchestrator:
    """Get the orchestrator attached to the application."""
    orchestrator: Orchestrator = request.app.state.orchestrator
    return orchestrator


OrchestratorDep = Annotated[Orchestrator, Depends(get_orchestrator)]


def _respond(result: Result[StatusSnapshot, TaurusError], message: str) -> StatusResponse:
    if result.is_err:
        raise result.error
    return StatusResponse(message=message, mcp_status=result.value.to_payload())


@router.get("/status", response_model=StatusResponse)
async def get_status(orchestrator: OrchestratorDep) -> StatusResponse:
    """Return the current status snapshot."""
    return StatusResponse(mcp_status=orchestrator.get_status().to_payload())


@router.post("/agents", response_model=StatusResponse, responses=_ERRORS)
async def add_agent(body: AddAgentRequest, orchestrator: OrchestratorDep) -> StatusResponse:
    """Register a new agent."""
    result = orchestrator.add_agent(body.agent_name, body.agent_config)
    return _respond(result, f"Agent {body.agent_name} added successfully")


@router.delete("/agents/{name}", response_model=StatusResponse)
async def remove_agent(name: str, orchestrator: OrchestratorDep) -> StatusResponse:
    """Deactivate and delete an agent."""
    return _respond(orchestrator.remove_agent(name), f"Agent {name} removed successfully")


@router.post("/agents/{name}/activate", response_model=StatusResponse, responses=_ERRORS)
async def activate_agent(name: str, orchestrator: OrchestratorDep) -> StatusResponse:
    """Activate an agent. Unknown names are 404."""
    return _respond(orchestrator.activate_agent(name), f"Agent {name} activated successfully")


@router.post("/agents/{name}/deactivate", response_model=StatusResponse)
async def deactivate_agent(name: str, orchestrator: OrchestratorDep) -> StatusResponse:
    """Deactivate an agent."""
    return _respond(
        orchestrator.deactivate_agent(name), f"Agent {name} deactivated successfully"
    )


@router.post("/health-check", response_model=StatusResponse)
async def run_health_check(orchestrator: OrchestratorDep) -> StatusResponse:
    """Run a health pass now."""
    return _respond(await orchestrator.run_health_check_now(), "Health check completed")


@router.get(
    "/agents/select",
    response_model=SelectResponse,
    responses={404: _ERRORS[404]},
    status_code=status.HTTP_200_OK,
)
async def select_agent(
    orchestrator: OrchestratorDep,
    capability: Annotated[str | None, Query(description="Required capability tag")] = None,
) -> SelectResponse:
    """Pick the next healthy active agent in round-robin order."""
    agent = orchestrator.select_agent(capability)
    if agent is None:
        raise NotFoundError(
            "No healthy active agent available",
            details={"capability": capability},
        )
    return SelectResponse(agent=AgentView.from_agent(agent))
