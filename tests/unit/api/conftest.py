"""Fixtures for the management API tests."""

from collections.abc import Iterator

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest

from taurus.agents.models import AgentStatus, Priority
from taurus.api import create_app
from taurus.config.models import AgentDeclaration, TaurusConfig
from taurus.orchestrator import Orchestrator


@pytest.fixture
def api_config() -> TaurusConfig:
    """Two active agents and one standby agent."""

    def declare(priority: Priority, status: AgentStatus, port: int) -> AgentDeclaration:
        return AgentDeclaration(
            endpoint=f"http://localhost:{port}",
            capabilities=("research",),
            priority=priority,
            status=status,
        )

    return TaurusConfig(
        agents={
            "perplexity": declare(Priority.HIGH, AgentStatus.ACTIVE, 9201),
            "design_tokens": declare(Priority.MEDIUM, AgentStatus.ACTIVE, 9202),
            "github": declare(Priority.MEDIUM, AgentStatus.STANDBY, 9203),
        }
    )


@pytest.fixture
def orchestrator(api_config: TaurusConfig) -> Orchestrator:
    return Orchestrator(api_config)


@pytest.fixture
def app(orchestrator: Orchestrator) -> FastAPI:
    return create_app(orchestrator)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Test client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client
