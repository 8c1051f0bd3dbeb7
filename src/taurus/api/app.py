"""FastAPI application factory for the Taurus management API."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import taurus
from taurus.api.broadcast import StatusBroadcaster, ws_router
from taurus.api.models import ErrorResponse
from taurus.api.routes import router
from taurus.config.models import TaurusConfig
from taurus.core.errors import NotFoundError, TaurusError, ValidationError
from taurus.observability.logging import get_logger
from taurus.orchestrator import Orchestrator

log = get_logger(__name__)


def _status_code_for(error: TaurusError) -> int:
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _taurus_error_handler(request: Request, exc: TaurusError) -> JSONResponse:
    code = _status_code_for(exc)
    log.info(
        "api.request.rejected",
        path=request.url.path,
        status_code=code,
        error_type=type(exc).__name__,
    )
    body = ErrorResponse(
        error=exc.message,
        field=exc.field if isinstance(exc, ValidationError) else None,
    )
    return JSONResponse(status_code=code, content=body.model_dump(by_alias=True))


def create_app(
    orchestrator: Orchestrator | None = None,
    config: TaurusConfig | None = None,
) -> FastAPI:
    """Create the management API.

    Args:
        orchestrator: Orchestrator to serve. Built from ``config`` if omitted.
        config: Configuration used when no orchestrator is given, and for
            the API settings. Defaults to the orchestrator's own config.

    The lifespan starts the orchestrator's periodic loops and subscribes the
    WebSocket broadcaster; both are undone on shutdown.
    """
    if orchestrator is None:
        orchestrator = Orchestrator(config)
    api_config = (config or orchestrator.config).api
    broadcaster = StatusBroadcaster()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        unsubscribe = orchestrator.subscribe(broadcaster)
        await orchestrator.start()
        log.info("api.server.started", host=api_config.host, port=api_config.port)
        try:
            yield
        finally:
            await orchestrator.stop()
            unsubscribe()
            log.info("api.server.stopped")

    app = FastAPI(
        title="Taurus Agent Orchestrator",
        description="Agent registry, health probing and auto-scaling",
        version=taurus.__version__,
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator
    app.state.broadcaster = broadcaster
    app.state.status_push_interval = api_config.status_push_interval

    app.add_middleware(
        CORSMiddleware,
        allow_origins=api_config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.exception_handler(TaurusError)(_taurus_error_handler)
    app.include_router(router)
    app.include_router(ws_router)

    return app
