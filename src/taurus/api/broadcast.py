"""WebSocket push of status snapshots.

Messages are JSON objects ``{"type": ..., "data": ...}``.

Outbound:
    initial-data           on connect, ``{"mcpStatus": snapshot}``
    mcp-status-update      after every mutation and every push interval
    mcp-agent-activated    ``{"agentName", "status": "success"}``
    mcp-agent-deactivated  ``{"agentName", "status": "success"}``
    mcp-agent-error        ``{"error": message}``

Inbound:
    mcp-health-check       run a health pass
    activate-mcp-agent     ``{"agentName"}``
    deactivate-mcp-agent   ``{"agentName"}``
"""

import asyncio
import json
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from taurus.agents.status import StatusSnapshot
from taurus.observability.logging import get_logger
from taurus.orchestrator import Orchestrator

log = get_logger(__name__)

ws_router = APIRouter()


def _message(kind: str, data: Any) -> dict[str, Any]:
    return {"type": kind, "data": data}


class StatusBroadcaster:
    """Fans status snapshots out to every connected WebSocket.

    Registered with the orchestrator as an async notification sink. A
    connection that fails to receive is dropped.
    """

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def register(self, websocket: WebSocket) -> None:
        self._connections.add(websocket)
        log.info("api.websocket.connected", connections=len(self._connections))

    def unregister(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)
        log.info("api.websocket.disconnected", connections=len(self._connections))

    async def __call__(self, snapshot: StatusSnapshot) -> None:
        await self.broadcast(_message("mcp-status-update", snapshot.to_payload()))

    async def broadcast(self, message: dict[str, Any]) -> None:
        for websocket in list(self._connections):
            try:
                await websocket.send_json(message)
            except Exception as e:
                log.warning("api.websocket.send_failed", error=str(e))
                self._connections.discard(websocket)


async def _push_periodically(
    websocket: WebSocket, orchestrator: Orchestrator, interval: float
) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            await websocket.send_json(
                _message("mcp-status-update", orchestrator.get_status().to_payload())
            )
        except Exception as e:
            log.debug("api.websocket.push_stopped", error=str(e))
            return


async def _handle(websocket: WebSocket, orchestrator: Orchestrator, raw: str) -> None:
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        await websocket.send_json(_message("mcp-agent-error", {"error": "Invalid JSON"}))
        return
    if not isinstance(message, dict):
        await websocket.send_json(_message("mcp-agent-error", {"error": "Invalid message"}))
        return

    kind = message.get("type")
    data = message.get("data") or {}
    agent_name = data.get("agentName") if isinstance(data, dict) else None

    if kind == "mcp-health-check":
        await orchestrator.run_health_check_now()
        await websocket.send_json(
            _message("mcp-status-update", orchestrator.get_status().to_payload())
        )
        return

    if kind in ("activate-mcp-agent", "deactivate-mcp-agent"):
        if not agent_name:
            await websocket.send_json(
                _message("mcp-agent-error", {"error": "agentName is required"})
            )
            return
        if kind == "activate-mcp-agent":
            result, reply = orchestrator.activate_agent(agent_name), "mcp-agent-activated"
        else:
            result, reply = orchestrator.deactivate_agent(agent_name), "mcp-agent-deactivated"

        if result.is_err:
            payload = _message("mcp-agent-error", {"error": result.error.message})
        else:
            payload = _message(reply, {"agentName": agent_name, "status": "success"})
        await websocket.send_json(payload)
        return

    log.debug("api.websocket.message_ignored", type=kind)


@ws_router.websocket("/ws")
async def status_socket(websocket: WebSocket) -> None:
    """Stream status updates and accept agent commands."""
    app = websocket.app
    orchestrator: Orchestrator = app.state.orchestrator
    broadcaster: StatusBroadcaster = app.state.broadcaster
    interval: float = app.state.status_push_interval

    await websocket.accept()
    await websocket.send_json(
        _message("initial-data", {"mcpStatus": orchestrator.get_status().to_payload()})
    )
    broadcaster.register(websocket)
    pusher = asyncio.create_task(_push_periodically(websocket, orchestrator, interval))

    try:
        while True:
            received = await websocket.receive()
            if received["type"] == "websocket.disconnect":
                break
            raw = received.get("text")
            if raw is None:
                await websocket.send_json(
                    _message("mcp-agent-error", {"error": "Binary frames are not supported"})
                )
                continue
            await _handle(websocket, orchestrator, raw)
    except WebSocketDisconnect:
        pass
    finally:
        pusher.cancel()
        broadcaster.unregister(websocket)
