"""WebSocket endpoint for live snapshots, game events and pointer intents."""

import json
import queue
from datetime import datetime, timezone
from typing import Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger
from pydantic import ValidationError

from loopdefense.simulation.intents import INTENT_TYPES
from loopdefense_api.models import INTENT_PAYLOADS

router = APIRouter(prefix="/ws", tags=["websocket"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ConnectionManager:
    """Open game sockets.  Only touched from the server's event loop."""

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.add(websocket)
        logger.info(f"WebSocket connected ({len(self.active_connections)} open)")

    async def disconnect(self, websocket: WebSocket):
        self.active_connections.discard(websocket)
        logger.info(f"WebSocket disconnected ({len(self.active_connections)} open)")

    async def broadcast(self, message: dict):
        """Send *message* to every client, dropping sockets that fail."""
        if not self.active_connections:
            return
        text = json.dumps(message)
        for connection in list(self.active_connections):
            try:
                await connection.send_text(text)
            except Exception as e:
                logger.warning(f"Dropping websocket after failed send: {e}")
                self.active_connections.discard(connection)

    async def send_to(self, websocket: WebSocket, message: dict):
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.warning(f"Failed to send to websocket: {e}")


manager = ConnectionManager()


async def forward_events(events: queue.Queue) -> int:
    """Broadcast every pending EventBus message.  Returns how many were sent."""
    sent = 0
    while True:
        try:
            msg = events.get_nowait()
        except queue.Empty:
            return sent
        await manager.broadcast({
            "type": msg["type"],
            "data": msg.get("data"),
            "timestamp": _now(),
        })
        sent += 1


@router.websocket("/game")
async def websocket_game(websocket: WebSocket):
    """Live game channel: server pushes snapshots and events, client sends intents."""
    await manager.connect(websocket)
    engine = getattr(websocket.app.state, "engine", None)

    await manager.send_to(websocket, {"type": "connected", "timestamp": _now()})
    if engine is not None:
        await manager.send_to(websocket, {"type": "snapshot", **engine.snapshot()})

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await manager.send_to(websocket, {"type": "error", "message": "Invalid JSON"})
                continue
            await handle_client_message(websocket, engine, message)
    except WebSocketDisconnect:
        await manager.disconnect(websocket)


async def handle_client_message(websocket: WebSocket, engine, message: dict):
    """Turn one client message into an intent and report the outcome."""
    msg_type = message.get("type") if isinstance(message, dict) else None

    if msg_type == "ping":
        await manager.send_to(websocket, {"type": "pong", "timestamp": _now()})
        return

    payload_model = INTENT_PAYLOADS.get(msg_type)
    if payload_model is None:
        await manager.send_to(
            websocket,
            {"type": "error", "message": f"Unknown message type: {msg_type}"},
        )
        return
    if engine is None:
        await manager.send_to(websocket, {"type": "error", "message": "Simulation engine not available"})
        return

    fields = {k: v for k, v in message.items() if k != "type"}
    try:
        payload = payload_model.model_validate(fields)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(part) for part in first["loc"])
        await manager.send_to(
            websocket,
            {"type": "error", "message": f"Bad {msg_type} payload: {where}: {first['msg']}"},
        )
        return

    applied = engine.apply(INTENT_TYPES[msg_type](**payload.model_dump()))
    await manager.send_to(websocket, {
        "type": "ack",
        "intent": msg_type,
        "applied": applied,
        "gold": engine.state.gold,
    })
