# server/services/websocket_service.py
"""WebSocket connection management and message handling."""

import json
import uuid
from typing import Dict, Iterable

from fastapi import WebSocket, WebSocketDisconnect
from loguru import logger

from models.events import ServerEvent
from services.game_service import GameService
from services.room_service import RoomManager, RoomRegistry


class WebSocketService:
    """Manages WebSocket connections and message routing.

    Also acts as the room manager's transport: every outbound frame is
    ``{"type": event, **payload}``.
    """

    def __init__(self, registry: RoomRegistry, game_service: GameService, **manager_options):
        self.connections: Dict[str, WebSocket] = {}
        self.room_manager = RoomManager(registry, game_service, self, **manager_options)

    async def handle_connection(self, websocket: WebSocket):
        """Handle a new WebSocket connection."""
        await websocket.accept()
        conn_id = str(uuid.uuid4())
        self.connections[conn_id] = websocket
        logger.info(f"Connection {conn_id} opened from {websocket.client}")

        try:
            await self._handle_client_messages(websocket, conn_id)
        except WebSocketDisconnect:
            logger.info(f"Connection {conn_id} closed")
        except Exception as e:
            logger.warning(f"WebSocket error for {conn_id}: {e}")
        finally:
            await self._handle_disconnect(conn_id)

    async def _handle_client_messages(self, websocket: WebSocket, conn_id: str):
        """Handle incoming messages from a client."""
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                await self.send(conn_id, ServerEvent.ERROR, {"message": "Malformed JSON"})
                continue
            await self.room_manager.dispatch(conn_id, data)

    async def _handle_disconnect(self, conn_id: str):
        self.connections.pop(conn_id, None)
        await self.room_manager.disconnect(conn_id)

    async def send(self, conn_id: str, event: ServerEvent, payload: dict) -> bool:
        """Send one frame; a socket that fails is dropped."""
        websocket = self.connections.get(conn_id)
        if websocket is None:
            return False
        try:
            await websocket.send_json({"type": event.value, **payload})
            return True
        except Exception as e:
            logger.warning(f"Dropping {conn_id} after failed send of {event.value}: {e}")
            self.connections.pop(conn_id, None)
            return False

    async def broadcast(self, conn_ids: Iterable[str], event: ServerEvent, payload: dict):
        """Broadcast a message to the given connections."""
        for conn_id in list(conn_ids):
            await self.send(conn_id, event, payload)
