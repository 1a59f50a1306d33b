"""
Real-time push over WebSocket

Every connected dashboard receives every event as a JSON envelope
{"type": ..., "data": ...}. No per-user targeting, replay or acknowledgement.
"""
import json
import logging
from typing import Any, List

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)

MAINTENANCE_REQUEST = "MAINTENANCE_REQUEST"
SECURITY_ALERT = "SECURITY_ALERT"
URGENT_MAINTENANCE = "URGENT_MAINTENANCE"


class ConnectionManager:
    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"[ws] Client connected ({len(self.active_connections)} open)")

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(f"[ws] Client disconnected ({len(self.active_connections)} open)")

    async def broadcast(self, event_type: str, data: Any = None) -> int:
        """Send an event to all clients; sockets that fail are dropped. Returns deliveries."""
        message = json.dumps({"type": event_type, "data": jsonable_encoder(data)})
        delivered = 0
        for websocket in list(self.active_connections):
            try:
                await websocket.send_text(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"[ws] Dropping client after send failure: {e}")
                self.disconnect(websocket)
        return delivered


manager = ConnectionManager()
