"""
WebSocket endpoint for dashboard push notifications
"""
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.realtime import manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await manager.connect(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            if message.strip().lower() == "ping":
                await websocket.send_json({"type": "PONG", "data": None})
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket)
