from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState
import logging

from ..services.webhook_client import WellnessClient

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1")


@router.websocket("/ws")
async def chat_websocket(ws: WebSocket):
    """Each text frame is a chat message; each reply is one envelope frame."""
    log.info("🔗 New WebSocket connection attempt")
    await ws.accept()
    log.info("✅ WebSocket connection accepted")

    client: WellnessClient = ws.app.state.client
    await ws.send_json({
        "type": "session",
        "user_id": client.get_user_id(),
        "assistant": client.get_current_assistant(),
    })

    message_count = 0
    try:
        while True:
            text = await ws.receive_text()
            message_count += 1
            log.info(f"📨 Received message #{message_count}: {text[:100]}")

            envelope = await client.send_message(text)
            if ws.application_state == WebSocketState.CONNECTED:
                await ws.send_json({"type": "reply", **envelope.to_payload()})
            else:
                log.warning("❌ WebSocket not connected, reply dropped")
    except WebSocketDisconnect:
        log.info(f"👋 Client disconnected after {message_count} messages")
