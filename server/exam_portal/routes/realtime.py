"""
Real-time proctoring channel.

Frames are JSON envelopes `{"event": ..., "data": {...}}`:
  client -> server: register_role, exam_tab_switch
  server -> client: teacher_alert (teachers only), new-exam (everyone)
"""
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from exam_portal.schemas import RegisterRoleMessage, SocketEnvelope, TabSwitchEvent
from exam_portal.services.connection_registry import ConnectionRole

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


def parse_tab_switch(data: dict) -> TabSwitchEvent:
    """Malformed fields are dropped so they fall back to sentinels; the event is never rejected."""
    try:
        return TabSwitchEvent.model_validate(data)
    except ValidationError as e:
        bad_fields = {err["loc"][0] for err in e.errors() if err["loc"]}
        logger.warning(f"Malformed exam_tab_switch fields {sorted(map(str, bad_fields))}")
        return TabSwitchEvent.model_validate(
            {k: v for k, v in data.items() if k not in bad_fields}
        )


async def handle_message(state, connection_id: str, raw: str) -> None:
    try:
        envelope = SocketEnvelope.model_validate_json(raw)
    except ValidationError:
        logger.warning(f"Ignoring malformed frame from {connection_id}")
        return

    if envelope.event == "register_role":
        try:
            role = RegisterRoleMessage.model_validate(envelope.payload).role
        except ValidationError:
            role = None
        if state.registry.register(connection_id, role) is ConnectionRole.TEACHER:
            state.pipeline.flush_pending(connection_id)
    elif envelope.event == "exam_tab_switch":
        event = parse_tab_switch(envelope.payload)
        await state.pipeline.handle_tab_switch(
            student=event.student, exam=event.exam_id, detected_at=event.detected_at
        )
    else:
        logger.debug(f"Unknown event {envelope.event!r} from {connection_id}")


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket):
    state = websocket.app.state
    connection_id = await state.connections.connect(websocket)
    state.registry.connect(connection_id)
    logger.info(f"🔌 Client connected: {connection_id}")
    try:
        while True:
            raw = await websocket.receive_text()
            await handle_message(state, connection_id, raw)
    except WebSocketDisconnect:
        pass
    finally:
        state.registry.unregister(connection_id)
        state.connections.disconnect(connection_id)
        logger.info(f"🔌 Client disconnected: {connection_id}")
