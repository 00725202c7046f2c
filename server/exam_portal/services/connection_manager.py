"""
WebSocket Connection Manager for real-time exam and proctoring events.
"""
import asyncio
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Owns the live WebSocket handles, keyed by an opaque connection id."""

    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket) -> str:
        """Accept a socket and give it a fresh connection id."""
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        self.active_connections[connection_id] = websocket
        return connection_id

    def disconnect(self, connection_id: str) -> Optional[WebSocket]:
        return self.active_connections.pop(connection_id, None)

    async def send(self, connection_id: str, event: str, data: Dict[str, Any]) -> bool:
        """Send one event. A connection that is already gone is skipped, not an error."""
        websocket = self.active_connections.get(connection_id)
        if websocket is None:
            return False
        await websocket.send_json({"event": event, "data": data})
        return True

    async def broadcast(self, event: str, data: Dict[str, Any]) -> None:
        """Send an event to every live connection; one failing socket does not stop the rest."""
        connection_ids = list(self.active_connections)
        results = await asyncio.gather(
            *(self.send(cid, event, data) for cid in connection_ids),
            return_exceptions=True,
        )
        for cid, result in zip(connection_ids, results):
            if isinstance(result, Exception):
                logger.debug(f"Dropped {event} for {cid}: {result}")
