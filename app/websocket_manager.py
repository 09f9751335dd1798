"""Realtime fan-out registry.

Connections are grouped under user ids. A connection joins a group by sending a
``join`` frame; it leaves every group it joined when it disconnects. Delivery is
best-effort: a frame that cannot be written is logged and the dead connection is
dropped, nothing is queued or retried.
"""

import logging
from typing import Any, Dict, List, Set

from fastapi import WebSocket
from starlette.requests import HTTPConnection

logger = logging.getLogger(__name__)


class Connection:
    def __init__(self, websocket: WebSocket, manager: "ConnectionManager"):
        self.websocket = websocket
        self.manager = manager
        self.user_ids: Set[int] = set()

    def join_group(self, user_id: int) -> None:
        self.manager.join(self, user_id)

    async def send(self, event: str, data: Any = None) -> bool:
        message = {"type": event}
        if data is not None:
            message["data"] = data
        try:
            await self.websocket.send_json(message)
            return True
        except Exception:
            logger.warning("Dropping %s for a closed connection (groups=%s)", event, sorted(self.user_ids))
            self.manager.disconnect(self)
            return False


class Group:
    def __init__(self, user_id: int, manager: "ConnectionManager"):
        self.user_id = user_id
        self.manager = manager

    @property
    def connections(self) -> List[Connection]:
        return list(self.manager.groups.get(self.user_id, []))

    async def broadcast(self, event: str, data: Any = None) -> int:
        delivered = 0
        for connection in self.connections:
            if await connection.send(event, data):
                delivered += 1
        return delivered


class ConnectionManager:
    def __init__(self):
        self.active_connections: List[Connection] = []
        self.groups: Dict[int, List[Connection]] = {}

    async def connect(self, websocket: WebSocket) -> Connection:
        connection = Connection(websocket, self)
        self.active_connections.append(connection)
        await websocket.accept()
        return connection

    def disconnect(self, connection: Connection) -> None:
        if connection in self.active_connections:
            self.active_connections.remove(connection)

        for user_id in list(connection.user_ids):
            members = self.groups.get(user_id, [])
            if connection in members:
                members.remove(connection)
            if not members:
                self.groups.pop(user_id, None)
        connection.user_ids.clear()

    def join(self, connection: Connection, user_id: int) -> None:
        members = self.groups.setdefault(user_id, [])
        if connection not in members:
            members.append(connection)
        connection.user_ids.add(user_id)
        logger.debug("Connection joined group %s (%d connections)", user_id, len(members))

    def group(self, user_id: int) -> Group:
        return Group(user_id, self)

    async def broadcast(self, event: str, data: Any = None) -> int:
        """Send to every live connection, joined or not."""
        delivered = 0
        for connection in list(self.active_connections):
            if await connection.send(event, data):
                delivered += 1
        return delivered


def get_connection_manager(conn: HTTPConnection) -> ConnectionManager:
    """Dependency returning the registry created by the application lifespan."""
    return conn.app.state.manager
