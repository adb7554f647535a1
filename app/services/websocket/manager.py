import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fastapi import WebSocket

from app.config import get_settings
from app.schemas.ws import (
    ConnectedPayload,
    MessageType,
    WSCloseCode,
    WSServerMessage,
)

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """Represents an active WebSocket connection."""

    connection_id: str
    websocket: WebSocket
    room_id: str
    player_id: str | None = None
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_heartbeat: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ConnectionManager:
    """Registry of WebSocket connections and the rooms they belong to.

    Local storage:
        - _connections: connection_id -> Connection
        - _room_connections: room_id -> set of connection_ids

    A room's entry is created when its first connection joins and removed
    when its last connection leaves.
    """

    def __init__(self, heartbeat_interval: int | None = None, timeout: int | None = None):
        settings = get_settings()
        self._heartbeat_interval = heartbeat_interval or settings.WS_HEARTBEAT_INTERVAL
        self._timeout = timeout or settings.WS_CONNECTION_TIMEOUT

        self._connections: dict[str, Connection] = {}
        self._room_connections: dict[str, set[str]] = {}

        # Cleanup task
        self._cleanup_task: asyncio.Task | None = None

        logger.info(
            "ConnectionManager initialized (heartbeat=%ds, timeout=%ds)",
            self._heartbeat_interval,
            self._timeout,
        )

    async def connect(
        self,
        websocket: WebSocket,
        room_id: str,
        player_id: str | None = None,
        state: dict | None = None,
    ) -> Connection:
        """Register an accepted WebSocket connection in a room.

        Args:
            websocket: The accepted WebSocket instance.
            room_id: The room to join.
            player_id: The player this connection acts for; None when unseated.
            state: Current game state to include in the acknowledgment.

        Returns:
            The created Connection object.
        """
        connection_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)

        connection = Connection(
            connection_id=connection_id,
            websocket=websocket,
            room_id=room_id,
            player_id=player_id,
            connected_at=now,
            last_heartbeat=now,
        )

        self._connections[connection_id] = connection
        if room_id not in self._room_connections:
            logger.info("Room %s opened", room_id)
            self._room_connections[room_id] = set()
        self._room_connections[room_id].add(connection_id)

        logger.info(
            "Connection %s established for player %s in room %s",
            connection_id,
            player_id,
            room_id,
        )

        await self.send_to_connection(
            connection_id,
            WSServerMessage(
                type=MessageType.CONNECTED,
                payload=ConnectedPayload(
                    connection_id=connection_id,
                    room_id=room_id,
                    player_id=player_id,
                    players_online=self.get_room_player_ids(room_id),
                    state=state,
                ).model_dump(mode="json"),
            ),
        )

        return connection

    async def disconnect(self, connection_id: str) -> None:
        """Remove a connection, closing its room's entry if it was the last.

        Args:
            connection_id: The connection to remove.
        """
        connection = self._connections.pop(connection_id, None)
        if connection is None:
            logger.debug("Connection %s not found for disconnect", connection_id)
            return

        room_id = connection.room_id
        if room_id in self._room_connections:
            self._room_connections[room_id].discard(connection_id)
            if not self._room_connections[room_id]:
                del self._room_connections[room_id]
                logger.info("Room %s closed (last connection left)", room_id)

        logger.info("Connection %s disconnected from room %s", connection_id, room_id)

    async def heartbeat(self, connection_id: str) -> None:
        """Mark a connection as alive."""
        connection = self._connections.get(connection_id)
        if connection:
            connection.last_heartbeat = datetime.now(timezone.utc)
            logger.debug("Heartbeat updated for connection %s", connection_id)

    def _is_stale(self, connection: Connection, now: datetime) -> bool:
        return (now - connection.last_heartbeat).total_seconds() > self._timeout

    async def _close(self, connection: Connection, code: int) -> None:
        try:
            await connection.websocket.close(code=code)
        except Exception as e:
            logger.debug("Error closing websocket %s: %s", connection.connection_id, e)
        await self.disconnect(connection.connection_id)

    async def cleanup_stale_connections(self) -> int:
        """Close connections whose last heartbeat is older than the timeout.

        Returns:
            Number of connections removed.
        """
        now = datetime.now(timezone.utc)
        stale = [c for c in list(self._connections.values()) if self._is_stale(c, now)]

        for connection in stale:
            logger.warning(
                "Connection %s in room %s is stale, closing",
                connection.connection_id,
                connection.room_id,
            )
            await self._close(connection, WSCloseCode.GOING_AWAY)

        if stale:
            logger.info("Cleaned up %d stale connections", len(stale))
        return len(stale)

    async def start_cleanup_task(self) -> None:
        """Start the periodic stale-connection sweep."""
        if self._cleanup_task is not None:
            logger.warning("Cleanup task already running")
            return

        async def cleanup_loop():
            logger.info("Starting cleanup task with interval %ds", self._heartbeat_interval)
            while True:
                try:
                    await asyncio.sleep(self._heartbeat_interval)
                    await self.cleanup_stale_connections()
                except asyncio.CancelledError:
                    logger.info("Cleanup task cancelled")
                    break
                except Exception as e:
                    logger.error("Error in cleanup task: %s", e)

        self._cleanup_task = asyncio.create_task(cleanup_loop())

    async def stop_cleanup_task(self) -> None:
        if self._cleanup_task is None:
            return
        self._cleanup_task.cancel()
        try:
            await self._cleanup_task
        except asyncio.CancelledError:
            pass
        self._cleanup_task = None
        logger.info("Cleanup task stopped")

    async def close_all_connections(self) -> None:
        """Close every connection on shutdown."""
        logger.info(
            "Closing %d connections across %d rooms",
            len(self._connections),
            len(self._room_connections),
        )
        for connection in list(self._connections.values()):
            await self._close(connection, WSCloseCode.GOING_AWAY)

    async def send_to_connection(self, connection_id: str, message: WSServerMessage) -> bool:
        """Send a message to one connection.

        A connection that fails to receive is dropped from its room.

        Returns:
            True if sent, False otherwise.
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.debug("Connection %s not found for sending", connection_id)
            return False

        try:
            await connection.websocket.send_json(message.model_dump(mode="json", exclude_none=True))
            return True
        except Exception as e:
            logger.warning("Failed to send to connection %s: %s", connection_id, e)
            await self.disconnect(connection_id)
            return False

    async def send_to_room(
        self, room_id: str, message: WSServerMessage, exclude_connection: str | None = None
    ) -> int:
        """Fan a message out to a room's connections.

        Returns:
            Number of connections the message reached.
        """
        sent = 0
        for conn_id in list(self._room_connections.get(room_id, ())):
            if conn_id != exclude_connection and await self.send_to_connection(conn_id, message):
                sent += 1
        logger.debug("Sent %s to %d connections in room %s", message.type, sent, room_id)
        return sent

    def get_connection(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def get_room_connection_count(self, room_id: str) -> int:
        return len(self._room_connections.get(room_id, ()))

    def get_room_player_ids(self, room_id: str) -> list[str]:
        """Ids of the players connected to a room, in join order.

        Unseated connections are skipped.
        """
        player_ids: list[str] = []
        for connection in self._connections.values():
            player_id = connection.player_id
            if connection.room_id != room_id or player_id is None:
                continue
            if player_id not in player_ids:
                player_ids.append(player_id)
        return player_ids

    def has_room(self, room_id: str) -> bool:
        return room_id in self._room_connections

    def get_total_connection_count(self) -> int:
        return len(self._connections)


# Global manager instance (initialized in lifespan)
_connection_manager: ConnectionManager | None = None


def get_connection_manager() -> ConnectionManager:
    """Get the global ConnectionManager instance."""
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager()
    return _connection_manager


def set_connection_manager(manager: ConnectionManager | None) -> None:
    """Set the global ConnectionManager instance."""
    global _connection_manager
    _connection_manager = manager
