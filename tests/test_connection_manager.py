"""Tests for the WebSocket connection registry."""

import asyncio
from datetime import datetime, timedelta, timezone

from app.schemas.ws import MessageType, WSServerMessage
from app.services.websocket.manager import ConnectionManager

from .conftest import PLAYER_1_ID, PLAYER_2_ID


class FakeWebSocket:
    """Records what the manager sends and closes."""

    def __init__(self, fail_on_send: bool = False):
        self.sent: list[dict] = []
        self.close_code: int | None = None
        self.fail_on_send = fail_on_send

    async def send_json(self, data: dict) -> None:
        if self.fail_on_send:
            raise RuntimeError("socket gone")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.close_code = code


def run(coro):
    return asyncio.run(coro)


class TestRoomMembership:
    def test_room_opens_on_first_join_and_closes_on_last_leave(self):
        manager = ConnectionManager(heartbeat_interval=30, timeout=120)

        first = run(manager.connect(FakeWebSocket(), "room-a", PLAYER_1_ID))
        second = run(manager.connect(FakeWebSocket(), "room-a", PLAYER_2_ID))
        assert manager.has_room("room-a")
        assert manager.get_room_connection_count("room-a") == 2

        run(manager.disconnect(first.connection_id))
        assert manager.has_room("room-a")

        run(manager.disconnect(second.connection_id))
        assert not manager.has_room("room-a")
        assert manager.get_total_connection_count() == 0

    def test_connected_ack_lists_players_online(self):
        manager = ConnectionManager(heartbeat_interval=30, timeout=120)
        run(manager.connect(FakeWebSocket(), "room-a", PLAYER_1_ID))
        run(manager.connect(FakeWebSocket(), "room-a"))
        websocket = FakeWebSocket()

        run(manager.connect(websocket, "room-a", PLAYER_2_ID, state={"turn_number": 1}))

        (ack,) = websocket.sent
        assert ack["type"] == "connected"
        assert ack["payload"]["players_online"] == [PLAYER_1_ID, PLAYER_2_ID]
        assert ack["payload"]["state"] == {"turn_number": 1}
        assert manager.get_room_player_ids("room-a") == [PLAYER_1_ID, PLAYER_2_ID]

    def test_disconnect_unknown_connection_is_ignored(self):
        manager = ConnectionManager(heartbeat_interval=30, timeout=120)

        run(manager.disconnect("missing"))

        assert manager.get_total_connection_count() == 0


class TestSending:
    def test_send_to_room_skips_excluded_connection(self):
        manager = ConnectionManager(heartbeat_interval=30, timeout=120)
        sender_ws, other_ws, elsewhere_ws = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
        sender = run(manager.connect(sender_ws, "room-a", PLAYER_1_ID))
        run(manager.connect(other_ws, "room-a", PLAYER_2_ID))
        run(manager.connect(elsewhere_ws, "room-b", PLAYER_1_ID))
        message = WSServerMessage(type=MessageType.GAME_UPDATE, payload={"events": []})

        sent = run(manager.send_to_room("room-a", message, exclude_connection=sender.connection_id))

        assert sent == 1
        assert len(sender_ws.sent) == 1
        assert other_ws.sent[-1]["type"] == "game_update"
        assert len(elsewhere_ws.sent) == 1

    def test_failed_send_drops_connection(self):
        manager = ConnectionManager(heartbeat_interval=30, timeout=120)
        connection = run(manager.connect(FakeWebSocket(fail_on_send=True), "room-a"))

        assert manager.get_connection(connection.connection_id) is None
        assert not manager.has_room("room-a")


class TestStaleConnections:
    def test_cleanup_closes_stale_connections(self):
        manager = ConnectionManager(heartbeat_interval=30, timeout=120)
        stale_ws, fresh_ws = FakeWebSocket(), FakeWebSocket()
        stale = run(manager.connect(stale_ws, "room-a", PLAYER_1_ID))
        fresh = run(manager.connect(fresh_ws, "room-a", PLAYER_2_ID))
        stale.last_heartbeat = datetime.now(timezone.utc) - timedelta(seconds=300)

        removed = run(manager.cleanup_stale_connections())

        assert removed == 1
        assert stale_ws.close_code == 1001
        assert manager.get_connection(stale.connection_id) is None
        assert manager.get_connection(fresh.connection_id) is fresh

    def test_heartbeat_keeps_connection_alive(self):
        manager = ConnectionManager(heartbeat_interval=30, timeout=120)
        connection = run(manager.connect(FakeWebSocket(), "room-a", PLAYER_1_ID))
        connection.last_heartbeat = datetime.now(timezone.utc) - timedelta(seconds=300)

        run(manager.heartbeat(connection.connection_id))

        assert run(manager.cleanup_stale_connections()) == 0

    def test_close_all_connections(self):
        manager = ConnectionManager(heartbeat_interval=30, timeout=120)
        sockets = [FakeWebSocket(), FakeWebSocket()]
        for websocket in sockets:
            run(manager.connect(websocket, "room-a"))

        run(manager.close_all_connections())

        assert all(ws.close_code == 1001 for ws in sockets)
        assert manager.get_total_connection_count() == 0
