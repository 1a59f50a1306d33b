import asyncio
import json

from app.services.realtime import SECURITY_ALERT, ConnectionManager, manager


class FakeSocket:
    def __init__(self, fail=False):
        self.fail = fail
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_text(self, message):
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(json.loads(message))


def test_broadcast_reaches_every_client():
    hub = ConnectionManager()
    first, second = FakeSocket(), FakeSocket()

    async def scenario():
        await hub.connect(first)
        await hub.connect(second)
        return await hub.broadcast("MAINTENANCE_REQUEST", {"id": 7})

    assert asyncio.run(scenario()) == 2
    assert first.accepted
    assert first.sent == second.sent == [{"type": "MAINTENANCE_REQUEST", "data": {"id": 7}}]


def test_failed_client_is_dropped():
    hub = ConnectionManager()
    good, broken = FakeSocket(), FakeSocket(fail=True)

    async def scenario():
        await hub.connect(broken)
        await hub.connect(good)
        return await hub.broadcast(SECURITY_ALERT, None)

    assert asyncio.run(scenario()) == 1
    assert hub.active_connections == [good]
    assert good.sent == [{"type": SECURITY_ALERT, "data": None}]


def test_disconnected_client_gets_nothing():
    hub = ConnectionManager()
    socket = FakeSocket()

    async def scenario():
        await hub.connect(socket)
        hub.disconnect(socket)
        hub.disconnect(socket)
        return await hub.broadcast("URGENT_MAINTENANCE", {})

    assert asyncio.run(scenario()) == 0
    assert socket.sent == []


def test_websocket_ping(client):
    with client.websocket_connect("/ws") as websocket:
        websocket.send_text("ping")
        assert websocket.receive_json() == {"type": "PONG", "data": None}


def test_security_alert_is_broadcast(landlord, property_id, monkeypatch):
    events = []

    async def fake_broadcast(event_type, data=None):
        events.append((event_type, data))
        return 0

    monkeypatch.setattr(manager, "broadcast", fake_broadcast)

    response = landlord.post("/api/alerts", json={
        "property_id": property_id,
        "type": "intrusion",
        "message": "Motion detected at the back gate",
    })

    assert response.status_code == 201, response.text
    assert events[0][0] == SECURITY_ALERT
    assert events[0][1].message == "Motion detected at the back gate"

    alerts = landlord.get("/api/alerts").json()
    assert [a["status"] for a in alerts] == ["unread"]

    read = landlord.patch(f"/api/alerts/{alerts[0]['id']}/read")
    assert read.json()["status"] == "read"
