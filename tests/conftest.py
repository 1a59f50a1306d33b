import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.database import SessionLocal, reset_db
from app.main import app
from app.services import notification_service
from app.storage import Storage

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_db():
    reset_db()
    yield


@pytest.fixture(autouse=True)
def offline_providers(monkeypatch):
    """No test talks to SMTP, Africa's Talking, Stripe or OpenAI."""
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "")
    monkeypatch.setattr(settings, "AT_API_KEY", "")
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "")
    monkeypatch.setattr(settings, "SMTP_USER", "")
    monkeypatch.setattr(settings, "SMTP_PASSWORD", "")


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Capture outbound email/SMS instead of sending them."""
    sent = {"email": [], "sms": []}

    def fake_send_email(to, subject, body_html, body_text=""):
        sent["email"].append({"to": to, "subject": subject, "body": body_html})
        return True

    def fake_send_sms(phone, message):
        if not phone:
            return False
        sent["sms"].append({"to": phone, "message": message})
        return True

    monkeypatch.setattr(notification_service, "send_email", fake_send_email)
    monkeypatch.setattr(notification_service, "send_sms", fake_send_sms)
    return sent


@pytest.fixture
def storage():
    db = SessionLocal()
    yield Storage(db)
    db.close()


@pytest.fixture
def client_factory():
    clients = []

    def factory():
        client = TestClient(app)
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def client(client_factory):
    return client_factory()


def _register(client, username, role="tenant", phone=None):
    response = client.post("/api/register", json={
        "username": username,
        "password": PASSWORD,
        "name": username.title(),
        "email": f"{username}@example.com",
        "role": role,
        "phone": phone,
    })
    assert response.status_code == 201, response.text
    return response.json()


def _login(client, username, password=PASSWORD):
    response = client.post("/api/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def landlord(client_factory):
    client = client_factory()
    client.user = _register(client, "landlord", role="landlord", phone="0700000001")
    return client


@pytest.fixture
def tenant(client_factory):
    client = client_factory()
    client.user = _register(client, "tenant", role="tenant", phone="0712345678")
    return client


@pytest.fixture
def property_id(landlord):
    response = landlord.post("/api/properties", json={
        "name": "Sunset Apartments 4B",
        "address": "12 Ngong Road, Nairobi",
        "rent": 45000,
        "utilities": {"water": {"rate": 2.0}},
    })
    assert response.status_code == 201, response.text
    return response.json()["id"]


@pytest.fixture
def make_staff(landlord, client_factory):
    """Create a staff account through the landlord and return a logged-in client for it."""
    def _make(username, specialization, phone=None):
        response = landlord.post("/api/staff", json={
            "username": username,
            "password": PASSWORD,
            "name": username.title(),
            "email": f"{username}@example.com",
            "phone": phone,
            "specialization": specialization,
        })
        assert response.status_code == 201, response.text
        client = client_factory()
        _login(client, username)
        client.user = response.json()
        return client
    return _make


@pytest.fixture
def register():
    return _register


@pytest.fixture
def login():
    return _login
