from types import SimpleNamespace

import pytest
import stripe

from app.core.config import settings
from app.services.payment_gateways import AfricasTalkingPaymentsService


@pytest.fixture
def invoice(landlord, tenant, property_id):
    response = landlord.post("/api/invoices", json={
        "property_id": property_id,
        "tenant_id": tenant.user["id"],
        "utilities": {"water": {"cost": 25.0}, "electricity": {"cost": 35.0}},
    })
    assert response.status_code == 201, response.text
    return response.json()


class FakeStripe:
    def __init__(self):
        self.calls = []
        self.status = "succeeded"

    def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(id=f"pi_{len(self.calls)}", status=self.status)


@pytest.fixture
def stripe_charges(monkeypatch):
    """Stand in for the Stripe PaymentIntent API."""
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_123")
    fake = FakeStripe()
    monkeypatch.setattr(stripe.PaymentIntent, "create", fake.create)
    return fake


def test_card_payment_marks_invoice_paid(tenant, invoice, stripe_charges):
    response = tenant.post("/api/payments/card", json={
        "invoice_id": invoice["id"],
        "payment_method_id": "pm_card_visa",
    })

    assert response.status_code == 201, response.text
    payment = response.json()
    assert payment["status"] == "completed"
    assert payment["method"] == "card"
    assert payment["amount"] == 60.0
    assert payment["transaction_id"] == "pi_1"
    assert payment["metadata"]["stripe_payment_intent_id"] == "pi_1"

    assert stripe_charges.calls[0]["amount"] == 6000
    assert stripe_charges.calls[0]["payment_method"] == "pm_card_visa"
    assert stripe_charges.calls[0]["confirm"] is True

    assert tenant.get(f"/api/invoices/{invoice['id']}").json()["status"] == "paid"


def test_paid_invoice_cannot_be_paid_again(tenant, invoice, stripe_charges):
    body = {"invoice_id": invoice["id"], "payment_method_id": "pm_card_visa"}
    assert tenant.post("/api/payments/card", json=body).status_code == 201

    response = tenant.post("/api/payments/card", json=body)
    assert response.status_code == 400
    assert len(stripe_charges.calls) == 1


def test_card_payment_cancels_pending_reminders(tenant, landlord, invoice, stripe_charges):
    tenant.post("/api/payments/card", json={"invoice_id": invoice["id"], "payment_method_id": "pm_card_visa"})

    reminders = landlord.get("/api/reminders", params={"invoice_id": invoice["id"]}).json()
    assert [r["status"] for r in reminders] == ["cancelled", "cancelled"]


def test_card_payment_needing_action_stays_pending(tenant, invoice, stripe_charges):
    stripe_charges.status = "requires_action"

    response = tenant.post("/api/payments/card", json={
        "invoice_id": invoice["id"],
        "payment_method_id": "pm_card_3ds",
    })

    assert response.status_code == 201
    assert response.json()["status"] == "pending"
    assert tenant.get(f"/api/invoices/{invoice['id']}").json()["status"] == "pending"


def test_card_decline_returns_bad_gateway(tenant, invoice, monkeypatch):
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_123")

    def declined(**kwargs):
        raise stripe.CardError("Your card was declined.", None, "card_declined")

    monkeypatch.setattr(stripe.PaymentIntent, "create", declined)

    response = tenant.post("/api/payments/card", json={
        "invoice_id": invoice["id"],
        "payment_method_id": "pm_card_chargeDeclined",
    })

    assert response.status_code == 502
    assert "declined" in response.json()["detail"]

    payments = tenant.get("/api/payments").json()
    assert [p["status"] for p in payments] == ["failed"]
    assert tenant.get(f"/api/invoices/{invoice['id']}").json()["status"] == "pending"


def test_card_payment_without_stripe_key(tenant, invoice):
    response = tenant.post("/api/payments/card", json={
        "invoice_id": invoice["id"],
        "payment_method_id": "pm_card_visa",
    })
    assert response.status_code == 502


def test_mpesa_payment_is_pending_with_transaction(tenant, invoice, monkeypatch):
    checkouts = []

    async def fake_checkout(self, phone_number, amount, currency="KES", metadata=None):
        checkouts.append({"phone_number": phone_number, "amount": amount, "metadata": metadata})
        return {"status": "PendingConfirmation", "description": "Waiting for user input", "transactionId": "ATPid_42"}

    monkeypatch.setattr(AfricasTalkingPaymentsService, "mobile_checkout", fake_checkout)

    response = tenant.post("/api/payments/mpesa", json={
        "invoice_id": invoice["id"],
        "phone_number": "0712 345 678",
    })

    assert response.status_code == 201, response.text
    payment = response.json()
    assert payment["status"] == "pending"
    assert payment["method"] == "mpesa"
    assert payment["transaction_id"] == "ATPid_42"
    assert checkouts[0]["phone_number"] == "+254712345678"
    assert checkouts[0]["amount"] == 60.0
    assert tenant.get(f"/api/invoices/{invoice['id']}").json()["status"] == "pending"


def test_mpesa_failure_marks_payment_failed(tenant, invoice):
    # AT_API_KEY is blank in tests, so the gateway refuses the checkout
    response = tenant.post("/api/payments/mpesa", json={
        "invoice_id": invoice["id"],
        "phone_number": "0712345678",
    })

    assert response.status_code == 502
    payments = tenant.get("/api/payments").json()
    assert payments[0]["status"] == "failed"
    assert payments[0]["method"] == "mpesa"


def test_tenant_cannot_pay_someone_elses_invoice(client_factory, register, invoice, stripe_charges):
    stranger = client_factory()
    register(stranger, "stranger")

    response = stranger.post("/api/payments/card", json={
        "invoice_id": invoice["id"],
        "payment_method_id": "pm_card_visa",
    })

    assert response.status_code == 403
    assert stripe_charges.calls == []


def test_unknown_invoice(tenant):
    response = tenant.post("/api/payments/card", json={"invoice_id": 999, "payment_method_id": "pm_card_visa"})
    assert response.status_code == 404


def test_payment_listing_is_scoped(client_factory, register, tenant, landlord, invoice, stripe_charges):
    tenant.post("/api/payments/card", json={"invoice_id": invoice["id"], "payment_method_id": "pm_card_visa"})

    stranger = client_factory()
    register(stranger, "stranger")

    assert len(tenant.get("/api/payments").json()) == 1
    assert len(landlord.get("/api/payments").json()) == 1
    assert stranger.get("/api/payments").json() == []
