from datetime import datetime, timedelta

import pytest

from app.core.security import get_password_hash
from app.models.payment import InvoiceStatus, ReminderStatus, ReminderType
from app.models.user import User, UserRole
from app.services import billing_service

UTILITIES = {
    "water": {"usage": 12.5, "rate": 2.0, "cost": 25.0},
    "electricity": {"usage": 140, "rate": 0.25, "cost": 35.0},
}


@pytest.fixture
def billed(storage):
    """Landlord, property, tenant and a utility invoice created on 1 March 2024."""
    landlord = storage.create_user(
        username="owner", hashed_password=get_password_hash("secret123"),
        role=UserRole.LANDLORD, name="Owner", email="owner@example.com",
    )
    tenant = storage.create_user(
        username="renter", hashed_password=get_password_hash("secret123"),
        role=UserRole.TENANT, name="Renter", email="renter@example.com", phone="0712345678",
    )
    property = storage.create_property(landlord_id=landlord.id, name="Block A", address="Nairobi", rent=30000)
    invoice = billing_service.generate_utility_invoice(
        storage, property.id, tenant.id, UTILITIES, now=datetime(2024, 3, 1, 9, 0),
    )
    return {"tenant": tenant, "property": property, "invoice": invoice}


def test_invoice_total_is_sum_of_costs():
    assert billing_service.calculate_invoice_total(UTILITIES) == 60.0
    assert billing_service.calculate_invoice_total({"gas": {"cost": 0.1}, "water": {"cost": 0.2}}) == 0.3
    assert billing_service.calculate_invoice_total({}) == 0


def test_generated_invoice(billed):
    invoice = billed["invoice"]

    assert invoice.amount == 60.0
    assert invoice.status.value == "pending"
    assert invoice.type.value == "utility"
    assert invoice.due_date == datetime(2024, 3, 15, 9, 0)
    assert invoice.period == {"month": 3, "year": 2024}
    assert invoice.details == UTILITIES


def test_two_reminders_scheduled_before_due_date(storage, billed):
    invoice = billed["invoice"]
    reminders = {r.type: r for r in storage.get_payment_reminders(invoice.id)}

    assert set(reminders) == {ReminderType.EMAIL, ReminderType.SMS}
    assert reminders[ReminderType.EMAIL].scheduled_for == invoice.due_date - timedelta(days=3)
    assert reminders[ReminderType.SMS].scheduled_for == invoice.due_date - timedelta(days=2)
    assert all(r.status == ReminderStatus.PENDING for r in reminders.values())


def test_due_reminder_query(storage, billed):
    due = billed["invoice"].due_date

    assert storage.get_due_payment_reminders(due - timedelta(days=4)) == []
    assert [r.type for r in storage.get_due_payment_reminders(due - timedelta(days=3))] == [ReminderType.EMAIL]
    assert len(storage.get_due_payment_reminders(due)) == 2


def test_sweep_sends_due_reminders_once(storage, billed, outbox):
    now = billed["invoice"].due_date - timedelta(days=1)

    results = billing_service.send_payment_reminders(storage, now=now)

    assert sorted(r["type"] for r in results) == ["email", "sms"]
    assert all(r["status"] == "sent" for r in results)
    assert outbox["email"][0]["subject"] == "Payment Reminder: Invoice Due Soon"
    assert outbox["sms"][0]["to"] == "0712345678"
    assert all(r.sent_at is not None for r in storage.get_payment_reminders(billed["invoice"].id))

    assert storage.get_due_payment_reminders(now) == []
    assert billing_service.send_payment_reminders(storage, now=now) == []


def test_sweep_marks_sms_failed_without_phone(storage, billed):
    storage.db.query(User).filter_by(id=billed["tenant"].id).update({"phone": None})
    storage.db.commit()

    results = billing_service.send_payment_reminders(storage, now=billed["invoice"].due_date)

    by_type = {r["type"]: r["status"] for r in results}
    assert by_type == {"email": "sent", "sms": "failed"}
    sms = [r for r in storage.get_payment_reminders(billed["invoice"].id) if r.type == ReminderType.SMS][0]
    assert sms.status == ReminderStatus.FAILED
    assert sms.sent_at is None
    # Failed reminders are not retried
    assert storage.get_due_payment_reminders(billed["invoice"].due_date) == []


def test_sweep_marks_failed_when_provider_fails(storage, billed, monkeypatch):
    monkeypatch.setattr(billing_service.notification_service, "send_payment_reminder_email", lambda t, i: False)

    results = billing_service.send_payment_reminders(storage, now=billed["invoice"].due_date - timedelta(days=3))

    assert results == [{
        "reminder_id": results[0]["reminder_id"],
        "invoice_id": billed["invoice"].id,
        "type": "email",
        "status": "failed",
    }]


def test_sweep_skips_paid_invoice(storage, billed, outbox):
    storage.update_invoice_status(billed["invoice"].id, InvoiceStatus.PAID)

    results = billing_service.send_payment_reminders(storage, now=billed["invoice"].due_date)

    assert sorted(r["status"] for r in results) == ["cancelled", "cancelled"]
    assert outbox["email"] == []
    assert outbox["sms"] == []
    assert all(r.sent_at is None for r in storage.get_payment_reminders(billed["invoice"].id))


def test_cancel_payment_reminders(storage, billed):
    invoice_id = billed["invoice"].id

    assert billing_service.cancel_payment_reminders(storage, invoice_id) == 2
    assert billing_service.cancel_payment_reminders(storage, invoice_id) == 0
    statuses = {r.status for r in storage.get_payment_reminders(invoice_id)}
    assert statuses == {ReminderStatus.CANCELLED}
    assert storage.get_due_payment_reminders(billed["invoice"].due_date) == []


def test_create_invoice_endpoint(landlord, tenant, property_id):
    response = landlord.post("/api/invoices", json={
        "property_id": property_id,
        "tenant_id": tenant.user["id"],
        "utilities": UTILITIES,
    })

    assert response.status_code == 201, response.text
    invoice = response.json()
    assert invoice["amount"] == 60.0
    assert invoice["status"] == "pending"

    reminders = landlord.get("/api/reminders", params={"invoice_id": invoice["id"]}).json()
    assert sorted(r["type"] for r in reminders) == ["email", "sms"]

    assert [i["id"] for i in tenant.get("/api/invoices").json()] == [invoice["id"]]
    assert tenant.get(f"/api/invoices/{invoice['id']}").status_code == 200


def test_invoice_requires_utilities(landlord, tenant, property_id):
    response = landlord.post("/api/invoices", json={
        "property_id": property_id,
        "tenant_id": tenant.user["id"],
        "utilities": {},
    })
    assert response.status_code == 422


def test_invoice_rejects_negative_cost(landlord, tenant, property_id):
    response = landlord.post("/api/invoices", json={
        "property_id": property_id,
        "tenant_id": tenant.user["id"],
        "utilities": {"water": {"cost": -5}},
    })
    assert response.status_code == 422


def test_landlord_can_only_bill_own_property(client_factory, register, tenant, property_id):
    other = client_factory()
    register(other, "otherlandlord", role="landlord")

    response = other.post("/api/invoices", json={
        "property_id": property_id,
        "tenant_id": tenant.user["id"],
        "utilities": UTILITIES,
    })
    assert response.status_code == 403


def test_invoice_must_target_tenant(landlord, property_id):
    response = landlord.post("/api/invoices", json={
        "property_id": property_id,
        "tenant_id": landlord.user["id"],
        "utilities": UTILITIES,
    })
    assert response.status_code == 400


def test_tenants_cannot_create_invoices(tenant, property_id):
    response = tenant.post("/api/invoices", json={
        "property_id": property_id,
        "tenant_id": tenant.user["id"],
        "utilities": UTILITIES,
    })
    assert response.status_code == 403


def test_other_tenant_cannot_see_invoice(client_factory, register, landlord, tenant, property_id):
    invoice = landlord.post("/api/invoices", json={
        "property_id": property_id,
        "tenant_id": tenant.user["id"],
        "utilities": UTILITIES,
    }).json()

    stranger = client_factory()
    register(stranger, "stranger")
    assert stranger.get("/api/invoices").json() == []
    assert stranger.get(f"/api/invoices/{invoice['id']}").status_code == 404


def test_reminder_sweep_endpoint_with_nothing_due(landlord, tenant, property_id):
    landlord.post("/api/invoices", json={
        "property_id": property_id,
        "tenant_id": tenant.user["id"],
        "utilities": UTILITIES,
    })

    response = landlord.post("/api/reminders/send")

    assert response.status_code == 200
    assert response.json() == {"success": True, "processed": 0, "results": []}
