"""
Storage layer
Thin record-level access over the SQLAlchemy session used by services and routes
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.db.base import utcnow
from app.models.user import User, UserRole
from app.models.property import Property
from app.models.alert import SecurityAlert
from app.models.maintenance import MaintenanceRequest, MaintenanceReport
from app.models.payment import (
    Invoice,
    InvoiceStatus,
    Payment,
    PaymentReminder,
    ReminderStatus,
)


class Storage:
    """Record store bound to one database session"""

    def __init__(self, db: Session):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def _update(self, obj, **fields):
        for key, value in fields.items():
            setattr(obj, key, value)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    # ==================== Users ====================

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_all_users(self) -> List[User]:
        return self.db.query(User).order_by(User.id).all()

    def create_user(self, **fields) -> User:
        return self._save(User(**fields))

    def get_staff(self) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role == UserRole.STAFF)
            .order_by(User.id)
            .all()
        )

    def get_staff_by_specialization(self, specialization: Optional[str]) -> Optional[User]:
        """First staff member (insertion order) with the given specialization."""
        if not specialization:
            return None
        for staff in self.get_staff():
            if staff.specialization == specialization:
                return staff
        return None

    # ==================== Properties ====================

    def get_properties(self) -> List[Property]:
        return self.db.query(Property).order_by(Property.id).all()

    def get_property(self, property_id: int) -> Optional[Property]:
        return self.db.get(Property, property_id)

    def create_property(self, **fields) -> Property:
        return self._save(Property(**fields))

    # ==================== Security alerts ====================

    def get_security_alerts(self) -> List[SecurityAlert]:
        return self.db.query(SecurityAlert).order_by(SecurityAlert.timestamp.desc(), SecurityAlert.id.desc()).all()

    def get_security_alert(self, alert_id: int) -> Optional[SecurityAlert]:
        return self.db.get(SecurityAlert, alert_id)

    def create_security_alert(self, **fields) -> SecurityAlert:
        return self._save(SecurityAlert(**fields))

    def update_security_alert(self, alert_id: int, **fields) -> Optional[SecurityAlert]:
        alert = self.get_security_alert(alert_id)
        if alert is None:
            return None
        return self._update(alert, **fields)

    # ==================== Maintenance ====================

    def get_maintenance_requests(self) -> List[MaintenanceRequest]:
        return self.db.query(MaintenanceRequest).order_by(MaintenanceRequest.id).all()

    def get_maintenance_request(self, request_id: int) -> Optional[MaintenanceRequest]:
        return self.db.get(MaintenanceRequest, request_id)

    def create_maintenance_request(self, **fields) -> MaintenanceRequest:
        return self._save(MaintenanceRequest(**fields))

    def update_maintenance_request(self, request_id: int, **fields) -> Optional[MaintenanceRequest]:
        request = self.get_maintenance_request(request_id)
        if request is None:
            return None
        return self._update(request, **fields)

    def create_maintenance_report(self, **fields) -> MaintenanceReport:
        fields.setdefault("created_at", utcnow())
        return self._save(MaintenanceReport(**fields))

    def get_maintenance_report_for_request(self, request_id: int) -> Optional[MaintenanceReport]:
        return (
            self.db.query(MaintenanceReport)
            .filter(MaintenanceReport.request_id == request_id)
            .first()
        )

    def count_maintenance_reports(self, request_id: int) -> int:
        return (
            self.db.query(MaintenanceReport)
            .filter(MaintenanceReport.request_id == request_id)
            .count()
        )

    # ==================== Invoices ====================

    def get_invoices(self) -> List[Invoice]:
        return self.db.query(Invoice).order_by(Invoice.id).all()

    def get_invoice(self, invoice_id: int) -> Optional[Invoice]:
        return self.db.get(Invoice, invoice_id)

    def create_invoice(self, **fields) -> Invoice:
        return self._save(Invoice(**fields))

    def update_invoice_status(self, invoice_id: int, status: InvoiceStatus) -> Optional[Invoice]:
        invoice = self.get_invoice(invoice_id)
        if invoice is None:
            return None
        return self._update(invoice, status=status)

    # ==================== Payments ====================

    def get_payments(self) -> List[Payment]:
        return self.db.query(Payment).order_by(Payment.id.desc()).all()

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        return self.db.get(Payment, payment_id)

    def create_payment(self, **fields) -> Payment:
        return self._save(Payment(**fields))

    def update_payment(self, payment_id: int, **fields) -> Optional[Payment]:
        payment = self.get_payment(payment_id)
        if payment is None:
            return None
        return self._update(payment, **fields)

    # ==================== Payment reminders ====================

    def get_payment_reminders(
        self,
        invoice_id: Optional[int] = None,
        status: Optional[ReminderStatus] = None,
    ) -> List[PaymentReminder]:
        query = self.db.query(PaymentReminder)
        if invoice_id is not None:
            query = query.filter(PaymentReminder.invoice_id == invoice_id)
        if status is not None:
            query = query.filter(PaymentReminder.status == status)
        return query.order_by(PaymentReminder.scheduled_for, PaymentReminder.id).all()

    def create_payment_reminder(self, **fields) -> PaymentReminder:
        return self._save(PaymentReminder(**fields))

    def get_due_payment_reminders(self, now: Optional[datetime] = None) -> List[PaymentReminder]:
        """Pending reminders whose scheduled time has passed."""
        now = now or utcnow()
        return (
            self.db.query(PaymentReminder)
            .filter(
                PaymentReminder.scheduled_for <= now,
                PaymentReminder.status == ReminderStatus.PENDING,
            )
            .order_by(PaymentReminder.scheduled_for, PaymentReminder.id)
            .all()
        )

    def update_payment_reminder(self, reminder_id: int, **fields) -> Optional[PaymentReminder]:
        reminder = self.db.get(PaymentReminder, reminder_id)
        if reminder is None:
            return None
        return self._update(reminder, **fields)
