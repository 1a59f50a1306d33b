# Import all models so they register with Base.metadata
from app.models.user import User, UserRole
from app.models.property import Property, PropertyStatus
from app.models.alert import SecurityAlert, AlertStatus
from app.models.maintenance import (
    MaintenanceRequest,
    MaintenanceReport,
    MaintenanceStatus,
    MaintenancePriority,
    MAINTENANCE_CATEGORIES,
)
from app.models.payment import (
    Invoice,
    InvoiceStatus,
    InvoiceType,
    Payment,
    PaymentStatus,
    PaymentMethod,
    PaymentReminder,
    ReminderType,
    ReminderStatus,
)

__all__ = [
    "User",
    "UserRole",
    "Property",
    "PropertyStatus",
    "SecurityAlert",
    "AlertStatus",
    "MaintenanceRequest",
    "MaintenanceReport",
    "MaintenanceStatus",
    "MaintenancePriority",
    "MAINTENANCE_CATEGORIES",
    "Invoice",
    "InvoiceStatus",
    "InvoiceType",
    "Payment",
    "PaymentStatus",
    "PaymentMethod",
    "PaymentReminder",
    "ReminderType",
    "ReminderStatus",
]
