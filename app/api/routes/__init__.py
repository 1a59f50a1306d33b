from app.api.routes.auth import router as auth_router
from app.api.routes.staff import router as staff_router
from app.api.routes.properties import router as properties_router
from app.api.routes.alerts import router as alerts_router
from app.api.routes.maintenance import router as maintenance_router
from app.api.routes.invoices import router as invoices_router
from app.api.routes.payments import router as payments_router
from app.api.routes.reminders import router as reminders_router

__all__ = [
    "auth_router",
    "staff_router",
    "properties_router",
    "alerts_router",
    "maintenance_router",
    "invoices_router",
    "payments_router",
    "reminders_router",
]
