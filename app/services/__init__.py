from app.services import notification_service
from app.services import sentiment_service

__all__ = [
    "notification_service",
    "sentiment_service",
    "maintenance_service",
    "billing_service",
    "payment_gateways",
    "realtime",
]
