"""
Security Alert Routes
Alerts are broadcast to every connected dashboard as they are raised
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from app.dependencies import get_current_user, get_storage, require_role
from app.db.base import utcnow
from app.models.alert import AlertStatus
from app.models.user import User, UserRole
from app.schemas.alert import SecurityAlertCreate, SecurityAlertResponse
from app.services.realtime import SECURITY_ALERT, manager
from app.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[SecurityAlertResponse])
@router.get("/", response_model=List[SecurityAlertResponse], include_in_schema=False)
def list_alerts(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Newest alerts first"""
    return storage.get_security_alerts()


@router.post("", response_model=SecurityAlertResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=SecurityAlertResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def create_alert(
    alert_in: SecurityAlertCreate,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_role(UserRole.LANDLORD, UserRole.STAFF, UserRole.ADMIN)),
):
    if storage.get_property(alert_in.property_id) is None:
        raise HTTPException(status_code=404, detail="Property not found")

    alert = storage.create_security_alert(
        property_id=alert_in.property_id,
        type=alert_in.type,
        message=alert_in.message,
        timestamp=utcnow(),
        status=AlertStatus.UNREAD,
    )
    logger.info(f"[alerts] {alert.type} alert {alert.id} on property {alert.property_id}")

    await manager.broadcast(SECURITY_ALERT, SecurityAlertResponse.model_validate(alert))
    return alert


@router.patch("/{alert_id}/read", response_model=SecurityAlertResponse)
def mark_alert_read(
    alert_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    alert = storage.update_security_alert(alert_id, status=AlertStatus.READ)
    if alert is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    return alert
