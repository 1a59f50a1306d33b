"""
Maintenance Dispatch Service

Responsibilities:
  • create_maintenance_request   - store the request, auto-assign the first staff
                                   member whose specialization matches the category
  • assign_maintenance_request   - manual assignment of a pending request
  • complete_maintenance_request - file the staff report and close the request

Assignment problems never fail request creation: the request is kept in
"pending" and returned. Notification failures are logged and swallowed.
"""
import logging
from typing import Optional, Tuple

from app.db.base import utcnow
from app.models.maintenance import (
    MAINTENANCE_CATEGORIES,
    MaintenanceReport,
    MaintenanceRequest,
    MaintenanceStatus,
)
from app.models.user import User, UserRole
from app.services import notification_service
from app.storage import Storage

logger = logging.getLogger(__name__)


class MaintenanceRequestNotFound(LookupError):
    pass


class StaffNotFound(LookupError):
    pass


class InvalidMaintenanceTransition(ValueError):
    pass


def required_specialization(category: Optional[str]) -> Optional[str]:
    if not category:
        return None
    return MAINTENANCE_CATEGORIES.get(category.strip().lower())


def create_maintenance_request(
    storage: Storage,
    property_id: int,
    tenant_id: int,
    title: str,
    description: str,
    category: str,
    priority,
) -> MaintenanceRequest:
    request = storage.create_maintenance_request(
        property_id=property_id,
        tenant_id=tenant_id,
        title=title,
        description=description,
        category=category,
        priority=priority,
        status=MaintenanceStatus.PENDING,
        assigned_staff_id=None,
        created_at=utcnow(),
        completed_at=None,
        resolution=None,
    )
    logger.info(f"[maintenance] Request {request.id} created ({category}) by tenant {tenant_id}")

    try:
        specialization = required_specialization(category)
        staff = storage.get_staff_by_specialization(specialization)
        if staff is None:
            logger.info(
                f"[maintenance] No staff with specialization '{specialization}' "
                f"for request {request.id}; left pending"
            )
            return request

        request = storage.update_maintenance_request(
            request.id,
            assigned_staff_id=staff.id,
            status=MaintenanceStatus.ASSIGNED,
        )
        logger.info(f"[maintenance] Request {request.id} assigned to staff {staff.id}")
    except Exception as e:
        logger.error(f"[maintenance] Error assigning staff to request {request.id}: {e}")
        storage.db.rollback()
        return storage.get_maintenance_request(request.id)

    _notify_assignment(storage, staff, request)
    return request


def assign_maintenance_request(storage: Storage, request_id: int, staff_id: int) -> MaintenanceRequest:
    request = storage.get_maintenance_request(request_id)
    if request is None:
        raise MaintenanceRequestNotFound(f"Maintenance request {request_id} not found")
    if request.status != MaintenanceStatus.PENDING:
        raise InvalidMaintenanceTransition(f"Request {request_id} is already {request.status.value}")

    staff = storage.get_user(staff_id)
    if staff is None or staff.role != UserRole.STAFF:
        raise StaffNotFound(f"Staff member {staff_id} not found")

    request = storage.update_maintenance_request(
        request_id,
        assigned_staff_id=staff.id,
        status=MaintenanceStatus.ASSIGNED,
    )
    logger.info(f"[maintenance] Request {request_id} manually assigned to staff {staff.id}")

    _notify_assignment(storage, staff, request)
    return request


def complete_maintenance_request(
    storage: Storage,
    request_id: int,
    actor: User,
    description: str,
    work_done: str,
    materials: Optional[list] = None,
    cost: float = 0.0,
    time_spent: Optional[str] = None,
) -> Tuple[MaintenanceRequest, MaintenanceReport]:
    """
    Close an assigned request. Only the assigned staff member or an admin may
    complete it, and only once.
    """
    request = storage.get_maintenance_request(request_id)
    if request is None:
        raise MaintenanceRequestNotFound(f"Maintenance request {request_id} not found")

    if actor.role != UserRole.ADMIN and request.assigned_staff_id != actor.id:
        raise PermissionError("Only the assigned staff member can complete this request")

    if request.status == MaintenanceStatus.COMPLETED:
        raise InvalidMaintenanceTransition(f"Request {request_id} is already completed")
    if request.status != MaintenanceStatus.ASSIGNED:
        raise InvalidMaintenanceTransition(f"Request {request_id} has no assigned staff")

    report = storage.create_maintenance_report(
        request_id=request_id,
        staff_id=actor.id,
        description=description,
        work_done=work_done,
        materials=materials or [],
        cost=cost,
        time_spent=time_spent,
    )

    request = storage.update_maintenance_request(
        request_id,
        status=MaintenanceStatus.COMPLETED,
        completed_at=utcnow(),
        resolution=description,
    )
    logger.info(f"[maintenance] Request {request_id} completed by user {actor.id} (report {report.id})")

    _notify_completion(storage, request, report)
    return request, report


def _notify_assignment(storage: Storage, staff: User, request: MaintenanceRequest) -> None:
    try:
        notification_service.notify_staff_assigned(staff, request)
        tenant = storage.get_user(request.tenant_id)
        if tenant:
            notification_service.notify_tenant_assigned(tenant, request)
    except Exception as e:
        logger.error(f"[maintenance] Assignment notifications failed for request {request.id}: {e}")


def _notify_completion(storage: Storage, request: MaintenanceRequest, report: MaintenanceReport) -> None:
    try:
        tenant = storage.get_user(request.tenant_id)
        if tenant:
            notification_service.notify_tenant_completed(tenant, request, report)

        property = storage.get_property(request.property_id)
        if property:
            landlord = storage.get_user(property.landlord_id)
            if landlord:
                notification_service.notify_landlord_completed(landlord, request, report)
    except Exception as e:
        logger.error(f"[maintenance] Completion notifications failed for request {request.id}: {e}")
