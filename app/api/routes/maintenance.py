"""
Maintenance Routes
Tenants file requests, the dispatcher assigns staff, staff close them with a report.
New requests are pushed to dashboards; urgent-sounding ones get a second event.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from typing import List

from app.dependencies import get_current_user, get_storage, require_role
from app.models.maintenance import MaintenanceRequest
from app.models.user import User, UserRole
from app.schemas.maintenance import (
    MaintenanceAssign,
    MaintenanceCompletion,
    MaintenanceCompletionResponse,
    MaintenanceReportResponse,
    MaintenanceRequestCreate,
    MaintenanceRequestResponse,
    RecommendationResponse,
)
from app.services import maintenance_service, sentiment_service
from app.services.maintenance_service import (
    InvalidMaintenanceTransition,
    MaintenanceRequestNotFound,
    StaffNotFound,
)
from app.services.realtime import MAINTENANCE_REQUEST, URGENT_MAINTENANCE, manager
from app.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


def _can_view(storage: Storage, user: User, request: MaintenanceRequest) -> bool:
    if user.role == UserRole.ADMIN:
        return True
    if user.role == UserRole.TENANT:
        return request.tenant_id == user.id
    if user.role == UserRole.STAFF:
        return request.assigned_staff_id == user.id
    return _owns_property(storage, user, request.property_id)


def _owns_property(storage: Storage, user: User, property_id: int) -> bool:
    property = storage.get_property(property_id)
    return property is not None and property.landlord_id == user.id


def _visible_requests(storage: Storage, user: User) -> List[MaintenanceRequest]:
    return [r for r in storage.get_maintenance_requests() if _can_view(storage, user, r)]


def _get_request_or_404(storage: Storage, request_id: int, user: User) -> MaintenanceRequest:
    """Requests the caller may not see are reported as missing"""
    request = storage.get_maintenance_request(request_id)
    if request is None or not _can_view(storage, user, request):
        raise HTTPException(status_code=404, detail="Maintenance request not found")
    return request


@router.get("", response_model=List[MaintenanceRequestResponse])
@router.get("/", response_model=List[MaintenanceRequestResponse], include_in_schema=False)
def list_maintenance_requests(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    return _visible_requests(storage, current_user)


@router.post("", response_model=MaintenanceRequestResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=MaintenanceRequestResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def create_maintenance_request(
    request_in: MaintenanceRequestCreate,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_role(UserRole.TENANT)),
):
    """File a request; staff are auto-assigned when one with the right specialization exists"""
    if storage.get_property(request_in.property_id) is None:
        raise HTTPException(status_code=404, detail="Property not found")

    try:
        # DB writes and staff notifications block; keep them off the event loop
        request = await run_in_threadpool(
            maintenance_service.create_maintenance_request,
            storage,
            property_id=request_in.property_id,
            tenant_id=current_user.id,
            title=request_in.title,
            description=request_in.description,
            category=request_in.category,
            priority=request_in.priority,
        )
    except Exception as e:
        logger.error(f"[maintenance] Create failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create maintenance request: {str(e)}"
        )

    payload = MaintenanceRequestResponse.model_validate(request)
    await manager.broadcast(MAINTENANCE_REQUEST, payload)

    sentiment = await sentiment_service.analyze_sentiment(request.description)
    if sentiment_service.is_urgent(sentiment):
        logger.info(f"[maintenance] Request {request.id} rated urgent ({sentiment['rating']})")
        await manager.broadcast(URGENT_MAINTENANCE, {"request": payload, "sentiment": sentiment})

    return request


@router.get("/{request_id}", response_model=MaintenanceRequestResponse)
def get_maintenance_request(
    request_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    return _get_request_or_404(storage, request_id, current_user)


@router.post("/{request_id}/assign", response_model=MaintenanceRequestResponse)
def assign_maintenance_request(
    request_id: int,
    assignment: MaintenanceAssign,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_role(UserRole.LANDLORD, UserRole.ADMIN)),
):
    """Assign a pending request by hand (no staff matched at creation)"""
    request = storage.get_maintenance_request(request_id)
    if request is None:
        raise HTTPException(status_code=404, detail="Maintenance request not found")
    if current_user.role == UserRole.LANDLORD and not _owns_property(storage, current_user, request.property_id):
        raise HTTPException(status_code=403, detail="Not authorized to assign requests on this property")

    try:
        return maintenance_service.assign_maintenance_request(storage, request_id, assignment.staff_id)
    except MaintenanceRequestNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StaffNotFound as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidMaintenanceTransition as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{request_id}/complete", response_model=MaintenanceCompletionResponse)
def complete_maintenance_request(
    request_id: int,
    completion: MaintenanceCompletion,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_role(UserRole.STAFF, UserRole.ADMIN)),
):
    """Close a request with a work report (assigned staff member or admin only)"""
    try:
        request, report = maintenance_service.complete_maintenance_request(
            storage,
            request_id,
            actor=current_user,
            description=completion.description,
            work_done=completion.work_done,
            materials=completion.materials,
            cost=completion.cost,
            time_spent=completion.time_spent,
        )
    except MaintenanceRequestNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except InvalidMaintenanceTransition as e:
        raise HTTPException(status_code=409, detail=str(e))

    return {"request": request, "report": report}


@router.get("/{request_id}/report", response_model=MaintenanceReportResponse)
def get_maintenance_report(
    request_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    _get_request_or_404(storage, request_id, current_user)
    report = storage.get_maintenance_report_for_request(request_id)
    if report is None:
        raise HTTPException(status_code=404, detail="No report filed for this request")
    return report


@router.get("/{request_id}/recommendation", response_model=RecommendationResponse)
async def get_maintenance_recommendation(
    request_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    request = _get_request_or_404(storage, request_id, current_user)
    recommendation = await sentiment_service.generate_maintenance_recommendation(request.description)
    return {"request_id": request.id, "recommendation": recommendation}
