"""
Staff Routes
Landlords and admins list and onboard maintenance staff
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from app.core.security import get_password_hash
from app.dependencies import get_storage, require_role
from app.models.user import User, UserRole
from app.schemas.user import StaffCreate, UserResponse
from app.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["staff"])


@router.get("", response_model=List[UserResponse])
@router.get("/", response_model=List[UserResponse], include_in_schema=False)
def get_all_staff(
    current_user: User = Depends(require_role(UserRole.LANDLORD, UserRole.ADMIN)),
    storage: Storage = Depends(get_storage),
):
    """Get all staff members"""
    return storage.get_staff()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_staff(
    staff_in: StaffCreate,
    current_user: User = Depends(require_role(UserRole.LANDLORD, UserRole.ADMIN)),
    storage: Storage = Depends(get_storage),
):
    """Create a staff account with a specialization"""
    if storage.get_user_by_username(staff_in.username):
        raise HTTPException(status_code=400, detail="Username already exists")

    staff = storage.create_user(
        username=staff_in.username,
        hashed_password=get_password_hash(staff_in.password),
        role=UserRole.STAFF,
        name=staff_in.name,
        email=staff_in.email,
        phone=staff_in.phone,
        specialization=staff_in.specialization.strip().lower(),
    )
    logger.info(f"[staff] {current_user.username} added staff '{staff.username}' ({staff.specialization})")
    return staff
