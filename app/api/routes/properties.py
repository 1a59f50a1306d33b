from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from app.dependencies import get_current_user, get_storage, require_role
from app.models.user import User, UserRole
from app.schemas.property import PropertyCreate, PropertyResponse
from app.storage import Storage

router = APIRouter()


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_property(
    property_in: PropertyCreate,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_role(UserRole.LANDLORD, UserRole.ADMIN)),
):
    """Create a new property"""
    data = property_in.model_dump()
    landlord_id = data.pop("landlord_id")

    if current_user.role == UserRole.LANDLORD:
        landlord_id = current_user.id
    elif landlord_id is None:
        raise HTTPException(status_code=400, detail="landlord_id is required")
    else:
        landlord = storage.get_user(landlord_id)
        if landlord is None or landlord.role != UserRole.LANDLORD:
            raise HTTPException(status_code=400, detail="landlord_id must reference a landlord")

    return storage.create_property(**data, landlord_id=landlord_id)


@router.get("", response_model=List[PropertyResponse])
@router.get("/", response_model=List[PropertyResponse], include_in_schema=False)
def list_properties(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Get all properties"""
    return storage.get_properties()


@router.get("/{property_id}", response_model=PropertyResponse)
def get_property(
    property_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Get a specific property"""
    property = storage.get_property(property_id)
    if not property:
        raise HTTPException(status_code=404, detail="Property not found")
    return property
