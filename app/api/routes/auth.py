"""
Authentication Endpoints
Registration, login/logout and the current-user lookup
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.core.config import settings
from app.core.security import verify_password, get_password_hash, create_access_token
from app.dependencies import get_current_user, get_storage
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserLogin, UserResponse, Token
from app.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


def _start_session(response: Response, user: User) -> str:
    token = create_access_token(data={"sub": str(user.id), "role": user.role.value})
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return token


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, response: Response, storage: Storage = Depends(get_storage)):
    """Register a tenant or landlord and start a session"""
    if storage.get_user_by_username(user_in.username):
        raise HTTPException(status_code=400, detail="Username already exists")

    user = storage.create_user(
        username=user_in.username,
        hashed_password=get_password_hash(user_in.password),
        role=UserRole(user_in.role.value),
        name=user_in.name,
        email=user_in.email,
        phone=user_in.phone,
    )
    logger.info(f"[auth] Registered {user.role.value} '{user.username}' (id {user.id})")

    _start_session(response, user)
    return user


@router.post("/login", response_model=Token)
def login(credentials: UserLogin, response: Response, storage: Storage = Depends(get_storage)):
    """Login and get a session cookie (the token is also returned for API clients)"""
    user = storage.get_user_by_username(credentials.username)

    if not user or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
        )

    access_token = _start_session(response, user)
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": user,
    }


@router.post("/logout")
def logout(response: Response, current_user: User = Depends(get_current_user)):
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"success": True, "message": "Logged out"}


@router.get("/user", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return current_user
