from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import decode_access_token
from app.database import get_db
from app.models.user import User, UserRole
from app.storage import Storage


def get_storage(db: Session = Depends(get_db)) -> Storage:
    return Storage(db)


def _extract_token(request: Request) -> Optional[str]:
    """Session cookie first, then an Authorization: Bearer header"""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        return token
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return None


async def get_current_user(
    request: Request,
    storage: Storage = Depends(get_storage),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
    )

    token = _extract_token(request)
    if not token:
        raise credentials_exception

    payload = decode_access_token(token)
    if not payload or payload.get("sub") is None:
        raise credentials_exception

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise credentials_exception

    user = storage.get_user(user_id)
    if user is None:
        raise credentials_exception

    return user


def require_role(*roles: UserRole):
    async def role_checker(user: User = Depends(get_current_user)):
        if user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user
    return role_checker
