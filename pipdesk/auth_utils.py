# pipdesk/auth_utils.py
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from . import crud, models
from .auth import verify_token
from .database import get_db

ACCESS_COOKIE = "access_token"


def _token_from_request(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(ACCESS_COOKIE)


async def get_optional_user(
    request: Request,
    db: Session = Depends(get_db)
) -> Optional[models.User]:
    """Current user from bearer header or cookie, or None"""
    token = _token_from_request(request)
    if not token:
        return None

    payload = verify_token(token, "access")
    if not payload:
        return None

    user_id = payload.get("sub")
    if not user_id or not str(user_id).isdigit():
        return None

    return crud.get_user(db, int(user_id))


async def get_current_user(
    user: Optional[models.User] = Depends(get_optional_user)
) -> models.User:
    """Current user (requires authentication)"""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active or user.is_banned:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account disabled"
        )

    return user


async def get_admin_user(
    user: models.User = Depends(get_current_user)
) -> models.User:
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user
