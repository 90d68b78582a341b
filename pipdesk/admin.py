# pipdesk/admin.py
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from . import crud, models, schemas
from .auth_utils import get_admin_user
from .config import settings
from .database import get_db
from .utils import signals_csv, users_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _get_pending_request(db: Session, request_id: int) -> models.SubscriptionRequest:
    request = crud.get_subscription_request(db, request_id)
    if request is None:
        raise HTTPException(status_code=404, detail="Subscription request not found")
    if request.status != "pending":
        raise HTTPException(status_code=409, detail=f"Subscription request is already {request.status}")
    if request.user is None:
        raise HTTPException(status_code=404, detail="User for this request no longer exists")
    return request


@router.get("/stats", response_model=schemas.AdminStats)
async def admin_stats(
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    """Dashboard counters"""
    return crud.get_admin_stats(db)


# ==================== USERS ====================

@router.get("/users", response_model=List[schemas.User])
async def admin_users(
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    return crud.get_users(db, skip=skip, limit=limit)


@router.post("/users", response_model=schemas.User, status_code=status.HTTP_201_CREATED)
async def admin_create_user(
    payload: schemas.AdminUserCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    """Create an account with a role and, optionally, a subscription"""
    if "@" not in payload.email:
        raise HTTPException(status_code=400, detail="Invalid email address")
    if len(payload.password) < settings.PASSWORD_MIN_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
        )
    if crud.get_user_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    user = crud.create_user(
        db,
        schemas.UserCreate(
            email=payload.email,
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name,
        ),
        role=payload.role,
    )
    subscription = payload.model_dump(
        include={"subscription_plan", "subscription_status", "subscription_expiry"},
        exclude_none=True,
    )
    if "subscription_plan" in subscription:
        subscription["subscription_plan"] = subscription["subscription_plan"].strip().lower()
    if subscription:
        user = crud.update_user(db, user, subscription)

    logger.info(f"Admin {admin.id} created user {user.id} ({user.role})")
    return user


@router.put("/users/{user_id}", response_model=schemas.User)
async def admin_update_user(
    user_id: int,
    payload: schemas.AdminUserUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    user = crud.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    updates = payload.model_dump(exclude_unset=True)
    if user.id == admin.id and (updates.get("role") == "user" or updates.get("is_banned")):
        raise HTTPException(status_code=400, detail="Admins cannot demote or ban themselves")

    logger.info(f"Admin {admin.id} updated user {user_id}: {sorted(updates)}")
    return crud.update_user(db, user, updates)


@router.delete("/users/{user_id}")
async def admin_delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    user = crud.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="Admins cannot delete themselves")

    crud.delete_user(db, user, reassign_to=admin.id)
    return {"success": True, "message": "User deleted"}


# ==================== SUBSCRIPTION REQUESTS ====================

@router.get("/subscription-requests", response_model=List[schemas.SubscriptionRequest])
async def admin_subscription_requests(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    return crud.get_subscription_requests(db, status=status_filter)


@router.post("/subscription-requests/{request_id}/approve", response_model=schemas.SubscriptionRequest)
async def approve_subscription_request(
    request_id: int,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    """Activate the requested plan for one subscription period"""
    request = _get_pending_request(db, request_id)
    return crud.approve_subscription_request(db, request)


@router.post("/subscription-requests/{request_id}/reject", response_model=schemas.SubscriptionRequest)
async def reject_subscription_request(
    request_id: int,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    request = _get_pending_request(db, request_id)
    return crud.reject_subscription_request(db, request)


# ==================== EXPORT / BACKUP ====================

@router.get("/export/users")
async def export_users(
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    users = crud.get_users(db, limit=crud.count_users(db) or 1)
    return _csv_response(users_csv(users), "users.csv")


@router.get("/export/signals")
async def export_signals(
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    return _csv_response(signals_csv(crud.get_signals(db)), "signals.csv")


@router.get("/backup")
async def backup(
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    """Row counts per table, stamped with the time of the snapshot"""
    counts = {
        "users": crud.count_users(db),
        "signals": db.query(models.Signal).count(),
        "lessons": db.query(models.Lesson).count(),
        "plans": db.query(models.Plan).count(),
        "trading_entries": db.query(models.TradingEntry).count(),
        "subscription_requests": db.query(models.SubscriptionRequest).count(),
    }
    logger.info(f"Backup snapshot requested by admin {admin.id}: {counts}")
    return {"success": True, "timestamp": datetime.utcnow().isoformat(), "counts": counts}
