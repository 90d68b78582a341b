# pipdesk/routers/accounts.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from pipdesk import auth, crud, models, schemas
from pipdesk.auth_utils import ACCESS_COOKIE, get_current_user
from pipdesk.config import settings
from pipdesk.database import get_db
from pipdesk.subscriptions import days_until_expiry, is_subscription_active, subscription_status

logger = logging.getLogger(__name__)

router = APIRouter()


def _login_response(response: Response, user: models.User) -> schemas.Token:
    access_token = auth.create_access_token(data={"sub": str(user.id), "role": user.role})
    response.set_cookie(
        key=ACCESS_COOKIE,
        value=access_token,
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite=settings.SESSION_COOKIE_SAMESITE,
        path="/"
    )
    return schemas.Token(access_token=access_token, user=schemas.User.model_validate(user))


# ==================== AUTHENTICATION ====================

@router.post("/auth/register", response_model=schemas.Token, status_code=status.HTTP_201_CREATED)
async def register(
    payload: schemas.UserCreate,
    response: Response,
    db: Session = Depends(get_db)
):
    """Create an account and log it in"""
    if "@" not in payload.email:
        raise HTTPException(status_code=400, detail="Invalid email address")

    if len(payload.password) < settings.PASSWORD_MIN_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
        )

    if crud.get_user_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    user = crud.create_user(db, payload)
    return _login_response(response, user)


@router.post("/auth/login", response_model=schemas.Token)
async def login(
    payload: schemas.LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    user = crud.get_user_by_email(db, payload.email)
    if not user or not auth.verify_password(payload.password, user.hashed_password):
        logger.warning(f"Failed login for {payload.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.is_active or user.is_banned:
        raise HTTPException(status_code=403, detail="Account disabled")

    return _login_response(response, user)


@router.post("/auth/logout")
async def logout(response: Response):
    response.delete_cookie(ACCESS_COOKIE, path="/")
    return {"success": True}


@router.get("/auth/user", response_model=schemas.User)
async def read_current_user(current_user: models.User = Depends(get_current_user)):
    return current_user


# ==================== PROFILE ====================

@router.get("/profile", response_model=schemas.User)
async def read_profile(current_user: models.User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=schemas.User)
async def update_profile(
    payload: schemas.ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    return crud.update_user(db, current_user, payload.model_dump(exclude_unset=True))


@router.get("/profile/subscription", response_model=schemas.SubscriptionInfo)
async def read_subscription(current_user: models.User = Depends(get_current_user)):
    return schemas.SubscriptionInfo(
        status=subscription_status(current_user),
        plan=current_user.subscription_plan,
        is_active=is_subscription_active(current_user),
        expiry=current_user.subscription_expiry,
        days_until_expiry=days_until_expiry(current_user),
    )


# ==================== MONTHLY GOAL ====================

@router.get("/profile/goal", response_model=schemas.GoalProgress)
async def read_goal(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Goal progress recomputed from the journal"""
    tracker = crud.get_goal_tracker(db, current_user)
    return crud.goal_progress(current_user, tracker)


@router.put("/profile/goal", response_model=schemas.GoalProgress)
async def update_goal(
    payload: schemas.GoalSettings,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    user = crud.update_goal_settings(db, current_user, payload)
    return crud.goal_progress(user, crud.get_goal_tracker(db, user))


@router.post("/profile/goal/reset", response_model=schemas.GoalProgress)
async def reset_goal(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Start a new goal period today"""
    tracker = crud.reset_goal_period(db, current_user)
    return crud.goal_progress(current_user, tracker)


# ==================== STATISTICS ====================

@router.get("/stats/user", response_model=schemas.UserStats)
async def read_user_stats(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    return crud.get_user_stats(db, current_user)
