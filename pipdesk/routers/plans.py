# pipdesk/routers/plans.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pipdesk import crud, models, schemas
from pipdesk.auth_utils import get_admin_user, get_current_user
from pipdesk.database import get_db

router = APIRouter(tags=["plans"])


def _get_plan_or_404(db: Session, plan_id: int) -> models.Plan:
    plan = crud.get_plan(db, plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan


# ==================== PLANS ====================

@router.get("/plans", response_model=List[schemas.Plan])
async def read_plans(db: Session = Depends(get_db)):
    """Active plans, cheapest first (public)"""
    return crud.get_active_plans(db)


@router.get("/plans/{plan_id}", response_model=schemas.Plan)
async def read_plan(plan_id: int, db: Session = Depends(get_db)):
    return _get_plan_or_404(db, plan_id)


@router.post("/plans", response_model=schemas.Plan, status_code=status.HTTP_201_CREATED)
async def create_plan(
    payload: schemas.PlanCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    return crud.create_plan(db, payload)


@router.put("/plans/{plan_id}", response_model=schemas.Plan)
async def update_plan(
    plan_id: int,
    payload: schemas.PlanUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    return crud.update_plan(db, _get_plan_or_404(db, plan_id), payload)


@router.delete("/plans/{plan_id}")
async def delete_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    crud.delete_plan(db, _get_plan_or_404(db, plan_id))
    return {"success": True, "message": "Plan deleted"}


# ==================== SUBSCRIPTION REQUESTS ====================

@router.post(
    "/subscription-requests",
    response_model=schemas.SubscriptionRequest,
    status_code=status.HTTP_201_CREATED,
)
async def request_subscription(
    payload: schemas.SubscriptionRequestCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Ask an admin to move the current user onto a plan"""
    plan = crud.get_plan(db, payload.plan_id)
    if plan is None or not plan.is_active:
        raise HTTPException(status_code=404, detail="Plan not found")

    if crud.get_pending_request_for_user(db, current_user.id):
        raise HTTPException(status_code=409, detail="You already have a pending subscription request")

    return crud.create_subscription_request(db, current_user.id, plan)


@router.get("/subscription-requests/mine", response_model=List[schemas.SubscriptionRequest])
async def read_my_subscription_requests(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    return crud.get_user_subscription_requests(db, current_user.id)
