# pipdesk/routers/signals.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from pipdesk import crud, models, schemas
from pipdesk.auth_utils import get_admin_user, get_current_user
from pipdesk.database import get_db
from pipdesk.exceptions import IllegalTransitionError
from pipdesk.signal_lifecycle import (
    SignalStatus, cancel_signal, close_signal, result_from_outcome,
)
from pipdesk.subscriptions import can_view_signal
from pipdesk.utils import signal_to_schema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/signals", tags=["signals"])


def _get_signal_or_404(db: Session, signal_id: int) -> models.Signal:
    signal = crud.get_signal(db, signal_id)
    if signal is None:
        raise HTTPException(status_code=404, detail="Signal not found")
    return signal


@router.get("", response_model=List[schemas.Signal])
async def read_signals(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Signals visible to the current user's plan, newest first"""
    signals = [s for s in crud.get_signals(db) if can_view_signal(current_user, s)]
    if status_filter:
        signals = [s for s in signals if s.status == status_filter.lower()]
    return [signal_to_schema(s) for s in signals]


@router.get("/stats", response_model=schemas.SignalStats)
async def read_signal_stats(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    return crud.get_signal_stats(db)


@router.get("/{signal_id}", response_model=schemas.Signal)
async def read_signal(
    signal_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    signal = _get_signal_or_404(db, signal_id)
    if not can_view_signal(current_user, signal):
        raise HTTPException(status_code=403, detail="Signal not available on your plan")
    return signal_to_schema(signal)


@router.post("", response_model=schemas.Signal, status_code=status.HTTP_201_CREATED)
async def create_signal(
    payload: schemas.SignalCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    return signal_to_schema(crud.create_signal(db, payload, created_by=admin.id))


@router.put("/{signal_id}", response_model=schemas.Signal)
async def update_signal(
    signal_id: int,
    payload: schemas.SignalUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    """Edit an active signal; closed and cancelled signals are frozen"""
    signal = _get_signal_or_404(db, signal_id)
    if signal.status != SignalStatus.ACTIVE.value:
        raise IllegalTransitionError(f"Cannot edit a signal that is already {signal.status}")
    return signal_to_schema(crud.update_signal(db, signal, payload))


@router.post("/{signal_id}/close", response_model=schemas.Signal)
async def close_signal_endpoint(
    signal_id: int,
    payload: schemas.SignalClose,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    """
    Close an active signal.

    Either give the realized `result` in pips, or an `outcome` (TP1, TP2, SL)
    and the result is derived from the signal's own levels.
    """
    signal = _get_signal_or_404(db, signal_id)
    result = payload.result
    if result is None and payload.outcome:
        if signal.status != SignalStatus.ACTIVE.value:
            raise IllegalTransitionError(f"Cannot close a signal that is already {signal.status}")
        result = result_from_outcome(signal, payload.outcome)

    close_signal(signal, result, admin.role)
    return signal_to_schema(crud.save_signal(db, signal))


@router.post("/{signal_id}/cancel", response_model=schemas.Signal)
async def cancel_signal_endpoint(
    signal_id: int,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    signal = _get_signal_or_404(db, signal_id)
    cancel_signal(signal, admin.role)
    return signal_to_schema(crud.save_signal(db, signal))


@router.delete("/{signal_id}")
async def delete_signal(
    signal_id: int,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    signal = _get_signal_or_404(db, signal_id)
    crud.delete_signal(db, signal)
    logger.info(f"Signal {signal_id} deleted by admin {admin.id}")
    return {"success": True, "message": "Signal deleted"}
