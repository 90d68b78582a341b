# pipdesk/routers/trading.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pipdesk import crud, models, schemas
from pipdesk.auth_utils import get_current_user
from pipdesk.calculators import (
    TradeDirection, compute_pips, compute_profit, compute_risk_reward, pip_value, round_money, round_pips,
)
from pipdesk.database import get_db
from pipdesk.instruments import default_registry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["trading"])


# ==================== CALCULATOR ====================

@router.get("/instruments", response_model=List[schemas.Instrument])
async def read_instruments():
    return [
        schemas.Instrument(
            symbol=instrument.symbol,
            pip_scale=instrument.pip_scale,
            pip_size=instrument.pip_size,
            asset_class=instrument.asset_class,
        )
        for instrument in default_registry.all()
    ]


@router.post("/calculator/preview", response_model=schemas.TradePreview)
async def preview_trade(payload: schemas.TradePreviewRequest):
    """Live pips / pip value / profit for a hypothetical trade. Nothing is stored."""
    instrument = default_registry.get(payload.pair)
    direction = TradeDirection.parse(payload.direction)
    pips = compute_pips(direction, payload.entry_price, payload.exit_price, instrument)
    return schemas.TradePreview(
        pair=instrument.symbol,
        direction=direction.value,
        pips=pips,
        display_pips=int(round_pips(pips)),
        pip_value=pip_value(payload.lot_size, instrument),
        profit=round_money(compute_profit(pips, payload.lot_size, instrument)),
    )


@router.post("/calculator/risk-reward", response_model=schemas.RiskRewardResult)
async def risk_reward(payload: schemas.RiskRewardRequest):
    return schemas.RiskRewardResult(
        risk_reward=compute_risk_reward(
            payload.direction, payload.entry_price, payload.take_profit_price, payload.stop_loss_price
        )
    )


# ==================== TRADING JOURNAL ====================

@router.get("/trading-entries", response_model=List[schemas.TradingEntry])
async def read_trading_entries(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    return crud.get_trading_entries(db, current_user.id)


@router.get("/trading-entries/summary", response_model=schemas.JournalSummary)
async def read_journal_summary(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    return crud.summarize_entries(crud.get_trading_entries(db, current_user.id))


@router.post(
    "/trading-entries",
    response_model=schemas.TradingEntryCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_trading_entry(
    payload: schemas.TradingEntryCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Record a trade; pips and profit are computed here, never taken from the client"""
    if payload.signal_id is not None and crud.get_signal(db, payload.signal_id) is None:
        raise HTTPException(status_code=404, detail="Signal not found")

    entry = crud.create_trading_entry(db, current_user, payload)
    tracker = crud.refresh_goal_progress(db, current_user)
    return schemas.TradingEntryCreated(
        entry=schemas.TradingEntry.model_validate(entry),
        goal=crud.goal_progress(current_user, tracker),
    )


@router.delete("/trading-entries/{entry_id}", response_model=schemas.GoalProgress)
async def delete_trading_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    entry = crud.get_trading_entry(db, entry_id)
    if entry is None or entry.user_id != current_user.id:
        raise HTTPException(status_code=404, detail="Trading entry not found")

    crud.delete_trading_entry(db, entry)
    tracker = crud.refresh_goal_progress(db, current_user)
    logger.info(f"Journal entry {entry_id} deleted by user {current_user.id}")
    return crud.goal_progress(current_user, tracker)
