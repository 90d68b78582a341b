# pipdesk/utils.py
import csv
import io
from typing import Iterable, List, Sequence

from . import models, schemas
from .calculators import compute_risk_reward, round_pips


def signal_to_schema(signal: models.Signal) -> schemas.Signal:
    """Signal with its risk/reward ratio and whole-pip display result"""
    return schemas.Signal(
        id=signal.id,
        pair=signal.pair,
        direction=signal.direction,
        entry_price=signal.entry_price,
        take_profit_price=signal.take_profit_price,
        take_profit_2_price=signal.take_profit_2_price,
        stop_loss_price=signal.stop_loss_price,
        status=signal.status,
        result=signal.result,
        display_result=int(round_pips(signal.result)) if signal.result is not None else None,
        risk_reward=compute_risk_reward(
            signal.direction, signal.entry_price, signal.take_profit_price, signal.stop_loss_price
        ),
        analysis=signal.analysis,
        trading_view_link=signal.trading_view_link,
        allowed_plans=signal.allowed_plans or [],
        closed_at=signal.closed_at,
        created_at=signal.created_at,
        created_by=signal.created_by,
    )


def to_csv(header: Sequence[str], rows: Iterable[Sequence]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(header)
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
    return buffer.getvalue()


USER_EXPORT_COLUMNS: List[str] = [
    "id", "email", "first_name", "last_name", "role",
    "subscription_plan", "subscription_status", "subscription_expiry", "created_at",
]

SIGNAL_EXPORT_COLUMNS: List[str] = [
    "id", "pair", "direction", "entry_price", "take_profit_price", "take_profit_2_price",
    "stop_loss_price", "status", "result", "risk_reward", "created_at", "closed_at",
]


def users_csv(users: Iterable[models.User]) -> str:
    return to_csv(
        USER_EXPORT_COLUMNS,
        ([getattr(user, column) for column in USER_EXPORT_COLUMNS] for user in users),
    )


def signals_csv(signals: Iterable[models.Signal]) -> str:
    rows = []
    for signal in signals:
        data = signal_to_schema(signal).model_dump()
        rows.append([data.get(column) for column in SIGNAL_EXPORT_COLUMNS])
    return to_csv(SIGNAL_EXPORT_COLUMNS, rows)
