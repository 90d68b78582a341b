# pipdesk/crud.py
import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from . import models, schemas
from .auth import get_password_hash
from .calculators import (
    compute_pips, compute_profit, parse_lot_size, parse_price, parse_signed, round_money,
    TradeDirection,
)
from .config import settings
from .exceptions import InvalidPriceError
from .goal_tracker import GoalProgressTracker
from .instruments import default_registry
from .signal_lifecycle import SignalStatus, summarize_signals, validate_signal_levels

logger = logging.getLogger(__name__)

# ==================== USER CRUD ====================

def get_user(db: Session, user_id: int):
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == email.strip().lower()).first()


def get_users(db: Session, skip: int = 0, limit: int = 100):
    return db.query(models.User).order_by(models.User.created_at.desc(), models.User.id.desc()).offset(skip).limit(limit).all()


def count_users(db: Session) -> int:
    return db.query(models.User).count()


def create_user(db: Session, user: schemas.UserCreate, role: str = "user"):
    db_user = models.User(
        email=user.email.strip().lower(),
        hashed_password=get_password_hash(user.password),
        first_name=user.first_name,
        last_name=user.last_name,
        role=role,
        subscription_plan=settings.FREE_PLAN,
        subscription_status="inactive",
        default_lot_size=parse_lot_size(settings.DEFAULT_LOT_SIZE),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"User {db_user.email} created with role {role}")
    return db_user


def update_user(db: Session, db_user: models.User, updates: dict):
    for key, value in updates.items():
        setattr(db_user, key, value)
    db.commit()
    db.refresh(db_user)
    return db_user


def delete_user(db: Session, db_user: models.User, reassign_to: int):
    """
    Delete a user with their journal, lesson progress and subscription requests.
    Signals and lessons they authored are handed over to `reassign_to`.
    """
    db.query(models.Signal).filter(models.Signal.created_by == db_user.id).update(
        {models.Signal.created_by: reassign_to}, synchronize_session=False
    )
    db.query(models.Lesson).filter(models.Lesson.created_by == db_user.id).update(
        {models.Lesson.created_by: reassign_to}, synchronize_session=False
    )
    db.delete(db_user)
    db.commit()
    logger.info(f"User {db_user.id} deleted; authored content moved to user {reassign_to}")


# ==================== GOAL ====================

def _non_negative_amount(value, field: str) -> Decimal:
    amount = parse_signed(value, field)
    if amount < 0:
        raise InvalidPriceError(f"{field.capitalize()} must not be negative")
    return round_money(amount)


def update_goal_settings(db: Session, db_user: models.User, goal: schemas.GoalSettings):
    if goal.initial_balance is not None:
        db_user.initial_balance = _non_negative_amount(goal.initial_balance, "initial balance")
    if goal.monthly_goal is not None:
        db_user.monthly_goal = _non_negative_amount(goal.monthly_goal, "monthly goal")
    if goal.default_lot_size is not None:
        db_user.default_lot_size = parse_lot_size(goal.default_lot_size)
    if db_user.goal_period_start is None:
        db_user.goal_period_start = date.today().replace(day=1)
    refresh_goal_progress(db, db_user)
    return db_user


def _period_entries(db: Session, db_user: models.User):
    query = db.query(models.TradingEntry).filter(models.TradingEntry.user_id == db_user.id)
    start = db_user.goal_period_start
    if start is not None:
        query = query.filter(models.TradingEntry.date >= start)
    if start is not None and db_user.goal_period_started_at is not None:
        query = query.filter(or_(
            models.TradingEntry.date > start,
            and_(
                models.TradingEntry.date == start,
                models.TradingEntry.created_at >= db_user.goal_period_started_at,
            ),
        ))
    return query.all()


def get_goal_tracker(db: Session, db_user: models.User) -> GoalProgressTracker:
    """Goal progress rebuilt from the user's journal entries for the current period"""
    return GoalProgressTracker.from_entries(
        db_user.initial_balance,
        db_user.monthly_goal,
        (entry.profit for entry in _period_entries(db, db_user)),
    )


def refresh_goal_progress(db: Session, db_user: models.User) -> GoalProgressTracker:
    tracker = get_goal_tracker(db, db_user)
    db_user.current_balance = round_money(tracker.current_balance)
    db.commit()
    db.refresh(db_user)
    return tracker


def reset_goal_period(
    db: Session,
    db_user: models.User,
    period_start: Optional[date] = None,
    now: Optional[datetime] = None,
):
    """Start a new goal period; without `period_start`, entries already recorded today no longer count"""
    now = now or datetime.utcnow()
    db_user.goal_period_start = period_start or date.today()
    # A start passed in explicitly counts the whole day
    db_user.goal_period_started_at = now if period_start is None else None
    tracker = refresh_goal_progress(db, db_user)
    logger.info(f"Goal period for user {db_user.id} reset to start {db_user.goal_period_start}")
    return tracker


def goal_progress(db_user: models.User, tracker: GoalProgressTracker) -> schemas.GoalProgress:
    return schemas.GoalProgress(**tracker.snapshot(), period_start=db_user.goal_period_start)


# ==================== SIGNAL CRUD ====================

def get_signals(db: Session):
    return db.query(models.Signal).order_by(models.Signal.created_at.desc(), models.Signal.id.desc()).all()


def get_signal(db: Session, signal_id: int):
    return db.query(models.Signal).filter(models.Signal.id == signal_id).first()


def _signal_levels(direction, entry, tp, tp2, sl) -> dict:
    validate_signal_levels(direction, entry, tp, sl, tp2)
    return {
        "direction": TradeDirection.parse(direction).value,
        "entry_price": parse_price(entry, "entry price"),
        "take_profit_price": parse_price(tp, "take profit price"),
        "take_profit_2_price": parse_price(tp2, "take profit 2 price") if tp2 is not None else None,
        "stop_loss_price": parse_price(sl, "stop loss price"),
    }


def create_signal(db: Session, signal: schemas.SignalCreate, created_by: int):
    instrument = default_registry.get(signal.pair)
    levels = _signal_levels(
        signal.direction,
        signal.entry_price,
        signal.take_profit_price,
        signal.take_profit_2_price,
        signal.stop_loss_price,
    )
    db_signal = models.Signal(
        pair=instrument.symbol,
        analysis=signal.analysis,
        trading_view_link=signal.trading_view_link,
        allowed_plans=signal.allowed_plans,
        status=SignalStatus.ACTIVE.value,
        created_by=created_by,
        **levels,
    )
    db.add(db_signal)
    db.commit()
    db.refresh(db_signal)
    logger.info(f"Signal {db_signal.id} created: {db_signal.direction} {db_signal.pair} @ {db_signal.entry_price}")
    return db_signal


def update_signal(db: Session, db_signal: models.Signal, updates: schemas.SignalUpdate):
    data = updates.model_dump(exclude_unset=True)

    if "pair" in data:
        db_signal.pair = default_registry.get(data.pop("pair")).symbol

    level_fields = ("direction", "entry_price", "take_profit_price", "take_profit_2_price", "stop_loss_price")
    if any(field in data for field in level_fields):
        merged = {field: data.pop(field, getattr(db_signal, field)) for field in level_fields}
        levels = _signal_levels(
            merged["direction"],
            merged["entry_price"],
            merged["take_profit_price"],
            merged["take_profit_2_price"],
            merged["stop_loss_price"],
        )
        for key, value in levels.items():
            setattr(db_signal, key, value)

    for key, value in data.items():
        setattr(db_signal, key, value)

    db.commit()
    db.refresh(db_signal)
    return db_signal


def save_signal(db: Session, db_signal: models.Signal):
    db.commit()
    db.refresh(db_signal)
    return db_signal


def delete_signal(db: Session, db_signal: models.Signal):
    db.delete(db_signal)
    db.commit()


def get_signal_stats(db: Session) -> dict:
    return summarize_signals(db.query(models.Signal).all())


# ==================== LESSON CRUD ====================

def get_lessons(db: Session):
    return db.query(models.Lesson).order_by(models.Lesson.created_at.desc(), models.Lesson.id.desc()).all()


def get_published_lessons(db: Session):
    return (
        db.query(models.Lesson)
        .filter(models.Lesson.is_published == True)  # noqa: E712
        .order_by(models.Lesson.created_at.desc(), models.Lesson.id.desc())
        .all()
    )


def get_lesson(db: Session, lesson_id: int):
    return db.query(models.Lesson).filter(models.Lesson.id == lesson_id).first()


def create_lesson(db: Session, lesson: schemas.LessonCreate, created_by: int):
    db_lesson = models.Lesson(**lesson.model_dump(), created_by=created_by)
    db.add(db_lesson)
    db.commit()
    db.refresh(db_lesson)
    return db_lesson


def update_lesson(db: Session, db_lesson: models.Lesson, updates: schemas.LessonUpdate):
    for key, value in updates.model_dump(exclude_unset=True).items():
        setattr(db_lesson, key, value)
    db.commit()
    db.refresh(db_lesson)
    return db_lesson


def delete_lesson(db: Session, db_lesson: models.Lesson):
    db.query(models.UserLesson).filter(models.UserLesson.lesson_id == db_lesson.id).delete()
    db.delete(db_lesson)
    db.commit()


def get_user_lesson_progress(db: Session, user_id: int):
    return db.query(models.UserLesson).filter(models.UserLesson.user_id == user_id).all()


def mark_lesson_completed(db: Session, user_id: int, lesson_id: int):
    progress = db.query(models.UserLesson).filter(
        models.UserLesson.user_id == user_id,
        models.UserLesson.lesson_id == lesson_id
    ).first()

    if progress is None:
        progress = models.UserLesson(user_id=user_id, lesson_id=lesson_id)
        db.add(progress)

    progress.is_completed = True
    progress.completed_at = datetime.utcnow()
    db.commit()
    db.refresh(progress)
    return progress


def count_completed_lessons(db: Session, user_id: int) -> int:
    return db.query(models.UserLesson).filter(
        models.UserLesson.user_id == user_id,
        models.UserLesson.is_completed == True  # noqa: E712
    ).count()


# ==================== PLAN CRUD ====================

def get_plans(db: Session):
    return db.query(models.Plan).order_by(models.Plan.price).all()


def get_active_plans(db: Session):
    return db.query(models.Plan).filter(models.Plan.is_active == True).order_by(models.Plan.price).all()  # noqa: E712


def get_plan(db: Session, plan_id: int):
    return db.query(models.Plan).filter(models.Plan.id == plan_id).first()


def create_plan(db: Session, plan: schemas.PlanCreate):
    data = plan.model_dump()
    data["price"] = _non_negative_amount(data["price"], "plan price")
    db_plan = models.Plan(**data)
    db.add(db_plan)
    db.commit()
    db.refresh(db_plan)
    return db_plan


def update_plan(db: Session, db_plan: models.Plan, updates: schemas.PlanUpdate):
    data = updates.model_dump(exclude_unset=True)
    if data.get("price") is not None:
        data["price"] = _non_negative_amount(data["price"], "plan price")
    for key, value in data.items():
        setattr(db_plan, key, value)
    db.commit()
    db.refresh(db_plan)
    return db_plan


def delete_plan(db: Session, db_plan: models.Plan):
    db.delete(db_plan)
    db.commit()


# ==================== SUBSCRIPTION REQUESTS ====================

def get_subscription_requests(db: Session, status: Optional[str] = None):
    query = db.query(models.SubscriptionRequest)
    if status:
        query = query.filter(models.SubscriptionRequest.status == status)
    return query.order_by(models.SubscriptionRequest.request_date.desc(), models.SubscriptionRequest.id.desc()).all()


def get_user_subscription_requests(db: Session, user_id: int):
    return (
        db.query(models.SubscriptionRequest)
        .filter(models.SubscriptionRequest.user_id == user_id)
        .order_by(models.SubscriptionRequest.id.desc())
        .all()
    )


def get_subscription_request(db: Session, request_id: int):
    return db.query(models.SubscriptionRequest).filter(models.SubscriptionRequest.id == request_id).first()


def get_pending_request_for_user(db: Session, user_id: int):
    return db.query(models.SubscriptionRequest).filter(
        models.SubscriptionRequest.user_id == user_id,
        models.SubscriptionRequest.status == "pending"
    ).first()


def create_subscription_request(db: Session, user_id: int, plan: models.Plan):
    request = models.SubscriptionRequest(
        user_id=user_id,
        plan_id=plan.id,
        plan_name=plan.name,
        status="pending",
        request_date=datetime.utcnow(),
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info(f"User {user_id} requested plan {plan.name}")
    return request


def approve_subscription_request(db: Session, request: models.SubscriptionRequest, now: Optional[datetime] = None):
    now = now or datetime.utcnow()
    user = get_user(db, request.user_id)
    user.subscription_plan = request.plan_name.strip().lower()
    user.subscription_status = "active"
    user.subscription_expiry = now + timedelta(days=settings.SUBSCRIPTION_PERIOD_DAYS)
    request.status = "approved"
    request.processed_date = now
    db.commit()
    db.refresh(request)
    logger.info(f"Subscription request {request.id} approved: user {user.id} -> {user.subscription_plan}")
    return request


def reject_subscription_request(db: Session, request: models.SubscriptionRequest, now: Optional[datetime] = None):
    request.status = "rejected"
    request.processed_date = now or datetime.utcnow()
    db.commit()
    db.refresh(request)
    logger.info(f"Subscription request {request.id} rejected")
    return request


# ==================== TRADING ENTRIES ====================

def get_trading_entries(db: Session, user_id: int):
    return (
        db.query(models.TradingEntry)
        .filter(models.TradingEntry.user_id == user_id)
        .order_by(models.TradingEntry.date.desc(), models.TradingEntry.id.desc())
        .all()
    )


def get_trading_entry(db: Session, entry_id: int):
    return db.query(models.TradingEntry).filter(models.TradingEntry.id == entry_id).first()


def _default_lot_size(db_user: models.User):
    if db_user.default_lot_size is not None:
        return db_user.default_lot_size
    return settings.DEFAULT_LOT_SIZE


def create_trading_entry(db: Session, db_user: models.User, entry: schemas.TradingEntryCreate):
    """Store a journal entry with pips and profit computed server-side"""
    instrument = default_registry.get(entry.pair)
    direction = TradeDirection.parse(entry.direction).side
    lot_size = parse_lot_size(
        entry.lot_size if entry.lot_size is not None else _default_lot_size(db_user)
    )
    entry_price = parse_price(entry.entry_price, "entry price")
    exit_price = parse_price(entry.exit_price, "exit price")

    pips = compute_pips(direction, entry_price, exit_price, instrument)
    profit = compute_profit(pips, lot_size, instrument)

    db_entry = models.TradingEntry(
        user_id=db_user.id,
        signal_id=entry.signal_id,
        pair=instrument.symbol,
        direction=direction.value,
        lot_size=lot_size,
        entry_price=entry_price,
        exit_price=exit_price,
        result=entry.result.value,
        pips=pips.quantize(Decimal("0.01")),
        profit=round_money(profit),
        notes=entry.notes,
        date=entry.date or date.today(),
        created_at=datetime.utcnow(),
    )
    db.add(db_entry)
    db.commit()
    db.refresh(db_entry)
    logger.info(f"Journal entry {db_entry.id} for user {db_user.id}: {db_entry.pips} pips, {db_entry.profit}")
    return db_entry


def delete_trading_entry(db: Session, db_entry: models.TradingEntry):
    db.delete(db_entry)
    db.commit()


def summarize_entries(entries: Iterable[models.TradingEntry]) -> dict:
    total = wins = losses = 0
    total_pips = Decimal("0")
    total_profit = Decimal("0")
    for entry in entries:
        total += 1
        profit = Decimal(entry.profit)
        total_pips += Decimal(entry.pips)
        total_profit += profit
        if profit > 0:
            wins += 1
        elif profit < 0:
            losses += 1

    win_rate = Decimal(wins) / Decimal(total) * 100 if total else Decimal("0")
    return {
        "total_entries": total,
        "winning_entries": wins,
        "losing_entries": losses,
        "win_rate": win_rate,
        "total_pips": total_pips,
        "total_profit": total_profit,
    }


# ==================== STATISTICS ====================

def get_user_stats(db: Session, db_user: models.User) -> dict:
    signal_stats = get_signal_stats(db)
    journal = summarize_entries(get_trading_entries(db, db_user.id))
    return {
        "active_signals": signal_stats["active_signals"],
        "completed_lessons": count_completed_lessons(db, db_user.id),
        "win_rate": signal_stats["win_rate"],
        "total_pips": signal_stats["total_pips"],
        "journal_profit": journal["total_profit"],
    }


def monthly_revenue(users: Iterable[models.User], plans: List[models.Plan], now: Optional[datetime] = None) -> Decimal:
    """Sum of plan prices over users with an active, unexpired subscription"""
    now = now or datetime.utcnow()
    prices = {plan.name.strip().lower(): Decimal(plan.price) for plan in plans}
    total = Decimal("0")
    for user in users:
        if user.subscription_status != "active":
            continue
        if user.subscription_expiry is not None and user.subscription_expiry <= now:
            continue
        total += prices.get((user.subscription_plan or "").lower(), Decimal("0"))
    return total


def get_admin_stats(db: Session) -> dict:
    signal_stats = get_signal_stats(db)
    users = db.query(models.User).all()
    return {
        "total_users": len(users),
        "active_signals": signal_stats["active_signals"],
        "total_lessons": db.query(models.Lesson).count(),
        "monthly_revenue": monthly_revenue(users, get_plans(db)),
        "total_pips": signal_stats["total_pips"],
        "win_rate": signal_stats["win_rate"],
        "pending_requests": len(get_subscription_requests(db, status="pending")),
    }
