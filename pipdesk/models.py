# pipdesk/models.py
from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, JSON, Numeric, String, Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    role = Column(String, nullable=False, default="user")  # 'admin' or 'user'
    is_active = Column(Boolean, default=True)
    is_banned = Column(Boolean, default=False)

    subscription_plan = Column(String, default="free")  # free, basic, premium, vip
    subscription_status = Column(String, default="inactive")  # active, inactive, cancelled
    subscription_expiry = Column(DateTime, nullable=True)

    # Goal configuration
    initial_balance = Column(Numeric(12, 2), nullable=True)
    monthly_goal = Column(Numeric(12, 2), nullable=True)
    default_lot_size = Column(Numeric(10, 4), default=0.01)
    goal_period_start = Column(Date, nullable=True)
    # Set by a manual reset; entries dated on the start day count only if created after it
    goal_period_started_at = Column(DateTime, nullable=True)
    # Cached for listings only; goal progress is always recomputed from entries
    current_balance = Column(Numeric(12, 2), nullable=True)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    trading_entries = relationship("TradingEntry", back_populates="user", cascade="all, delete-orphan")
    lesson_progress = relationship("UserLesson", back_populates="user", cascade="all, delete-orphan")
    subscription_requests = relationship(
        "SubscriptionRequest", back_populates="user", cascade="all, delete-orphan"
    )


class Signal(Base):
    __tablename__ = "signals"

    id = Column(Integer, primary_key=True, index=True)
    pair = Column(String, nullable=False)
    direction = Column(String, nullable=False)  # BUY, SELL, BUY_LIMIT, SELL_LIMIT
    entry_price = Column(Numeric(12, 5), nullable=False)
    take_profit_price = Column(Numeric(12, 5), nullable=False)
    take_profit_2_price = Column(Numeric(12, 5), nullable=True)
    stop_loss_price = Column(Numeric(12, 5), nullable=False)
    status = Column(String, nullable=False, default="active", index=True)  # active, closed, cancelled
    result = Column(Numeric(12, 2), nullable=True)  # signed pips
    analysis = Column(Text, nullable=True)
    trading_view_link = Column(String, nullable=True)
    allowed_plans = Column(JSON, default=lambda: ["free", "basic", "premium", "vip"])
    closed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)

    creator = relationship("User")


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False)  # fundamentals, technical_analysis, psychology, strategies
    level = Column(String, nullable=False)  # beginner, intermediate, advanced
    duration = Column(Integer, nullable=True)  # minutes
    video_url = Column(String, nullable=True)
    thumbnail_url = Column(String, nullable=True)
    rating = Column(Numeric(2, 1), default=0)
    is_published = Column(Boolean, default=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)


class Plan(Base):
    __tablename__ = "plans"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String, nullable=False, default="BRL")
    signals_per_week = Column(Integer, nullable=True)
    has_educational_access = Column(Boolean, default=False)
    has_priority_support = Column(Boolean, default=False)
    has_exclusive_analysis = Column(Boolean, default=False)
    has_mentoring = Column(Boolean, default=False)
    has_whatsapp_support = Column(Boolean, default=False)
    has_detailed_reports = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    is_popular = Column(Boolean, default=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class UserLesson(Base):
    __tablename__ = "user_lessons"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    is_completed = Column(Boolean, default=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now())

    user = relationship("User", back_populates="lesson_progress")


class SubscriptionRequest(Base):
    __tablename__ = "subscription_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    plan_id = Column(Integer, ForeignKey("plans.id"), nullable=False)
    plan_name = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending, approved, rejected
    request_date = Column(DateTime, default=func.now())
    processed_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now())

    user = relationship("User", back_populates="subscription_requests")
    plan = relationship("Plan")


class TradingEntry(Base):
    __tablename__ = "trading_entries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    signal_id = Column(Integer, ForeignKey("signals.id", ondelete="SET NULL"), nullable=True)
    pair = Column(String, nullable=False)
    direction = Column(String, nullable=False)  # BUY or SELL
    lot_size = Column(Numeric(10, 4), nullable=False)
    entry_price = Column(Numeric(12, 5), nullable=False)
    exit_price = Column(Numeric(12, 5), nullable=False)
    result = Column(String, nullable=False)  # TP1, TP2, SL, manual
    pips = Column(Numeric(12, 2), nullable=False)
    profit = Column(Numeric(14, 2), nullable=False)
    notes = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, default=func.now())

    user = relationship("User", back_populates="trading_entries")
