# pipdesk/schemas.py
from datetime import date as Date, datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field

# Prices and lot sizes come from form inputs as strings or numbers; they are
# parsed by pipdesk.calculators so the domain errors stay the only contract.
NumberInput = Union[float, str]


class ExitReason(str, Enum):
    TP1 = "TP1"
    TP2 = "TP2"
    SL = "SL"
    MANUAL = "manual"


# ==================== AUTH / USERS ====================

class UserCreate(BaseModel):
    email: str
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class User(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    role: str
    is_active: bool = True
    is_banned: bool = False
    subscription_plan: Optional[str] = None
    subscription_status: Optional[str] = None
    subscription_expiry: Optional[datetime] = None
    initial_balance: Optional[float] = None
    monthly_goal: Optional[float] = None
    default_lot_size: Optional[float] = None
    current_balance: Optional[float] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None


class AdminUserCreate(BaseModel):
    email: str
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str = Field(default="user", pattern="^(admin|user)$")
    subscription_plan: Optional[str] = None
    subscription_status: Optional[str] = Field(default=None, pattern="^(active|inactive|cancelled)$")
    subscription_expiry: Optional[datetime] = None


class AdminUserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = Field(default=None, pattern="^(admin|user)$")
    subscription_plan: Optional[str] = None
    subscription_status: Optional[str] = Field(default=None, pattern="^(active|inactive|cancelled)$")
    subscription_expiry: Optional[datetime] = None
    is_active: Optional[bool] = None
    is_banned: Optional[bool] = None


class SubscriptionInfo(BaseModel):
    status: str
    plan: Optional[str] = None
    is_active: bool
    expiry: Optional[datetime] = None
    days_until_expiry: Optional[int] = None


# ==================== GOAL ====================

class GoalSettings(BaseModel):
    initial_balance: Optional[NumberInput] = None
    monthly_goal: Optional[NumberInput] = None
    default_lot_size: Optional[NumberInput] = None


class GoalProgress(BaseModel):
    initial_balance: float
    monthly_goal: float
    accumulated_profit: float
    current_balance: float
    target_balance: float
    percent_to_goal: float
    remaining_to_goal: float
    goal_reached: bool
    period_start: Optional[Date] = None


# ==================== SIGNALS ====================

class SignalCreate(BaseModel):
    pair: str
    direction: str
    entry_price: NumberInput
    take_profit_price: NumberInput
    take_profit_2_price: Optional[NumberInput] = None
    stop_loss_price: NumberInput
    analysis: Optional[str] = None
    trading_view_link: Optional[str] = None
    allowed_plans: List[str] = Field(default_factory=lambda: ["free", "basic", "premium", "vip"])


class SignalUpdate(BaseModel):
    pair: Optional[str] = None
    direction: Optional[str] = None
    entry_price: Optional[NumberInput] = None
    take_profit_price: Optional[NumberInput] = None
    take_profit_2_price: Optional[NumberInput] = None
    stop_loss_price: Optional[NumberInput] = None
    analysis: Optional[str] = None
    trading_view_link: Optional[str] = None
    allowed_plans: Optional[List[str]] = None


class SignalClose(BaseModel):
    result: Optional[NumberInput] = None  # signed pips
    outcome: Optional[str] = None  # TP1, TP2, SL


class Signal(BaseModel):
    id: int
    pair: str
    direction: str
    entry_price: float
    take_profit_price: float
    take_profit_2_price: Optional[float] = None
    stop_loss_price: float
    status: str
    result: Optional[float] = None
    display_result: Optional[int] = None
    risk_reward: str
    analysis: Optional[str] = None
    trading_view_link: Optional[str] = None
    allowed_plans: List[str] = []
    closed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    created_by: int


class SignalStats(BaseModel):
    total_signals: int
    active_signals: int
    closed_signals: int
    cancelled_signals: int
    winning_signals: int
    losing_signals: int
    breakeven_signals: int
    win_rate: float
    total_pips: float


# ==================== CALCULATOR ====================

class TradePreviewRequest(BaseModel):
    pair: str
    direction: str
    lot_size: NumberInput
    entry_price: NumberInput
    exit_price: NumberInput


class TradePreview(BaseModel):
    pair: str
    direction: str
    pips: float
    display_pips: int
    pip_value: float
    profit: float


class RiskRewardRequest(BaseModel):
    direction: str
    entry_price: NumberInput
    take_profit_price: NumberInput
    stop_loss_price: NumberInput


class RiskRewardResult(BaseModel):
    risk_reward: str


class Instrument(BaseModel):
    symbol: str
    pip_scale: int
    pip_size: float
    asset_class: str


# ==================== TRADING JOURNAL ====================

class TradingEntryCreate(BaseModel):
    pair: str
    direction: str
    lot_size: Optional[NumberInput] = None  # falls back to the user's default lot size
    entry_price: NumberInput
    exit_price: NumberInput
    result: ExitReason
    notes: Optional[str] = None
    date: Optional[Date] = None
    signal_id: Optional[int] = None


class TradingEntry(BaseModel):
    id: int
    user_id: int
    signal_id: Optional[int] = None
    pair: str
    direction: str
    lot_size: float
    entry_price: float
    exit_price: float
    result: str
    pips: float
    profit: float
    notes: Optional[str] = None
    date: Date
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JournalSummary(BaseModel):
    total_entries: int
    winning_entries: int
    losing_entries: int
    win_rate: float
    total_pips: float
    total_profit: float


class TradingEntryCreated(BaseModel):
    entry: TradingEntry
    goal: GoalProgress


# ==================== LESSONS ====================

class LessonCreate(BaseModel):
    title: str
    description: Optional[str] = None
    category: str
    level: str
    duration: Optional[int] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    is_published: bool = False


class LessonUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    level: Optional[str] = None
    duration: Optional[int] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    is_published: Optional[bool] = None


class Lesson(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    category: str
    level: str
    duration: Optional[int] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    rating: Optional[float] = None
    is_published: bool
    created_at: Optional[datetime] = None
    created_by: int

    class Config:
        from_attributes = True


class UserLesson(BaseModel):
    id: int
    user_id: int
    lesson_id: int
    is_completed: bool
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ==================== PLANS ====================

class PlanCreate(BaseModel):
    name: str
    price: NumberInput
    currency: str = "BRL"
    signals_per_week: Optional[int] = None
    has_educational_access: bool = False
    has_priority_support: bool = False
    has_exclusive_analysis: bool = False
    has_mentoring: bool = False
    has_whatsapp_support: bool = False
    has_detailed_reports: bool = False
    is_active: bool = True
    is_popular: bool = False


class PlanUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[NumberInput] = None
    currency: Optional[str] = None
    signals_per_week: Optional[int] = None
    has_educational_access: Optional[bool] = None
    has_priority_support: Optional[bool] = None
    has_exclusive_analysis: Optional[bool] = None
    has_mentoring: Optional[bool] = None
    has_whatsapp_support: Optional[bool] = None
    has_detailed_reports: Optional[bool] = None
    is_active: Optional[bool] = None
    is_popular: Optional[bool] = None


class Plan(BaseModel):
    id: int
    name: str
    price: float
    currency: str
    signals_per_week: Optional[int] = None
    has_educational_access: bool
    has_priority_support: bool
    has_exclusive_analysis: bool
    has_mentoring: bool
    has_whatsapp_support: bool
    has_detailed_reports: bool
    is_active: bool
    is_popular: bool

    class Config:
        from_attributes = True


# ==================== SUBSCRIPTION REQUESTS ====================

class SubscriptionRequestCreate(BaseModel):
    plan_id: int


class SubscriptionRequest(BaseModel):
    id: int
    user_id: int
    plan_id: int
    plan_name: str
    status: str
    request_date: Optional[datetime] = None
    processed_date: Optional[datetime] = None

    class Config:
        from_attributes = True


# ==================== STATS ====================

class UserStats(BaseModel):
    active_signals: int
    completed_lessons: int
    win_rate: float
    total_pips: float
    journal_profit: float


class AdminStats(BaseModel):
    total_users: int
    active_signals: int
    total_lessons: int
    monthly_revenue: float
    total_pips: float
    win_rate: float
    pending_requests: int
