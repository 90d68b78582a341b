# pipdesk/subscriptions.py
import math
from datetime import datetime
from typing import Optional

from .config import settings


def is_subscription_active(user, now: Optional[datetime] = None) -> bool:
    if user is None:
        return False
    if user.role == "admin":
        return True
    if user.subscription_status != "active" or user.subscription_expiry is None:
        return False
    return user.subscription_expiry > (now or datetime.utcnow())


def subscription_status(user, now: Optional[datetime] = None) -> str:
    """admin / active / expired / none, or the stored status"""
    if user is None:
        return "none"
    if user.role == "admin":
        return "admin"
    if not user.subscription_status:
        return "none"

    now = now or datetime.utcnow()
    expiry = user.subscription_expiry
    if user.subscription_status == "active" and expiry is not None and expiry > now:
        return "active"
    if expiry is not None and expiry <= now:
        return "expired"
    return user.subscription_status


def days_until_expiry(user, now: Optional[datetime] = None) -> Optional[int]:
    if user is None or user.subscription_expiry is None:
        return None
    seconds = (user.subscription_expiry - (now or datetime.utcnow())).total_seconds()
    return max(0, math.ceil(seconds / 86400))


def effective_plan(user, now: Optional[datetime] = None) -> str:
    """Plan the user can use right now; lapsed subscriptions fall back to free"""
    if is_subscription_active(user, now):
        return (user.subscription_plan or settings.FREE_PLAN).lower()
    return settings.FREE_PLAN


def can_view_signal(user, signal, now: Optional[datetime] = None) -> bool:
    if user.role == "admin":
        return True
    allowed = [plan.lower() for plan in (signal.allowed_plans or [])]
    return effective_plan(user, now) in allowed
