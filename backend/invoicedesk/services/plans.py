"""
Subscription plans, their usage limits and the active/expired rules.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from invoicedesk.schemas.subscription import LimitTypeEnum, SubscriptionPlanEnum, SubscriptionStatusEnum

UNLIMITED = -1
SOFT_LIMIT_THRESHOLD = 80

PLAN_LIMITS: Dict[SubscriptionPlanEnum, Dict[LimitTypeEnum, int]] = {
    SubscriptionPlanEnum.FREE: {
        LimitTypeEnum.USERS: 3,
        LimitTypeEnum.CUSTOMERS: 50,
        LimitTypeEnum.INVOICES: 20,
        LimitTypeEnum.QUOTATIONS: 20,
    },
    SubscriptionPlanEnum.BASIC: {
        LimitTypeEnum.USERS: 5,
        LimitTypeEnum.CUSTOMERS: 200,
        LimitTypeEnum.INVOICES: 100,
        LimitTypeEnum.QUOTATIONS: 100,
    },
    SubscriptionPlanEnum.PRO: {
        LimitTypeEnum.USERS: 15,
        LimitTypeEnum.CUSTOMERS: 1000,
        LimitTypeEnum.INVOICES: 500,
        LimitTypeEnum.QUOTATIONS: 500,
    },
    SubscriptionPlanEnum.ENTERPRISE: {
        LimitTypeEnum.USERS: 100,
        LimitTypeEnum.CUSTOMERS: UNLIMITED,
        LimitTypeEnum.INVOICES: UNLIMITED,
        LimitTypeEnum.QUOTATIONS: UNLIMITED,
    },
}


@dataclass(frozen=True)
class LimitStatus:
    type: LimitTypeEnum
    allowed: bool
    current: int
    limit: Optional[int]
    percentage: float
    level: str  # none | soft | hard
    message: Optional[str] = None


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; they are stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_subscription_active(subscription: Any, now: Optional[datetime] = None) -> bool:
    if subscription is None:
        return False
    now = now or datetime.now(timezone.utc)
    status = subscription.status
    if status == SubscriptionStatusEnum.ACTIVE:
        period_end = _aware(subscription.current_period_end)
        return period_end is None or period_end > now
    if status == SubscriptionStatusEnum.TRIAL:
        trial_end = _aware(subscription.trial_ends_at)
        return trial_end is not None and trial_end > now
    return False


def days_remaining(subscription: Any, now: Optional[datetime] = None) -> Optional[int]:
    now = now or datetime.now(timezone.utc)
    if subscription.status == SubscriptionStatusEnum.TRIAL:
        end = _aware(subscription.trial_ends_at)
    else:
        end = _aware(subscription.current_period_end)
    if end is None:
        return None
    return max(0, (end - now).days)


def check_limit(plan: Optional[SubscriptionPlanEnum], limit_type: LimitTypeEnum, current: int) -> LimitStatus:
    limits = PLAN_LIMITS.get(plan or SubscriptionPlanEnum.FREE, PLAN_LIMITS[SubscriptionPlanEnum.FREE])
    limit = limits[limit_type]
    if limit == UNLIMITED:
        return LimitStatus(type=limit_type, allowed=True, current=current, limit=None, percentage=0, level="none")

    percentage = round(min(100.0, current / limit * 100), 2) if limit > 0 else 100.0
    name = limit_type.value
    if current >= limit:
        return LimitStatus(
            type=limit_type, allowed=False, current=current, limit=limit, percentage=100, level="hard",
            message=f"You've reached your {name} limit ({current}/{limit}). Upgrade to continue.",
        )
    if percentage >= SOFT_LIMIT_THRESHOLD:
        return LimitStatus(
            type=limit_type, allowed=True, current=current, limit=limit, percentage=percentage, level="soft",
            message=f"You're approaching your {name} limit ({current}/{limit}). Only {limit - current} remaining.",
        )
    return LimitStatus(type=limit_type, allowed=True, current=current, limit=limit, percentage=percentage, level="none")
