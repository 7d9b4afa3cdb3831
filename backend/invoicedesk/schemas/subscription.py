from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from enum import Enum
import uuid

class SubscriptionPlanEnum(str, Enum):
    FREE = "free"
    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"

class SubscriptionStatusEnum(str, Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"

class LimitTypeEnum(str, Enum):
    USERS = "users"
    CUSTOMERS = "customers"
    INVOICES = "invoices"
    QUOTATIONS = "quotations"

class SubscriptionUpdate(BaseModel):
    plan: Optional[SubscriptionPlanEnum] = None
    status: Optional[SubscriptionStatusEnum] = None
    current_period_end: Optional[datetime] = None

class LimitWarning(BaseModel):
    type: LimitTypeEnum
    level: str # none | soft | hard
    current: int
    limit: Optional[int] = None
    percentage: float
    message: Optional[str] = None

class Subscription(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    plan: SubscriptionPlanEnum
    status: SubscriptionStatusEnum
    trial_ends_at: Optional[datetime] = None
    current_period_end: Optional[datetime] = None

    class Config:
        from_attributes = True

class SubscriptionOverview(BaseModel):
    subscription: Subscription
    is_active: bool
    days_remaining: Optional[int] = None
    warnings: List[LimitWarning] = []
