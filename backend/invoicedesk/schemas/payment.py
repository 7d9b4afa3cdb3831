from pydantic import BaseModel, Field
from typing import Optional
import uuid
from datetime import date, datetime
from enum import Enum

class PaymentMethodEnum(str, Enum):
    CASH = "cash"
    BANK = "bank"
    BKASH = "bkash"
    NAGAD = "nagad"
    CARD = "card"
    CHEQUE = "cheque"
    OTHER = "other"

class PaymentCreate(BaseModel):
    amount: float = Field(..., gt=0)
    payment_date: date = Field(default_factory=date.today)
    payment_method: PaymentMethodEnum = PaymentMethodEnum.CASH
    reference: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None

class Payment(BaseModel):
    id: uuid.UUID
    invoice_id: uuid.UUID
    organization_id: uuid.UUID
    amount: float
    payment_date: date
    payment_method: PaymentMethodEnum
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Response after recording, with the invoice's new balance
class PaymentReceipt(BaseModel):
    payment: Payment
    invoice_id: uuid.UUID
    paid_amount: float
    due_amount: float
    status: str

class PaymentListEntry(Payment):
    invoice_number: Optional[str] = None
    customer_name: Optional[str] = None

class PaymentStats(BaseModel):
    total_received_this_month: float
    today_collections: float
    pending_due: float
    overdue_amount: float
