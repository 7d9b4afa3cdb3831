from pydantic import BaseModel, Field
from typing import Optional, List
import uuid
from datetime import date, datetime
from enum import Enum

from .invoice import InvoiceItemBase

class QuotationStatusEnum(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"

class QuotationItemCreate(InvoiceItemBase):
    pass

class QuotationItem(InvoiceItemBase):
    id: uuid.UUID
    quotation_id: uuid.UUID
    total: float
    sort_order: int = 0

    class Config:
        from_attributes = True

class QuotationBase(BaseModel):
    quotation_date: date = Field(default_factory=date.today)
    valid_until: Optional[date] = None
    discount: float = Field(default=0.0, ge=0)
    tax: float = Field(default=0.0, ge=0)
    notes: Optional[str] = None

class QuotationCreate(QuotationBase):
    organization_id: uuid.UUID
    customer_id: Optional[uuid.UUID] = None
    items: List[QuotationItemCreate] = Field(..., min_length=1)

class QuotationUpdate(BaseModel):
    quotation_date: Optional[date] = None
    valid_until: Optional[date] = None
    customer_id: Optional[uuid.UUID] = None
    discount: Optional[float] = Field(default=None, ge=0)
    tax: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    items: Optional[List[QuotationItemCreate]] = Field(default=None, min_length=1)

class QuotationStatusUpdate(BaseModel):
    status: QuotationStatusEnum

class Quotation(QuotationBase):
    id: uuid.UUID
    organization_id: uuid.UUID
    customer_id: Optional[uuid.UUID] = None
    quotation_number: str
    subtotal: float
    total: float
    status: QuotationStatusEnum
    items: List[QuotationItem] = []
    invoice_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class QuotationSummary(BaseModel):
    id: uuid.UUID
    quotation_number: str
    quotation_date: date
    customer_id: Optional[uuid.UUID] = None
    total: float
    status: QuotationStatusEnum

    class Config:
        from_attributes = True
