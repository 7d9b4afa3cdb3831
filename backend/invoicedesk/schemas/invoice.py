from pydantic import BaseModel, Field, constr, field_validator
from typing import Optional, List
import uuid
from datetime import date, datetime
from enum import Enum

# --- Enums for Invoice ---
class InvoiceStatusEnum(str, Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"

# Derived from amounts and due date, never stored
class InvoiceDisplayStatusEnum(str, Enum):
    PAID = "paid"
    PARTIAL = "partial"
    OVERDUE = "overdue"
    UNPAID = "unpaid"

# --- InvoiceItem Schemas ---
class InvoiceItemBase(BaseModel):
    description: str
    quantity: float = Field(default=1, gt=0)
    unit: Optional[str] = Field(default="pcs", max_length=50)
    unit_price: float = Field(default=0.0, ge=0)
    discount: float = Field(default=0.0, ge=0)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("All items must have a description")
        return v.strip()

class InvoiceItemCreate(InvoiceItemBase):
    # Send the id of an existing item on update to keep its costing rows
    id: Optional[uuid.UUID] = None

class InvoiceItem(InvoiceItemBase):
    id: uuid.UUID
    invoice_id: uuid.UUID
    total: float
    sort_order: int = 0

    class Config:
        from_attributes = True


# --- Invoice Schemas ---
class InvoiceBase(BaseModel):
    invoice_date: date = Field(default_factory=date.today)
    due_date: Optional[date] = None
    discount: float = Field(default=0.0, ge=0)
    tax: float = Field(default=0.0, ge=0)
    notes: Optional[str] = None

class InvoiceCreate(InvoiceBase):
    organization_id: uuid.UUID
    customer_id: uuid.UUID
    # Left empty, the next number from the organization's sequence is used
    invoice_number: Optional[constr(min_length=1, max_length=50)] = None
    items: List[InvoiceItemCreate] = Field(..., min_length=1)

class InvoiceUpdate(BaseModel):
    invoice_number: Optional[constr(min_length=1, max_length=50)] = None
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    customer_id: Optional[uuid.UUID] = None
    discount: Optional[float] = Field(default=None, ge=0)
    tax: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    items: Optional[List[InvoiceItemCreate]] = Field(default=None, min_length=1)


class Invoice(InvoiceBase): # Full invoice response model
    id: uuid.UUID
    organization_id: uuid.UUID
    customer_id: uuid.UUID
    invoice_number: str
    subtotal: float
    total: float
    paid_amount: float
    status: InvoiceStatusEnum
    display_status: Optional[InvoiceDisplayStatusEnum] = None
    due_amount: Optional[float] = None
    items: List[InvoiceItem] = []
    created_by: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class InvoiceSummary(BaseModel):
    id: uuid.UUID
    invoice_number: str
    invoice_date: date
    due_date: Optional[date] = None
    customer_id: uuid.UUID
    customer_name: Optional[str] = None
    total: float
    paid_amount: float
    due_amount: float
    status: InvoiceStatusEnum
    display_status: InvoiceDisplayStatusEnum

    class Config:
        from_attributes = True

class InvoiceNumberPreview(BaseModel):
    next_invoice_number: str
