from pydantic import BaseModel, Field
from typing import Optional, List
import uuid
from enum import Enum

class TemplateLoadModeEnum(str, Enum):
    REPLACE = "replace"
    APPEND = "append"

class ItemCostingStatusEnum(str, Enum):
    COSTED = "costed"
    IN_PROGRESS = "in_progress"
    NOT_COSTED = "not_costed"

# --- Costing rows ---
class CostingRowBase(BaseModel):
    item_type: Optional[str] = Field(default="", max_length=100)
    description: Optional[str] = None
    quantity: float = 1
    price: float = 0

class CostingRowIn(CostingRowBase):
    invoice_item_id: Optional[uuid.UUID] = None

class CostingRow(CostingRowBase):
    id: uuid.UUID
    invoice_id: uuid.UUID
    invoice_item_id: Optional[uuid.UUID] = None
    item_no: Optional[int] = None
    line_total: float
    sort_order: int = 0

    class Config:
        from_attributes = True

class CostingSave(BaseModel):
    items: List[CostingRowIn]

class ApplyCostingTemplate(BaseModel):
    template_id: uuid.UUID
    mode: TemplateLoadModeEnum = TemplateLoadModeEnum.REPLACE
    invoice_item_id: Optional[uuid.UUID] = None

class ApplyItemTemplate(BaseModel):
    invoice_item_id: uuid.UUID
    item_name: str = Field(..., min_length=1)

class ImportPriceCalculation(BaseModel):
    price_calculation_id: uuid.UUID
    mode: TemplateLoadModeEnum = TemplateLoadModeEnum.APPEND
    invoice_item_id: Optional[uuid.UUID] = None

# --- Responses ---
class CostingPermissionsOut(BaseModel):
    can_view: bool
    can_edit: bool
    can_save: bool
    can_reset: bool
    can_view_profit: bool
    is_read_only: bool

class ProfitMarginOut(BaseModel):
    costing_total: float
    profit: float
    margin_percent: float
    is_positive: bool

class CostingItemGroup(BaseModel):
    invoice_item_id: uuid.UUID
    item_no: int
    description: str
    item_total: float
    status: ItemCostingStatusEnum
    subtotal: float
    rows: List[CostingRow] = []

class InvoiceCosting(BaseModel):
    invoice_id: uuid.UUID
    invoice_total: float
    rows: List[CostingRow]
    groups: List[CostingItemGroup]
    unassigned_rows: List[CostingRow] = []
    costing_total: float
    profit: Optional[ProfitMarginOut] = None
    permissions: CostingPermissionsOut

class CostingSummaryEntry(BaseModel):
    invoice_id: uuid.UUID
    invoice_number: str
    invoice_total: float
    costing_total: float
    profit: float
    margin_percent: Optional[float] = None

class CostingSummary(BaseModel):
    invoices: List[CostingSummaryEntry]
    total_revenue: float
    total_costing: float
    total_profit: float
    overall_margin_percent: Optional[float] = None
