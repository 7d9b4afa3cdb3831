from pydantic import BaseModel, Field, constr
from typing import Optional, List
from datetime import datetime
import uuid

# A row as stored inside a saved template's JSON list
class TemplateItem(BaseModel):
    item_type: Optional[str] = ""
    description: Optional[str] = None
    quantity: float = 1
    price: float = 0
    line_total: float = 0

class CostingTemplateBase(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=255)
    description: Optional[str] = None

class CostingTemplateCreate(CostingTemplateBase):
    organization_id: uuid.UUID
    items: List[TemplateItem]

class CostingTemplateFromInvoice(CostingTemplateBase):
    invoice_id: uuid.UUID
    # Snapshot only one line item's rows when set
    invoice_item_id: Optional[uuid.UUID] = None

class CostingTemplateUpdate(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1, max_length=255)] = None
    description: Optional[str] = None
    items: Optional[List[TemplateItem]] = None

class CostingTemplate(CostingTemplateBase):
    id: uuid.UUID
    organization_id: uuid.UUID
    items: List[TemplateItem] = []
    item_count: int = 0
    total: float = 0
    created_by: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# --- Item templates (keyed by item name, e.g. "Plate") ---
class ItemTemplateRowBase(BaseModel):
    sub_item_name: constr(strip_whitespace=True, min_length=1, max_length=255)
    description: Optional[str] = None
    default_qty: float = Field(default=1, ge=0)
    default_price: float = Field(default=0, ge=0)
    sort_order: Optional[int] = None

class ItemTemplateRow(ItemTemplateRowBase):
    id: uuid.UUID
    sort_order: int = 0

    class Config:
        from_attributes = True

class CostingItemTemplateCreate(BaseModel):
    organization_id: uuid.UUID
    item_name: constr(strip_whitespace=True, min_length=1, max_length=255)
    description: Optional[str] = None
    rows: List[ItemTemplateRowBase] = []

class CostingItemTemplateUpdate(BaseModel):
    item_name: Optional[constr(strip_whitespace=True, min_length=1, max_length=255)] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    rows: Optional[List[ItemTemplateRowBase]] = None

class CostingItemTemplate(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    item_name: str
    description: Optional[str] = None
    is_active: bool
    rows: List[ItemTemplateRow] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
