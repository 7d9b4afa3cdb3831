from pydantic import BaseModel, Field, constr
from typing import Optional, Literal
from datetime import datetime
import uuid

# Every cost line is a quantity/price pair: design_qty, design_price, ...
COST_LINES = (
    "design",
    "plate", "plate2", "plate3",
    "paper1", "paper2", "paper3",
    "print", "print2", "print3",
    "lamination",
    "die_cutting",
    "foil_printing",
    "binding",
    "others",
)

class _CostLines(BaseModel):
    design_qty: Optional[float] = Field(default=None, ge=0)
    design_price: Optional[float] = Field(default=None, ge=0)
    plate_qty: Optional[float] = Field(default=None, ge=0)
    plate_price: Optional[float] = Field(default=None, ge=0)
    plate2_qty: Optional[float] = Field(default=None, ge=0)
    plate2_price: Optional[float] = Field(default=None, ge=0)
    plate3_qty: Optional[float] = Field(default=None, ge=0)
    plate3_price: Optional[float] = Field(default=None, ge=0)
    paper1_qty: Optional[float] = Field(default=None, ge=0)
    paper1_price: Optional[float] = Field(default=None, ge=0)
    paper2_qty: Optional[float] = Field(default=None, ge=0)
    paper2_price: Optional[float] = Field(default=None, ge=0)
    paper3_qty: Optional[float] = Field(default=None, ge=0)
    paper3_price: Optional[float] = Field(default=None, ge=0)
    print_qty: Optional[float] = Field(default=None, ge=0)
    print_price: Optional[float] = Field(default=None, ge=0)
    print2_qty: Optional[float] = Field(default=None, ge=0)
    print2_price: Optional[float] = Field(default=None, ge=0)
    print3_qty: Optional[float] = Field(default=None, ge=0)
    print3_price: Optional[float] = Field(default=None, ge=0)
    lamination_qty: Optional[float] = Field(default=None, ge=0)
    lamination_price: Optional[float] = Field(default=None, ge=0)
    die_cutting_qty: Optional[float] = Field(default=None, ge=0)
    die_cutting_price: Optional[float] = Field(default=None, ge=0)
    foil_printing_qty: Optional[float] = Field(default=None, ge=0)
    foil_printing_price: Optional[float] = Field(default=None, ge=0)
    binding_qty: Optional[float] = Field(default=None, ge=0)
    binding_price: Optional[float] = Field(default=None, ge=0)
    others_qty: Optional[float] = Field(default=None, ge=0)
    others_price: Optional[float] = Field(default=None, ge=0)

class PriceCalculationBase(_CostLines):
    job_description: constr(strip_whitespace=True, min_length=1)
    customer_id: Optional[uuid.UUID] = None
    quantity: float = Field(default=1, ge=0)
    margin_percent: float = Field(default=20, ge=0)
    notes: Optional[str] = None

class PriceCalculationCreate(PriceCalculationBase):
    organization_id: uuid.UUID

class PriceCalculationUpdate(_CostLines):
    job_description: Optional[constr(strip_whitespace=True, min_length=1)] = None
    customer_id: Optional[uuid.UUID] = None
    quantity: Optional[float] = Field(default=None, ge=0)
    margin_percent: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

class PriceCalculation(PriceCalculationBase):
    id: uuid.UUID
    organization_id: uuid.UUID
    costing_total: float
    margin_amount: float
    final_price: float
    price_per_piece: float
    quotation_id: Optional[uuid.UUID] = None
    invoice_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PriceCalculationSummary(BaseModel):
    id: uuid.UUID
    job_description: str
    customer_id: Optional[uuid.UUID] = None
    quantity: float
    costing_total: float
    margin_percent: float
    final_price: float
    price_per_piece: float
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PriceCalculationConvert(BaseModel):
    target: Literal["quotation", "invoice"]

class PriceCalculationConverted(BaseModel):
    target: str
    document_id: uuid.UUID
    document_number: str
