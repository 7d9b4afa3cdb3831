from pydantic import BaseModel
from typing import Optional

class DashboardStats(BaseModel):
    total_invoiced: float
    total_collected: float
    total_outstanding: float
    invoice_count: int
    overdue_count: int
    customer_count: int
    pending_quotations: int
    currency: Optional[str] = None
    # Only filled for roles allowed to see profit
    costing_total: Optional[float] = None
    gross_profit: Optional[float] = None
