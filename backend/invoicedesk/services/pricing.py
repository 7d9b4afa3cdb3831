"""
Price calculation for print jobs: cost lines plus a margin give the quote.
"""
from dataclasses import dataclass
from typing import Any, List

from invoicedesk.schemas.price_calculation import COST_LINES
from invoicedesk.services.costing import CostingRowDraft, field_value, to_number

# (cost line, costing step type, label) used when importing into invoice costing
COST_LINE_ROWS = (
    ("design", "design", "Design Cost"),
    ("plate", "plate", "Plate 1"),
    ("plate2", "plate", "Plate 2"),
    ("plate3", "plate", "Plate 3"),
    ("paper1", "paper", "Paper 1"),
    ("paper2", "paper", "Paper 2"),
    ("paper3", "paper", "Paper 3"),
    ("print", "print", "Print 1"),
    ("print2", "print", "Print 2"),
    ("print3", "print", "Print 3"),
    ("lamination", "lamination", "Lamination"),
    ("die_cutting", "die_cutting", "Die Cutting"),
    ("foil_printing", "foil_printing", "Foil Printing"),
    ("binding", "binding", "Binding"),
    ("others", "others", "Others"),
)

DEFAULT_MARGIN_PERCENT = 20.0


@dataclass(frozen=True)
class PriceBreakdown:
    costing_total: float
    margin_amount: float
    final_price: float
    price_per_piece: float


def cost_line_total(calc: Any, line: str) -> float:
    return to_number(field_value(calc, f"{line}_qty")) * to_number(field_value(calc, f"{line}_price"))


def compute_price(calc: Any) -> PriceBreakdown:
    costing_total = sum(cost_line_total(calc, line) for line in COST_LINES)
    margin_percent = field_value(calc, "margin_percent")
    margin_percent = DEFAULT_MARGIN_PERCENT if margin_percent is None else to_number(margin_percent)
    margin_amount = costing_total * margin_percent / 100
    final_price = costing_total + margin_amount
    quantity = to_number(field_value(calc, "quantity", 1))
    price_per_piece = final_price / quantity if quantity > 0 else 0.0
    return PriceBreakdown(
        costing_total=round(costing_total, 2),
        margin_amount=round(margin_amount, 2),
        final_price=round(final_price, 2),
        price_per_piece=round(price_per_piece, 2),
    )


def to_costing_rows(calc: Any) -> List[CostingRowDraft]:
    """
    Costing rows for every cost line with a positive quantity and price.
    """
    rows = []
    for line, item_type, label in COST_LINE_ROWS:
        qty = to_number(field_value(calc, f"{line}_qty"))
        price = to_number(field_value(calc, f"{line}_price"))
        if qty > 0 and price > 0:
            rows.append(CostingRowDraft(item_type=item_type, description=label, quantity=qty, price=price))
    return rows
