from dataclasses import dataclass
from typing import Iterable, Tuple

from invoicedesk.services.invoice_status import round_currency


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: float
    discount: float
    tax: float
    total: float


def line_item_total(quantity, unit_price, discount=0.0) -> float:
    """
    quantity * unit_price minus the item's absolute discount, never below zero.
    """
    amount = float(quantity or 0) * float(unit_price or 0)
    return max(0.0, round_currency(amount - float(discount or 0)))


def calculate_totals(items: Iterable[Tuple[float, float, float]], discount=0.0, tax=0.0) -> DocumentTotals:
    """
    items yields (quantity, unit_price, item_discount). Document discount and
    tax are absolute amounts applied to the subtotal.
    """
    subtotal = sum(line_item_total(q, p, d) for q, p, d in items)
    return totals_from_subtotal(subtotal, discount, tax)


def totals_from_subtotal(subtotal, discount=0.0, tax=0.0) -> DocumentTotals:
    subtotal = round_currency(subtotal)
    discount = round_currency(discount)
    tax = round_currency(tax)
    total = max(0.0, round_currency(subtotal - discount + tax))
    return DocumentTotals(subtotal=subtotal, discount=discount, tax=tax, total=total)
