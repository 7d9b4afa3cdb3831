"""
Invoice status derived from amounts and due date.

The stored status (unpaid/partial/paid) only depends on amounts; the display
status additionally reports unpaid invoices past their due date as overdue.
"""
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from invoicedesk.schemas.invoice import InvoiceDisplayStatusEnum, InvoiceStatusEnum

Number = Union[int, float, str, None]


def round_currency(amount: Number) -> float:
    try:
        value = float(amount or 0)
    except (TypeError, ValueError):
        value = 0.0
    return round(value, 2)


@dataclass(frozen=True)
class InvoiceStatusInfo:
    total: float
    paid_amount: float
    due_amount: float
    display_status: InvoiceDisplayStatusEnum
    is_overdue: bool
    is_fully_paid: bool


def calculate_invoice_status(
    total: Number, paid_amount: Number, due_date: Optional[date], today: Optional[date] = None
) -> InvoiceStatusInfo:
    total_num = round_currency(total)
    paid_num = round_currency(paid_amount)
    due_amount = round_currency(max(0.0, total_num - paid_num))

    today = today or date.today()
    past_due = bool(due_date and due_date < today)
    is_fully_paid = paid_num >= total_num and total_num > 0

    if is_fully_paid or due_amount <= 0:
        display = InvoiceDisplayStatusEnum.PAID
    elif paid_num > 0:
        display = InvoiceDisplayStatusEnum.PARTIAL
    elif past_due:
        display = InvoiceDisplayStatusEnum.OVERDUE
    else:
        display = InvoiceDisplayStatusEnum.UNPAID

    return InvoiceStatusInfo(
        total=total_num,
        paid_amount=paid_num,
        due_amount=due_amount,
        display_status=display,
        is_overdue=past_due and not is_fully_paid,
        is_fully_paid=is_fully_paid,
    )


def stored_status(total: Number, paid_amount: Number) -> InvoiceStatusEnum:
    total_num = round_currency(total)
    paid_num = round_currency(paid_amount)
    if total_num > 0 and paid_num >= total_num:
        return InvoiceStatusEnum.PAID
    if paid_num > 0:
        return InvoiceStatusEnum.PARTIAL
    return InvoiceStatusEnum.UNPAID
