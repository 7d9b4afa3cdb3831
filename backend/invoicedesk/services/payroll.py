from typing import Any, Iterable

from invoicedesk.schemas.employee import SalaryStatusEnum
from invoicedesk.services.costing import field_value, to_number


def net_payable(basic_salary=0, overtime_amount=0, bonus=0, deductions=0, advance=0) -> float:
    """
    basic + overtime + bonus - deductions - advance. May be negative when
    advances exceed earnings.
    """
    return round(
        to_number(basic_salary) + to_number(overtime_amount) + to_number(bonus)
        - to_number(deductions) - to_number(advance),
        2,
    )


def record_net_payable(record: Any) -> float:
    return net_payable(
        field_value(record, "basic_salary"),
        field_value(record, "overtime_amount"),
        field_value(record, "bonus"),
        field_value(record, "deductions"),
        field_value(record, "advance"),
    )


def summarize(records: Iterable[Any]) -> dict:
    total_payable = total_paid = 0.0
    employees = set()
    for record in records:
        amount = to_number(field_value(record, "net_payable"))
        total_payable += amount
        if field_value(record, "status") == SalaryStatusEnum.PAID:
            total_paid += amount
        employees.add(field_value(record, "employee_id"))
    return {
        "employee_count": len(employees),
        "total_payable": round(total_payable, 2),
        "total_paid": round(total_paid, 2),
        "total_pending": round(total_payable - total_paid, 2),
    }
