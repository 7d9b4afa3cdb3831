from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import or_
import logging
import uuid
from datetime import date
from typing import List, Optional

from invoicedesk.models.employee import Employee as EmployeeModel, SalaryRecord as SalaryRecordModel
from invoicedesk.schemas.employee import (
    EmployeeCreate,
    EmployeeUpdate,
    EmployeeStatusEnum,
    SalaryRecordCreate,
    SalaryRecordUpdate,
    SalaryStatusEnum,
)
from invoicedesk.services import payroll
from invoicedesk.crud import crud_audit_log

logger = logging.getLogger(__name__)


# --- Employees ---
async def get_employee(db: AsyncSession, employee_id: uuid.UUID) -> Optional[EmployeeModel]:
    result = await db.execute(select(EmployeeModel).filter(EmployeeModel.id == employee_id))
    return result.scalars().first()

async def get_employees(
    db: AsyncSession, *, organization_id: uuid.UUID, status: Optional[EmployeeStatusEnum] = None,
    search: Optional[str] = None, skip: int = 0, limit: int = 100
) -> List[EmployeeModel]:
    query = select(EmployeeModel).filter(EmployeeModel.organization_id == organization_id)
    if status: query = query.filter(EmployeeModel.status == status)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            EmployeeModel.full_name.ilike(pattern),
            EmployeeModel.designation.ilike(pattern),
            EmployeeModel.department.ilike(pattern),
        ))
    result = await db.execute(query.order_by(EmployeeModel.full_name).offset(skip).limit(limit))
    return result.scalars().all()

async def create_employee(db: AsyncSession, *, employee_in: EmployeeCreate) -> EmployeeModel:
    db_obj = EmployeeModel(**employee_in.model_dump())
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def update_employee(db: AsyncSession, *, db_obj: EmployeeModel, obj_in: EmployeeUpdate) -> EmployeeModel:
    update_data = obj_in.model_dump(exclude_unset=True)
    for field in ("full_name", "basic_salary", "status"):
        if field in update_data and update_data[field] is None:
            update_data.pop(field)
    for field, value in update_data.items():
        setattr(db_obj, field, value)

    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def delete_employee(db: AsyncSession, *, db_obj: EmployeeModel) -> EmployeeModel:
    await db.delete(db_obj)
    await db.commit()
    return db_obj


# --- Salary records ---
async def get_salary_record(db: AsyncSession, record_id: uuid.UUID) -> Optional[SalaryRecordModel]:
    result = await db.execute(select(SalaryRecordModel).filter(SalaryRecordModel.id == record_id))
    return result.scalars().first()

async def get_salary_records(
    db: AsyncSession, *, organization_id: uuid.UUID, employee_id: Optional[uuid.UUID] = None,
    month: Optional[int] = None, year: Optional[int] = None, status: Optional[SalaryStatusEnum] = None,
    skip: int = 0, limit: int = 100
) -> List[SalaryRecordModel]:
    query = select(SalaryRecordModel).filter(SalaryRecordModel.organization_id == organization_id)
    if employee_id: query = query.filter(SalaryRecordModel.employee_id == employee_id)
    if month: query = query.filter(SalaryRecordModel.month == month)
    if year: query = query.filter(SalaryRecordModel.year == year)
    if status: query = query.filter(SalaryRecordModel.status == status)
    query = query.order_by(SalaryRecordModel.year.desc(), SalaryRecordModel.month.desc()).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()

async def salary_record_exists(db: AsyncSession, *, employee_id: uuid.UUID, month: int, year: int) -> bool:
    result = await db.execute(
        select(SalaryRecordModel.id)
        .filter(SalaryRecordModel.employee_id == employee_id)
        .filter(SalaryRecordModel.month == month)
        .filter(SalaryRecordModel.year == year)
    )
    return result.first() is not None

async def create_salary_record(
    db: AsyncSession, *, employee: EmployeeModel, record_in: SalaryRecordCreate, user_id: Optional[uuid.UUID] = None
) -> SalaryRecordModel:
    """
    Raises ValueError when the employee already has a record for the month.
    """
    if await salary_record_exists(db, employee_id=employee.id, month=record_in.month, year=record_in.year):
        raise ValueError(f"A salary record for {record_in.month}/{record_in.year} already exists for this employee.")

    data = record_in.model_dump()
    if data["basic_salary"] is None:
        data["basic_salary"] = employee.basic_salary
    db_obj = SalaryRecordModel(**data, organization_id=employee.organization_id, status=SalaryStatusEnum.PENDING)
    db_obj.net_payable = payroll.record_net_payable(db_obj)
    db.add(db_obj)
    await db.flush()

    crud_audit_log.add_entry(
        db, organization_id=employee.organization_id, user_id=user_id, action="salary.created",
        entity_type="salary_record", entity_id=db_obj.id,
        details={"employee": employee.full_name, "month": record_in.month, "year": record_in.year,
                 "net_payable": db_obj.net_payable},
    )
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def update_salary_record(
    db: AsyncSession, *, db_obj: SalaryRecordModel, obj_in: SalaryRecordUpdate
) -> SalaryRecordModel:
    if db_obj.status == SalaryStatusEnum.PAID:
        raise ValueError("A paid salary record cannot be changed.")
    update_data = obj_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field != "notes":
            continue
        setattr(db_obj, field, value)

    db_obj.net_payable = payroll.record_net_payable(db_obj)
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj

async def pay_salary_record(
    db: AsyncSession, *, db_obj: SalaryRecordModel, paid_date: Optional[date] = None, user_id: Optional[uuid.UUID] = None
) -> SalaryRecordModel:
    """
    Raises ValueError when the record is already paid.
    """
    if db_obj.status == SalaryStatusEnum.PAID:
        raise ValueError("This salary has already been paid.")
    db_obj.status = SalaryStatusEnum.PAID
    db_obj.paid_date = paid_date or date.today()
    db.add(db_obj)
    crud_audit_log.add_entry(
        db, organization_id=db_obj.organization_id, user_id=user_id, action="salary.paid",
        entity_type="salary_record", entity_id=db_obj.id,
        details={"month": db_obj.month, "year": db_obj.year, "net_payable": db_obj.net_payable},
    )
    await db.commit()
    await db.refresh(db_obj)
    logger.info(f"Salary record {db_obj.id} paid ({db_obj.net_payable})")
    return db_obj

async def delete_salary_record(db: AsyncSession, *, db_obj: SalaryRecordModel) -> SalaryRecordModel:
    await db.delete(db_obj)
    await db.commit()
    return db_obj

async def get_salary_summary(db: AsyncSession, *, organization_id: uuid.UUID, month: int, year: int) -> dict:
    records = await get_salary_records(db, organization_id=organization_id, month=month, year=year, limit=10000)
    return {"month": month, "year": year, **payroll.summarize(records)}
