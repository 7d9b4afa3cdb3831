from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Any, Optional
import uuid

from invoicedesk import crud, models, schemas
from invoicedesk.db.session import get_db
from invoicedesk.api import deps
from invoicedesk.api.endpoints.employees import get_employee_for_user

router = APIRouter()

async def _get_record_for_user(
    db: AsyncSession, record_id: uuid.UUID, current_user: models.User
) -> tuple[models.SalaryRecord, deps.OrgMembership]:
    record = await crud.employee.get_salary_record(db, record_id=record_id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Salary record not found")
    try:
        membership = await deps.get_org_membership(db=db, org_id=record.organization_id, current_user=current_user)
    except HTTPException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Salary record not found")
    return record, membership

@router.post("/", response_model=schemas.SalaryRecord, status_code=status.HTTP_201_CREATED)
async def create_salary_record(
    *,
    db: AsyncSession = Depends(get_db),
    record_in: schemas.SalaryRecordCreate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Create the salary record of an employee for one month. The basic salary
    defaults to the employee's current one.
    """
    employee, membership = await get_employee_for_user(db, record_in.employee_id, current_user)
    deps.require_permission(membership, "salary", "create")
    try:
        return await crud.employee.create_salary_record(
            db, employee=employee, record_in=record_in, user_id=current_user.id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[schemas.SalaryRecord])
async def read_salary_records(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    employee_id: Optional[uuid.UUID] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = None,
    status_filter: Optional[schemas.SalaryStatusEnum] = Query(None, alias="status"),
    skip: int = 0,
    limit: int = 100,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_permission(membership, "salary", "view")
    return await crud.employee.get_salary_records(
        db, organization_id=organization_id, employee_id=employee_id, month=month, year=year,
        status=status_filter, skip=skip, limit=limit,
    )

@router.get("/summary", response_model=schemas.SalarySummary)
async def read_salary_summary(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    month: int = Query(..., ge=1, le=12),
    year: int = Query(...),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_permission(membership, "salary", "view")
    return await crud.employee.get_salary_summary(db, organization_id=organization_id, month=month, year=year)

@router.get("/{record_id}", response_model=schemas.SalaryRecord)
async def read_salary_record(
    record_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    record, membership = await _get_record_for_user(db, record_id, current_user)
    deps.require_permission(membership, "salary", "view")
    return record

@router.put("/{record_id}", response_model=schemas.SalaryRecord)
async def update_salary_record(
    record_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    record_in: schemas.SalaryRecordUpdate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    record, membership = await _get_record_for_user(db, record_id, current_user)
    deps.require_permission(membership, "salary", "edit")
    try:
        return await crud.employee.update_salary_record(db, db_obj=record, obj_in=record_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/{record_id}/pay", response_model=schemas.SalaryRecord)
async def pay_salary_record(
    record_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    pay_in: Optional[schemas.SalaryPay] = None,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    record, membership = await _get_record_for_user(db, record_id, current_user)
    deps.require_permission(membership, "salary", "edit")
    try:
        return await crud.employee.pay_salary_record(
            db, db_obj=record, paid_date=pay_in.paid_date if pay_in else None, user_id=current_user.id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{record_id}", response_model=schemas.SalaryRecord)
async def delete_salary_record(
    record_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    record, membership = await _get_record_for_user(db, record_id, current_user)
    deps.require_permission(membership, "salary", "delete")
    return await crud.employee.delete_salary_record(db, db_obj=record)
