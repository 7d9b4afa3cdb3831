from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Any, Optional
import uuid

from invoicedesk import crud, models, schemas
from invoicedesk.db.session import get_db
from invoicedesk.api import deps

router = APIRouter()

async def get_employee_for_user(
    db: AsyncSession, employee_id: uuid.UUID, current_user: models.User
) -> tuple[models.Employee, deps.OrgMembership]:
    employee = await crud.employee.get_employee(db, employee_id=employee_id)
    if not employee:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    try:
        membership = await deps.get_org_membership(db=db, org_id=employee.organization_id, current_user=current_user)
    except HTTPException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return employee, membership

@router.post("/", response_model=schemas.Employee, status_code=status.HTTP_201_CREATED)
async def create_new_employee(
    *,
    db: AsyncSession = Depends(get_db),
    employee_in: schemas.EmployeeCreate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=employee_in.organization_id, current_user=current_user)
    deps.require_permission(membership, "employees", "create")
    return await crud.employee.create_employee(db, employee_in=employee_in)

@router.get("/", response_model=List[schemas.Employee])
async def read_employees(
    *,
    db: AsyncSession = Depends(get_db),
    organization_id: uuid.UUID = Query(...),
    status_filter: Optional[schemas.EmployeeStatusEnum] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Matches name, designation or department"),
    skip: int = 0,
    limit: int = 100,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    membership = await deps.get_org_membership(db=db, org_id=organization_id, current_user=current_user)
    deps.require_permission(membership, "employees", "view")
    return await crud.employee.get_employees(
        db, organization_id=organization_id, status=status_filter, search=search, skip=skip, limit=limit
    )

@router.get("/{employee_id}", response_model=schemas.Employee)
async def read_employee_by_id(
    employee_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    employee, membership = await get_employee_for_user(db, employee_id, current_user)
    deps.require_permission(membership, "employees", "view")
    return employee

@router.put("/{employee_id}", response_model=schemas.Employee)
async def update_existing_employee(
    employee_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    employee_in: schemas.EmployeeUpdate,
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    employee, membership = await get_employee_for_user(db, employee_id, current_user)
    deps.require_permission(membership, "employees", "edit")
    return await crud.employee.update_employee(db, db_obj=employee, obj_in=employee_in)

@router.delete("/{employee_id}", response_model=schemas.Employee)
async def delete_existing_employee(
    employee_id: uuid.UUID,
    *,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(deps.get_current_active_user)
) -> Any:
    """
    Delete an employee together with their salary records.
    """
    employee, membership = await get_employee_for_user(db, employee_id, current_user)
    deps.require_permission(membership, "employees", "delete")
    return await crud.employee.delete_employee(db, db_obj=employee)
