from pydantic import BaseModel, EmailStr, Field, constr
from typing import Optional
import uuid
from datetime import date, datetime
from enum import Enum

class EmployeeStatusEnum(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

class SalaryStatusEnum(str, Enum):
    PENDING = "pending"
    PAID = "paid"

# --- Employees ---
class EmployeeBase(BaseModel):
    full_name: constr(strip_whitespace=True, min_length=1, max_length=255)
    designation: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    joining_date: Optional[date] = None
    basic_salary: float = Field(default=0, ge=0)
    status: EmployeeStatusEnum = EmployeeStatusEnum.ACTIVE

class EmployeeCreate(EmployeeBase):
    organization_id: uuid.UUID

class EmployeeUpdate(BaseModel):
    full_name: Optional[constr(strip_whitespace=True, min_length=1, max_length=255)] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    joining_date: Optional[date] = None
    basic_salary: Optional[float] = Field(default=None, ge=0)
    status: Optional[EmployeeStatusEnum] = None

class Employee(EmployeeBase):
    id: uuid.UUID
    organization_id: uuid.UUID
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# --- Salary records ---
class SalaryRecordCreate(BaseModel):
    employee_id: uuid.UUID
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    # Defaults to the employee's current basic salary
    basic_salary: Optional[float] = Field(default=None, ge=0)
    overtime_hours: float = Field(default=0, ge=0)
    overtime_amount: float = Field(default=0, ge=0)
    bonus: float = Field(default=0, ge=0)
    deductions: float = Field(default=0, ge=0)
    advance: float = Field(default=0, ge=0)
    notes: Optional[str] = None

class SalaryRecordUpdate(BaseModel):
    basic_salary: Optional[float] = Field(default=None, ge=0)
    overtime_hours: Optional[float] = Field(default=None, ge=0)
    overtime_amount: Optional[float] = Field(default=None, ge=0)
    bonus: Optional[float] = Field(default=None, ge=0)
    deductions: Optional[float] = Field(default=None, ge=0)
    advance: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

class SalaryPay(BaseModel):
    paid_date: date = Field(default_factory=date.today)

class SalaryRecord(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    employee_id: uuid.UUID
    month: int
    year: int
    basic_salary: float
    overtime_hours: float
    overtime_amount: float
    bonus: float
    deductions: float
    advance: float
    net_payable: float
    status: SalaryStatusEnum
    paid_date: Optional[date] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True

class SalarySummary(BaseModel):
    month: int
    year: int
    employee_count: int
    total_payable: float
    total_paid: float
    total_pending: float
