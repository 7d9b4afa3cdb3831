import uuid
from sqlalchemy import (
    Column, String, Text, ForeignKey, Float, Date, DateTime, Integer, UniqueConstraint, Uuid,
    Enum as DBEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from invoicedesk.db.base_class import Base
from invoicedesk.schemas.employee import EmployeeStatusEnum, SalaryStatusEnum

class Employee(Base):
    # __tablename__ will be 'employees'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False, index=True)
    designation = Column(String(255), nullable=True)
    department = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    joining_date = Column(Date, nullable=True)
    basic_salary = Column(Float, nullable=False, default=0.0)
    status = Column(DBEnum(EmployeeStatusEnum, name="employee_status_enum"),
                    nullable=False, default=EmployeeStatusEnum.ACTIVE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    salary_records = relationship(
        "SalaryRecord",
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self):
        return f"<Employee(id={self.id}, full_name='{self.full_name}')>"


class SalaryRecord(Base):
    __tablename__ = "salary_records"
    __table_args__ = (
        UniqueConstraint("employee_id", "month", "year", name="uq_salary_per_employee_month"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    organization_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_id = Column(Uuid(as_uuid=True), ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    basic_salary = Column(Float, nullable=False, default=0.0)
    overtime_hours = Column(Float, nullable=False, default=0.0)
    overtime_amount = Column(Float, nullable=False, default=0.0)
    bonus = Column(Float, nullable=False, default=0.0)
    deductions = Column(Float, nullable=False, default=0.0)
    advance = Column(Float, nullable=False, default=0.0)
    net_payable = Column(Float, nullable=False, default=0.0)

    status = Column(DBEnum(SalaryStatusEnum, name="salary_status_enum"),
                    nullable=False, default=SalaryStatusEnum.PENDING)
    paid_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("Employee", back_populates="salary_records")

    def __repr__(self):
        return f"<SalaryRecord(employee={self.employee_id}, {self.month}/{self.year}, net={self.net_payable})>"
