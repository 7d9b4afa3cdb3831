from pydantic import BaseModel, EmailStr, constr
from typing import Optional
from datetime import datetime
import uuid

# Shared properties for a customer
class CustomerBase(BaseModel):
    name: constr(min_length=1, max_length=255)
    company_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

# Properties to receive on customer creation
class CustomerCreate(CustomerBase):
    organization_id: uuid.UUID # Customer must belong to an organization

# Properties to receive on customer update (all fields optional)
class CustomerUpdate(BaseModel):
    name: Optional[constr(min_length=1, max_length=255)] = None
    company_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

class Customer(CustomerBase):
    id: uuid.UUID
    organization_id: uuid.UUID
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Summary for lists
class CustomerSummary(BaseModel):
    id: uuid.UUID
    name: str
    company_name: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True
