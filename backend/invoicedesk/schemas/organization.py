from pydantic import BaseModel, EmailStr, Field, constr
from typing import Optional, List
from datetime import datetime
from enum import Enum
import uuid

from .user import UserOut

class OrgRoleEnum(str, Enum):
    OWNER = "owner"
    MANAGER = "manager"
    ACCOUNTS = "accounts"
    SALES_STAFF = "sales_staff"
    DESIGNER = "designer"
    EMPLOYEE = "employee"

# Shared properties
class OrganizationBase(BaseModel):
    name: constr(min_length=1, max_length=255)
    address: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    currency: str = Field(default="BDT", min_length=3, max_length=3)
    invoice_prefix: constr(min_length=1, max_length=20) = "INV-"
    invoice_starting_number: int = Field(default=1, ge=1)

# Properties to receive on organization creation
class OrganizationCreate(OrganizationBase):
    pass

# Properties to receive on organization update (all optional)
class OrganizationUpdate(BaseModel):
    name: Optional[constr(min_length=1, max_length=255)] = None
    address: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    invoice_prefix: Optional[constr(min_length=1, max_length=20)] = None
    invoice_starting_number: Optional[int] = Field(default=None, ge=1)

class Organization(OrganizationBase):
    id: uuid.UUID
    slug: str
    owner_id: uuid.UUID
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# An organization as seen by one of its members
class OrganizationSummary(BaseModel):
    id: uuid.UUID
    name: str
    slug: str
    role: OrgRoleEnum

# The signed-in user with every organization they can switch to
class UserProfile(UserOut):
    organizations: List[OrganizationSummary] = []


# --- Membership ---
class MemberCreate(BaseModel):
    email: EmailStr
    role: OrgRoleEnum = OrgRoleEnum.EMPLOYEE

class MemberUpdate(BaseModel):
    role: OrgRoleEnum

class Member(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    user_id: uuid.UUID
    role: OrgRoleEnum
    user: Optional[UserOut] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

