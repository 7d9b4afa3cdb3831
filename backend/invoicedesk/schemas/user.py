from pydantic import BaseModel, EmailStr, constr
from typing import Optional
import uuid

class UserBase(BaseModel):
    email: EmailStr
    full_name: Optional[constr(strip_whitespace=True, max_length=255)] = None

# Self-registration; activation and superuser flags are never client-set
class UserCreate(UserBase):
    password: constr(min_length=8)

class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    full_name: Optional[constr(strip_whitespace=True, max_length=255)] = None
    password: Optional[constr(min_length=8)] = None

class UserOut(UserBase):
    id: uuid.UUID
    is_active: bool = True
    is_superuser: bool = False

    class Config:
        from_attributes = True


# --- Auth ---
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    # Lifetime in seconds
    expires_in: int

class TokenPayload(BaseModel):
    sub: Optional[str] = None # user id
