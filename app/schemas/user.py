"""
StockEasy - User Schemas
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from app.models.user import UserRole


class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=2, max_length=255)
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.OPERADOR
    company_id: Optional[int] = None


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    company_id: Optional[int] = None


class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    role: str
    company_id: Optional[int] = None
    company_name: Optional[str] = None
    is_active: bool
    last_login_at: Optional[str] = None
    created_at: Optional[str] = None

    class Config:
        from_attributes = True


class AssignCompanyRequest(BaseModel):
    company_id: Optional[int] = None
    role: UserRole = UserRole.OPERADOR
