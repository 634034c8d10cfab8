"""
StockEasy - Company Schemas
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
import re

from app.models.company import CompanyPlan


def validate_cnpj(cnpj: str) -> bool:
    """Valida CNPJ pelos digitos verificadores"""
    if len(cnpj) != 14 or cnpj == cnpj[0] * 14:
        return False

    def calc_digit(cnpj, weights):
        total = sum(int(digit) * weight for digit, weight in zip(cnpj, weights))
        remainder = total % 11
        return 0 if remainder < 2 else 11 - remainder

    weights1 = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
    weights2 = [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]

    return (calc_digit(cnpj, weights1) == int(cnpj[12]) and
            calc_digit(cnpj, weights2) == int(cnpj[13]))


def normalize_cnpj(value: Optional[str]) -> Optional[str]:
    """Remove mascara e valida. Vazio vira None"""
    if value is None:
        return None
    numbers = re.sub(r'\D', '', value)
    if not numbers:
        return None
    if not validate_cnpj(numbers):
        raise ValueError('CNPJ inválido')
    return numbers


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    cnpj: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    plan: CompanyPlan = CompanyPlan.BASIC
    max_users: Optional[int] = Field(None, ge=1)

    @field_validator('cnpj')
    @classmethod
    def check_cnpj(cls, v):
        return normalize_cnpj(v)


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    cnpj: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    plan: Optional[CompanyPlan] = None
    max_users: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None

    @field_validator('cnpj')
    @classmethod
    def check_cnpj(cls, v):
        return normalize_cnpj(v)


class CompanyResponse(BaseModel):
    id: int
    name: str
    email: str
    cnpj: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    plan: str
    max_users: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    users_count: Optional[int] = None

    class Config:
        from_attributes = True
