"""
StockEasy - Auth Schemas
"""
from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional

from app.models.user import UserRole
from .company import CompanyCreate


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: dict


class SignupRequest(BaseModel):
    """
    Cadastro de usuario.
    Com `company` cria a empresa e o primeiro usuario (admin);
    com `company_id` entra em uma empresa existente.
    """
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: Optional[str] = Field(None, max_length=255)
    company: Optional[CompanyCreate] = None
    company_id: Optional[int] = None
    role: Optional[UserRole] = None

    @model_validator(mode='after')
    def check_company(self):
        if self.company is None and self.company_id is None:
            raise ValueError('Informe os dados da empresa ou company_id')
        if self.company is not None and self.company_id is not None:
            raise ValueError('Informe apenas um entre company e company_id')
        if self.role == UserRole.MASTER:
            raise ValueError('Cadastro público não pode criar usuário MASTER')
        return self


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)
