"""
StockEasy - Company Model
Empresa (tenant). Todo registro de negocio pertence a exatamente uma empresa
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Boolean, DateTime, Text, Integer

from app.database import Base


class CompanyPlan(str, Enum):
    """Planos disponíveis"""
    BASIC = "basic"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class Company(Base):
    """Modelo de Empresa"""
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    cnpj = Column(String(14), index=True)
    phone = Column(String(20))
    address = Column(Text)

    plan = Column(String(20), nullable=False, default=CompanyPlan.BASIC.value)
    max_users = Column(Integer, default=10)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "cnpj": self.cnpj,
            "phone": self.phone,
            "address": self.address,
            "plan": self.plan,
            "max_users": self.max_users,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
