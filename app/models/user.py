"""
StockEasy - User Model
Perfil do usuario, vinculado a identidade externa pelo auth_subject
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship

from app.database import Base


class UserRole(str, Enum):
    """Papeis de usuario"""
    MASTER = "MASTER"       # Operador da plataforma, sem empresa
    ADMIN = "admin"
    GERENTE = "gerente"
    OPERADOR = "operador"


class User(Base):
    """Modelo de usuário"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identificador na camada de identidade (claim `sub` do token)
    auth_subject = Column(String(64), unique=True, nullable=False, index=True)

    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    hashed_password = Column(String(255))

    role = Column(String(20), nullable=False, default=UserRole.OPERADOR.value)
    # Nulo apenas para MASTER
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)

    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    company = relationship("Company", lazy="selectin")

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "company_id": self.company_id,
            "company_name": self.company.name if self.company else None,
            "is_active": self.is_active,
            "last_login_at": self.last_login_at.isoformat() if self.last_login_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
