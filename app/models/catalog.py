"""
StockEasy - Catalog Models
Categorias, fornecedores e produtos de cada empresa
"""
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Text, Integer, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from app.database import Base


def _money(value):
    return float(value) if value is not None else None


class Category(Base):
    """Categoria de produto"""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "company_id": self.company_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Supplier(Base):
    """Fornecedor"""
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(20))
    email = Column(String(255))
    address = Column(Text)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "company_id": self.company_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Product(Base):
    """Produto em estoque"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    unit = Column(String(20), nullable=False)  # kg, unidade, litro...

    # Alterado apenas pelo ledger de movimentacoes
    current_stock = Column(Integer, nullable=False, default=0)
    min_stock = Column(Integer, nullable=False, default=1)
    max_stock = Column(Integer)
    cost_price = Column(Numeric(10, 2))

    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    best_purchase_day = Column(String(10))

    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    supplier = relationship("Supplier", lazy="selectin")
    category = relationship("Category", lazy="selectin")

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock

    def to_dict(self, include_relations: bool = True):
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "unit": self.unit,
            "current_stock": self.current_stock,
            "min_stock": self.min_stock,
            "max_stock": self.max_stock,
            "cost_price": _money(self.cost_price),
            "supplier_id": self.supplier_id,
            "category_id": self.category_id,
            "best_purchase_day": self.best_purchase_day,
            "company_id": self.company_id,
            "is_active": self.is_active,
            "is_low_stock": self.is_low_stock,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_relations:
            data["supplier"] = self.supplier.to_dict() if self.supplier else None
            data["category"] = self.category.to_dict() if self.category else None
        return data
