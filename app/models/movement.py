"""
StockEasy - Stock Movement Model
Ledger de movimentacoes de estoque (somente insercao)
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, DateTime, Text, Integer, Numeric, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.database import Base


class MovementType(str, Enum):
    """Tipos de movimentacao"""
    ENTRADA = "entrada"
    SAIDA = "saida"
    AJUSTE = "ajuste"


class StockMovement(Base):
    """Movimentacao de estoque. Nunca e alterada ou removida"""
    __tablename__ = "stock_movements"
    __table_args__ = (
        Index('ix_stock_movements_company_created', 'company_id', 'created_at'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    type = Column(String(10), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2))
    total_price = Column(Numeric(10, 2))
    notes = Column(Text)

    # Estoque resultante apos a movimentacao
    resulting_stock = Column(Integer)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    product = relationship("Product", lazy="selectin")
    user = relationship("User", lazy="selectin")

    def to_dict(self, include_relations: bool = True):
        data = {
            "id": self.id,
            "product_id": self.product_id,
            "type": self.type,
            "quantity": self.quantity,
            "unit_price": float(self.unit_price) if self.unit_price is not None else None,
            "total_price": float(self.total_price) if self.total_price is not None else None,
            "notes": self.notes,
            "resulting_stock": self.resulting_stock,
            "user_id": self.user_id,
            "company_id": self.company_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_relations:
            data["product"] = self.product.to_dict(include_relations=False) if self.product else None
            data["user"] = {"id": self.user.id, "name": self.user.name} if self.user else None
        return data
