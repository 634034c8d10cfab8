"""
StockEasy - Stock Movement Schemas
"""
from decimal import Decimal
from pydantic import BaseModel, Field, model_validator
from typing import Optional

from app.models.movement import MovementType


class MovementCreate(BaseModel):
    """
    Entrada/saida usam `quantity` (> 0, validada pelo ledger);
    ajuste usa `new_stock`, o estoque final desejado.
    """
    product_id: int
    type: MovementType
    quantity: Optional[int] = None
    new_stock: Optional[int] = Field(None, ge=0)
    unit_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    notes: Optional[str] = None

    @model_validator(mode='after')
    def check_amount(self):
        if self.type == MovementType.AJUSTE:
            if self.new_stock is None:
                raise ValueError('Ajuste exige new_stock')
        elif self.quantity is None:
            raise ValueError('Informe quantity')
        return self
