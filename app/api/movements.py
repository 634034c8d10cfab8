"""
StockEasy - Movements API
Ledger de movimentacoes de estoque
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import Principal
from app.database import get_db
from app.models import MovementType
from app.schemas import MovementCreate
from app.services import StockLedger
from .deps import get_current_principal

router = APIRouter(prefix="/movements", tags=["Movements"])


@router.get("")
async def list_movements(
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Movimentacoes mais recentes primeiro"""
    movements = await StockLedger(db).list_movements(principal, limit)
    return [movement.to_dict() for movement in movements]


@router.get("/product/{product_id}")
async def list_product_movements(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    movements = await StockLedger(db).list_for_product(principal, product_id)
    return [movement.to_dict() for movement in movements]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_movement(
    request: MovementCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Registra entrada/saida; ajuste recebe o estoque final em `new_stock`"""
    ledger = StockLedger(db)
    if request.type == MovementType.AJUSTE:
        movement = await ledger.adjust_stock(principal, request.product_id, request.new_stock, request.notes)
    else:
        movement = await ledger.record_movement(
            principal,
            request.product_id,
            request.type,
            request.quantity,
            unit_price=request.unit_price,
            notes=request.notes,
        )
    await db.commit()
    return movement.to_dict()
