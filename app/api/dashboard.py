"""
StockEasy - Dashboard API
Indicadores e lista de compras
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import Principal
from app.database import get_db
from app.services import DashboardService
from .deps import get_current_principal

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])
shopping_router = APIRouter(prefix="/whatsapp", tags=["Dashboard"])


@router.get("/stats")
async def get_stats(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Indicadores do painel"""
    return await DashboardService(db).stats(principal)


@shopping_router.get("/shopping-list")
async def shopping_list(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Texto da lista de compras, agrupado por fornecedor"""
    return await DashboardService(db).shopping_list(principal)
