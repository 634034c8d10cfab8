"""
StockEasy - Master API
Visao global da plataforma para o operador MASTER
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import Principal
from app.database import get_db
from app.models import UserRole
from app.schemas import AssignCompanyRequest, CompanyResponse, UserResponse
from app.services import CompanyService, ProductStore, UserStore
from .deps import require_roles

router = APIRouter(prefix="/master", tags=["Master"])

master_only = require_roles(UserRole.MASTER)


@router.get("/companies", response_model=List[CompanyResponse])
async def list_companies(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(master_only)
):
    """Empresas com a contagem de usuarios"""
    service = CompanyService(db)
    counts = await service.users_count()
    return [
        {**company.to_dict(), "users_count": counts.get(company.id, 0)}
        for company in await service.list()
    ]


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(master_only)
):
    users = await UserStore(db).list(principal)
    return [user.to_dict() for user in users]


@router.post("/users/{user_id}/assign-company", response_model=UserResponse)
async def assign_company(
    user_id: int,
    request: AssignCompanyRequest,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(master_only)
):
    """Atribui empresa e papel a um usuario"""
    user = await UserStore(db).assign_company(principal, user_id, request.company_id, request.role)
    await db.commit()
    return user.to_dict()


@router.get("/products/{product_id}")
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(master_only)
):
    """Consulta de produto incluindo inativos"""
    product = await ProductStore(db).get(principal, product_id, include_inactive=True)
    return product.to_dict()
