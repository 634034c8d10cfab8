"""
StockEasy - Companies API
Gestao de empresas (apenas MASTER)
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import Principal
from app.database import get_db
from app.models import UserRole
from app.schemas import CompanyCreate, CompanyUpdate, CompanyResponse
from app.services import CompanyService
from .deps import require_roles

router = APIRouter(prefix="/super-admin/companies", tags=["Companies"])

master_only = require_roles(UserRole.MASTER)


@router.get("", response_model=List[CompanyResponse])
async def list_companies(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(master_only)
):
    """Lista todas as empresas"""
    service = CompanyService(db)
    counts = await service.users_count()
    return [
        {**company.to_dict(), "users_count": counts.get(company.id, 0)}
        for company in await service.list()
    ]


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(master_only)
):
    company = await CompanyService(db).get(company_id)
    return company.to_dict()


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    request: CompanyCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(master_only)
):
    company = await CompanyService(db).create(request.model_dump())
    await db.commit()
    return company.to_dict()


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: int,
    request: CompanyUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(master_only)
):
    company = await CompanyService(db).update(company_id, request.model_dump(exclude_unset=True))
    await db.commit()
    return company.to_dict()


@router.delete("/{company_id}", response_model=CompanyResponse)
async def deactivate_company(
    company_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(master_only)
):
    """Empresas nao sao removidas, apenas desativadas"""
    company = await CompanyService(db).deactivate(company_id)
    await db.commit()
    return company.to_dict()
