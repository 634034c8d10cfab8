"""
StockEasy - Catalog API
Fornecedores e categorias
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authorization import Principal
from app.core.errors import NotFound
from app.database import get_db
from app.schemas import CategoryCreate, CategoryUpdate, SupplierCreate, SupplierUpdate
from app.services import CategoryStore, SupplierStore
from .deps import get_current_principal

suppliers_router = APIRouter(prefix="/suppliers", tags=["Suppliers"])
categories_router = APIRouter(prefix="/categories", tags=["Categories"])


# === Fornecedores ===

@suppliers_router.get("")
async def list_suppliers(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    return [supplier.to_dict() for supplier in await SupplierStore(db).list(principal)]


@suppliers_router.get("/{supplier_id}")
async def get_supplier(
    supplier_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    return (await SupplierStore(db).get(principal, supplier_id)).to_dict()


@suppliers_router.post("", status_code=status.HTTP_201_CREATED)
async def create_supplier(
    request: SupplierCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    supplier = await SupplierStore(db).create(principal, request.model_dump())
    await db.commit()
    return supplier.to_dict()


@suppliers_router.put("/{supplier_id}")
async def update_supplier(
    supplier_id: int,
    request: SupplierUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    supplier = await SupplierStore(db).update(principal, supplier_id, request.model_dump(exclude_unset=True))
    await db.commit()
    return supplier.to_dict()


@suppliers_router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_supplier(
    supplier_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    if not await SupplierStore(db).delete(principal, supplier_id):
        raise NotFound("Fornecedor não encontrado")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# === Categorias ===

@categories_router.get("")
async def list_categories(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    return [category.to_dict() for category in await CategoryStore(db).list(principal)]


@categories_router.get("/{category_id}")
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    return (await CategoryStore(db).get(principal, category_id)).to_dict()


@categories_router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    request: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    category = await CategoryStore(db).create(principal, request.model_dump())
    await db.commit()
    return category.to_dict()


@categories_router.put("/{category_id}")
async def update_category(
    category_id: int,
    request: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    category = await CategoryStore(db).update(principal, category_id, request.model_dump(exclude_unset=True))
    await db.commit()
    return category.to_dict()


@categories_router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    if not await CategoryStore(db).delete(principal, category_id):
        raise NotFound("Categoria não encontrada")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
